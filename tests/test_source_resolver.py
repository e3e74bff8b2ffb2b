"""
Source Resolver Tests
"""

import pytest

from models.errors import UnresolvedItemError
from models.queue_item import ItemKind
from services.source_resolver import SourceResolver


class TestSourceResolver:
    """Source string to playable reference"""

    def setup_method(self):
        self.resolver = SourceResolver()

    @pytest.mark.parametrize("source, expected", [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ?t=42", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/shorts/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("  dQw4w9WgXcQ  ", "dQw4w9WgXcQ"),
    ])
    def test_single_video(self, source, expected):
        resolved = self.resolver.resolve(source)
        assert resolved.kind == ItemKind.SINGLE
        assert resolved.item_id == expected

    def test_playlist_parameter_wins_over_video(self):
        """A watch URL inside a playlist plays the whole playlist."""
        resolved = self.resolver.resolve(
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PLabc123_-x&index=2"
        )
        assert resolved.kind == ItemKind.COLLECTION
        assert resolved.item_id == "PLabc123_-x"

    def test_other_url_is_single(self):
        resolved = self.resolver.resolve("http://radio.example.com/stream.mp3")
        assert resolved.kind == ItemKind.SINGLE
        assert resolved.item_id == "http://radio.example.com/stream.mp3"

    def test_local_paths(self, tmp_path):
        song = tmp_path / "song.mp3"
        song.write_bytes(b"")
        playlist = tmp_path / "mix.m3u"
        playlist.write_text("song.mp3\n")

        assert self.resolver.resolve(str(song)).kind == ItemKind.SINGLE
        assert self.resolver.resolve(str(playlist)).kind == ItemKind.COLLECTION
        assert self.resolver.resolve(str(tmp_path)).kind == ItemKind.COLLECTION

    @pytest.mark.parametrize("source", ["", "   ", "not a video", "short"])
    def test_unresolvable(self, source):
        with pytest.raises(UnresolvedItemError):
            self.resolver.resolve(source)
        assert self.resolver.try_resolve(source) is None
