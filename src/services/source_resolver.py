"""
Source Resolver Module

Turns the source string of a queue row (a pasted URL, a bare id or a local
path) into a playable item reference.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import re
import logging

from models.errors import UnresolvedItemError
from models.queue_item import ItemKind

logger = logging.getLogger(__name__)

_PLAYLIST_RE = re.compile(r"[?&]list=([^&#\s]+)")
_VIDEO_RE = re.compile(
    r"(?:youtube\.com/(?:[^/\n\s]+/\S+/|(?:v|e(?:mbed)?|shorts|live)/|\S*?[?&]v=)|youtu\.be/)"
    r"([a-zA-Z0-9_-]{11})"
)
_BARE_VIDEO_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")
_URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")

PLAYLIST_SUFFIXES = {".m3u", ".m3u8", ".pls"}


@dataclass(frozen=True)
class ResolvedSource:
    """Playable reference parsed from a source string"""
    kind: ItemKind
    item_id: str


class SourceResolver:
    """
    Source Resolver

    Resolution order:
    1. A "list=" query parameter is a collection (the playlist id).
    2. A YouTube watch/short/embed URL is a single item (the video id).
    3. A local directory or playlist file is a collection (its path).
    4. Any other existing file, any scheme:// URL or a bare video id is a single item.
    """

    def resolve(self, source: str) -> ResolvedSource:
        """
        Resolve a source string.

        Raises:
            UnresolvedItemError: When nothing playable can be derived.
        """
        text = (source or "").strip()
        if not text:
            raise UnresolvedItemError(source)

        playlist_match = _PLAYLIST_RE.search(text)
        if playlist_match:
            return ResolvedSource(ItemKind.COLLECTION, playlist_match.group(1))

        video_match = _VIDEO_RE.search(text)
        if video_match:
            return ResolvedSource(ItemKind.SINGLE, video_match.group(1))

        path = Path(text).expanduser()
        try:
            if path.is_dir():
                return ResolvedSource(ItemKind.COLLECTION, str(path))
            if path.is_file():
                kind = ItemKind.COLLECTION if path.suffix.lower() in PLAYLIST_SUFFIXES else ItemKind.SINGLE
                return ResolvedSource(kind, str(path))
        except OSError as e:
            logger.debug("Cannot inspect path %s: %s", text, e)

        if _URL_RE.match(text):
            return ResolvedSource(ItemKind.SINGLE, text)

        if _BARE_VIDEO_ID_RE.match(text):
            return ResolvedSource(ItemKind.SINGLE, text)

        raise UnresolvedItemError(source)

    def try_resolve(self, source: str) -> Optional[ResolvedSource]:
        """Resolve a source string, returning None instead of raising."""
        try:
            return self.resolve(source)
        except UnresolvedItemError:
            return None
