"""
VLC Player Handle Implementation

Player handle backend based on the python-vlc library. Every handle owns a
MediaListPlayer, so a single item is a one-entry list and a collection is the
expanded list of its entries.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, List, Optional, Sequence

from core.ports.player import IPlayerListener
from models.playback import HandleState
from models.queue_item import ItemKind

logger = logging.getLogger(__name__)

# Try to import vlc
try:
    import vlc
    VLC_AVAILABLE = True
except (ImportError, OSError) as e:
    # OSError: python-vlc is installed but libvlc itself is missing
    vlc = None  # type: ignore
    VLC_AVAILABLE = False
    logger.warning("python-vlc or libvlc is not available; the VLC player backend is unavailable: %s", e)

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={}"
YOUTUBE_PLAYLIST_URL = "https://www.youtube.com/playlist?list={}"

# Error code reported for MediaPlayerEncounteredError (libvlc gives no code)
VLC_ERROR_CODE = 1


def media_location(item_id: str) -> str:
    """Map an item id to something libvlc can open: a URL or a local path."""
    if "://" in item_id or Path(item_id).expanduser().exists():
        return item_id
    return YOUTUBE_WATCH_URL.format(item_id)


def expand_collection(item_id: str) -> List[str]:
    """
    List the entries of a collection.

    - Directory: its files, sorted by name
    - .m3u/.m3u8: non-comment lines, relative to the playlist's directory
    - .pls: FileN= values
    - Anything else: a remote playlist id, opened as one entry for libvlc to expand
    """
    path = Path(item_id).expanduser()

    if path.is_dir():
        return [str(p) for p in sorted(path.iterdir()) if p.is_file() and not p.name.startswith(".")]

    if path.is_file():
        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            logger.warning("Cannot read playlist %s: %s", path, e)
            return []

        suffix = path.suffix.lower()
        if suffix == ".pls":
            entries = [
                line.split("=", 1)[1].strip()
                for line in lines
                if line.lower().startswith("file") and "=" in line
            ]
        else:
            entries = [line.strip() for line in lines if line.strip() and not line.startswith("#")]
        return [_resolve_entry(path.parent, entry) for entry in entries]

    if "://" in item_id:
        return [item_id]
    return [YOUTUBE_PLAYLIST_URL.format(item_id)]


def _resolve_entry(base: Path, entry: str) -> str:
    if "://" in entry:
        return entry
    candidate = Path(entry).expanduser()
    if not candidate.is_absolute():
        candidate = base / candidate
    return str(candidate)


def _expanded_node(media_list: Any) -> Optional[Any]:
    """Sub-items of a one-entry list whose entry libvlc expanded (a remote playlist URL)."""
    if media_list.count() != 1:
        return None
    node = media_list.item_at_index(0)
    if node is None:
        return None
    subitems = node.subitems()
    if subitems is None or subitems.count() == 0:
        return None
    return subitems


def list_position(media_list: Any, media: Any) -> int:
    """Index of the playing media in a list, looking through an expanded node."""
    index = media_list.index_of_item(media)
    if index < 0:
        subitems = _expanded_node(media_list)
        if subitems is not None:
            index = subitems.index_of_item(media)
    return index if index >= 0 else 0


def list_length(media_list: Any) -> int:
    """Number of playable entries, counting an expanded node's sub-items."""
    subitems = _expanded_node(media_list)
    if subitems is not None:
        return subitems.count()
    return max(1, media_list.count())


class VlcPlayerHandle:
    """
    VLC-based Player Handle

    libvlc raises events on its own threads; they are forwarded to the
    listener as-is, and the listener is responsible for moving them onto its
    loop thread.
    """

    @staticmethod
    def probe() -> bool:
        """Check if python-vlc dependencies are available."""
        return VLC_AVAILABLE

    def __init__(self, slot_id: str, instance: Any):
        if not VLC_AVAILABLE:
            raise ImportError("The python-vlc library is not installed.")

        self._slot_id = slot_id
        self._instance = instance
        self._player: Any = instance.media_player_new()
        self._list_player: Any = instance.media_list_player_new()
        self._list_player.set_media_player(self._player)
        self._media_list: Optional[Any] = None
        self._entries: List[str] = []
        self._kind: Optional[ItemKind] = None

        self._listener: Optional[IPlayerListener] = None
        self._last_state: Optional[HandleState] = None
        self._lock = threading.Lock()
        self._destroyed = False

        self._setup_event_callbacks()

    @property
    def slot_id(self) -> str:
        return self._slot_id

    def _setup_event_callbacks(self) -> None:
        """Set VLC event callbacks."""
        events = self._player.event_manager()
        events.event_attach(vlc.EventType.MediaPlayerPlaying, lambda e: self._emit_state(HandleState.PLAYING))
        events.event_attach(vlc.EventType.MediaPlayerPaused, lambda e: self._emit_state(HandleState.PAUSED))
        events.event_attach(vlc.EventType.MediaPlayerBuffering, lambda e: self._emit_state(HandleState.BUFFERING))
        events.event_attach(vlc.EventType.MediaPlayerEndReached, lambda e: self._emit_state(HandleState.ENDED))
        events.event_attach(vlc.EventType.MediaPlayerEncounteredError, self._on_vlc_error)

    def set_listener(self, listener: Optional[IPlayerListener]) -> None:
        """Set the notification receiver; the handle is ready as soon as it has one."""
        self._listener = listener
        if listener is not None and not self._destroyed:
            listener.on_ready(self._slot_id)

    def _emit_state(self, state: HandleState) -> None:
        with self._lock:
            # libvlc repeats buffering/playing while a stream stalls
            if state == self._last_state and state != HandleState.ENDED:
                return
            self._last_state = state
        listener = self._listener
        if listener is not None:
            listener.on_state_changed(self._slot_id, state)

    def _on_vlc_error(self, event: Any) -> None:
        logger.warning("VLC playback error in row %s", self._slot_id)
        listener = self._listener
        if listener is not None:
            listener.on_error(self._slot_id, VLC_ERROR_CODE)

    def _set_item(self, item_id: str, kind: ItemKind) -> None:
        if kind == ItemKind.COLLECTION:
            entries = expand_collection(item_id)
        else:
            entries = [media_location(item_id)]
        if not entries:
            raise ValueError(f"Collection has no entries: {item_id}")

        media_list = self._instance.media_list_new(entries)
        with self._lock:
            self._list_player.stop()
            previous, self._media_list = self._media_list, media_list
            self._entries = list(entries)
            self._kind = kind
            self._last_state = None
            self._list_player.set_media_list(media_list)
        if previous is not None:
            previous.release()

    def load(self, item_id: str, kind: ItemKind) -> None:
        """Load an item and start playing it."""
        self._set_item(item_id, kind)
        self._list_player.play()

    def cue(self, item_id: str, kind: ItemKind) -> None:
        """Load an item without playing it."""
        self._set_item(item_id, kind)
        self._emit_state(HandleState.CUED)

    def play(self) -> None:
        self._list_player.play()

    def stop(self) -> None:
        self._list_player.stop()
        with self._lock:
            self._last_state = None

    def seek_to_start(self) -> None:
        # After EndReached libvlc ignores set_time; replaying index 0 restarts the media
        with self._lock:
            self._last_state = None
        self._list_player.play_item_at_index(0)

    def jump_to_first_position(self) -> None:
        with self._lock:
            self._last_state = None
        self._list_player.play_item_at_index(0)

    def current_position(self) -> int:
        if self._media_list is None:
            return 0
        media = self._player.get_media()
        if media is None:
            return 0
        return list_position(self._media_list, media)

    def collection_length(self) -> int:
        if self._media_list is None:
            return 1
        return list_length(self._media_list)

    def destroy(self) -> None:
        """Release libvlc resources."""
        self._destroyed = True
        self._listener = None
        try:
            self._list_player.stop()
        finally:
            self._list_player.release()
            self._player.release()
            if self._media_list is not None:
                self._media_list.release()
                self._media_list = None


class VlcPlayerHandleFactory:
    """Creates VLC player handles that share one libvlc instance"""

    def __init__(self, video: bool = True, extra_args: Sequence[str] = ()):
        if not VLC_AVAILABLE:
            raise ImportError("The python-vlc library is not installed.")

        args = list(extra_args)
        if not video:
            args.append("--no-video")
        self._instance: Any = vlc.Instance(*args)

    def create(self, slot_id: str) -> VlcPlayerHandle:
        return VlcPlayerHandle(slot_id, self._instance)

    def cleanup(self) -> None:
        try:
            self._instance.release()
        except Exception as e:
            logger.warning("VLC cleanup failed: %s", e)
