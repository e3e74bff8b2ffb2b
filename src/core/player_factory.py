"""
Player Backend Factory

Creates the player handle factory for the configured backend.
"""

import logging
from typing import Any, Callable, Dict, List

from core.ports.player import IPlayerHandleFactory

logger = logging.getLogger(__name__)

# Backend registry: name -> (probe, constructor taking the "player" config section)
_BACKEND_REGISTRY: Dict[str, Any] = {}


def register_backend(
    name: str,
    probe: Callable[[], bool],
    constructor: Callable[[Dict[str, Any]], IPlayerHandleFactory],
) -> None:
    """
    Register a player backend.

    Args:
        name: Backend name identifier
        probe: Returns True when the backend's dependencies are importable
        constructor: Builds the handle factory from the "player" config section
    """
    _BACKEND_REGISTRY[name] = (probe, constructor)


def _create_vlc(settings: Dict[str, Any]) -> IPlayerHandleFactory:
    from core.vlc_player_handle import VlcPlayerHandleFactory
    return VlcPlayerHandleFactory(
        video=bool(settings.get("video", True)),
        extra_args=[str(arg) for arg in settings.get("vlc_args") or []],
    )


def _probe_vlc() -> bool:
    from core.vlc_player_handle import VlcPlayerHandle
    return VlcPlayerHandle.probe()


register_backend("vlc", _probe_vlc, _create_vlc)


class PlayerBackendFactory:
    """
    Player Backend Factory

    Usage Example:
        handle_factory = PlayerBackendFactory.create("vlc", config.get("player", {}))
        handle = handle_factory.create(entry.slot_id)
    """

    @classmethod
    def create(cls, backend: str, settings: Dict[str, Any] = None) -> IPlayerHandleFactory:
        """
        Create the handle factory of a backend.

        Raises:
            RuntimeError: If the backend is unknown or unavailable
        """
        if backend not in _BACKEND_REGISTRY:
            raise RuntimeError(f"Unknown player backend: {backend}")
        if not cls.is_available(backend):
            raise RuntimeError(f"Player backend is unavailable: {backend}")

        _, constructor = _BACKEND_REGISTRY[backend]
        factory = constructor(settings or {})
        logger.info("Using player backend: %s", backend)
        return factory

    @classmethod
    def get_available_backends(cls) -> List[str]:
        return [name for name in _BACKEND_REGISTRY if cls.is_available(name)]

    @classmethod
    def is_available(cls, backend: str) -> bool:
        if backend not in _BACKEND_REGISTRY:
            return False
        probe, _ = _BACKEND_REGISTRY[backend]
        try:
            return bool(probe())
        except Exception as e:
            logger.debug("Backend probe failed for %s: %s", backend, e)
            return False
