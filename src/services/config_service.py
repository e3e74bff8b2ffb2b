"""
Configuration Service Module

Manages application configuration read/write: player backend, queue rows,
schedule, accounts and logging.
"""

from typing import Any, Dict, List, Optional
from pathlib import Path
import copy
import os
import sys
import yaml
import threading
import logging

logger = logging.getLogger(__name__)

# Overrides the per-user configuration location
CONFIG_PATH_ENV = "LOOP_QUEUE_PLAYER_CONFIG"


class ConfigService:
    """
    Configuration Service - Singleton Pattern

    Layers, later ones win:
    1. Built-in defaults
    2. Repository template (config/default_config.yaml), default mode only
    3. User file (platform config directory, or the custom path)

    Usage Example:
        config = ConfigService("config/default_config.yaml")

        # Get configuration
        interval = config.get("schedule.poll_interval_seconds", 1)

        # Set configuration
        config.set("schedule.enabled", True)
        config.save()
    """

    DEFAULT_TEMPLATE_PATH = "config/default_config.yaml"

    _instance: Optional['ConfigService'] = None
    _lock = threading.Lock()

    def __new__(cls, config_path: str = None) -> 'ConfigService':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: str = None):
        if self._initialized:
            return

        template_path = Path(self.DEFAULT_TEMPLATE_PATH)
        provided_path = Path(config_path) if config_path else None

        # Passing the template path itself still saves to the user directory,
        # so the repository template is never overwritten.
        self._use_custom_path = provided_path is not None and provided_path != template_path

        if self._use_custom_path:
            self._user_config_path = provided_path
        else:
            self._user_config_path = self._get_user_config_path()

        self._config: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._initialized = True

        self._load()

    @property
    def path(self) -> Path:
        """File that save() writes to"""
        return self._user_config_path

    @staticmethod
    def _get_user_config_path() -> Path:
        """Get user configuration file path (platform-specific)"""
        override = os.environ.get(CONFIG_PATH_ENV)
        if override:
            return Path(override).expanduser()
        if sys.platform == "win32":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / "loop-queue-player" / "config.yaml"

    def _load(self) -> None:
        """Load and merge every configuration layer"""
        config = self._get_default_config()

        layers: List[Path] = []
        if not self._use_custom_path:
            layers.append(Path(self.DEFAULT_TEMPLATE_PATH))
        layers.append(self._user_config_path)

        for layer in layers:
            self._deep_merge(config, self._read_yaml(layer))

        with self._lock:
            self._config = config

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load configuration %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring configuration %s: top level is not a mapping", path)
            return {}
        return data

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge dictionaries, override overwrites base (lists are replaced)"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'app': {
                'name': 'Loop Queue Player',
                'version': '1.0.0',
            },
            'player': {
                'backend': 'vlc',
                'video': True,
                'vlc_args': [],
            },
            'queue': [],
            'schedule': {
                'enabled': False,
                'poll_interval_seconds': 1,
                'entries': [],
            },
            'accounts': [],
            'logging': {
                'level': 'INFO',
                'file': '',
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Supports dot-separated nested keys, e.g., "schedule.entries".
        Lists and mappings are returned as copies.

        Args:
            key: Configuration key
            default: Default value

        Returns:
            Configuration value or the default value.
        """
        with self._lock:
            value = self._config
            try:
                for k in key.split('.'):
                    value = value[k]
            except (KeyError, TypeError):
                return default
            return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (dot-separated)
            value: Configuration value
        """
        with self._lock:
            keys = key.split('.')
            config = self._config

            for k in keys[:-1]:
                if not isinstance(config.get(k), dict):
                    config[k] = {}
                config = config[k]

            config[keys[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configurations."""
        with self._lock:
            return copy.deepcopy(self._config)

    def save(self) -> bool:
        """
        Save configuration to the user configuration file.

        Returns:
            bool: True if saving was successful.
        """
        try:
            self._user_config_path.parent.mkdir(parents=True, exist_ok=True)

            with self._lock:
                with open(self._user_config_path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(self._config, f, allow_unicode=True,
                                   default_flow_style=False, sort_keys=False)
            logger.debug("Configuration saved to: %s", self._user_config_path)
            return True
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save configuration: %s", e)
            return False

    def reload(self) -> bool:
        """
        Reload configuration

        Returns:
            bool: Whether loading was successful
        """
        try:
            self._load()
            return True
        except Exception as e:
            logger.error("Failed to reload configuration: %s", e)
            return False

    def reset(self) -> None:
        """Reset to default configuration."""
        with self._lock:
            self._config = self._get_default_config()

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing only)."""
        with cls._lock:
            cls._instance = None
