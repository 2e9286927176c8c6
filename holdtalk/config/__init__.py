"""Simple YAML configuration loader for Holdtalk."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "hold": {
        "duration_ms": 5000,
    },
    "audio": {
        "sample_rate": None,  # device native rate
        "frames_per_buffer": 4096,
        "input_device_index": None,
        "permission_mode": "once",
    },
    "feedback": {
        "enabled": True,
        "frequency_hz": 880,
        "duration_ms": 200,
        "volume": 0.2,
    },
    "storage": {
        "data_directory": "data",
        "slot": "latest_recording",
    },
    "playback": {
        "default_asset": "assets/default.wav",
    },
    "prompts": {
        "yes": "assets/yes.wav",
        "no": "assets/no.wav",
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/holdtalk.log",
        "console_output": True,
    },
}

# Config keys holding paths resolved relative to the config file
PATH_KEYS = (
    "storage.data_directory",
    "playback.default_asset",
    "prompts.yes",
    "prompts.no",
    "logging.file_path",
)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base`` in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class HoldTalkConfig:
    """Holdtalk configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, the built-in
                        defaults are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for key_path in PATH_KEYS:
            section, key = key_path.split('.')
            value = config.get(section, {}).get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(config_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'hold.duration_ms').

        Args:
            key_path: Dot-separated key path (e.g., 'audio.frames_per_buffer')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'hold.duration_ms')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_hold_duration_ms(self) -> int:
        duration = int(self.get('hold.duration_ms', 5000))
        if duration < 0:
            raise ValueError(f"hold.duration_ms must not be negative: {duration}")
        return duration

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())
