"""Configuration management for Job Tracker."""
import copy
import logging
import os
import yaml
from pathlib import Path
from typing import Any, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

# Used for any key the YAML file leaves out
DEFAULTS = {
    'tracker': {
        'storage': {
            'path': '~/.job_tracker/storage.json',
            'key': 'job_applications',
            'legacy_key': 'gcandidaturas:v1',
        },
        'search': {
            'debounce_ms': 200,
        },
        'export': {
            'directory': '.',
            'json_filename': 'candidaturas.json',
            'report_filename': 'candidaturas.html',
            'report_title': 'Job Applications Report',
        },
    },
    'logging': {
        'level': 'INFO',
        'use_systemd': False,
        'file': None,
    },
    'service': {
        'debug': False,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Return base updated recursively with override."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance: Optional['Config'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self._load_env()
        self._load_yaml()

    def _load_env(self):
        """Load environment variables from .env file."""
        load_dotenv(PROJECT_ROOT / ".env")

    @property
    def config_path(self) -> Path:
        """YAML file location, overridable with JOB_TRACKER_CONFIG."""
        override = os.getenv('JOB_TRACKER_CONFIG')
        if override:
            return Path(override).expanduser()
        return PROJECT_ROOT / "config" / "config.yaml"

    def _load_yaml(self):
        """Load configuration from YAML file on top of the built-in defaults."""
        config_path = self.config_path

        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}, using defaults")
            self.config = copy.deepcopy(DEFAULTS)
            return

        with open(config_path, 'r', encoding='utf-8') as f:
            self.config = _deep_merge(DEFAULTS, yaml.safe_load(f) or {})

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path (e.g., 'tracker.storage.key')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config = Config()
            >>> config.get('tracker.storage.legacy_key')
            'gcandidaturas:v1'
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_env(self, key: str, default: Any = None) -> Any:
        """
        Get environment variable.

        Args:
            key: Environment variable name
            default: Default value if not found

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default)

    @property
    def storage_path(self) -> Path:
        """Key-value store file; JOB_TRACKER_STORAGE wins over the YAML value."""
        raw = self.get_env('JOB_TRACKER_STORAGE') or self.get('tracker.storage.path')
        return Path(raw).expanduser()

    @property
    def storage_key(self) -> str:
        return self.get('tracker.storage.key')

    @property
    def legacy_storage_key(self) -> str:
        return self.get('tracker.storage.legacy_key')

    @property
    def debounce_seconds(self) -> float:
        """Search debounce window in seconds."""
        return float(self.get('tracker.search.debounce_ms', 200)) / 1000.0

    @property
    def export_dir(self) -> Path:
        return Path(self.get('tracker.export.directory', '.')).expanduser()

    def reload(self):
        """Reload configuration from files."""
        self._load_env()
        self._load_yaml()


# Global config instance
config = Config()
