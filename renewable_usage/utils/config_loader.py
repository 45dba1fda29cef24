"""
Configuration loader for the renewable usage report.

This module provides a singleton configuration loader that reads settings
from config.yaml and provides easy access throughout the application.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
import threading

from ..errors import ReportError


class ConfigurationError(ReportError):
    """Raised when there's an issue with configuration."""
    pass


PROJECT_ROOT = Path(__file__).parent.parent.parent

# Used when no config.yaml is found, e.g. when running from an installed wheel
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "default_config.yaml"

REQUIRED_SECTIONS = ['data_paths', 'processing', 'aggregation', 'charts', 'logging']


class Config:
    """Thread-safe singleton configuration loader."""

    _instance = None
    _config = None
    _lock = threading.Lock()

    def __new__(cls):
        # Double-checked locking pattern for thread safety
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration loader."""
        with self._lock:
            if self._config is None:
                self._load_config()

    @classmethod
    def reset(cls):
        """Drop the cached instance so the next access reloads the file."""
        with cls._lock:
            cls._instance = None
            cls._config = None

    @staticmethod
    def config_path() -> Path:
        """
        Path of the active configuration file.

        ``RENEWABLE_USAGE_CONFIG`` wins, then ``config.yaml`` in the project
        checkout, then the defaults shipped with the package.
        """
        override = os.environ.get('RENEWABLE_USAGE_CONFIG')
        if override:
            return Path(override)

        project_config = PROJECT_ROOT / "config.yaml"
        if project_config.exists():
            return project_config

        return DEFAULT_CONFIG_PATH

    def _load_config(self):
        """Load configuration from YAML file with comprehensive error handling."""
        config_path = self.config_path()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}")
        except PermissionError as e:
            raise ConfigurationError(f"Permission denied reading configuration file: {e}")

        if not config:
            raise ConfigurationError("Configuration file is empty or invalid")

        missing_sections = [s for s in REQUIRED_SECTIONS if s not in config]
        if missing_sections:
            raise ConfigurationError(f"Missing required configuration sections: {missing_sections}")

        # Assign on the class so every handle to the singleton shares it
        type(self)._config = config

        self._resolve_paths(config_path.parent)
        self._apply_env_overrides()

    def _resolve_paths(self, base_dir: Path):
        """Convert relative data paths to absolute paths based on the config directory."""
        for key, value in self._config['data_paths'].items():
            if isinstance(value, str) and value and not os.path.isabs(value):
                self._config['data_paths'][key] = str(base_dir / value)

    def _apply_env_overrides(self):
        """Apply environment variable overrides for configuration values."""
        if 'RENEWABLE_USAGE_DATA' in os.environ:
            self._config['data_paths']['usage_data'] = os.environ['RENEWABLE_USAGE_DATA']

        if 'RENEWABLE_USAGE_OUTPUT_DIR' in os.environ:
            self._config['data_paths']['output_dir'] = os.environ['RENEWABLE_USAGE_OUTPUT_DIR']

        if 'RENEWABLE_USAGE_SAMPLE_SIZE' in os.environ:
            try:
                self._config['processing']['default_sample_size'] = int(os.environ['RENEWABLE_USAGE_SAMPLE_SIZE'])
            except ValueError:
                logging.warning(
                    f"Invalid RENEWABLE_USAGE_SAMPLE_SIZE environment variable: "
                    f"{os.environ['RENEWABLE_USAGE_SAMPLE_SIZE']}"
                )

        if 'RENEWABLE_USAGE_RANDOM_SEED' in os.environ:
            try:
                self._config['processing']['random_seed'] = int(os.environ['RENEWABLE_USAGE_RANDOM_SEED'])
            except ValueError:
                logging.warning(
                    f"Invalid RENEWABLE_USAGE_RANDOM_SEED environment variable: "
                    f"{os.environ['RENEWABLE_USAGE_RANDOM_SEED']}"
                )

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to configuration value (e.g., 'aggregation.confidence_z')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_data_path(self, path_key: str) -> Optional[str]:
        """
        Get a data path from configuration.

        Args:
            path_key: Key for the data path (e.g., 'usage_data')

        Returns:
            Absolute path, or None when the key is present but empty

        Raises:
            ConfigurationError: If path key not found
        """
        if path_key not in self._config['data_paths']:
            raise ConfigurationError(f"Data path not found in configuration: {path_key}")

        return self._config['data_paths'][path_key] or None

    def get_sample_size(self, override: Optional[int] = None) -> Optional[int]:
        """Get sample size for loading, None for the full table."""
        if override is not None:
            return override

        return self._config['processing'].get('default_sample_size')

    def get_random_seed(self) -> int:
        """Get random seed for reproducibility."""
        return self._config['processing'].get('random_seed', 42)

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self._config['logging']

    def get_chart_config(self, chart_name: str) -> Dict[str, Any]:
        """Get the per-chart overrides (title, filename) for one chart."""
        return self._config['charts'].get(chart_name) or {}

    def to_dict(self) -> Dict[str, Any]:
        """Get full configuration as dictionary."""
        return self._config.copy()


def get_config() -> Config:
    """
    Get the singleton configuration instance.

    Returns:
        Config instance
    """
    return Config()
