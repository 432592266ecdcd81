"""
Configuration management for the RO performance calculator.

Calibration data is loaded and merged from:
1. Default YAML files in config/
2. Environment variables prefixed with RO_CALC_
3. Runtime overrides via set_config()
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

ENV_PREFIX = "RO_CALC_"


class ConfigLoader:
    """Handles configuration loading and management."""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory containing config files.
                       Defaults to config/ in project root.
        """
        if config_dir is None:
            project_root = Path(__file__).parent.parent
            config_dir = project_root / "config"

        self.config_dir = Path(config_dir)
        self._config: Dict[str, Any] = {}
        self._loaded = False

    def load(self, config_files: Optional[list] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML files.

        Args:
            config_files: List of config files to load.
                         If None, loads all .yaml files in config_dir.

        Returns:
            Merged configuration dictionary.
        """
        if config_files is None:
            config_files = sorted(self.config_dir.glob("*.yaml"))
        else:
            config_files = [self.config_dir / f if isinstance(f, str) else f
                            for f in config_files]

        for config_file in config_files:
            if config_file.exists():
                logger.debug(f"Loading config from {config_file}")
                with open(config_file, 'r') as f:
                    file_config = yaml.safe_load(f)
                    if file_config:
                        self._config = self._deep_merge(self._config, file_config)
            else:
                logger.warning(f"Config file not found: {config_file}")

        self._apply_env_overrides()

        self._loaded = True
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "transport.beta_coefficient")
            default: Default value if key not found

        Returns:
            Configuration value or default.
        """
        if not self._loaded:
            self.load()

        value = self._config
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value using dot notation.

        Args:
            key: Configuration key
            value: Value to set
        """
        if not self._loaded:
            self.load()
        self._assign(key.split('.'), value)

    def _assign(self, keys: list, value: Any) -> None:
        config = self._config
        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def _deep_merge(self, dict1: Dict, dict2: Dict) -> Dict:
        """
        Deep merge two dictionaries.

        Args:
            dict1: Base dictionary
            dict2: Dictionary to merge into dict1

        Returns:
            Merged dictionary.
        """
        result = dict1.copy()

        for key, value in dict2.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        # RO_CALC_DESIGN_LIMITS__MAX_FLUX_GFD -> design_limits.max_flux_gfd
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            config_key = env_key[len(ENV_PREFIX):].lower().replace('__', '.')
            value = _parse_env_value(env_value)

            logger.debug(f"Overriding {config_key} with {value} from environment")
            self._assign(config_key.split('.'), value)

    def to_dict(self) -> Dict[str, Any]:
        """Return the full configuration as a dictionary."""
        if not self._loaded:
            self.load()
        return self._config.copy()


def _parse_env_value(env_value: str) -> Any:
    if env_value.lower() in ('true', 'false'):
        return env_value.lower() == 'true'
    try:
        if env_value.lstrip('-').isdigit():
            return int(env_value)
        return float(env_value)
    except ValueError:
        return env_value


# Global configuration instance
_config_loader = ConfigLoader()


def load_config(config_files: Optional[list] = None) -> Dict[str, Any]:
    """Load configuration (convenience function)."""
    return _config_loader.load(config_files)


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value (convenience function).

    Args:
        key: Configuration key using dot notation
        default: Default value if not found

    Returns:
        Configuration value.
    """
    return _config_loader.get(key, default)


def set_config(key: str, value: Any) -> None:
    """Set a configuration value (convenience function)."""
    _config_loader.set(key, value)
