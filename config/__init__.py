"""
Configuration Module for the Document Date Annotator.

Settings live in ``config/settings.yaml`` and are read through a single
ConfigurationManager instance. Modules look values up with dot notation
instead of hard-coding OCR parameters, store locations or defaults.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigurationManager:
    """
    Centralized configuration for the annotator.

    Loads settings.yaml once and serves values by dotted key. A different
    file can be supplied on first construction (the CLI ``--config`` flag).

    Attributes:
        config_path (Path): Path to the configuration file.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("ocr.tesseract.lang")
        'eng'
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        Defaults to config/settings.yaml.
        """
        if self._initialized:
            return

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            yaml.YAMLError: If configuration file is invalid.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """Resolve relative entries under ``paths`` and ``store.memory.seed_file`` against the project root."""
        project_root = Path(__file__).parent.parent

        if 'paths' in self._config:
            for key, value in self._config['paths'].items():
                if value and not Path(value).is_absolute():
                    self._config['paths'][key] = str(project_root / value)

        memory = self._config.get('store', {}).get('memory', {})
        seed_file = memory.get('seed_file')
        if seed_file and not Path(seed_file).is_absolute():
            memory['seed_file'] = str(project_root / seed_file)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "ocr.engine").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("session.default_dataset")
            'id_cards'
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next construction reads a fresh file."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
