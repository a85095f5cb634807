#!/usr/bin/env python3
"""Configuration loader that reads from config.jsonc / config.json"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

_COMMENT_PATTERN = re.compile(r"^\s*//.*$|(?<=[,{\[\s])//[^\"\n]*$", re.MULTILINE)

DEFAULT_CONFIG: dict[str, Any] = {
    "conversion": {
        "code_aware": False,
        "default_file_type": None,
        "convert_units": True,
        "normalise_smart_quotes": False,
        "min_confidence": None,
    },
    "paths": {
        "user_dictionary": "american_spellings.json",
        "unit_config": "unit_config.json",
        "contextual_config": "contextual_word_config.json",
    },
    "logging": {"level": "WARNING"},
}


class ConfigurationError(Exception):
    """Raised when a configuration file or value cannot be used safely."""
    pass


def get_config_dir() -> Path:
    """User configuration directory (M2E_CONFIG_DIR overrides ~/.config/m2e)."""
    override = os.environ.get("M2E_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "m2e"


def strip_json_comments(content: str) -> str:
    """Remove // line comments so JSONC files parse as JSON."""
    return _COMMENT_PATTERN.sub("", content)


def load_jsonc(path: str | Path) -> Any:
    """Read a JSON file that may carry // comments.

    Raises:
        ConfigurationError: If the file cannot be read or is not valid JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    try:
        return json.loads(strip_json_comments(content))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed JSON in {path}: {e}") from e


class ConfigLoader:
    """Load application configuration from config.jsonc / config.json"""

    def __init__(self, config_path: str | Path | None = None) -> None:
        if config_path is None:
            config_path = self._find_config_file()

        self.config_file = str(config_path)

        loaded = load_jsonc(config_path)
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Top level of {config_path} must be an object")

        self._config = self._merge_defaults(DEFAULT_CONFIG, loaded)
        self.project_dir = str(Path(config_path).parent)

    def _find_config_file(self) -> Path:
        """Find config file in multiple locations"""
        # Method 1: Relative to source code (development mode): core -> m2e -> src -> project root
        current = Path(__file__).parent.parent.parent.parent
        for filename in ["config.jsonc", "config.json"]:
            config_path = current / filename
            if config_path.exists():
                return config_path

        # Method 2: Current working directory
        for filename in ["config.jsonc", "config.json"]:
            config_path = Path.cwd() / filename
            if config_path.exists():
                return config_path

        # Method 3: User configuration directory
        for filename in ["config.jsonc", "config.json"]:
            config_path = get_config_dir() / filename
            if config_path.exists():
                return config_path

        # Method 4: Create a default config
        return self._create_default_config()

    def _create_default_config(self) -> Path:
        """Create a default config file in temp directory"""
        temp_config = Path(tempfile.gettempdir()) / "m2e-config.json"
        with open(temp_config, "w", encoding="utf-8") as f:
            json.dump(DEFAULT_CONFIG, f, indent=2)

        return temp_config

    @staticmethod
    def _merge_defaults(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
        merged = json.loads(json.dumps(defaults))
        for section, value in overrides.items():
            if isinstance(value, dict) and isinstance(merged.get(section), dict):
                merged[section].update(value)
            else:
                merged[section] = value
        return merged

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a value using dot notation (e.g., 'conversion.code_aware')"""
        keys = key_path.split(".")
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def __setitem__(self, key: str, value: Any) -> None:
        """Set a value in the config dictionary to support item assignment"""
        self._config[key] = value

    def __getitem__(self, key: str) -> Any:
        """Get a value from the config dictionary to support item access"""
        return self._config[key]

    def set(self, key_path: str, value: Any) -> None:
        """Set a value using dot notation (e.g., 'conversion.min_confidence')"""
        keys = key_path.split(".")
        target = self._config

        for key in keys[:-1]:
            if key not in target:
                target[key] = {}
            target = target[key]

        target[keys[-1]] = value

    def as_dict(self) -> dict[str, Any]:
        return json.loads(json.dumps(self._config))

    @property
    def config_dir(self) -> Path:
        return get_config_dir()

    @property
    def code_aware(self) -> bool:
        return bool(self.get("conversion.code_aware", False))

    @property
    def default_file_type(self) -> str | None:
        value = self.get("conversion.default_file_type")
        return str(value) if value else None

    @property
    def convert_units(self) -> bool:
        return bool(self.get("conversion.convert_units", True))

    @property
    def normalise_smart_quotes(self) -> bool:
        return bool(self.get("conversion.normalise_smart_quotes", False))

    @property
    def min_confidence(self) -> Optional[float]:
        """Contextual threshold override; None defers to the contextual word config."""
        value = self.get("conversion.min_confidence")
        if value is None:
            return None
        value = float(value)
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"conversion.min_confidence must be between 0 and 1, got {value}")
        return value

    def _resolve_path(self, key: str, default: str) -> Path:
        path = Path(str(self.get(f"paths.{key}", default))).expanduser()
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    @property
    def user_dictionary_path(self) -> Path:
        return self._resolve_path("user_dictionary", "american_spellings.json")

    @property
    def unit_config_path(self) -> Path:
        return self._resolve_path("unit_config", "unit_config.json")

    @property
    def contextual_config_path(self) -> Path:
        return self._resolve_path("contextual_config", "contextual_word_config.json")

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "WARNING")).upper()

    def save(self) -> None:
        """Write the current configuration back to its file."""
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self._config, f, indent=2)


_config_loader: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Get the global config loader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config() -> None:
    """Forget the global config loader so the next get_config() re-reads disk."""
    global _config_loader
    _config_loader = None


def load_config(config_path: str | Path | None = None) -> ConfigLoader:
    """Load configuration from config file (alias for creating ConfigLoader)."""
    return ConfigLoader(config_path)


# ========================= CENTRALIZED LOGGING SETUP =========================


def setup_logging(
    module_name: str,
    log_level: str | None = None,
    include_console: bool | None = None,
    include_file: bool | None = None,
) -> logging.LoggerAdapter:
    """
    Setup standardized logging for m2e modules.

    Args:
        module_name: Name of the module (usually __name__)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        include_console: Whether to log to console
        include_file: Whether to log to file

    Returns:
        Configured ContextLogger instance

    """
    from .logging import get_logger as get_structured_logger

    return get_structured_logger(
        name=module_name,
        log_level=log_level,
        include_console=include_console,
        include_file=include_file,
    )
