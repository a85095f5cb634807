#!/usr/bin/env python3
"""
Unit conversion configuration.

Mirrors the JSON document users keep in ``unit_config.json``::

    {
      "enabled": true,
      "enabledUnitTypes": ["length", "mass", "volume", "temperature", "area"],
      "precision": {"length": 1, "temperature": 0},
      "customMappings": {"metres": "m"},
      "excludePatterns": ["miles?\\s+away"],
      "preferences": {"preferWholeNumbers": true, "maxDecimalPlaces": 2, ...},
      "detection": {"minConfidence": 0.5, "maxNumberDistance": 3, ...}
    }

Every setting has a default, so partial documents are accepted.
"""
from __future__ import annotations

import copy
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core.config import ConfigurationError, load_jsonc
from .common import UnitType

VALID_TEMPERATURE_FORMATS = ("°C", "degrees Celsius", "C", "celsius")

DEFAULT_PRECISION: dict[str, int] = {
    "length": 1,
    "mass": 1,
    "volume": 1,
    "temperature": 0,
    "area": 1,
}

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    r"(?<![\d.]\s)(?<![\d.])miles?\s+(?:away|apart|from\s+home|ahead)",
    r"inch\s+by\s+inch",
    r"every\s+inch",
    r"tons?\s+of\s+(?:fun|work|stuff|things)",
    r"(?<![\d.]\s)pounds?\s+of\s+(?:pressure|force)\b(?!\s*\d)",
    r"cold\s+feet",
    r"foot\s+(?:in\s+the\s+door|the\s+bill)",
    r"pound\s+(?:the\s+pavement|the\s+table)",
)


def _require(data: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    value = data[key]
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) and kind in (int, float, (int, float)):
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}")
    if not isinstance(value, kind):
        raise ConfigurationError(f"'{key}' has the wrong type: {value!r}")
    return value


@dataclass
class ConversionPreferences:
    """How converted values are rounded and rendered."""

    prefer_whole_numbers: bool = True
    max_decimal_places: int = 2
    use_localized_units: bool = True
    temperature_format: str = "°C"
    use_space_between_value_and_unit: bool = True
    rounding_threshold: float = 0.1

    _KEYS = {
        "preferWholeNumbers": ("prefer_whole_numbers", bool),
        "maxDecimalPlaces": ("max_decimal_places", int),
        "useLocalizedUnits": ("use_localized_units", bool),
        "temperatureFormat": ("temperature_format", str),
        "useSpaceBetweenValueAndUnit": ("use_space_between_value_and_unit", bool),
        "roundingThreshold": ("rounding_threshold", (int, float)),
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversionPreferences:
        prefs = cls()
        for json_key, (attr, kind) in cls._KEYS.items():
            if json_key in data:
                setattr(prefs, attr, _require(data, json_key, kind))
        prefs.rounding_threshold = float(prefs.rounding_threshold)
        return prefs

    def to_dict(self) -> dict[str, Any]:
        return {json_key: getattr(self, attr) for json_key, (attr, _) in self._KEYS.items()}


@dataclass
class DetectionSettings:
    """Thresholds used while looking for quantities."""

    min_confidence: float = 0.5
    max_number_distance: int = 3
    detect_compound_units: bool = True
    detect_written_numbers: bool = True

    _KEYS = {
        "minConfidence": ("min_confidence", (int, float)),
        "maxNumberDistance": ("max_number_distance", int),
        "detectCompoundUnits": ("detect_compound_units", bool),
        "detectWrittenNumbers": ("detect_written_numbers", bool),
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DetectionSettings:
        settings = cls()
        for json_key, (attr, kind) in cls._KEYS.items():
            if json_key in data:
                setattr(settings, attr, _require(data, json_key, kind))
        settings.min_confidence = float(settings.min_confidence)
        return settings

    def to_dict(self) -> dict[str, Any]:
        return {json_key: getattr(self, attr) for json_key, (attr, _) in self._KEYS.items()}


@dataclass
class UnitConfig:
    """Complete unit conversion configuration."""

    enabled: bool = True
    enabled_unit_types: list[UnitType] = field(default_factory=lambda: list(UnitType))
    precision: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRECISION))
    custom_mappings: dict[str, str] = field(default_factory=dict)
    exclude_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    preferences: ConversionPreferences = field(default_factory=ConversionPreferences)
    detection: DetectionSettings = field(default_factory=DetectionSettings)

    @classmethod
    def default(cls) -> UnitConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UnitConfig:
        """Build a config from its JSON form, filling gaps with defaults.

        Raises:
            ConfigurationError: On wrong value types or unknown unit types
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Unit configuration must be a JSON object")

        config = cls()
        if "enabled" in data:
            config.enabled = _require(data, "enabled", bool)

        if "enabledUnitTypes" in data:
            names = _require(data, "enabledUnitTypes", list)
            config.enabled_unit_types = [cls._parse_unit_type(name) for name in names]

        if "precision" in data:
            precision = _require(data, "precision", dict)
            for name, value in precision.items():
                unit_type = cls._parse_unit_type(name)
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ConfigurationError(f"precision for {name} must be an integer, got {value!r}")
                config.precision[unit_type.value] = value

        if "customMappings" in data:
            mappings = _require(data, "customMappings", dict)
            config.custom_mappings = {str(k): str(v) for k, v in mappings.items()}

        if "excludePatterns" in data:
            patterns = _require(data, "excludePatterns", list)
            config.exclude_patterns = [str(p) for p in patterns]

        if "preferences" in data:
            config.preferences = ConversionPreferences.from_dict(_require(data, "preferences", dict))

        if "detection" in data:
            config.detection = DetectionSettings.from_dict(_require(data, "detection", dict))

        return config

    @staticmethod
    def _parse_unit_type(name: Any) -> UnitType:
        try:
            return UnitType(str(name).lower())
        except ValueError:
            raise ConfigurationError(f"invalid unit type: {name}") from None

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "enabledUnitTypes": [unit_type.value for unit_type in self.enabled_unit_types],
            "precision": dict(self.precision),
            "customMappings": dict(self.custom_mappings),
            "excludePatterns": list(self.exclude_patterns),
            "preferences": self.preferences.to_dict(),
            "detection": self.detection.to_dict(),
        }

    def validate(self) -> None:
        """Check every value is in range.

        Raises:
            ConfigurationError: Describing the first invalid setting found
        """
        for unit_type in self.enabled_unit_types:
            if not isinstance(unit_type, UnitType):
                raise ConfigurationError(f"invalid unit type: {unit_type}")

        for name, value in self.precision.items():
            if value < 0 or value > 10:
                raise ConfigurationError(f"precision for {name} must be between 0 and 10, got {value}")

        detection = self.detection
        if not 0.0 <= detection.min_confidence <= 1.0:
            raise ConfigurationError(
                f"minConfidence must be between 0.0 and 1.0, got {detection.min_confidence}"
            )
        if not 1 <= detection.max_number_distance <= 10:
            raise ConfigurationError(
                f"maxNumberDistance must be between 1 and 10, got {detection.max_number_distance}"
            )

        prefs = self.preferences
        if not 0 <= prefs.max_decimal_places <= 10:
            raise ConfigurationError(f"maxDecimalPlaces must be between 0 and 10, got {prefs.max_decimal_places}")
        if not 0.0 <= prefs.rounding_threshold <= 1.0:
            raise ConfigurationError(
                f"roundingThreshold must be between 0.0 and 1.0, got {prefs.rounding_threshold}"
            )
        if prefs.temperature_format not in VALID_TEMPERATURE_FORMATS:
            raise ConfigurationError(f"invalid temperature format: {prefs.temperature_format}")

        for pattern in self.exclude_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigurationError(f"invalid exclude pattern {pattern!r}: {e}") from e

    def merge(self, other: UnitConfig) -> UnitConfig:
        """Return a new config with `other` layered over this one.

        Unit type and exclude lists are replaced when `other` supplies any;
        precision and custom mappings are overlaid key by key; preferences and
        detection settings are taken from `other` wholesale.
        """
        merged = self.clone()
        merged.enabled = other.enabled
        if other.enabled_unit_types:
            merged.enabled_unit_types = list(other.enabled_unit_types)
        merged.precision.update(other.precision)
        merged.custom_mappings.update(other.custom_mappings)
        if other.exclude_patterns:
            merged.exclude_patterns = list(other.exclude_patterns)
        merged.preferences = copy.deepcopy(other.preferences)
        merged.detection = copy.deepcopy(other.detection)
        return merged

    def clone(self) -> UnitConfig:
        return copy.deepcopy(self)

    def precision_for(self, unit_type: UnitType) -> int:
        return self.precision.get(unit_type.value, DEFAULT_PRECISION[unit_type.value])

    def is_unit_type_enabled(self, unit_type: UnitType) -> bool:
        return self.enabled and unit_type in self.enabled_unit_types

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


def load_unit_config(path: str | Path) -> UnitConfig:
    """Read and validate a unit configuration file.

    Raises:
        ConfigurationError: If the file is unreadable, malformed or out of range
    """
    config = UnitConfig.from_dict(load_jsonc(path))
    config.validate()
    return config
