"""Metric conversion and rendering of detected imperial quantities."""

from typing import Dict, Optional

from ..common import NumberParser, UnitMatch, UnitType
from ..pattern_modules.unit_patterns import UNIT_RULES, UnitRule
from ..unit_config import UnitConfig
from .base import BasePatternConverter

SINGULAR_UNITS = {
    "metres": "metre",
    "tonnes": "tonne",
    "litres": "litre",
    "hectares": "hectare",
}

# Spellings used when localised unit names are turned off
AMERICAN_UNIT_NAMES = {
    "metres": "meters",
    "metre": "meter",
    "litres": "liters",
    "litre": "liter",
}

SYMBOL_UNITS = ("°C",)


class UnitConverter(BasePatternConverter):
    """Converter from imperial quantities to metric text."""

    def __init__(self, number_parser: NumberParser, config: UnitConfig):
        """Initialize unit converter."""
        super().__init__(number_parser, config)
        self.rules: Dict[str, UnitRule] = {rule.name: rule for rule in UNIT_RULES}

        # Define supported unit types and their converter methods
        self.supported_types: Dict[UnitType, str] = {
            UnitType.LENGTH: "convert_length",
            UnitType.MASS: "convert_mass",
            UnitType.VOLUME: "convert_volume",
            UnitType.TEMPERATURE: "convert_temperature",
            UnitType.AREA: "convert_area",
        }

    def convert(self, match: UnitMatch) -> Optional[str]:
        """Convert a detected quantity to its metric rendering."""
        if not self.config.is_unit_type_enabled(match.unit_type):
            return None
        converter_method = self.get_converter_method(match.unit_type)
        rule = self.rules.get(match.unit)
        if not converter_method or rule is None:
            return None
        return getattr(self, converter_method)(match, rule)

    def to_base(self, match: UnitMatch, rule: UnitRule) -> float:
        """Value in the metric base unit, adding any secondary part ("5 feet 10 inches")."""
        base = rule.to_metric(match.value)
        if match.secondary_value is not None and match.secondary_unit in self.rules:
            base += self.rules[match.secondary_unit].to_metric(match.secondary_value)
        return base

    # ==========================================================================
    # PER TYPE CONVERSION
    # ==========================================================================

    def convert_length(self, match: UnitMatch, rule: UnitRule) -> str:
        """
        Convert a length, picking mm, cm, metres or km by magnitude.

        Examples:
        - "12 feet" → "3.7 metres"
        - "3 inches" → "7.6 cm"
        - "a 6-foot fence" → "a 1.8-metre fence"

        """
        metres = self.to_base(match, rule)
        value, unit = self.select_length_unit(metres, from_inches=rule.name == "inch" and match.secondary_value is None)
        return self._render(value, unit, match, UnitType.LENGTH)

    def convert_mass(self, match: UnitMatch, rule: UnitRule) -> str:
        value, unit = self.select_mass_unit(self.to_base(match, rule))
        return self._render(value, unit, match, UnitType.MASS)

    def convert_volume(self, match: UnitMatch, rule: UnitRule) -> str:
        value, unit = self.select_volume_unit(self.to_base(match, rule))
        return self._render(value, unit, match, UnitType.VOLUME)

    def convert_area(self, match: UnitMatch, rule: UnitRule) -> str:
        value, unit = self.select_area_unit(self.to_base(match, rule))
        return self._render(value, unit, match, UnitType.AREA)

    def convert_temperature(self, match: UnitMatch, rule: UnitRule) -> str:
        """Convert Fahrenheit to Celsius ("75°F" → "24°C")."""
        celsius = rule.to_metric(match.value)
        number = self.format_value(celsius, self.config.precision_for(UnitType.TEMPERATURE))
        temperature_format = self.config.preferences.temperature_format
        unit = self.config.custom_mappings.get(temperature_format, temperature_format)
        if unit in SYMBOL_UNITS:
            return f"{number}{unit}"
        if temperature_format == "degrees Celsius":
            return f"{number} {unit}"
        return self._join(number, unit)

    # ==========================================================================
    # UNIT SELECTION
    # ==========================================================================

    @staticmethod
    def select_length_unit(metres: float, from_inches: bool = False) -> tuple[float, str]:
        if from_inches:
            if metres < 0.01:
                return metres * 1000, "mm"
            if metres < 10:
                return metres * 100, "cm"
        if metres == 0:
            return metres, "metres"
        if metres < 0.01:
            return metres * 1000, "mm"
        if metres < 1:
            return metres * 100, "cm"
        if metres < 1000:
            return metres, "metres"
        return metres / 1000, "km"

    @staticmethod
    def select_mass_unit(kilograms: float) -> tuple[float, str]:
        if kilograms < 0.001:
            return kilograms * 1_000_000, "mg"
        if kilograms < 1:
            return kilograms * 1000, "g"
        if kilograms < 1000:
            return kilograms, "kg"
        return kilograms / 1000, "tonnes"

    @staticmethod
    def select_volume_unit(litres: float) -> tuple[float, str]:
        if litres < 1:
            return litres * 1000, "ml"
        return litres, "litres"

    @staticmethod
    def select_area_unit(square_metres: float) -> tuple[float, str]:
        if square_metres < 10000:
            return square_metres, "m²"
        return square_metres / 10000, "hectares"

    # ==========================================================================
    # FORMATTING
    # ==========================================================================

    def format_value(self, value: float, type_precision: int) -> str:
        """
        Round a converted value for display.

        Precision is capped by max_decimal_places. Values within rounding_threshold
        of a whole number are shown whole when whole numbers are preferred, and
        trailing places are dropped when a shorter form is close enough.
        """
        prefs = self.config.preferences
        precision = min(type_precision, prefs.max_decimal_places)

        if prefs.prefer_whole_numbers and abs(value - round(value)) < prefs.rounding_threshold:
            return self._format_number(value, 0)
        if precision <= 0:
            return self._format_number(value, 0)

        for places in range(precision):
            if abs(value - self._round_half_up(value, places)) < prefs.rounding_threshold / 10:
                return self._format_number(value, places)
        return self._format_number(value, precision)

    def _render(self, value: float, unit: str, match: UnitMatch, unit_type: UnitType) -> str:
        number = self.format_value(value, self.config.precision_for(unit_type))
        singular = match.is_compound or number == "1"
        if singular:
            unit = SINGULAR_UNITS.get(unit, unit)
        if not self.config.preferences.use_localized_units:
            unit = AMERICAN_UNIT_NAMES.get(unit, unit)
        unit = self.config.custom_mappings.get(unit, unit)

        if match.is_compound:
            return f"{number}-{unit}"
        if match.modifier:
            return f"{number} {match.modifier} {unit}"
        return self._join(number, unit)

    def _join(self, number: str, unit: str) -> str:
        if unit.startswith("°"):
            return f"{number}{unit}"
        if self.config.preferences.use_space_between_value_and_unit:
            return f"{number} {unit}"
        return f"{number}{unit}"
