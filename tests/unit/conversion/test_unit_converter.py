"""Tests for metric unit selection, rounding and rendering."""
import pytest

from m2e.conversion.common import NumberParser, UnitMatch, UnitType
from m2e.conversion.converters.base import BasePatternConverter
from m2e.conversion.converters.unit_converter import UnitConverter
from m2e.conversion.pattern_modules.unit_patterns import UNIT_RULES
from m2e.conversion.unit_config import UnitConfig


@pytest.fixture
def converter():
    return UnitConverter(NumberParser(), UnitConfig())


def quantity(value, unit, unit_type, text="", **extra):
    return UnitMatch(start=0, end=len(text), text=text, value=value, unit=unit, unit_type=unit_type,
                     confidence=0.9, **extra)


class TestRounding:
    """format_value and half-up rounding."""

    @pytest.mark.parametrize(
        "value,precision,expected",
        [
            (3.6576, 1, "3.7"),
            (5.08, 1, "5"),
            (2.25, 1, "2.3"),
            (3.14159, 2, "3.14"),
            (3.104, 2, "3.1"),
            (3.95, 2, "4"),
            (23.888, 0, "24"),
            (3.14159, 5, "3.14"),
        ],
    )
    def test_format_value(self, converter, value, precision, expected):
        assert converter.format_value(value, precision) == expected

    def test_whole_numbers_not_preferred(self):
        config = UnitConfig()
        config.preferences.prefer_whole_numbers = False
        converter = UnitConverter(NumberParser(), config)
        assert converter.format_value(5.08, 1) == "5.1"

    @pytest.mark.parametrize(
        "value,places,expected",
        [(2.5, 0, 3.0), (-2.5, 0, -3.0), (0.25, 1, 0.3), (0.0, 2, 0.0), (1.005, 2, 1.01)],
    )
    def test_round_half_up(self, value, places, expected):
        assert BasePatternConverter._round_half_up(value, places) == pytest.approx(expected)


class TestUnitSelection:
    """Metric units are picked by magnitude."""

    @pytest.mark.parametrize(
        "metres,expected_unit",
        [(0.005, "mm"), (0.5, "cm"), (3.0, "metres"), (1500.0, "km"), (0.0, "metres")],
    )
    def test_length(self, metres, expected_unit):
        assert UnitConverter.select_length_unit(metres)[1] == expected_unit

    def test_inches_prefer_centimetres(self):
        assert UnitConverter.select_length_unit(2.5, from_inches=True)[1] == "cm"
        assert UnitConverter.select_length_unit(0.005, from_inches=True)[1] == "mm"
        assert UnitConverter.select_length_unit(12.0, from_inches=True)[1] == "metres"

    @pytest.mark.parametrize(
        "kilograms,expected_unit",
        [(0.0005, "mg"), (0.5, "g"), (4.5, "kg"), (1800.0, "tonnes")],
    )
    def test_mass(self, kilograms, expected_unit):
        assert UnitConverter.select_mass_unit(kilograms)[1] == expected_unit

    def test_volume(self):
        assert UnitConverter.select_volume_unit(0.5)[1] == "ml"
        assert UnitConverter.select_volume_unit(3.0)[1] == "litres"

    def test_area(self):
        assert UnitConverter.select_area_unit(46.0)[1] == "m²"
        assert UnitConverter.select_area_unit(40468.0)[1] == "hectares"


class TestRendering:
    """Converted quantities as they appear in the output text."""

    def test_plural_and_singular(self, converter):
        assert converter.convert(quantity(12, "foot", UnitType.LENGTH)) == "3.7 metres"
        assert converter.convert(quantity(3.3, "foot", UnitType.LENGTH)) == "1 metre"

    def test_compound_adjective(self, converter):
        assert converter.convert(quantity(6, "foot", UnitType.LENGTH, is_compound=True)) == "1.8-metre"

    def test_modifier(self, converter):
        assert converter.convert(quantity(5, "mile", UnitType.LENGTH, modifier="more")) == "8 more km"

    def test_secondary_value(self, converter):
        match = quantity(5, "foot", UnitType.LENGTH, secondary_value=10, secondary_unit="inch")
        assert converter.convert(match) == "1.8 metres"

    def test_temperature(self, converter):
        assert converter.convert(quantity(75, "fahrenheit", UnitType.TEMPERATURE)) == "24°C"

    def test_temperature_precision(self):
        config = UnitConfig()
        config.precision["temperature"] = 1
        converter = UnitConverter(NumberParser(), config)
        assert converter.convert(quantity(75, "fahrenheit", UnitType.TEMPERATURE)) == "23.9°C"

    def test_no_space_between_value_and_unit(self):
        config = UnitConfig()
        config.preferences.use_space_between_value_and_unit = False
        converter = UnitConverter(NumberParser(), config)
        assert converter.convert(quantity(10, "pound", UnitType.MASS)) == "4.5kg"

    def test_disabled_type_is_not_converted(self):
        config = UnitConfig(enabled_unit_types=[UnitType.LENGTH])
        converter = UnitConverter(NumberParser(), config)
        assert converter.convert(quantity(10, "pound", UnitType.MASS)) is None

    def test_unknown_unit(self, converter):
        assert converter.convert(quantity(1, "furlong", UnitType.LENGTH)) is None

    def test_supported_types(self, converter):
        for unit_type in UnitType:
            assert converter.supports(unit_type)


class TestRules:
    """The declarative unit table."""

    def test_every_rule_has_aliases(self):
        for rule in UNIT_RULES:
            assert rule.unit_aliases
            assert rule.name in rule.unit_aliases or rule.unit_type is UnitType.TEMPERATURE

    def test_fahrenheit_offset(self):
        fahrenheit = next(rule for rule in UNIT_RULES if rule.name == "fahrenheit")
        assert fahrenheit.to_metric(212) == pytest.approx(100)
        assert not fahrenheit.written_number_support


class TestNumberParser:
    """Quantity tokens to floats."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("12", 12.0),
            ("1,200", 1200.0),
            ("3.5", 3.5),
            ("1/2", 0.5),
            ("5 1/2", 5.5),
            ("twelve", 12.0),
            ("twenty-five", 25.0),
            ("a hundred", 100.0),
        ],
    )
    def test_parse_quantity(self, text, expected):
        assert NumberParser().parse_quantity(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "lots", "3/0"])
    def test_not_a_number(self, text):
        assert NumberParser().parse_quantity(text) is None
