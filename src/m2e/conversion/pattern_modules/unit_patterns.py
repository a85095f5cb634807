#!/usr/bin/env python3
"""
Imperial unit rules and quantity detection patterns.

This module holds the declarative ``UnitRule`` table, the built-in idiom guards and
the regex builders the unit detector runs over each eligible span.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern

from ..common import UnitType
from ..pattern_cache import cached_pattern


# ==============================================================================
# UNIT RULES
# ==============================================================================


@dataclass(frozen=True)
class UnitRule:
    """One imperial unit and how it maps onto its metric base unit.

    Base units are metres, kilograms, litres, degrees Celsius and square metres.
    """

    name: str
    unit_type: UnitType
    unit_aliases: frozenset[str]
    factor: float
    offset: float = 0.0
    base_confidence: float = 0.9
    written_number_support: bool = True
    compound_support: bool = False
    precision: Optional[int] = None

    def to_metric(self, value: float) -> float:
        return (value + self.offset) * self.factor


UNIT_RULES: tuple[UnitRule, ...] = (
    # Length
    UnitRule("foot", UnitType.LENGTH, frozenset({"feet", "foot", "ft"}), 0.3048, compound_support=True),
    UnitRule("inch", UnitType.LENGTH, frozenset({"inches", "inch", "in"}), 0.0254, compound_support=True),
    UnitRule("yard", UnitType.LENGTH, frozenset({"yards", "yard", "yd", "yds"}), 0.9144, compound_support=True),
    UnitRule("mile", UnitType.LENGTH, frozenset({"miles", "mile", "mi"}), 1609.344, compound_support=True),
    # Mass
    UnitRule("pound", UnitType.MASS, frozenset({"pounds", "pound", "lbs", "lb"}), 0.45359237, compound_support=True),
    UnitRule("ounce", UnitType.MASS, frozenset({"ounces", "ounce", "oz"}), 0.028349523125, compound_support=True),
    UnitRule("ton", UnitType.MASS, frozenset({"tons", "ton"}), 907.18474, base_confidence=0.85, compound_support=True),
    # Volume
    UnitRule("fluid ounce", UnitType.VOLUME, frozenset({"fluid ounces", "fluid ounce", "fl oz", "fl. oz."}),
             0.0295735295625, base_confidence=0.95),
    UnitRule("gallon", UnitType.VOLUME, frozenset({"gallons", "gallon", "gal"}), 3.785411784, compound_support=True),
    UnitRule("quart", UnitType.VOLUME, frozenset({"quarts", "quart", "qt"}), 0.946352946),
    UnitRule("pint", UnitType.VOLUME, frozenset({"pints", "pint", "pt"}), 0.473176473),
    # Temperature
    UnitRule("fahrenheit", UnitType.TEMPERATURE,
             frozenset({"°f", "º f", "° f", "ºf", "degrees fahrenheit", "degree fahrenheit", "fahrenheit",
                        "degrees f"}),
             5 / 9, offset=-32.0, base_confidence=0.95, written_number_support=False),
    # Area
    UnitRule("square foot", UnitType.AREA,
             frozenset({"square feet", "square foot", "sq ft", "sq. ft.", "sq.ft.", "sqft", "ft²", "ft2"}),
             0.09290304, base_confidence=0.95),
    UnitRule("acre", UnitType.AREA, frozenset({"acres", "acre"}), 4046.8564224, compound_support=True),
)

# Aliases whose bare form is also a common word or typography term
WEAK_ALIASES: dict[str, float] = {
    "in": 0.5,
    "pt": 0.4,
    "mi": 0.8,
    "gal": 0.8,
}

# Abbreviations that may carry a period ("5 in. pipe")
ABBREVIATED_ALIASES = frozenset({"ft", "in", "yd", "yds", "mi", "lb", "lbs", "oz", "gal", "qt", "pt"})

FAHRENHEIT_CONFIDENCE = {
    "symbol": 0.95,
    "words": 0.9,
    "context": 0.8,
}


def build_alias_index(rules: tuple[UnitRule, ...] = UNIT_RULES) -> dict[str, UnitRule]:
    """Map every lower-case alias to its rule."""
    index: dict[str, UnitRule] = {}
    for rule in rules:
        for alias in rule.unit_aliases:
            index[alias.lower()] = rule
    return index


def normalise_alias(text: str) -> str:
    """Collapse whitespace and case so a matched unit can be looked up in the index."""
    return " ".join(text.lower().split()).replace("º", "°")


# ==============================================================================
# EXCLUSIONS
# ==============================================================================


@dataclass(frozen=True)
class ExclusionPattern:
    """An idiom guard. ``applies_to`` of None means every unit type.

    Built-in guards must overlap the quantity itself. ``whole_window`` guards reject
    a quantity whenever they match anywhere in the text around it.
    """

    matcher: Pattern[str]
    applies_to: Optional[UnitType] = None
    whole_window: bool = False

    def applies(self, unit_type: UnitType) -> bool:
        return self.applies_to is None or self.applies_to is unit_type


_IDIOM_SOURCES: tuple[tuple[str, Optional[UnitType]], ...] = (
    (r"(?<![\d.]\s)\bmiles?\s+(?:away|apart|ahead|behind|better|off)\b", None),
    (r"\b(?:go|went|going|goes)\s+the\s+extra\s+mile\b", UnitType.LENGTH),
    (r"\bmiles?\s+to\s+go\b", UnitType.LENGTH),
    (r"\b(?:give|gave|giving)\s+(?:an?|one)\s+inch\b", UnitType.LENGTH),
    (r"\binch\s+by\s+inch\b", UnitType.LENGTH),
    (r"\bevery\s+inch\b", UnitType.LENGTH),
    (r"\bone\s+foot\s+in\s+(?:the\s+grave|front|the\s+door)\b", UnitType.LENGTH),
    (r"\bfoot\s+(?:in\s+the\s+door|the\s+bill)\b", UnitType.LENGTH),
    (r"\b(?:on|with)\s+the\s+(?:right|wrong)\s+foot\b", UnitType.LENGTH),
    (r"\bsix\s+feet\s+under\b", UnitType.LENGTH),
    (r"\bcold\s+feet\b", UnitType.LENGTH),
    (r"\btons?\s+of\s+(?:fun|work|stuff|things|people|time|money|ways|reasons)\b", UnitType.MASS),
    (r"\bpound\s+(?:the\s+pavement|the\s+table|for\s+pound)\b", UnitType.MASS),
    (r"\b(?:ounce|pound)\s+of\s+(?:prevention|cure|flesh|sense)\b", UnitType.MASS),
    (r"(?<![\d.]\s)\bpounds?\s+of\s+(?:pressure|force)\b(?!\s*\d)", UnitType.MASS),
    (r"\bpints?\s+(?:of\s+beer|of\s+ale|at\s+the\s+pub)\b", UnitType.VOLUME),
    (r"\b\d+\s*pts?\b\s*(?:font|type|text|size|bold|border|margin|padding|line)", UnitType.VOLUME),
    (r"\bfont[- ]size\b", UnitType.VOLUME),
)

# Quantities of money written with "pounds"
_MONEY_SOURCES: tuple[str, ...] = (
    r"£\s*\d",
    r"\bpounds?\s+(?:sterling|stg)\b",
    r"\b(?:cost|costs|costing|paid|pay|pays|paying|price|priced|prices|worth|spent|spend|earn|earned|"
    r"owe|owed|charge|charged|fine|fined|salary|budget)\b[^.\n]{0,30}?\b\d[\d,.]*\s+pounds?\b",
    r"\b\d[\d,.]*\s+pounds?\s+(?:a|per)\s+(?:week|month|year|hour|day)\b",
)

# Ones that mark the surrounding sentence as figurative
_FIGURATIVE_SOURCE = r"\b(?:figuratively|metaphorically|so\s+to\s+speak|as\s+if|felt\s+like|seemed\s+like)\b"

# Words that indicate a literal measurement nearby
_MEASUREMENT_CONTEXT_SOURCE = (
    r"\b(?:measure[sd]?|measuring|measurement|length|width|height|depth|tall|wide|long|deep|high|"
    r"weigh[st]?|weighed|weight|heavy|distance|capacity|volume|area|size|dimensions?|temperature|"
    r"thick|thickness|diameter|radius|approximately|approx|about|roughly|around|nearly|over|under|"
    r"recipe|add|pour|fill|run|ran|walk|walked|drive|drove|hike|hiked)\b"
)


@cached_pattern
def build_idiom_pattern(source: str) -> Pattern[str]:
    return re.compile(source, re.IGNORECASE)


def build_idiom_exclusions() -> tuple[ExclusionPattern, ...]:
    """Built-in idiom guards, plus the money guard for pounds."""
    exclusions = [ExclusionPattern(build_idiom_pattern(source), unit_type) for source, unit_type in _IDIOM_SOURCES]
    exclusions.extend(ExclusionPattern(build_idiom_pattern(source), UnitType.MASS) for source in _MONEY_SOURCES)
    return tuple(exclusions)


def build_user_exclusions(sources: tuple[str, ...]) -> tuple[ExclusionPattern, ...]:
    """User exclude patterns describe the surrounding text, not just the quantity."""
    return tuple(ExclusionPattern(build_idiom_pattern(source), whole_window=True) for source in sources)


@cached_pattern
def build_figurative_pattern() -> Pattern[str]:
    return re.compile(_FIGURATIVE_SOURCE, re.IGNORECASE)


@cached_pattern
def build_measurement_context_pattern() -> Pattern[str]:
    return re.compile(_MEASUREMENT_CONTEXT_SOURCE, re.IGNORECASE)


# ==============================================================================
# NUMBERS
# ==============================================================================

WRITTEN_ONES = (
    "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten", "eleven", "twelve",
    "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen", "nineteen",
)
WRITTEN_TENS = ("twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety")

# Words allowed between a number and its unit ("5 more feet")
QUANTITY_FILLERS = ("more", "additional", "extra", "full", "whole", "solid", "entire", "short", "long")

_DIGIT_NUMBER = r"""
    \d{1,3}(?:,\d{3})+(?:\.\d+)?     # 1,200 or 1,200.5
    | \d+\s+\d+/\d+                  # 5 1/2
    | \d+/\d+                        # 3/4
    | \d+(?:\.\d+)?                  # 12 or 3.5
    | \.\d+                          # .5
"""


def _written_number_source() -> str:
    ones = "|".join(sorted(WRITTEN_ONES, key=len, reverse=True))
    tens = "|".join(WRITTEN_TENS)
    return (
        rf"(?:(?:a|one)\s+hundred"
        rf"|(?:{tens})(?:[-\s](?:{ones}))?"
        rf"|{ones})"
    )


def _alias_source(aliases: list[str]) -> str:
    parts = []
    for alias in sorted(aliases, key=len, reverse=True):
        escaped = re.escape(alias).replace(r"\ ", r"\s*" if alias.startswith(("°", "º")) else r"\s+")
        escaped = escaped.replace("°", "[°º]")
        parts.append(escaped)
    return "|".join(parts)


def _plain_aliases(rules: tuple[UnitRule, ...]) -> list[str]:
    return sorted(
        {alias for rule in rules if rule.unit_type is not UnitType.TEMPERATURE for alias in rule.unit_aliases}
    )


# ==============================================================================
# QUANTITY PATTERN BUILDERS
# ==============================================================================


@cached_pattern
def build_quantity_pattern(written_numbers: bool = True, max_fillers: int = 2) -> Pattern[str]:
    """Number, optional filler words, unit alias ("12 feet", "five more miles", "3.5lbs")."""
    number = _DIGIT_NUMBER
    if written_numbers:
        number += rf"| {_written_number_source()}"
    fillers = "|".join(QUANTITY_FILLERS)
    units = _alias_source(_plain_aliases(UNIT_RULES))
    return re.compile(
        rf"""
        (?<![\w.,/$£€-])                        # not inside another token
        (?P<number>{number})
        (?P<fillers>(?:\s+(?:{fillers})){{0,{max(0, max_fillers)}}})
        (?P<gap>\s*)
        (?P<unit>{units})
        (?![\w²])                               # whole unit only
        """,
        re.VERBOSE | re.IGNORECASE,
    )


@cached_pattern
def build_compound_pattern(written_numbers: bool = True) -> Pattern[str]:
    """Hyphenated adjective form ("a 6-foot fence", "ten-mile run")."""
    number = r"\d+(?:\.\d+)?"
    if written_numbers:
        number += rf"|{_written_number_source()}"
    singular = "|".join(
        sorted((rule.name for rule in UNIT_RULES if rule.compound_support), key=len, reverse=True)
    )
    return re.compile(
        rf"""
        (?<![\w.,/$£€-])
        (?P<number>{number})
        -
        (?P<unit>{singular})
        (?![\w])
        """,
        re.VERBOSE | re.IGNORECASE,
    )


@cached_pattern
def build_feet_inches_pattern(written_numbers: bool = True) -> Pattern[str]:
    """Feet and inches written as one length ("5 feet 10 inches", "6 ft 2 in")."""
    number = r"\d+(?:\.\d+)?"
    if written_numbers:
        number += rf"|{_written_number_source()}"
    return re.compile(
        rf"""
        (?<![\w.,/$£€-])
        (?P<number>{number})
        \s*(?:feet|foot|ft)\.?,?
        \s+(?:and\s+)?
        (?P<number2>{number})
        \s*(?P<unit>inches|inch|in)
        (?![\w])
        """,
        re.VERBOSE | re.IGNORECASE,
    )


@cached_pattern
def build_temperature_pattern() -> Pattern[str]:
    """Fahrenheit temperatures ("75°F", "-4 °F", "98.6 degrees Fahrenheit")."""
    temperature_rule = next(rule for rule in UNIT_RULES if rule.unit_type is UnitType.TEMPERATURE)
    units = _alias_source(sorted(temperature_rule.unit_aliases))
    return re.compile(
        rf"""
        (?<![\w.,/$£€])
        (?P<number>[-−]?\d+(?:\.\d+)?)
        (?P<gap>\s*)
        (?P<unit>{units})
        (?![\w])
        """,
        re.VERBOSE | re.IGNORECASE,
    )


@cached_pattern
def build_temperature_context_pattern() -> Pattern[str]:
    """A bare capital F after a temperature word ("the temperature reached 90 F")."""
    return re.compile(
        r"""
        \b(?:temperatures?|temp|highs?|lows?|heat|thermostat|oven|weather)\b
        [^.\n\d]{0,20}?
        (?<![\w.,/$£€])
        (?P<number>[-−]?\d+(?:\.\d+)?)
        (?P<gap>\s*)
        (?P<unit>(?-i:F))
        (?![\w°])
        """,
        re.VERBOSE | re.IGNORECASE,
    )


# ==============================================================================
# GETTER FUNCTIONS
# ==============================================================================


def get_quantity_pattern(written_numbers: bool = True, max_number_distance: int = 3) -> Pattern[str]:
    """Fillers are counted as intervening words, so distance 3 allows two of them."""
    return build_quantity_pattern(written_numbers, max(0, max_number_distance - 1))


def get_compound_pattern(written_numbers: bool = True) -> Pattern[str]:
    return build_compound_pattern(written_numbers)


def get_feet_inches_pattern(written_numbers: bool = True) -> Pattern[str]:
    return build_feet_inches_pattern(written_numbers)
