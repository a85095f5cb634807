#!/usr/bin/env python3
"""Common data structures and classes shared across conversion modules."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .unit_config import UnitConfig


class InvalidInput(ValueError):
    """Raised when the text handed to the engine is not valid Unicode."""
    pass


class ChangeKind(Enum):
    """Kinds of change the engine records."""

    SPELLING = "spelling"
    UNIT = "unit"
    QUOTE = "quote"


class SpanKind(Enum):
    """Scope classes produced by the scope resolver."""

    PROSE = "prose"
    COMMENT = "comment"
    STRING_LITERAL = "string-literal"
    CODE_TOKEN = "code-token"


class UnitType(Enum):
    """Imperial measurement families that can be converted."""

    LENGTH = "length"
    MASS = "mass"
    VOLUME = "volume"
    TEMPERATURE = "temperature"
    AREA = "area"


class IgnoreDirective(Enum):
    """Inline markers that suppress conversion."""

    SAME_LINE = auto()
    NEXT_LINE = auto()
    WHOLE_FILE = auto()
    BLOCK_START = auto()
    BLOCK_END = auto()


@dataclass(frozen=True)
class ChangeRecord:
    """One proposed or applied replacement, addressed by offset into the original text."""

    position: int
    original: str
    converted: str
    kind: ChangeKind
    is_contextual: bool = False
    confidence: float = 1.0

    @property
    def end(self) -> int:
        return self.position + len(self.original)

    def overlaps(self, other: ChangeRecord) -> bool:
        return self.position < other.end and other.position < self.end

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "original": self.original,
            "converted": self.converted,
            "kind": self.kind.value,
            "is_contextual": self.is_contextual,
            "confidence": round(self.confidence, 3),
        }


@dataclass(frozen=True)
class Span:
    """A contiguous region of the document with its scope class."""

    start: int
    end: int
    kind: SpanKind
    suppressed: bool = False

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class UnitMatch:
    """A detected imperial quantity before conversion."""

    start: int
    end: int
    text: str
    value: float
    unit: str
    unit_type: UnitType
    confidence: float
    is_compound: bool = False
    secondary_value: Optional[float] = None
    secondary_unit: Optional[str] = None
    modifier: str = ""


@dataclass(frozen=True)
class ConversionOptions:
    """Per-call conversion settings. Immutable, shared freely between threads.

    ``unit_config`` of None uses the unit configuration loaded into the pattern table.
    ``min_confidence`` of None uses the contextual word config's threshold.
    """

    convert_units: bool = True
    normalise_smart_quotes: bool = False
    code_aware: bool = False
    file_type: Optional[str] = None
    unit_config: Optional[UnitConfig] = None
    min_confidence: Optional[float] = None


@dataclass(frozen=True)
class ConversionResult:
    """Converted text plus the ordered list of changes applied to produce it."""

    converted_text: str
    changes: tuple[ChangeRecord, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def stats(self) -> dict[str, int]:
        """Change counts per kind; contextual spellings are also counted on their own."""
        counts = {kind.value: 0 for kind in ChangeKind}
        for change in self.changes:
            counts[change.kind.value] += 1
        counts["contextual"] = sum(1 for change in self.changes if change.is_contextual)
        counts["total"] = len(self.changes)
        return counts

    def to_dict(self) -> dict:
        return {
            "converted_text": self.converted_text,
            "changes": [change.to_dict() for change in self.changes],
            "stats": self.stats(),
        }


class NumberParser:
    """Parse numeric quantities written as digits, fractions or English words."""

    def __init__(self) -> None:
        self.ones = {
            "zero": 0,
            "one": 1,
            "two": 2,
            "three": 3,
            "four": 4,
            "five": 5,
            "six": 6,
            "seven": 7,
            "eight": 8,
            "nine": 9,
            "ten": 10,
            "eleven": 11,
            "twelve": 12,
            "thirteen": 13,
            "fourteen": 14,
            "fifteen": 15,
            "sixteen": 16,
            "seventeen": 17,
            "eighteen": 18,
            "nineteen": 19,
        }
        self.tens = {
            "twenty": 20,
            "thirty": 30,
            "forty": 40,
            "fifty": 50,
            "sixty": 60,
            "seventy": 70,
            "eighty": 80,
            "ninety": 90,
        }
        self.scales = {
            "hundred": 100,
            "thousand": 1000,
            "million": 1000000,
        }

        # Combine all number words for easy checking
        self.all_number_words = set(self.ones.keys()) | set(self.tens.keys()) | set(self.scales.keys())

    def parse(self, text: str) -> Optional[str]:
        """Parse number words to digits algorithmically, handling compound numbers."""
        if not text:
            return None

        text = text.strip().lower().replace("-", " ")

        # Check if it's already a number
        if text.replace(".", "", 1).isdigit():
            return text

        words = text.split()
        current_val = 0
        total_val = 0

        if not any(word in self.scales for word in words):
            parsed_sequence = self.parse_as_sequence(words)
            if parsed_sequence is not None:
                return parsed_sequence

        for word in words:
            if word in self.ones:
                current_val += self.ones[word]
            elif word in self.tens:
                current_val += self.tens[word]
            elif word in self.scales:
                scale_val = self.scales[word]
                # A standalone scale word means one of it
                multiplier = current_val if current_val > 0 else 1
                if scale_val == 100:
                    current_val = multiplier * scale_val
                else:
                    total_val += multiplier * scale_val
                    current_val = 0
            elif word.isdigit():
                current_val += int(word)
            elif word != "and":
                return None

        total_val += current_val
        return str(total_val) if total_val > 0 or text == "zero" else None

    def parse_as_sequence(self, words: list[str]) -> Optional[str]:
        """Parse a short run of number words below one hundred ("twenty five")."""
        if not words:
            return None
        value = self._parse_simple_number(" ".join(words))
        return str(value) if value is not None else None

    def _parse_simple_number(self, text: str) -> Optional[int]:
        """A non-recursive helper to parse numbers up to 999."""
        words = text.split()
        current_val = 0
        seen_tens = False
        for word in words:
            if word in self.ones:
                current_val += self.ones[word]
            elif word in self.tens:
                if seen_tens:
                    return None
                seen_tens = True
                current_val += self.tens[word]
            elif word == "hundred":
                current_val *= 100
            elif word != "and":
                return None
        return current_val if current_val > 0 or text == "zero" else None

    def parse_quantity(self, text: str) -> Optional[float]:
        """Parse a quantity token into a float.

        Accepts "12", "1,200", "3.5", "1/2", "5 1/2" and number words
        ("twelve", "twenty-five"). Returns None when the text is not a number.
        """
        if not text:
            return None

        cleaned = text.strip().replace(",", "")
        if cleaned.lower().startswith("a "):
            cleaned = "one " + cleaned[2:]
        parts = cleaned.split()

        # Mixed fraction "5 1/2"
        if len(parts) == 2 and "/" in parts[1] and parts[0].isdigit():
            fraction = self._parse_fraction(parts[1])
            if fraction is None:
                return None
            return int(parts[0]) + fraction

        if "/" in cleaned:
            return self._parse_fraction(cleaned)

        try:
            return float(cleaned)
        except ValueError:
            pass

        parsed = self.parse(cleaned)
        return float(parsed) if parsed is not None else None

    @staticmethod
    def _parse_fraction(text: str) -> Optional[float]:
        numerator, _, denominator = text.partition("/")
        if not (numerator.isdigit() and denominator.isdigit()) or int(denominator) == 0:
            return None
        return int(numerator) / int(denominator)
