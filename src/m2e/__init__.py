"""
M2E - American to British English conversion engine.

This package provides:
- Spelling conversion: color -> colour, analyze -> analyse
- Contextual words: license/licence, practice/practise, principal/principle
- Unit conversion: 12 feet -> 3.7 metres, 75°F -> 24°C
- Code-aware scope: only comments and prose are touched in source files
- Ignore directives: m2e-ignore, m2e-ignore-next, m2e-ignore-file
"""

__version__ = "1.0.0"
__author__ = "M2E Team"

from .conversion.common import (
    ChangeKind,
    ChangeRecord,
    ConversionOptions,
    ConversionResult,
    InvalidInput,
    SpanKind,
    UnitType,
)
from .conversion.constants import PatternTable, load_pattern_table, reload_pattern_table
from .conversion.engine import ConversionEngine, convert

__all__ = [
    "ChangeKind",
    "ChangeRecord",
    "ConversionEngine",
    "ConversionOptions",
    "ConversionResult",
    "InvalidInput",
    "PatternTable",
    "SpanKind",
    "UnitType",
    "convert",
    "load_pattern_table",
    "reload_pattern_table",
]
