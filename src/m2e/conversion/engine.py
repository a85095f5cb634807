#!/usr/bin/env python3
"""
Conversion engine for American to British English.

Pipeline per document:
- Scope resolution: prose, comment, string and code spans plus ignore directives
- Contextual pass: ambiguous words resolved from surrounding phrases
- Dictionary pass: context-free spelling substitution
- Unit pass: imperial quantities to metric
- Quote pass: smart quotes and dashes (optional)

Passes only propose ChangeRecords; overlaps are resolved by priority and the
survivors are applied in one right-to-left rewrite.
"""
from __future__ import annotations

from typing import Optional, Union

from ..core.config import setup_logging
from .common import ChangeRecord, ConversionOptions, ConversionResult, InvalidInput, Span
from .constants import PatternTable, load_pattern_table
from .detectors.contextual_detector import ContextualDetector
from .detectors.dictionary_detector import DictionaryDetector
from .detectors.quote_detector import QuoteDetector
from .detectors.scope_detector import is_eligible, resolve_scope, select_syntax
from .detectors.unit_detector import UnitDetector
from .priority_manager import PriorityManager

logger = setup_logging(__name__)


def validate_text(text: Union[str, bytes]) -> str:
    """
    Return the text as a valid Unicode string.

    Raises:
        InvalidInput: For bytes that are not UTF-8 or strings with lone surrogates
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            return bytes(text).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInput(f"Input is not valid UTF-8: {e}") from e
    if not isinstance(text, str):
        raise InvalidInput(f"Expected str or bytes, got {type(text).__name__}")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidInput(f"Input contains unpaired surrogates: {e}") from e
    return text


def apply_changes(text: str, changes: list[ChangeRecord]) -> str:
    """Apply non-overlapping changes from the highest offset down so earlier offsets stay valid."""
    result = text
    for change in sorted(changes, key=lambda c: c.position, reverse=True):
        result = result[:change.position] + change.converted + result[change.end:]
    return result


class ConversionEngine:
    """Main engine orchestrating the conversion passes"""

    def __init__(self, table: Optional[PatternTable] = None):
        # None means the shared table, looked up at every call so reloads are seen
        self._table = table
        self.priority_manager = PriorityManager()
        self.quote_detector = QuoteDetector()

    @property
    def table(self) -> PatternTable:
        return self._table if self._table is not None else load_pattern_table()

    def convert(self, text: Union[str, bytes], options: Optional[ConversionOptions] = None) -> ConversionResult:
        """
        Convert one document.

        Args:
            text: Document text (bytes are decoded as UTF-8)
            options: Per-call options (defaults: units on, quotes off, prose mode)

        Returns:
            ConversionResult with the converted text and the applied changes

        Raises:
            InvalidInput: If the text is not valid Unicode

        """
        text = validate_text(text)
        options = options or ConversionOptions()
        if not text:
            return ConversionResult(text, ())

        table = self.table

        # STEP 1: Scope resolution
        spans = resolve_scope(text, options)
        syntax = select_syntax(text, options)
        eligible: list[Span] = [span for span in spans if is_eligible(span, syntax)]
        logger.debug(
            f"Step 1 - Scope: {len(spans)} spans, {len(eligible)} eligible "
            f"(syntax: {syntax.name if syntax else 'prose'})"
        )
        if not eligible:
            return ConversionResult(text, ())

        # STEP 2: Contextual words
        proposals = ContextualDetector(table, options.min_confidence).detect(text, eligible)
        logger.debug(f"Step 2 - Contextual proposals: {len(proposals)}")

        # STEP 3: Dictionary
        dictionary_changes = DictionaryDetector(table).detect(text, eligible)
        proposals.extend(dictionary_changes)
        logger.debug(f"Step 3 - Dictionary proposals: {len(dictionary_changes)}")

        # STEP 4: Units
        if options.convert_units:
            unit_changes = UnitDetector(table, options.unit_config).detect(text, eligible)
            proposals.extend(unit_changes)
            logger.debug(f"Step 4 - Unit proposals: {len(unit_changes)}")

        # STEP 5: Smart quotes and dashes
        if options.normalise_smart_quotes:
            quote_changes = self.quote_detector.detect(text, eligible)
            proposals.extend(quote_changes)
            logger.debug(f"Step 5 - Quote proposals: {len(quote_changes)}")

        # STEP 6: Priority resolution and rewrite
        accepted = self.priority_manager.resolve(proposals)
        converted = apply_changes(text, accepted)
        logger.debug(f"Step 6 - Applied {len(accepted)} of {len(proposals)} proposals")

        return ConversionResult(converted, tuple(accepted))


# Global engine instance
_engine_instance: Optional[ConversionEngine] = None


def convert(text: Union[str, bytes], options: Optional[ConversionOptions] = None) -> ConversionResult:
    """
    Convert American English text to British English.

    This is the main entry point. It combines:
    - Code-aware scope resolution and ignore directives
    - Contextual disambiguation of ambiguous words
    - Dictionary spelling substitution
    - Imperial to metric unit conversion
    - Optional smart quote normalisation

    Args:
        text: The text to convert
        options: Conversion options

    Returns:
        ConversionResult with converted text and position-addressed changes

    """
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = ConversionEngine()

    return _engine_instance.convert(text, options)
