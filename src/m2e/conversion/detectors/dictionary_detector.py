#!/usr/bin/env python3
"""Context-free spelling substitution from the American to British dictionary."""
from __future__ import annotations

from ...core.config import setup_logging
from ..common import ChangeKind, ChangeRecord, Span
from ..constants import PatternTable
from ..pattern_modules.word_patterns import (
    build_code_token_prefix_pattern,
    build_code_token_suffix_pattern,
    build_email_pattern,
    build_url_pattern,
    build_word_start_pattern,
)
from ..utils import match_case, overlaps_range

logger = setup_logging(__name__)


class DictionaryDetector:
    def __init__(self, table: PatternTable) -> None:
        self.table = table
        self.word_start_pattern = build_word_start_pattern()
        self.prefix_pattern = build_code_token_prefix_pattern()
        self.suffix_pattern = build_code_token_suffix_pattern()
        self.url_pattern = build_url_pattern()
        self.email_pattern = build_email_pattern()

    def detect(self, text: str, spans: list[Span]) -> list[ChangeRecord]:
        """Propose spelling changes for every dictionary word in the given spans."""
        changes: list[ChangeRecord] = []
        for span in spans:
            changes.extend(self._detect_in_segment(text[span.start:span.end], span.start))
        logger.debug(f"Dictionary pass proposed {len(changes)} changes")
        return changes

    def _detect_in_segment(self, segment: str, offset: int) -> list[ChangeRecord]:
        skip = [(m.start(), m.end()) for m in self.url_pattern.finditer(segment)]
        skip.extend((m.start(), m.end()) for m in self.email_pattern.finditer(segment))

        changes: list[ChangeRecord] = []
        claimed_until = 0
        for start_match in self.word_start_pattern.finditer(segment):
            pos = start_match.start()
            if pos < claimed_until:
                continue

            match = self.table.dictionary_pattern.match(segment, pos)
            if match is None:
                continue

            end = match.end()
            if overlaps_range(pos, end, skip) or self._looks_like_code(segment, pos, end):
                continue

            original = match.group(0)
            converted = match_case(original, self.table.dictionary[original.lower()])
            if converted == original:
                continue

            changes.append(ChangeRecord(offset + pos, original, converted, ChangeKind.SPELLING))
            claimed_until = end
        return changes

    def _looks_like_code(self, segment: str, start: int, end: int) -> bool:
        """Identifiers, selectors and calls written inside prose ("$color", "color()", "#color")."""
        if self.prefix_pattern.search(segment, max(0, start - 1), start):
            return True
        return self.suffix_pattern.match(segment, end) is not None
