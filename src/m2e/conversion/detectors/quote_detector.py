#!/usr/bin/env python3
"""Smart quote and dash normalisation."""
from __future__ import annotations

from ..common import ChangeKind, ChangeRecord, Span
from ..pattern_modules.word_patterns import SMART_PUNCTUATION, build_smart_punctuation_pattern


class QuoteDetector:
    def __init__(self) -> None:
        self.pattern = build_smart_punctuation_pattern()

    def detect(self, text: str, spans: list[Span]) -> list[ChangeRecord]:
        """Curly quotes become straight quotes, en and em dashes become hyphens."""
        changes = []
        for span in spans:
            for match in self.pattern.finditer(text, span.start, span.end):
                char = match.group(0)
                changes.append(ChangeRecord(match.start(), char, SMART_PUNCTUATION[char], ChangeKind.QUOTE))
        return changes
