#!/usr/bin/env python3
"""Disambiguation of words whose British spelling depends on context."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...core.config import setup_logging
from ..common import ChangeKind, ChangeRecord, Span
from ..constants import PatternTable
from ..pattern_modules.contextual_patterns import (
    ROLE_NOUN,
    ROLE_VERB,
    ContextualPattern,
    build_definite_article_pattern,
    build_infinitive_context_pattern,
    build_software_license_pattern,
)
from ..utils import context_window, is_inside_range, match_case

logger = setup_logging(__name__)

CONTEXT_RADIUS = 50


@dataclass
class _Candidate:
    start: int
    end: int
    pattern: ContextualPattern
    confidence: float


class ContextualDetector:
    """
    Resolve ambiguous words from the phrases around them.

    Each ``ContextualPattern`` that matches around an occurrence scores it; the best
    score per occurrence wins and is kept only if it reaches the confidence threshold.
    The threshold is the per-call one when given, otherwise the contextual word
    config's ``minConfidence``.
    """

    def __init__(self, table: PatternTable, min_confidence: Optional[float] = None) -> None:
        self.table = table
        if min_confidence is None:
            min_confidence = table.contextual_min_confidence
        self.min_confidence = min_confidence

    def detect(self, text: str, spans: list[Span]) -> list[ChangeRecord]:
        if not self.table.contextual_patterns:
            return []
        changes: list[ChangeRecord] = []
        for span in spans:
            changes.extend(self._detect_in_segment(text[span.start:span.end], span.start))
        logger.debug(f"Contextual pass proposed {len(changes)} changes")
        return changes

    def _detect_in_segment(self, segment: str, offset: int) -> list[ChangeRecord]:
        excluded = [
            (m.start(), m.end()) for pattern in self.table.contextual_exclusions for m in pattern.finditer(segment)
        ]

        best: dict[tuple[int, int], _Candidate] = {}
        for pattern in self.table.contextual_patterns:
            for match in pattern.context_phrase.finditer(segment):
                start, end = match.span("word")
                if start < 0 or not self._within_window(segment, match.start(), match.end(), start, end,
                                                         pattern.scope_window):
                    continue
                if is_inside_range(start, end, excluded):
                    continue

                confidence = self._adjust_confidence(segment, start, end, pattern)
                current = best.get((start, end))
                if current is None or confidence > current.confidence:
                    best[(start, end)] = _Candidate(start, end, pattern, confidence)

        changes = []
        for (start, end), candidate in sorted(best.items()):
            if candidate.confidence < self.min_confidence:
                logger.debug(
                    f"Leaving '{segment[start:end]}' unchanged, best pattern "
                    f"'{candidate.pattern.description}' scored {candidate.confidence:.2f}"
                )
                continue
            original = segment[start:end]
            converted = match_case(original, self._resolved_form(original, candidate.pattern))
            if converted == original:
                continue
            changes.append(
                ChangeRecord(
                    position=offset + start,
                    original=original,
                    converted=converted,
                    kind=ChangeKind.SPELLING,
                    is_contextual=True,
                    confidence=candidate.confidence,
                )
            )
        return changes

    @staticmethod
    def _within_window(segment: str, match_start: int, match_end: int, start: int, end: int, window: int) -> bool:
        before = len(segment[match_start:start].split())
        after = len(segment[end:match_end].split())
        return before <= window and after <= window

    @staticmethod
    def _adjust_confidence(segment: str, start: int, end: int, pattern: ContextualPattern) -> float:
        _, context = context_window(segment, start, end, CONTEXT_RADIUS)
        confidence = pattern.confidence
        word = pattern.ambiguous_word

        if pattern.role == ROLE_VERB and build_infinitive_context_pattern(word).search(context):
            confidence += 0.1
        elif pattern.role == ROLE_NOUN and build_definite_article_pattern(word).search(context):
            confidence += 0.05

        if word == "license" and build_software_license_pattern().search(context):
            confidence -= 0.2

        return max(0.0, min(1.0, confidence))

    @staticmethod
    def _resolved_form(original: str, pattern: ContextualPattern) -> str:
        resolved = pattern.resolved_form
        if original.lower().endswith("s") and not pattern.ambiguous_word.endswith("s"):
            return resolved + "s"
        return resolved
