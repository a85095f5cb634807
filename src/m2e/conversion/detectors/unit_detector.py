#!/usr/bin/env python3
"""Imperial quantity detection for metric conversion."""
from __future__ import annotations

import re
from dataclasses import replace
from typing import Optional

from ...core.config import setup_logging
from ..common import ChangeKind, ChangeRecord, NumberParser, Span, UnitMatch, UnitType
from ..constants import PatternTable
from ..converters.unit_converter import UnitConverter
from ..pattern_modules import unit_patterns
from ..pattern_modules.unit_patterns import (
    ABBREVIATED_ALIASES,
    FAHRENHEIT_CONFIDENCE,
    WEAK_ALIASES,
    ExclusionPattern,
    UnitRule,
    normalise_alias,
)
from ..unit_config import UnitConfig
from ..utils import context_window

logger = setup_logging(__name__)

CONTEXT_RADIUS = 50

_TRAILING_PUNCTUATION = re.compile(r"\s*(?:$|[^\w\s])")
_ABBREVIATION_PERIOD = re.compile(r"\.(?=\s+[a-z0-9(])")


class UnitDetector:
    def __init__(self, table: PatternTable, unit_config: Optional[UnitConfig] = None) -> None:
        """Initialize UnitDetector.

        Args:
            table: Shared pattern table (rules, aliases and idiom guards)
            unit_config: Per-call configuration; the table's loaded configuration when None

        """
        self.table = table
        self.config = unit_config or table.unit_config
        self.number_parser = NumberParser()
        self.converter = UnitConverter(self.number_parser, self.config)

        detection = self.config.detection
        written = detection.detect_written_numbers
        self.quantity_pattern = unit_patterns.get_quantity_pattern(written, detection.max_number_distance)
        self.compound_pattern = unit_patterns.get_compound_pattern(written)
        self.feet_inches_pattern = unit_patterns.get_feet_inches_pattern(written)
        self.temperature_pattern = unit_patterns.build_temperature_pattern()
        self.temperature_context_pattern = unit_patterns.build_temperature_context_pattern()
        self.measurement_context_pattern = unit_patterns.build_measurement_context_pattern()
        self.figurative_pattern = unit_patterns.build_figurative_pattern()
        self.exclusions = table.unit_exclusions if unit_config is None else self._build_exclusions(unit_config)

    @staticmethod
    def _build_exclusions(config: UnitConfig) -> tuple[ExclusionPattern, ...]:
        exclusions = list(unit_patterns.build_idiom_exclusions())
        for source in config.exclude_patterns:
            try:
                exclusions.extend(unit_patterns.build_user_exclusions((source,)))
            except re.error as e:
                logger.warning(f"Ignoring unit exclude pattern {source!r}: {e}")
        return tuple(exclusions)

    def detect(self, text: str, spans: list[Span]) -> list[ChangeRecord]:
        """Detects imperial quantities and proposes their metric replacements."""
        if not self.config.enabled:
            return []

        changes: list[ChangeRecord] = []
        for span in spans:
            segment = text[span.start:span.end]
            for match in self.find_matches(segment):
                converted = self.converter.convert(match)
                if converted is None or converted == match.text:
                    continue
                changes.append(
                    ChangeRecord(
                        position=span.start + match.start,
                        original=match.text,
                        converted=converted,
                        kind=ChangeKind.UNIT,
                        confidence=match.confidence,
                    )
                )
        logger.debug(f"Unit pass proposed {len(changes)} changes")
        return changes

    def find_matches(self, segment: str) -> list[UnitMatch]:
        """All accepted quantities in a segment, overlaps resolved by confidence."""
        candidates: list[UnitMatch] = []
        if self.config.detection.detect_compound_units:
            self._detect_feet_inches(segment, candidates)
            self._detect_compound(segment, candidates)
        self._detect_temperatures(segment, candidates)
        self._detect_quantities(segment, candidates)

        accepted = []
        for candidate in candidates:
            scored = self._score(segment, candidate)
            if scored is not None:
                accepted.append(scored)
        return self._resolve_overlaps(accepted)

    # ==========================================================================
    # CANDIDATE DETECTION
    # ==========================================================================

    def _detect_feet_inches(self, segment: str, candidates: list[UnitMatch]) -> None:
        for match in self.feet_inches_pattern.finditer(segment):
            feet = self.number_parser.parse_quantity(match.group("number"))
            inches = self.number_parser.parse_quantity(match.group("number2"))
            if feet is None or inches is None:
                continue
            candidates.append(
                self._make_match(segment, match, feet, "foot", UnitType.LENGTH, 0.95,
                                 secondary_value=inches, secondary_unit="inch")
            )

    def _detect_compound(self, segment: str, candidates: list[UnitMatch]) -> None:
        for match in self.compound_pattern.finditer(segment):
            value = self.number_parser.parse_quantity(match.group("number"))
            rule = self.converter.rules.get(match.group("unit").lower())
            if value is None or rule is None:
                continue
            candidates.append(self._make_match(segment, match, value, rule.name, rule.unit_type, 0.85,
                                               is_compound=True))

    def _detect_temperatures(self, segment: str, candidates: list[UnitMatch]) -> None:
        for match in self.temperature_pattern.finditer(segment):
            value = self._parse_signed(match.group("number"))
            unit = match.group("unit")
            confidence = FAHRENHEIT_CONFIDENCE["symbol" if unit[0] in "°º" else "words"]
            candidates.append(self._make_match(segment, match, value, "fahrenheit", UnitType.TEMPERATURE, confidence))

        for match in self.temperature_context_pattern.finditer(segment):
            value = self._parse_signed(match.group("number"))
            candidates.append(self._make_match(segment, match, value, "fahrenheit", UnitType.TEMPERATURE,
                                               FAHRENHEIT_CONFIDENCE["context"]))

    def _detect_quantities(self, segment: str, candidates: list[UnitMatch]) -> None:
        for match in self.quantity_pattern.finditer(segment):
            alias = normalise_alias(match.group("unit"))
            rule: Optional[UnitRule] = self.table.unit_aliases.get(alias)
            if rule is None:
                continue

            number_text = match.group("number")
            written = not any(c.isdigit() for c in number_text)
            if written and not rule.written_number_support:
                continue

            gap = match.group("gap")
            if alias == "in" and gap and not _TRAILING_PUNCTUATION.match(segment, match.end()):
                # "5 in the box" is a preposition, not inches
                continue

            value = self.number_parser.parse_quantity(number_text)
            if value is None:
                continue

            fillers = match.group("fillers").split()
            confidence = WEAK_ALIASES.get(alias, rule.base_confidence)
            confidence -= 0.05 * len(fillers)
            if written:
                confidence -= 0.1
            if not gap and not fillers and not written and alias not in WEAK_ALIASES:
                confidence += 0.1

            end = match.end("unit")
            if alias in ABBREVIATED_ALIASES and _ABBREVIATION_PERIOD.match(segment, end):
                end += 1

            candidates.append(
                self._make_match(segment, match, value, rule.name, rule.unit_type, confidence,
                                 end=end, modifier=" ".join(fillers))
            )

    def _make_match(self, segment: str, match: re.Match, value: float, unit: str, unit_type: UnitType,
                    confidence: float, end: Optional[int] = None, **extra) -> UnitMatch:
        start = match.start("number")
        end = match.end("unit") if end is None else end
        return UnitMatch(
            start=start,
            end=end,
            text=segment[start:end],
            value=value,
            unit=unit,
            unit_type=unit_type,
            confidence=confidence,
            **extra,
        )

    @staticmethod
    def _parse_signed(text: str) -> float:
        return float(text.replace("−", "-"))

    # ==========================================================================
    # FILTERING
    # ==========================================================================

    def _score(self, segment: str, candidate: UnitMatch) -> Optional[UnitMatch]:
        """The candidate with its final confidence, or None when it is rejected."""
        if not self.config.is_unit_type_enabled(candidate.unit_type):
            return None

        window_start, window = context_window(segment, candidate.start, candidate.end, CONTEXT_RADIUS)
        local_start = candidate.start - window_start
        local_end = candidate.end - window_start

        for exclusion in self.exclusions:
            if not exclusion.applies(candidate.unit_type):
                continue
            for match in exclusion.matcher.finditer(window):
                if exclusion.whole_window or (match.start() < local_end and local_start < match.end()):
                    logger.debug(f"Excluded '{candidate.text}' by idiom '{exclusion.matcher.pattern}'")
                    return None

        confidence = self._adjust_confidence(window, local_start, local_end, candidate)
        if confidence < self.config.detection.min_confidence:
            logger.debug(f"Rejected '{candidate.text}' with confidence {confidence:.2f}")
            return None
        return replace(candidate, confidence=confidence)

    def _adjust_confidence(self, window: str, local_start: int, local_end: int, candidate: UnitMatch) -> float:
        confidence = candidate.confidence
        outside = window[:local_start] + " " + window[local_end:]

        if self.measurement_context_pattern.search(outside):
            confidence += 0.1
        if candidate.unit_type is not UnitType.TEMPERATURE and (candidate.value > 10000 or 0 < candidate.value < 0.001):
            confidence -= 0.2
        if self.figurative_pattern.search(window):
            confidence -= 0.3

        return max(0.0, min(1.0, confidence))

    @staticmethod
    def _resolve_overlaps(candidates: list[UnitMatch]) -> list[UnitMatch]:
        accepted: list[UnitMatch] = []
        for candidate in sorted(candidates, key=lambda c: (-c.confidence, -(c.end - c.start), c.start)):
            if any(candidate.start < other.end and other.start < candidate.end for other in accepted):
                continue
            accepted.append(candidate)
        return sorted(accepted, key=lambda c: c.start)
