#!/usr/bin/env python3
"""
Priority resolution between the conversion passes.

Every pass proposes ChangeRecords independently. When proposals overlap, the one
from the higher priority pass is kept:

    contextual > dictionary > unit > quote

Within a pass, records arrive already free of overlaps.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from ..core.config import setup_logging
from .common import ChangeKind, ChangeRecord

logger = setup_logging(__name__)


class ChangeSource(Enum):
    """The pass a record came from."""

    CONTEXTUAL = "contextual"
    DICTIONARY = "dictionary"
    UNIT = "unit"
    QUOTE = "quote"


def source_of(change: ChangeRecord) -> ChangeSource:
    if change.is_contextual:
        return ChangeSource.CONTEXTUAL
    if change.kind is ChangeKind.SPELLING:
        return ChangeSource.DICTIONARY
    if change.kind is ChangeKind.UNIT:
        return ChangeSource.UNIT
    return ChangeSource.QUOTE


class PriorityManager:
    """Deterministic overlap resolution between passes."""

    DEFAULT_PRIORITIES = {
        ChangeSource.CONTEXTUAL: 100,
        ChangeSource.DICTIONARY: 80,
        ChangeSource.UNIT: 60,
        ChangeSource.QUOTE: 40,
    }

    def __init__(self, priorities: Optional[dict[ChangeSource, int]] = None) -> None:
        self.priorities = dict(self.DEFAULT_PRIORITIES)
        if priorities:
            self.priorities.update(priorities)

    def get_priority(self, change: ChangeRecord) -> int:
        return self.priorities.get(source_of(change), 0)

    def resolve(self, changes: Iterable[ChangeRecord]) -> list[ChangeRecord]:
        """
        Drop every record that overlaps an accepted record of higher priority.

        Args:
            changes: Proposals from all passes, in any order

        Returns:
            Non-overlapping records sorted by position

        """
        ordered = sorted(changes, key=lambda c: (-self.get_priority(c), c.position, -len(c.original)))
        accepted: list[ChangeRecord] = []
        for change in ordered:
            conflict = next((other for other in accepted if change.overlaps(other)), None)
            if conflict is not None:
                logger.debug(
                    f"Dropped {source_of(change).value} change '{change.original}' at {change.position}, "
                    f"overlaps {source_of(conflict).value} change '{conflict.original}'"
                )
                continue
            accepted.append(change)
        return sorted(accepted, key=lambda c: c.position)
