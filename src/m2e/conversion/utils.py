#!/usr/bin/env python3
"""Shared utility functions for conversion modules."""
from __future__ import annotations

import bisect
from typing import Iterable, Sequence


def match_case(original: str, replacement: str) -> str:
    """
    Carry the casing of the original word onto its replacement.

    Args:
        original: The word as it appears in the text
        replacement: The replacement as the dictionary spells it

    Returns:
        UPPER, lower or Capitalised to match the original; mixed case originals
        keep the dictionary spelling

    """
    letters = [c for c in original if c.isalpha()]
    if not letters:
        return replacement
    if all(c.isupper() for c in letters) and len(letters) > 1:
        return replacement.upper()
    if all(c.islower() for c in letters):
        return replacement.lower()
    if letters[0].isupper() and all(c.islower() for c in letters[1:]):
        return replacement[:1].upper() + replacement[1:].lower()
    if len(letters) == 1 and letters[0].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def is_inside_range(start: int, end: int, ranges: Iterable[tuple[int, int]]) -> bool:
    """
    Check if a span lies entirely inside any of the given ranges.

    Args:
        start: Start position of the span to check
        end: End position of the span to check
        ranges: (start, end) pairs to check against

    Returns:
        True if the span is inside any range, False otherwise

    """
    return any(start >= r_start and end <= r_end for r_start, r_end in ranges)


def overlaps_range(start: int, end: int, ranges: Iterable[tuple[int, int]]) -> bool:
    """Check if a span overlaps any of the given ranges."""
    return any(not (end <= r_start or start >= r_end) for r_start, r_end in ranges)


def line_start_offsets(text: str) -> list[int]:
    """Offsets at which each line of the text begins."""
    offsets = [0]
    for index, char in enumerate(text):
        if char == "\n":
            offsets.append(index + 1)
    return offsets


def line_of(offset: int, line_starts: Sequence[int]) -> int:
    """Zero based line number containing the offset."""
    return bisect.bisect_right(line_starts, offset) - 1


def context_window(text: str, start: int, end: int, radius: int = 50) -> tuple[int, str]:
    """Text around a match plus the offset the window starts at."""
    window_start = max(0, start - radius)
    return window_start, text[window_start:min(len(text), end + radius)]
