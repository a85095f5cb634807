#!/usr/bin/env python3
"""
Word level patterns used by the dictionary and quote passes.
"""
from __future__ import annotations

import re
from typing import Pattern

from ..pattern_cache import cached_pattern


# ==============================================================================
# DICTIONARY
# ==============================================================================


def build_dictionary_pattern(words: tuple[str, ...]) -> Pattern[str]:
    """One alternation of every source word, longest first, anchored by the caller.

    Not cached: the dictionary changes on reload and the table owns the pattern.
    """
    if not words:
        # Never matches
        return re.compile(r"(?!x)x")
    alternation = "|".join(re.escape(word) for word in sorted(words, key=lambda w: (-len(w), w)))
    return re.compile(rf"(?:{alternation})(?![\w])", re.IGNORECASE)


@cached_pattern
def build_word_start_pattern() -> Pattern[str]:
    """Positions where a letter begins a new word."""
    return re.compile(r"(?<![\w])[^\W\d_]")


@cached_pattern
def build_code_token_prefix_pattern() -> Pattern[str]:
    """Characters that mark the following word as an identifier, selector or path part."""
    return re.compile(r"[.#<$@/\\]$")


@cached_pattern
def build_code_token_suffix_pattern() -> Pattern[str]:
    """A call or attribute access directly after the word."""
    return re.compile(r"\(|\.\w")


# ==============================================================================
# URLS AND EMAIL
# ==============================================================================


@cached_pattern
def build_url_pattern() -> Pattern[str]:
    return re.compile(
        r"""
        (?:https?|ftp)://\S+           # scheme
        | \bwww\.\S+                   # bare www host
        """,
        re.VERBOSE | re.IGNORECASE,
    )


@cached_pattern
def build_email_pattern() -> Pattern[str]:
    return re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b")


# ==============================================================================
# SMART QUOTES AND DASHES
# ==============================================================================

SMART_PUNCTUATION: dict[str, str] = {
    "“": '"',  # left double quotation mark
    "”": '"',  # right double quotation mark
    "‘": "'",  # left single quotation mark
    "’": "'",  # right single quotation mark
    "–": "-",  # en dash
    "—": "-",  # em dash
}


@cached_pattern
def build_smart_punctuation_pattern() -> Pattern[str]:
    return re.compile("[" + "".join(SMART_PUNCTUATION) + "]")
