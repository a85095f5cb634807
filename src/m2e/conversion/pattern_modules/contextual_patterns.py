#!/usr/bin/env python3
"""
Context phrase patterns for ambiguous words.

Two families live here:

* grammatical pairs (``license``/``licence``, ``practice``/``practise``,
  ``advice``/``advise``) where the British spelling depends on whether the word is
  used as a noun or a verb. These are generated from templates containing a
  ``{WORD}`` placeholder, one set per configured word.
* semantic pairs (``principal``/``principle``) where the intended word is recovered
  from the surrounding domain vocabulary.

Every context phrase names the ambiguous occurrence with a ``word`` group.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Pattern

from ..pattern_cache import cached_pattern

if TYPE_CHECKING:
    from ..contextual_config import WordConfig


ROLE_NOUN = "noun"
ROLE_VERB = "verb"
ROLE_SEMANTIC = "semantic"

DEFAULT_SCOPE_WINDOW = 6


@dataclass(frozen=True)
class ContextualPattern:
    """A phrase that resolves one ambiguous word to a specific spelling."""

    ambiguous_word: str
    context_phrase: Pattern[str]
    resolved_form: str
    confidence: float
    scope_window: int = DEFAULT_SCOPE_WINDOW
    role: str = ROLE_NOUN
    description: str = ""


# ==============================================================================
# GRAMMATICAL TEMPLATES
# ==============================================================================

_DETERMINERS = r"(?:the|a|an|this|that|these|those|my|your|his|her|its|our|their|each|every|any|no|one|another)"
_PREPOSITIONS = r"(?:of|for|with|without|about|under|from|by|on|in|into|regarding)"
_MODALS = r"(?:will|would|shall|should|can|could|may|might|must|cannot|can't|won't|wouldn't|shouldn't|couldn't)"
_PRONOUNS = r"(?:I|you|we|they|he|she|it|who)"

# (template, role, confidence, description)
GRAMMATICAL_TEMPLATES: tuple[tuple[str, str, float, str], ...] = (
    (rf"\b{_DETERMINERS}\s+(?:[a-z]+(?:-[a-z]+)?\s+){{1,2}}{{WORD}}", ROLE_NOUN, 0.9, "determiner and adjectives"),
    (rf"\b{_DETERMINERS}\s+{{WORD}}", ROLE_NOUN, 0.8, "determiner"),
    (rf"\b{_PREPOSITIONS}\s+(?:\w+\s+){{0,2}}?{{WORD}}", ROLE_NOUN, 0.85, "preposition"),
    (r"\b\w+'s\s+{WORD}", ROLE_NOUN, 0.95, "possessive"),
    (r"{WORD}(?=\s*[.!?](?:\s|$))", ROLE_NOUN, 0.7, "sentence end"),
    (r"\bto\s+{WORD}", ROLE_VERB, 0.98, "infinitive"),
    (rf"\b{_MODALS}\s+(?:not\s+|also\s+|never\s+|always\s+|still\s+)?{{WORD}}", ROLE_VERB, 0.95, "modal"),
    (rf"\b{_PRONOUNS}\s+(?:\w+ly\s+)?{{WORD}}", ROLE_VERB, 0.85, "pronoun subject"),
)

# Nouns that follow the ambiguous word as the head of a compound
COMPOUND_NOUNS: dict[str, tuple[str, ...]] = {
    "license": (
        "holder", "holders", "number", "numbers", "renewal", "renewals", "application", "applications",
        "fee", "fees", "requirement", "requirements", "suspension", "revocation", "exam", "test",
        "key", "keys", "class", "checks",
    ),
    "practice": (
        "session", "sessions", "area", "areas", "test", "tests", "exam", "exams", "round", "rounds",
        "match", "matches", "paper", "papers", "questions", "run", "runs", "manager", "nurse", "nurses",
    ),
    "advice": ("column", "columns", "columnist", "line", "lines", "service", "services", "page", "pages"),
}

# Objects that mark the word as a transitive verb
DIRECT_OBJECTS: dict[str, tuple[str, ...]] = {
    "license": (
        "software", "technology", "technologies", "content", "users", "user", "patents", "patent",
        "products", "product", "music", "images", "code", "rights", "material", "materials", "it", "them",
    ),
}

_PLURAL_QUANTIFIERS = r"(?:the|these|those|our|your|their|all|multiple|several|many|some|two|three|four|five)"


def _word_group(word: str, plural: bool = True) -> str:
    suffix = "s?" if plural else ""
    return rf"(?P<word>{re.escape(word)}{suffix})\b"


@cached_pattern
def build_template_pattern(template: str, word: str) -> Pattern[str]:
    return re.compile(template.replace("{WORD}", _word_group(word)), re.IGNORECASE)


@cached_pattern
def build_compound_noun_pattern(word: str, nouns: tuple[str, ...]) -> Pattern[str]:
    return re.compile(rf"\b{_word_group(word)}\s+(?:{'|'.join(nouns)})\b", re.IGNORECASE)


@cached_pattern
def build_direct_object_pattern(word: str, objects: tuple[str, ...]) -> Pattern[str]:
    return re.compile(
        rf"\b{_word_group(word)}\s+(?:the\s+|this\s+|our\s+|their\s+|its\s+|your\s+)?(?:{'|'.join(objects)})\b",
        re.IGNORECASE,
    )


@cached_pattern
def build_plural_noun_pattern(word: str) -> Pattern[str]:
    return re.compile(
        rf"\b{_PLURAL_QUANTIFIERS}\s+(?:\w+\s+)?(?P<word>{re.escape(word)}s)\b",
        re.IGNORECASE,
    )


def build_grammatical_patterns(word: str, config: WordConfig) -> tuple[ContextualPattern, ...]:
    """All noun/verb patterns for one configured word."""
    word = word.lower()
    resolved = {ROLE_NOUN: config.noun, ROLE_VERB: config.verb}
    patterns = [
        ContextualPattern(
            ambiguous_word=word,
            context_phrase=build_template_pattern(template, word),
            resolved_form=resolved[role],
            confidence=confidence,
            role=role,
            description=description,
        )
        for template, role, confidence, description in GRAMMATICAL_TEMPLATES
    ]

    nouns = COMPOUND_NOUNS.get(word)
    if nouns:
        patterns.append(
            ContextualPattern(word, build_compound_noun_pattern(word, nouns), config.noun, 0.95,
                              role=ROLE_NOUN, description="compound noun")
        )

    objects = DIRECT_OBJECTS.get(word)
    if objects:
        patterns.append(
            ContextualPattern(word, build_direct_object_pattern(word, objects), config.verb, 0.9,
                              role=ROLE_VERB, description="direct object")
        )

    patterns.append(
        ContextualPattern(word, build_plural_noun_pattern(word), config.noun, 0.8,
                          role=ROLE_NOUN, description="plural noun")
    )
    return tuple(patterns)


# ==============================================================================
# SEMANTIC PAIRS
# ==============================================================================

_PRINCIPLE_QUALIFIERS = (
    r"security|design|guiding|fundamental|core|engineering|basic|key|SOLID|DRY|KISS|YAGNI|"
    r"architectural|moral|ethical|first|general|underlying|founding"
)
_PRINCIPAL_QUALIFIERS = r"AWS|IAM|Azure|GCP|service|user|authentication|database|loan|Kerberos|security\s+group"
_PRINCIPAL_HEADS = r"ARN|ARNs|name|names|ID|IDs|amount|identifier|account|accounts|balance|payment|payments|investment"

# (word, source, resolved form, confidence, description)
_SEMANTIC_SOURCES: tuple[tuple[str, str, str, float, str], ...] = (
    ("principal", r"(?P<word>principals?)\s+of\s+least\s+privileges?", "principle", 0.98, "least privilege"),
    ("principal", rf"\b(?:{_PRINCIPLE_QUALIFIERS})\s+(?P<word>principals?)\b", "principle", 0.95,
     "qualified principle"),
    ("principal", r"\b(?P<word>principals?)\s+of\s+(?:good\s+)?(?:software|design|engineering|security|programming)\b",
     "principle", 0.9, "principles of a discipline"),
    ("principle", rf"\b(?:{_PRINCIPAL_QUALIFIERS})\s+(?P<word>principles?)\b", "principal", 0.95,
     "identity or finance principal"),
    ("principle", rf"\b(?P<word>principles?)\s+(?:{_PRINCIPAL_HEADS})\b", "principal", 0.95,
     "principal attribute"),
)


@cached_pattern
def build_semantic_pattern(source: str) -> Pattern[str]:
    return re.compile(source, re.IGNORECASE)


def build_semantic_patterns() -> tuple[ContextualPattern, ...]:
    return tuple(
        ContextualPattern(
            ambiguous_word=word,
            context_phrase=build_semantic_pattern(source),
            resolved_form=resolved,
            confidence=confidence,
            role=ROLE_SEMANTIC,
            description=description,
        )
        for word, source, resolved, confidence, description in _SEMANTIC_SOURCES
    )


# ==============================================================================
# EXCLUSIONS AND ADJUSTMENTS
# ==============================================================================

_EXCLUSION_SOURCES: tuple[str, ...] = (
    r"\b(?:MIT|BSD|GPL|LGPL|AGPL|Apache|Creative\s+Commons|GNU|Mozilla|ISC|Eclipse)(?:\s+[\w.-]+)?\s+license",
    r"\blicense\s+(?:file|txt|md|doc)\b",
    r"\bsoftware\s+license\s+(?:agreement|terms)\b",
    r"\bLICENSE\s*\.(?:txt|md|doc|pdf|html)\b",
    r"\blicense\s+plates?\b",
    r"(?:https?://|www\.)\S+",
    r"(?<![\w/])(?:~|\.{1,2})?(?:/[\w.-]+)+/?",
    r"\b[\w-]+(?:/[\w.-]+)+",
    r"\b(?:var|const|let|def|function|class|interface|struct|type|enum)\s+\w*(?:license|practice|advice)\w*",
    r"\b\w*(?:license|practice|advice)\w*\s*(?:=|:=|==|!=|<|>|\+|-(?!\w)|\*|/)",
    r"`[^`\n]*`",
    r"[\"'][\w.-]*(?:license|practice|advice)[\w.-]*[\"']",
)


@cached_pattern
def build_exclusion_pattern(source: str) -> Pattern[str]:
    return re.compile(source, re.IGNORECASE)


def build_contextual_exclusions(extra: tuple[str, ...] = ()) -> tuple[Pattern[str], ...]:
    """Built-in exclusions plus user supplied ones.

    Raises:
        re.error: If a user supplied pattern does not compile
    """
    return tuple(build_exclusion_pattern(source) for source in _EXCLUSION_SOURCES + tuple(extra))


@cached_pattern
def build_infinitive_context_pattern(word: str) -> Pattern[str]:
    return re.compile(rf"\bto\s+{re.escape(word)}", re.IGNORECASE)


@cached_pattern
def build_definite_article_pattern(word: str) -> Pattern[str]:
    return re.compile(rf"\bthe\s+{re.escape(word)}", re.IGNORECASE)


@cached_pattern
def build_software_license_pattern() -> Pattern[str]:
    return re.compile(r"\bsoftware\s+licen[cs]es?\b", re.IGNORECASE)
