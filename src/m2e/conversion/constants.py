#!/usr/bin/env python3
"""
Process-wide pattern table.

The table bundles everything the detectors read: the spelling dictionary, the unit
rules and their idiom guards, the contextual patterns and the configuration they
were built from. It is immutable once built. ``reload_pattern_table`` builds a new
table from disk and swaps the module reference in one step, so a conversion that
already holds a table keeps using it unchanged.
"""
from __future__ import annotations

import json
import os
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Pattern

from ..core.config import ConfigLoader, ConfigurationError, get_config, load_jsonc, setup_logging
from .contextual_config import ContextualWordConfig
from .pattern_modules.contextual_patterns import (
    ContextualPattern,
    build_contextual_exclusions,
    build_grammatical_patterns,
    build_semantic_patterns,
)
from .pattern_modules.unit_patterns import (
    UNIT_RULES,
    ExclusionPattern,
    UnitRule,
    build_alias_index,
    build_idiom_exclusions,
    build_user_exclusions,
)
from .pattern_modules.word_patterns import build_dictionary_pattern
from .unit_config import UnitConfig

logger = setup_logging(__name__)

# ==============================================================================
# BUILT-IN RESOURCES
# ==============================================================================

_RESOURCE_PATH = os.path.join(os.path.dirname(__file__), "resources")
_DICTIONARY_FILE = "american_spellings.json"

_OVERLAY_KEY_PATTERN = re.compile(r"[^\W\d_][\w'-]*")

_builtin_dictionary: Optional[dict[str, str]] = None
_BUILTIN_LOCK = threading.Lock()


def get_builtin_dictionary() -> dict[str, str]:
    """
    Load and cache the dictionary shipped with the package.

    Returns:
        dict: American spelling to British spelling, lower case

    Raises:
        ValueError: If the packaged resource is missing or corrupt

    """
    global _builtin_dictionary
    if _builtin_dictionary is not None:
        return _builtin_dictionary

    with _BUILTIN_LOCK:
        # Another thread may have loaded it while we were waiting
        if _builtin_dictionary is not None:
            return _builtin_dictionary

        filepath = os.path.join(_RESOURCE_PATH, _DICTIONARY_FILE)
        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ValueError(f"Built-in dictionary '{_DICTIONARY_FILE}' not found.") from None
        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {_DICTIONARY_FILE}") from e

        _builtin_dictionary = {str(k).lower(): str(v) for k, v in data.items()}
        return _builtin_dictionary


# ==============================================================================
# PATTERN TABLE
# ==============================================================================


@dataclass(frozen=True)
class PatternTable:
    """Everything the detectors need, frozen for sharing between threads."""

    dictionary: Mapping[str, str]
    dictionary_pattern: Pattern[str]
    unit_rules: tuple[UnitRule, ...]
    unit_aliases: Mapping[str, UnitRule]
    unit_exclusions: tuple[ExclusionPattern, ...]
    unit_config: UnitConfig
    contextual_patterns: tuple[ContextualPattern, ...]
    contextual_exclusions: tuple[Pattern[str], ...]
    contextual_words: frozenset[str]
    contextual_min_confidence: float
    warnings: tuple[str, ...] = ()
    sources: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def stats(self) -> dict[str, Any]:
        return {
            "dictionary_entries": len(self.dictionary),
            "unit_rules": len(self.unit_rules),
            "unit_aliases": len(self.unit_aliases),
            "unit_exclusions": len(self.unit_exclusions),
            "contextual_patterns": len(self.contextual_patterns),
            "contextual_words": sorted(self.contextual_words),
            "warnings": list(self.warnings),
            "sources": dict(self.sources),
        }


class _TableBuilder:
    """Collects warnings while assembling a table from the built-ins and user files."""

    def __init__(self, config: Optional[ConfigLoader]) -> None:
        self.config = config
        self.warnings: list[str] = []
        self.sources: dict[str, str] = {"dictionary": "built-in"}

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _path(self, attribute: str) -> Optional[Path]:
        if self.config is None:
            return None
        return getattr(self.config, attribute)

    def load_overlay(self) -> dict[str, str]:
        path = self._path("user_dictionary_path")
        if path is None or not path.exists():
            return {}
        try:
            data = load_jsonc(path)
            if not isinstance(data, dict):
                raise ConfigurationError(f"User dictionary {path} must be a JSON object")
        except ConfigurationError as e:
            self.warn(f"Skipping user dictionary: {e}")
            return {}

        overlay: dict[str, str] = {}
        for key, value in data.items():
            if not isinstance(key, str) or key.startswith("_") or not _OVERLAY_KEY_PATTERN.fullmatch(key):
                self.warn(f"Ignoring user dictionary key {key!r}")
                continue
            if not isinstance(value, str) or not value.strip():
                self.warn(f"Ignoring user dictionary entry {key!r}: replacement must be a non-empty string")
                continue
            overlay[key.lower()] = value
        self.sources["dictionary"] = f"built-in + {path}"
        return overlay

    def load_unit_config(self) -> UnitConfig:
        path = self._path("unit_config_path")
        if path is None or not path.exists():
            return UnitConfig.default()
        try:
            config = UnitConfig.from_dict(load_jsonc(path))
            config.exclude_patterns = [p for p in config.exclude_patterns if self._compiles(p, "unit")]
            config.validate()
        except ConfigurationError as e:
            self.warn(f"Using default unit configuration: {e}")
            return UnitConfig.default()
        self.sources["unit_config"] = str(path)
        return config

    def _compiles(self, source: str, kind: str) -> bool:
        try:
            re.compile(source)
        except re.error as e:
            self.warn(f"Ignoring {kind} exclude pattern {source!r}: {e}")
            return False
        return True

    def load_contextual_config(self) -> ContextualWordConfig:
        path = self._path("contextual_config_path")
        if path is None or not path.exists():
            return ContextualWordConfig.default()
        try:
            config = ContextualWordConfig.from_dict(load_jsonc(path))
            config.exclude_patterns = [p for p in config.exclude_patterns if self._compiles(p, "contextual")]
            config.validate()
        except ConfigurationError as e:
            self.warn(f"Using default contextual configuration: {e}")
            return ContextualWordConfig.default()
        self.sources["contextual_config"] = str(path)
        return config

    def build(self) -> PatternTable:
        contextual_config = self.load_contextual_config()
        contextual_patterns: list[ContextualPattern] = []
        if contextual_config.enabled:
            for word, word_config in contextual_config.active_words().items():
                contextual_patterns.extend(build_grammatical_patterns(word, word_config))
            contextual_patterns.extend(build_semantic_patterns())

        contextual_words = frozenset(
            form
            for pattern in contextual_patterns
            for form in (pattern.ambiguous_word, pattern.ambiguous_word + "s", pattern.resolved_form,
                         pattern.resolved_form + "s")
        )

        dictionary = dict(get_builtin_dictionary())
        dictionary.update(self.load_overlay())
        # Ambiguous words are only ever changed by the contextual pass
        for word in contextual_words:
            if dictionary.pop(word.lower(), None) is not None:
                logger.debug(f"Removed contextual word '{word}' from the dictionary")

        unit_config = self.load_unit_config()

        return PatternTable(
            dictionary=MappingProxyType(dictionary),
            dictionary_pattern=build_dictionary_pattern(tuple(dictionary)),
            unit_rules=UNIT_RULES,
            unit_aliases=MappingProxyType(build_alias_index(UNIT_RULES)),
            unit_exclusions=build_idiom_exclusions()
            + build_user_exclusions(tuple(unit_config.exclude_patterns)),
            unit_config=unit_config,
            contextual_patterns=tuple(contextual_patterns),
            contextual_exclusions=build_contextual_exclusions(tuple(contextual_config.exclude_patterns)),
            contextual_words=contextual_words,
            contextual_min_confidence=contextual_config.min_confidence,
            warnings=tuple(self.warnings),
            sources=MappingProxyType(dict(self.sources)),
        )


def _default_config_loader(builder_warnings: list[str]) -> Optional[ConfigLoader]:
    try:
        return get_config()
    except ConfigurationError as e:
        message = f"Using built-in defaults, application config unreadable: {e}"
        logger.warning(message)
        builder_warnings.append(message)
        return None


def build_pattern_table(config: Optional[ConfigLoader] = None) -> PatternTable:
    """Build a fresh table from the built-in resources and the configured user files."""
    early_warnings: list[str] = []
    if config is None:
        config = _default_config_loader(early_warnings)
    builder = _TableBuilder(config)
    builder.warnings.extend(early_warnings)
    table = builder.build()
    logger.debug(
        f"Pattern table built: {len(table.dictionary)} dictionary entries, "
        f"{len(table.contextual_patterns)} contextual patterns, {len(table.warnings)} warnings"
    )
    return table


_table: Optional[PatternTable] = None
_LOCK = threading.Lock()


def load_pattern_table(config: Optional[ConfigLoader] = None) -> PatternTable:
    """
    Return the shared pattern table, building it on first use.

    Args:
        config: Application config to read user file paths from (default: global config)

    Returns:
        PatternTable: The current table

    """
    if _table is not None:
        return _table

    with _LOCK:
        # Double-check if another thread built it while we were waiting
        if _table is not None:
            return _table
        return _swap(build_pattern_table(config))


def reload_pattern_table(config: Optional[ConfigLoader] = None) -> PatternTable:
    """Rebuild the table from disk and make it the shared one."""
    table = build_pattern_table(config)
    with _LOCK:
        return _swap(table)


def _swap(table: PatternTable) -> PatternTable:
    global _table
    _table = table
    return table
