#!/usr/bin/env python3
"""
Contextual word configuration.

Describes which ambiguous words are disambiguated and which spelling each
grammatical role takes::

    {
      "enabled": true,
      "minConfidence": 0.9,
      "wordConfigs": {
        "license": {"noun": "licence", "verb": "license", "enabled": true}
      },
      "excludePatterns": ["\\bLICENSE\\.md\\b"]
    }
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core.config import ConfigurationError, load_jsonc


@dataclass(frozen=True)
class WordConfig:
    """Spellings for one ambiguous word by role."""

    noun: str
    verb: str
    enabled: bool = True

    @classmethod
    def from_dict(cls, word: str, data: Any) -> WordConfig:
        if not isinstance(data, dict):
            raise ConfigurationError(f"wordConfigs.{word} must be an object")
        noun = data.get("noun")
        verb = data.get("verb")
        if not isinstance(noun, str) or not isinstance(verb, str) or not noun or not verb:
            raise ConfigurationError(f"wordConfigs.{word} needs non-empty 'noun' and 'verb' strings")
        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ConfigurationError(f"wordConfigs.{word}.enabled must be true or false")
        return cls(noun=noun, verb=verb, enabled=enabled)

    def to_dict(self) -> dict[str, Any]:
        return {"noun": self.noun, "verb": self.verb, "enabled": self.enabled}


DEFAULT_WORD_CONFIGS: dict[str, WordConfig] = {
    "license": WordConfig(noun="licence", verb="license"),
    "practice": WordConfig(noun="practice", verb="practise"),
    "advice": WordConfig(noun="advice", verb="advise"),
}


@dataclass
class ContextualWordConfig:
    enabled: bool = True
    min_confidence: float = 0.9
    word_configs: dict[str, WordConfig] = field(default_factory=lambda: dict(DEFAULT_WORD_CONFIGS))
    exclude_patterns: list[str] = field(default_factory=list)

    @classmethod
    def default(cls) -> ContextualWordConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: Any) -> ContextualWordConfig:
        """Build a config from its JSON form.

        Word configs given in the file are layered over the built-in ones, so a file
        that only disables "advice" keeps "license" and "practice".

        Raises:
            ConfigurationError: On wrong value types
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Contextual word configuration must be a JSON object")

        config = cls()
        if "enabled" in data:
            if not isinstance(data["enabled"], bool):
                raise ConfigurationError("'enabled' must be true or false")
            config.enabled = data["enabled"]

        if "minConfidence" in data:
            value = data["minConfidence"]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"'minConfidence' must be a number, got {value!r}")
            config.min_confidence = float(value)

        if "wordConfigs" in data:
            word_configs = data["wordConfigs"]
            if not isinstance(word_configs, dict):
                raise ConfigurationError("'wordConfigs' must be an object")
            for word, word_data in word_configs.items():
                config.word_configs[str(word).lower()] = WordConfig.from_dict(word, word_data)

        if "excludePatterns" in data:
            patterns = data["excludePatterns"]
            if not isinstance(patterns, list):
                raise ConfigurationError("'excludePatterns' must be a list")
            config.exclude_patterns = [str(p) for p in patterns]

        return config

    def validate(self) -> None:
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigurationError(f"minConfidence must be between 0.0 and 1.0, got {self.min_confidence}")
        for word in self.word_configs:
            if not re.fullmatch(r"[a-z]+", word):
                raise ConfigurationError(f"contextual word must be a single lower-case word: {word!r}")
        for pattern in self.exclude_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigurationError(f"invalid exclude pattern {pattern!r}: {e}") from e

    def active_words(self) -> dict[str, WordConfig]:
        if not self.enabled:
            return {}
        return {word: wc for word, wc in self.word_configs.items() if wc.enabled}

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "minConfidence": self.min_confidence,
            "wordConfigs": {word: wc.to_dict() for word, wc in self.word_configs.items()},
            "excludePatterns": list(self.exclude_patterns),
        }

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


def load_contextual_config(path: str | Path) -> ContextualWordConfig:
    """Read a contextual word configuration file.

    Raises:
        ConfigurationError: If the file is unreadable, malformed or out of range
    """
    config = ContextualWordConfig.from_dict(load_jsonc(path))
    config.validate()
    return config
