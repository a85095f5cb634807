"""Detectors sub-package for the individual conversion passes."""

from .contextual_detector import ContextualDetector
from .dictionary_detector import DictionaryDetector
from .quote_detector import QuoteDetector
from .scope_detector import ScopeResolver, ignore_stats, resolve_scope
from .unit_detector import UnitDetector

__all__ = [
    "ContextualDetector",
    "DictionaryDetector",
    "QuoteDetector",
    "ScopeResolver",
    "UnitDetector",
    "ignore_stats",
    "resolve_scope",
]
