"""Pattern converter modules for unit conversion."""

from .base import BasePatternConverter
from .unit_converter import UnitConverter

__all__ = [
    "BasePatternConverter",
    "UnitConverter",
]
