"""Base pattern converter class with shared utilities."""

import math
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..common import NumberParser, UnitMatch, UnitType
from ..unit_config import UnitConfig


class BasePatternConverter(ABC):
    """Base class for all pattern converters with shared utilities."""

    def __init__(self, number_parser: NumberParser, config: UnitConfig):
        """Initialize with number parser and unit configuration."""
        self.number_parser = number_parser
        self.config = config

        # Each converter defines its supported unit types
        self.supported_types: Dict[UnitType, str] = {}

    @abstractmethod
    def convert(self, match: UnitMatch) -> Optional[str]:
        """Convert a detected quantity to its final form.

        Args:
            match: The detected quantity

        Returns:
            The converted text, or None when the quantity cannot be converted
        """
        pass

    def supports(self, unit_type: UnitType) -> bool:
        """Check if this converter supports the given unit type."""
        return unit_type in self.supported_types

    def get_converter_method(self, unit_type: UnitType) -> str:
        """Get the converter method name for a unit type."""
        return self.supported_types.get(unit_type, "")

    # Shared utility methods
    @staticmethod
    def _round_half_up(value: float, places: int) -> float:
        """Round halves away from zero (2.5 -> 3), unlike the built-in round."""
        factor = 10 ** places
        rounded = math.floor(abs(value) * factor + 0.5 + 1e-9) / factor
        return math.copysign(rounded, value) if rounded else 0.0

    def _format_number(self, value: float, places: int) -> str:
        """Format a number with a fixed number of decimal places."""
        rounded = self._round_half_up(value, places)
        if places <= 0:
            return str(int(rounded))
        return f"{rounded:.{places}f}"
