"""
Exception hierarchy for the dip-shift simulator.

Configuration problems and price data problems are kept apart so callers
can report them precisely. File system failures are left as OSError.
"""

from datetime import date
from typing import Optional


class DipShiftError(Exception):
    """Base class for all dip-shift errors."""
    pass


class ValidationError(DipShiftError):
    """Raised when simulation configuration is invalid."""
    pass


class ParseError(DipShiftError):
    """Raised when a price file has malformed content."""
    pass


class DataError(DipShiftError):
    """
    Raised when price data is insufficient or invalid for a simulation.

    Attributes:
        series: Identifier of the offending series (if known)
        date: Date of the offending record (if known)
    """

    def __init__(
        self,
        message: str,
        series: Optional[str] = None,
        date: Optional[date] = None,
    ):
        super().__init__(message)
        self.series = series
        self.date = date
