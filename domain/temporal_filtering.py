"""Temporal filtering modes supported by the grabber."""
from enum import Enum


class TemporalFilteringType(Enum):
    """
    Frame-to-frame depth smoothing applied at acquisition time.

    MEDIAN is implemented by the depth buffer but the viewer's 'k' cycle
    only alternates between NONE and AVERAGE.
    """
    NONE = 0
    MEDIAN = 1
    AVERAGE = 2

    def __str__(self) -> str:
        return ("off", "median", "average")[self.value]
