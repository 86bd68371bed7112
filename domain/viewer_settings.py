"""Viewer settings record mutated by keyboard commands."""
from dataclasses import dataclass
from domain.temporal_filtering import TemporalFilteringType
from config import (
    DEFAULT_WINDOW_SIZE,
    DEFAULT_CONFIDENCE_THRESHOLD,
    MAX_CONFIDENCE_THRESHOLD,
    DEFAULT_BILATERAL_SIGMA_S,
    DEFAULT_BILATERAL_SIGMA_R,
    MIN_BILATERAL_SIGMA_S,
    MIN_BILATERAL_SIGMA_R,
)

# 'k' cycle. MEDIAN is deliberately absent.
_NEXT_TEMPORAL_FILTERING = {
    TemporalFilteringType.NONE: TemporalFilteringType.AVERAGE,
    TemporalFilteringType.AVERAGE: TemporalFilteringType.NONE,
}


@dataclass
class ViewerSettings:
    """
    Acquisition and post-processing settings owned by the control loop.

    Every adjust_* method applies its clamp and returns the new value so the
    caller can push it to the grabber or post-processor.

    Attributes:
        temporal_filtering: Temporal filtering mode pushed to the grabber
        window_size: Temporal filtering window (>= 1)
        confidence_threshold: Depth confidence threshold in [0, 15]
        bilateral_enabled: Whether the bilateral post-filter runs
        bilateral_sigma_s: Bilateral spatial sigma in pixels (>= 1)
        bilateral_sigma_r: Bilateral range sigma in metres (>= 0.01)
        recording: Whether every grabbed frame is written to disk
    """
    temporal_filtering: TemporalFilteringType = TemporalFilteringType.NONE
    window_size: int = DEFAULT_WINDOW_SIZE
    confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
    bilateral_enabled: bool = False
    bilateral_sigma_s: float = DEFAULT_BILATERAL_SIGMA_S
    bilateral_sigma_r: float = DEFAULT_BILATERAL_SIGMA_R
    recording: bool = False

    def adjust_window_size(self, delta: int) -> int:
        self.window_size = max(1, self.window_size + delta)
        return self.window_size

    def adjust_confidence_threshold(self, delta: int) -> int:
        value = self.confidence_threshold + delta
        self.confidence_threshold = min(max(value, 0), MAX_CONFIDENCE_THRESHOLD)
        return self.confidence_threshold

    def adjust_sigma_s(self, delta: float) -> float:
        self.bilateral_sigma_s = max(MIN_BILATERAL_SIGMA_S, self.bilateral_sigma_s + delta)
        return self.bilateral_sigma_s

    def adjust_sigma_r(self, delta: float) -> float:
        # Rounded so repeated 0.01 steps land exactly on the displayed value
        value = round(self.bilateral_sigma_r + delta, 2)
        self.bilateral_sigma_r = max(MIN_BILATERAL_SIGMA_R, value)
        return self.bilateral_sigma_r

    def next_temporal_filtering(self) -> TemporalFilteringType:
        self.temporal_filtering = _NEXT_TEMPORAL_FILTERING.get(
            self.temporal_filtering, TemporalFilteringType.NONE
        )
        return self.temporal_filtering

    def toggle_bilateral(self) -> bool:
        self.bilateral_enabled = not self.bilateral_enabled
        return self.bilateral_enabled
