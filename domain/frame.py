"""Point cloud frame data structure."""
from dataclasses import dataclass, replace
from typing import Optional
import numpy as np


@dataclass(frozen=True, eq=False)
class Frame:
    """
    One timestamped, organized point cloud delivered by the grabber.

    Attributes:
        points: (H, W, 3) float32 XYZ in metres, NaN where depth is invalid
        colors: (H, W, 3) uint8 RGB aligned with points, None for XYZ-only clouds
        timestamp: Capture time in microseconds
        sequence: Grabber frame number, strictly increasing per stream
    """
    points: np.ndarray
    colors: Optional[np.ndarray] = None
    timestamp: int = 0
    sequence: int = 0

    @property
    def has_color(self) -> bool:
        return self.colors is not None

    def valid_mask(self) -> np.ndarray:
        """Boolean (H, W) mask of samples with finite depth."""
        return np.isfinite(self.points[..., 2])

    def with_points(self, points: np.ndarray) -> "Frame":
        """Copy of this frame with replaced geometry (colors and stamps kept)."""
        return replace(self, points=points)
