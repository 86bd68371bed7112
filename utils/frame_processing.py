"""
Per-frame post-processing for organized point clouds.

The bilateral filter smooths the depth channel while preserving edges:
- spatial sigma is expressed in pixels of the organized cloud
- range sigma is expressed in metres of depth difference

X and Y are rescaled so every point stays on its original pixel ray. Invalid
samples are filled from their valid neighbours before filtering and restored
to NaN afterwards, so holes never pull the surrounding depth towards zero.
"""

import logging
import threading
import cv2
import numpy as np
from domain.frame import Frame
from config import DEFAULT_BILATERAL_SIGMA_S, DEFAULT_BILATERAL_SIGMA_R

logger = logging.getLogger(__name__)


def bilateral_filter(points: np.ndarray, sigma_s: float, sigma_r: float) -> np.ndarray:
    """
    Edge-preserving smoothing of an organized (H, W, 3) cloud.

    Args:
        points: Organized XYZ array, NaN where invalid
        sigma_s: Spatial sigma in pixels
        sigma_r: Range sigma in metres

    Returns:
        New (H, W, 3) float32 array with the same invalid samples
    """
    z = points[..., 2].astype(np.float32)
    valid = np.isfinite(z) & (z > 0)
    depth = np.where(valid, z, 0.0).astype(np.float32)

    # d=-1 makes OpenCV use a window radius of round(1.5 * sigma_s)
    radius = max(1, int(round(1.5 * float(sigma_s))))
    filled = fill_invalid_depth(depth, valid, radius)
    smoothed = cv2.bilateralFilter(filled, -1, float(sigma_r), float(sigma_s))

    scale = np.ones_like(depth)
    np.divide(smoothed, depth, out=scale, where=valid)

    filtered = points.astype(np.float32, copy=True)
    filtered[..., 0] *= scale
    filtered[..., 1] *= scale
    filtered[..., 2] = np.where(valid, smoothed, np.nan)
    return filtered


def fill_invalid_depth(depth: np.ndarray, valid: np.ndarray, radius: int) -> np.ndarray:
    """
    Grow valid depth into invalid pixels, one 3x3 ring per iteration.

    Every invalid pixel within radius (Chebyshev) of a valid one receives the
    mean of its already-known neighbours. Pixels further away stay 0.
    """
    filled = depth.copy()
    known = valid.astype(np.float32)
    for _ in range(radius):
        if known.all():
            break
        total = cv2.blur(filled * known, (3, 3))
        count = cv2.blur(known, (3, 3))
        grow = (known == 0) & (count > 0)
        if not grow.any():
            break
        filled[grow] = total[grow] / count[grow]
        known[grow] = 1.0
    return filled


class FramePostProcessor:
    """
    Optional bilateral smoothing applied to every grabbed frame.

    configure() is called from the control loop, process() from the grabber
    thread. Both take the same lock.
    """

    def __init__(
        self,
        enabled: bool = False,
        sigma_s: float = DEFAULT_BILATERAL_SIGMA_S,
        sigma_r: float = DEFAULT_BILATERAL_SIGMA_R
    ):
        self._lock = threading.Lock()
        self.enabled = enabled
        self.sigma_s = sigma_s
        self.sigma_r = sigma_r

    def configure(self, enabled: bool, sigma_s: float, sigma_r: float):
        with self._lock:
            self.enabled = enabled
            self.sigma_s = sigma_s
            self.sigma_r = sigma_r

    def process(self, frame: Frame) -> Frame:
        with self._lock:
            enabled, sigma_s, sigma_r = self.enabled, self.sigma_s, self.sigma_r
        if not enabled:
            return frame
        return frame.with_points(bilateral_filter(frame.points, sigma_s, sigma_r))
