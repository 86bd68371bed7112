"""
Temporal depth filtering over a sliding window of depth images.

Zero depth marks a missing sample and never contributes to the result.
"""

import threading
import warnings
from collections import deque
import numpy as np
from domain.temporal_filtering import TemporalFilteringType


class DepthBuffer:
    """
    Sliding window of uint16 depth images combined per pixel.

    Usage:
        buffer = DepthBuffer(TemporalFilteringType.AVERAGE, window=3)
        smoothed = buffer.push(depth_image)
    """

    def __init__(
        self,
        mode: TemporalFilteringType = TemporalFilteringType.NONE,
        window: int = 1
    ):
        self._lock = threading.Lock()
        self.mode = mode
        self.window = max(1, window)
        self._images: deque = deque(maxlen=self.window)

    def configure(self, mode: TemporalFilteringType, window: int):
        """Change mode and window size. Buffered images are discarded."""
        with self._lock:
            self.mode = mode
            self.window = max(1, window)
            self._images = deque(maxlen=self.window)

    def __len__(self) -> int:
        return len(self._images)

    def push(self, depth: np.ndarray) -> np.ndarray:
        """
        Add a depth image and return the filtered image for this step.

        Args:
            depth: (H, W) uint16 depth image

        Returns:
            (H, W) uint16 filtered depth
        """
        with self._lock:
            if self.mode == TemporalFilteringType.NONE:
                return depth
            if self._images and self._images[0].shape != depth.shape:
                self._images.clear()
            self._images.append(depth)
            stack = np.stack(self._images).astype(np.float32)
            mode = self.mode

        valid = stack > 0
        counts = valid.sum(axis=0)
        if mode == TemporalFilteringType.MEDIAN:
            stack[~valid] = np.nan
            # All-NaN columns are filled with 0 below
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", RuntimeWarning)
                combined = np.nanmedian(stack, axis=0)
        else:
            combined = stack.sum(axis=0) / np.maximum(counts, 1)
        combined = np.where(counts > 0, combined, 0.0)
        return np.rint(combined).astype(np.uint16)
