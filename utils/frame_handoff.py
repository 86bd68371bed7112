"""Single-slot, latest-wins hand-off between the grabber thread and the control loop."""
import threading
from typing import Optional
from domain.frame import Frame


class LatestFrameSlot:
    """
    Holds at most one pending frame.

    put() overwrites an unconsumed frame instead of queueing it; take() never
    blocks and returns None when nothing is pending.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: Optional[Frame] = None
        self.dropped = 0

    def put(self, frame: Frame):
        with self._lock:
            if self._pending is not None:
                self.dropped += 1
            self._pending = frame

    def take(self) -> Optional[Frame]:
        with self._lock:
            frame, self._pending = self._pending, None
            return frame
