"""Shared fakes for the viewer tests."""
from pathlib import Path
import numpy as np
import pytest
from domain.frame import Frame
from domain.temporal_filtering import TemporalFilteringType


class FakeGrabber:
    """Stands in for RealSenseGrabber: records pushes and lets tests emit frames."""

    def __init__(self, serial_number="231400041-03", fps=30.0):
        self.serial_number = serial_number
        self.fps = fps
        self.callbacks = {}
        self.running = False
        self.temporal_filtering = (TemporalFilteringType.NONE, 1)
        self.confidence_threshold = None
        self.pushes = []

    def register_callback(self, callback):
        handle = len(self.callbacks) + 1
        self.callbacks[handle] = callback
        return handle

    def unregister_callback(self, handle):
        self.callbacks.pop(handle, None)

    def start(self):
        self.running = True

    def stop(self):
        self.running = False

    def is_running(self):
        return self.running

    def get_frames_per_second(self):
        return self.fps

    def enable_temporal_filtering(self, mode, window):
        self.temporal_filtering = (mode, window)
        self.pushes.append(("temporal", mode, window))

    def set_confidence_threshold(self, threshold):
        self.confidence_threshold = threshold
        self.pushes.append(("threshold", threshold))

    def emit(self, frame):
        for callback in list(self.callbacks.values()):
            callback(frame)


class FakeDisplay:
    """Stands in for PointCloudWindow; stops after a fixed number of spins."""

    def __init__(self, max_spins=None):
        self.max_spins = max_spins
        self.spins = 0
        self.shown = []
        self.status = []
        self.key_callback = None
        self.closed = False
        self.stopped = False
        self.on_spin = None

    def register_keyboard_callback(self, callback):
        self.key_callback = callback

    def was_stopped(self):
        return self.stopped

    def show_cloud(self, frame):
        self.shown.append(frame)

    def set_status(self, lines):
        self.status = list(lines)

    def spin_once(self):
        self.spins += 1
        if self.on_spin is not None:
            self.on_spin(self.spins)
        if self.max_spins is not None and self.spins >= self.max_spins:
            self.stopped = True

    def close(self):
        self.closed = True
        self.stopped = True

    def press(self, *keys):
        for key in keys:
            self.key_callback(key)


class RecordingWriter:
    """Writer that touches the target file and remembers what it wrote."""

    def __init__(self):
        self.written = []

    def __call__(self, path, frame):
        path = Path(path)
        path.write_bytes(b"")
        self.written.append((path, frame))
        return path


def make_frame(sequence=1, timestamp=1000, shape=(4, 5), depth=1.0, color=True):
    height, width = shape
    u, v = np.meshgrid(np.arange(width, dtype=np.float32), np.arange(height, dtype=np.float32))
    z = np.full((height, width), depth, dtype=np.float32)
    points = np.stack([(u - width / 2) * z / 100.0, (v - height / 2) * z / 100.0, z], axis=-1)
    colors = np.full((height, width, 3), 128, dtype=np.uint8) if color else None
    return Frame(points=points, colors=colors, timestamp=timestamp, sequence=sequence)


@pytest.fixture
def grabber():
    return FakeGrabber()


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def writer():
    return RecordingWriter()


@pytest.fixture
def viewer(grabber, display, writer, tmp_path):
    from screens.viewer_screen import RealSenseViewer

    return RealSenseViewer(grabber, display, output_dir=tmp_path, writer=writer)
