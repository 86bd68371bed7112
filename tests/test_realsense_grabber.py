from types import SimpleNamespace
import numpy as np
import pytest
from domain.camera_info import CameraInfo
from domain.temporal_filtering import TemporalFilteringType
from utils import realsense_grabber
from utils.realsense_grabber import RealSenseGrabber, GrabberError, deproject_depth, list_devices

CAMERAS = [
    CameraInfo(index=1, serial_number="231400041-03", name="Intel RealSense SR300"),
    CameraInfo(index=2, serial_number="817612070540", name="Intel RealSense D435"),
]


class FakeDepthFrame:
    def __init__(self, depth, timestamp_ms=1500.25, fx=100.0, fy=100.0, ppx=1.0, ppy=0.5):
        self._depth = depth
        self._timestamp = timestamp_ms
        intrinsics = SimpleNamespace(fx=fx, fy=fy, ppx=ppx, ppy=ppy)
        stream = SimpleNamespace(get_intrinsics=lambda: intrinsics)
        self.profile = SimpleNamespace(as_video_stream_profile=lambda: stream)

    def get_data(self):
        return self._depth

    def get_timestamp(self):
        return self._timestamp


class FakeColorFrame:
    def __init__(self, rgb):
        self._rgb = rgb

    def get_data(self):
        return self._rgb


@pytest.mark.parametrize("device_id, serial", [
    ("", "231400041-03"),
    ("#1", "231400041-03"),
    ("#2", "817612070540"),
    ("817612070540", "817612070540"),
])
def test_device_selection(device_id, serial):
    grabber = RealSenseGrabber(device_id, cameras=CAMERAS)
    assert grabber.serial_number == serial
    assert not grabber.is_running()


@pytest.mark.parametrize("device_id", ["#3", "#0", "#x", "000000"])
def test_unknown_device_raises(device_id):
    with pytest.raises(GrabberError):
        RealSenseGrabber(device_id, cameras=CAMERAS)


def test_no_devices_raises():
    with pytest.raises(GrabberError):
        RealSenseGrabber("", cameras=[])


def test_list_devices_opens_until_failure(monkeypatch):
    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", lambda: list(CAMERAS))
    grabbers = list_devices()
    assert [g.serial_number for g in grabbers] == ["231400041-03", "817612070540"]


def test_list_devices_without_devices(monkeypatch):
    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", lambda: [])
    assert list_devices() == []


def test_deproject_depth():
    depth_m = np.array([[1.0, 0.0], [2.0, 2.0]], dtype=np.float32)
    points = deproject_depth(depth_m, fx=2.0, fy=4.0, cx=0.0, cy=0.0)
    assert points.shape == (2, 2, 3)
    np.testing.assert_allclose(points[0, 0], [0.0, 0.0, 1.0])
    assert np.isnan(points[0, 1]).all()
    np.testing.assert_allclose(points[1, 1], [1.0, 0.5, 2.0])


def test_build_frame_from_sdk_frames():
    grabber = RealSenseGrabber("", cameras=CAMERAS)
    depth = np.array([[1000, 0, 2000]], dtype=np.uint16)
    rgb = np.full((1, 3, 3), 7, dtype=np.uint8)

    frame = grabber._build_frame(FakeDepthFrame(depth), FakeColorFrame(rgb))

    assert frame.sequence == 1
    assert frame.timestamp == 1500250
    assert frame.points.shape == (1, 3, 3)
    np.testing.assert_allclose(frame.points[0, 0], [-0.01, -0.005, 1.0], rtol=1e-5)
    assert np.isnan(frame.points[0, 1]).all()
    np.testing.assert_array_equal(frame.colors, rgb)
    assert grabber._build_frame(FakeDepthFrame(depth), None).sequence == 2


def test_temporal_filtering_is_applied_to_depth():
    grabber = RealSenseGrabber("", xyz_only=True, cameras=CAMERAS)
    grabber.enable_temporal_filtering(TemporalFilteringType.AVERAGE, 2)
    grabber._build_frame(FakeDepthFrame(np.array([[1000]], dtype=np.uint16)), None)
    frame = grabber._build_frame(FakeDepthFrame(np.array([[3000]], dtype=np.uint16)), None)
    assert frame.points[0, 0, 2] == pytest.approx(2.0)
    assert frame.colors is None


def test_confidence_threshold_is_stored_until_started():
    grabber = RealSenseGrabber("", cameras=CAMERAS)
    grabber.set_confidence_threshold(9)
    assert grabber.confidence_threshold == 9


def test_callbacks_register_and_unregister():
    grabber = RealSenseGrabber("", cameras=CAMERAS)
    seen = []
    handle = grabber.register_callback(seen.append)
    assert handle in grabber._callbacks
    grabber.unregister_callback(handle)
    assert grabber._callbacks == {}


def test_frames_per_second():
    grabber = RealSenseGrabber("", cameras=CAMERAS)
    assert grabber.get_frames_per_second() == 0.0
    grabber._arrivals.extend([10.0, 10.5, 11.0])
    assert grabber.get_frames_per_second() == pytest.approx(2.0)


def test_list_devices_when_enumeration_fails(monkeypatch):
    def broken():
        raise RuntimeError("failed to set power state")

    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", broken)
    assert list_devices() == []


class FakePipeline:
    def __init__(self, depth):
        self.frameset = SimpleNamespace(get_depth_frame=lambda: FakeDepthFrame(depth))
        self.stopped = False

    def wait_for_frames(self, timeout_ms):
        return self.frameset

    def stop(self):
        self.stopped = True


def test_failing_callback_stops_capture(caplog):
    grabber = RealSenseGrabber("", xyz_only=True, cameras=CAMERAS)
    pipeline = FakePipeline(np.array([[1000]], dtype=np.uint16))
    grabber.pipeline = pipeline
    calls = []

    def write_to_full_disk(frame):
        calls.append(frame.sequence)
        raise OSError("No space left on device")

    grabber.register_callback(write_to_full_disk)
    grabber._running = True
    with caplog.at_level("ERROR", logger="utils.realsense_grabber"):
        grabber._grab_loop()

    assert calls == [1]
    assert not grabber.is_running()
    assert "frame callback failed" in caplog.text
    grabber.stop()
    assert pipeline.stopped
    assert grabber.pipeline is None
