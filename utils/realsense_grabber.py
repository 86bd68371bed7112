"""Intel RealSense point cloud grabber for the interactive viewer."""
import logging
import threading
import time
from collections import deque
from typing import Callable, Optional
import numpy as np
from domain.camera_info import CameraInfo
from domain.frame import Frame
from domain.temporal_filtering import TemporalFilteringType
from utils.camera_detection_realsense import detect_realsense_cameras, find_realsense_camera
from utils.depth_buffer import DepthBuffer
from config import (
    FPS,
    REALSENSE_WIDTH,
    REALSENSE_HEIGHT,
    FRAME_TIMEOUT_MS,
    FPS_WINDOW,
    DEFAULT_CONFIDENCE_THRESHOLD,
)

logger = logging.getLogger(__name__)


class GrabberError(Exception):
    """Raised when a RealSense device cannot be opened or started."""


def deproject_depth(depth_m: np.ndarray, fx: float, fy: float, cx: float, cy: float) -> np.ndarray:
    """
    Convert a metric depth image to an organized (H, W, 3) cloud.

    Pixels with zero depth become NaN.
    """
    height, width = depth_m.shape
    u, v = np.meshgrid(np.arange(width, dtype=np.float32), np.arange(height, dtype=np.float32))

    z = np.where(depth_m > 0, depth_m, np.nan).astype(np.float32)
    x = (u - cx) * z / fx
    y = (v - cy) * z / fy
    return np.stack([x, y, z], axis=-1)


class RealSenseGrabber:
    """
    Streams organized point clouds from one RealSense device.

    Handles:
    - Device selection by "" (first), "#N" (N-th, 1-based) or serial number
    - Depth (+ color aligned to depth unless xyz_only) acquisition on a worker thread
    - Temporal filtering of depth images (none, median, average)
    - Depth confidence threshold on sensors that expose it
    - Frame rate estimate over the last FPS_WINDOW frames

    Callbacks registered with register_callback() are invoked on the worker
    thread with every new Frame.
    """

    def __init__(
        self,
        device_id: str = "",
        xyz_only: bool = False,
        width: int = REALSENSE_WIDTH,
        height: int = REALSENSE_HEIGHT,
        fps: int = FPS,
        cameras: Optional[list[CameraInfo]] = None,
    ):
        """
        Open (but do not start) a RealSense device.

        Args:
            device_id: "" for the first device, "#N" or a serial number
            xyz_only: Grab geometry only, without the color stream
            width: Stream width
            height: Stream height
            fps: Stream frame rate
            cameras: Pre-enumerated device list; queried from the SDK when omitted

        Raises:
            GrabberError: If no connected device matches device_id
        """
        try:
            camera = find_realsense_camera(device_id, cameras)
        except RuntimeError as e:
            raise GrabberError(f"RealSense enumeration failed: {e}") from e
        if camera is None:
            if device_id:
                raise GrabberError(f"No RealSense device matches \"{device_id}\"")
            raise GrabberError("No RealSense devices connected")

        self.camera_info = camera
        self.xyz_only = xyz_only
        self.width = width
        self.height = height
        self.fps = fps

        self.depth_buffer = DepthBuffer()
        self.confidence_threshold = DEFAULT_CONFIDENCE_THRESHOLD

        self._callbacks: dict[int, Callable[[Frame], None]] = {}
        self._callbacks_lock = threading.Lock()
        self._next_handle = 0

        self._arrivals: deque = deque(maxlen=FPS_WINDOW)
        self._arrivals_lock = threading.Lock()
        self._sequence = 0

        self.pipeline = None
        self.depth_sensor = None
        self.depth_scale = 0.001
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def serial_number(self) -> str:
        return self.camera_info.serial_number

    def register_callback(self, callback: Callable[[Frame], None]) -> int:
        """Subscribe to new frames. Returns a handle for unregister_callback()."""
        with self._callbacks_lock:
            self._next_handle += 1
            self._callbacks[self._next_handle] = callback
            return self._next_handle

    def unregister_callback(self, handle: int):
        with self._callbacks_lock:
            self._callbacks.pop(handle, None)

    def is_running(self) -> bool:
        return self._running

    def start(self):
        """
        Start streaming on a daemon worker thread.

        Raises:
            GrabberError: If the pipeline cannot be started
        """
        if self._running:
            return
        import pyrealsense2 as rs

        self.pipeline = rs.pipeline()
        config = rs.config()
        config.enable_device(self.serial_number)
        config.enable_stream(rs.stream.depth, self.width, self.height, rs.format.z16, self.fps)
        if not self.xyz_only:
            config.enable_stream(rs.stream.color, self.width, self.height, rs.format.rgb8, self.fps)

        try:
            profile = self.pipeline.start(config)
        except RuntimeError as e:
            raise GrabberError(f"Failed to start RealSense pipeline: {e}") from e

        self.depth_sensor = profile.get_device().first_depth_sensor()
        self.depth_scale = self.depth_sensor.get_depth_scale()
        self._apply_confidence_threshold()

        self._running = True
        self._thread = threading.Thread(
            target=self._grab_loop,
            name=f"RealSense-{self.serial_number}",
            daemon=True
        )
        self._thread.start()
        logger.info(f"RealSense grabber started: {self.camera_info.name} ({self.serial_number})")

    def stop(self):
        """Stop streaming and release the pipeline. Also cleans up after a failed worker."""
        if self._thread is None and self.pipeline is None:
            return
        self._running = False
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=FRAME_TIMEOUT_MS / 1000.0 + 1.0)
            self._thread = None
        if self.pipeline is not None:
            self.pipeline.stop()
            self.pipeline = None
        logger.info(f"RealSense grabber stopped: {self.serial_number}")

    def get_frames_per_second(self) -> float:
        with self._arrivals_lock:
            if len(self._arrivals) < 2:
                return 0.0
            elapsed = self._arrivals[-1] - self._arrivals[0]
            if elapsed <= 0:
                return 0.0
            return (len(self._arrivals) - 1) / elapsed

    def enable_temporal_filtering(self, mode: TemporalFilteringType, window: int):
        self.depth_buffer.configure(mode, window)

    def set_confidence_threshold(self, threshold: int):
        self.confidence_threshold = threshold
        if self._running:
            self._apply_confidence_threshold()

    def _apply_confidence_threshold(self):
        import pyrealsense2 as rs

        option = getattr(rs.option, "confidence_threshold", None)
        if option is None or not self.depth_sensor.supports(option):
            logger.debug("Depth sensor does not support a confidence threshold")
            return
        self.depth_sensor.set_option(option, float(self.confidence_threshold))

    def _grab_loop(self):
        """Worker thread: wait for framesets and dispatch frames to callbacks."""
        align = None if self.xyz_only else self._make_align()

        while self._running:
            try:
                frames = self.pipeline.wait_for_frames(timeout_ms=FRAME_TIMEOUT_MS)
            except RuntimeError as e:
                if self._running:
                    logger.warning(f"RealSense {self.serial_number}: {e}")
                continue

            if align is not None:
                frames = align.process(frames)
            depth_frame = frames.get_depth_frame()
            if not depth_frame:
                continue
            color_frame = None if self.xyz_only else frames.get_color_frame()
            if not self.xyz_only and not color_frame:
                continue

            frame = self._build_frame(depth_frame, color_frame)
            with self._arrivals_lock:
                self._arrivals.append(time.monotonic())

            with self._callbacks_lock:
                callbacks = list(self._callbacks.values())
            for callback in callbacks:
                try:
                    callback(frame)
                except Exception:
                    logger.exception(f"RealSense {self.serial_number}: frame callback failed, stopping capture")
                    self._running = False
                    return

    def _make_align(self):
        import pyrealsense2 as rs

        return rs.align(rs.stream.depth)

    def _build_frame(self, depth_frame, color_frame) -> Frame:
        intrinsics = depth_frame.profile.as_video_stream_profile().get_intrinsics()
        depth = np.asanyarray(depth_frame.get_data()).copy()
        depth = self.depth_buffer.push(depth)
        depth_m = depth.astype(np.float32) * self.depth_scale

        points = deproject_depth(depth_m, intrinsics.fx, intrinsics.fy, intrinsics.ppx, intrinsics.ppy)
        colors = None
        if color_frame is not None:
            colors = np.asanyarray(color_frame.get_data()).copy()

        self._sequence += 1
        return Frame(
            points=points,
            colors=colors,
            timestamp=int(depth_frame.get_timestamp() * 1000),
            sequence=self._sequence,
        )


def list_devices() -> list[RealSenseGrabber]:
    """
    Open devices "#1", "#2", ... until opening one fails.

    Returns:
        One (not started) grabber per connected device
    """
    try:
        cameras = detect_realsense_cameras()
    except RuntimeError as e:
        logger.debug(f"RealSense enumeration failed: {e}")
        return []
    grabbers = []
    while True:
        try:
            grabbers.append(RealSenseGrabber(f"#{len(grabbers) + 1}", cameras=cameras))
        except GrabberError:
            break
    return grabbers
