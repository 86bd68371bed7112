"""RealSense viewer: control loop and keyboard commands."""
import logging
from pathlib import Path
from typing import Callable, Optional
from domain.frame import Frame
from domain.viewer_settings import ViewerSettings
from utils.frame_handoff import LatestFrameSlot
from utils.frame_processing import FramePostProcessor
from utils.point_cloud_io import save_point_cloud, snapshot_filename
from utils.realsense_grabber import GrabberError
from utils.status_overlay import format_status_lines
from utils.stream_recorder import StreamRecorder, RecordingError
from config import BASE_DIR

logger = logging.getLogger(__name__)


class RealSenseViewer:
    """
    Displays grabbed clouds and maps keyboard commands to settings changes.

    The grabber thread delivers frames through _on_frame(); the control loop
    in run() consumes the latest one. Settings live on the control-loop side
    and are pushed to the grabber, post-processor or recorder on every change.
    """

    def __init__(
        self,
        grabber,
        display,
        output_dir: Path = BASE_DIR,
        writer: Callable[[Path, Frame], object] = save_point_cloud,
        settings: Optional[ViewerSettings] = None,
    ):
        """
        Args:
            grabber: RealSenseGrabber (or any object with the same interface)
            display: PointCloudWindow (or any object with the same interface)
            output_dir: Directory for snapshots and recording sessions
            writer: Function writing one frame to a path
            settings: Initial settings; defaults when omitted
        """
        self.grabber = grabber
        self.display = display
        self.output_dir = Path(output_dir)
        self.writer = writer
        self.settings = settings or ViewerSettings()

        self.slot = LatestFrameSlot()
        self.processor = FramePostProcessor(
            self.settings.bilateral_enabled,
            self.settings.bilateral_sigma_s,
            self.settings.bilateral_sigma_r,
        )
        self.recorder = StreamRecorder(self.output_dir, writer=writer)

        self.last_frame: Optional[Frame] = None
        self.fatal_error: Optional[Exception] = None
        self._connection: Optional[int] = None

        self.display.register_keyboard_callback(self.handle_key)

    def run(self) -> int:
        """
        Stream until the display is closed.

        Returns:
            0 on normal shutdown, 1 if a recording error or a dead grabber stopped the viewer
        """
        self._connection = self.grabber.register_callback(self._on_frame)
        self.grabber.enable_temporal_filtering(self.settings.temporal_filtering, self.settings.window_size)
        self.grabber.set_confidence_threshold(self.settings.confidence_threshold)
        self.grabber.start()
        try:
            while not self.display.was_stopped() and self.fatal_error is None:
                if not self.grabber.is_running():
                    self.fatal_error = GrabberError(f"Grabber {self.grabber.serial_number} stopped delivering frames")
                    logger.error(str(self.fatal_error))
                    break
                self.spin_once()
        finally:
            self.grabber.stop()
            self.grabber.unregister_callback(self._connection)
            self.recorder.stop()
            self.display.close()
        return 0 if self.fatal_error is None else 1

    def spin_once(self):
        """One control-loop iteration: show the latest frame, then yield to the display."""
        frame = self.slot.take()
        if frame is not None:
            self.display.show_cloud(frame)
            self.display_settings()
            self.last_frame = frame
        self.display.spin_once()

    def _on_frame(self, frame: Frame):
        """Grabber-thread callback."""
        if self.display.was_stopped():
            return
        frame = self.processor.process(frame)
        self.slot.put(frame)
        self.recorder.save(frame)

    def display_settings(self):
        self.display.set_status(format_status_lines(self.settings, self.grabber.get_frames_per_second()))

    def handle_key(self, key: str):
        """Apply one key-down event. Unknown keys only refresh the overlay."""
        settings = self.settings

        if key in ("w", "W"):
            window = settings.adjust_window_size(1 if key == "w" else -1)
            logger.info(f"Temporal filtering window size: {window}")
            self.grabber.enable_temporal_filtering(settings.temporal_filtering, window)
        elif key in ("t", "T"):
            threshold = settings.adjust_confidence_threshold(1 if key == "t" else -1)
            logger.info(f"Confidence threshold: {threshold}")
            self.grabber.set_confidence_threshold(threshold)
        elif key == "k":
            mode = settings.next_temporal_filtering()
            logger.info(f"Temporal filtering: {mode.name.lower()}")
            self.grabber.enable_temporal_filtering(mode, settings.window_size)
        elif key == "b":
            enabled = settings.toggle_bilateral()
            logger.info(f"Bilateral filtering: {'ON' if enabled else 'OFF'}")
            self._push_bilateral()
        elif key in ("a", "A"):
            sigma_s = settings.adjust_sigma_s(1 if key == "a" else -1)
            logger.info(f"Bilateral filter spatial sigma: {sigma_s:.0f}")
            self._push_bilateral()
        elif key in ("z", "Z"):
            sigma_r = settings.adjust_sigma_r(0.01 if key == "z" else -0.01)
            logger.info(f"Bilateral filter range sigma: {sigma_r:.2f}")
            self._push_bilateral()
        elif key == "p":
            self.save_snapshot()
        elif key == "s":
            self._toggle_recording()

        self.display_settings()

    def save_snapshot(self) -> Optional[Path]:
        """Save the most recently displayed frame as RS_<serial>_<timestamp>.pcd."""
        frame = self.last_frame
        if frame is None:
            logger.warning("No point cloud displayed yet, nothing to save")
            return None
        path = self.output_dir / snapshot_filename(self.grabber.serial_number, frame.timestamp)
        self.writer(path, frame)
        logger.info(f"Saved point cloud: {path}")
        return path

    def _push_bilateral(self):
        settings = self.settings
        self.processor.configure(
            settings.bilateral_enabled,
            settings.bilateral_sigma_s,
            settings.bilateral_sigma_r,
        )

    def _toggle_recording(self):
        try:
            recording = self.recorder.toggle()
        except RecordingError as e:
            logger.error(str(e))
            self.fatal_error = e
            self.settings.recording = False
            return
        self.settings.recording = recording
        logger.info(f"Record stream: {'ON' if recording else 'OFF'}")
