"""
Stream recording into numbered session directories.

Layout under the base directory:
    0001/0000.pcd, 0001/0001.pcd, ...   first recording activation
    0002/0000.pcd, ...                  second activation

Session ids increase for the lifetime of the process; frame ids restart at 0
for every session.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional
from domain.frame import Frame
from domain.recording_session import RecordingSession
from utils.point_cloud_io import save_point_cloud
from config import BASE_DIR

logger = logging.getLogger(__name__)


class RecordingError(Exception):
    """Raised when a session directory cannot be created."""


class StreamRecorder:
    """
    Writes every saved frame to the active session directory.

    start()/stop() are called from the control loop, save() from the grabber
    thread while recording is active.
    """

    def __init__(
        self,
        base_dir: Path = BASE_DIR,
        writer: Callable[[Path, Frame], object] = save_point_cloud
    ):
        self.base_dir = Path(base_dir)
        self.writer = writer
        self._lock = threading.Lock()
        self._last_session_id = 0
        self.session: Optional[RecordingSession] = None

    @property
    def is_recording(self) -> bool:
        return self.session is not None

    def start(self) -> RecordingSession:
        """
        Open a new session and create its directory.

        Raises:
            RecordingError: If the session directory cannot be created
        """
        with self._lock:
            self._last_session_id += 1
            session = RecordingSession(session_id=self._last_session_id, base_dir=self.base_dir)
            try:
                session.session_dir.mkdir(parents=True)
            except OSError as e:
                raise RecordingError(
                    f"Error creating save directory {session.session_dir}: {e}"
                ) from e
            self.session = session
        logger.info(f"Recording session {session.session_id:04d} -> {session.session_dir}")
        return session

    def stop(self):
        with self._lock:
            session, self.session = self.session, None
        if session is not None:
            logger.info(
                f"Recording session {session.session_id:04d} stopped after {session.frame_id} frames"
            )

    def toggle(self) -> bool:
        """Start or stop recording. Returns the new recording state."""
        if self.is_recording:
            self.stop()
        else:
            self.start()
        return self.is_recording

    def save(self, frame: Frame) -> Optional[Path]:
        """Write a frame to the active session. No-op when not recording."""
        with self._lock:
            session = self.session
            if session is None:
                return None
            path = session.next_frame_path()
            self.writer(path, frame)
            session.frame_id += 1
        logger.debug(f"Recorded {path}")
        return path
