"""Recording session data model."""
from dataclasses import dataclass
from pathlib import Path
from config import BASE_DIR


@dataclass
class RecordingSession:
    """
    Represents one contiguous recording activation.

    Attributes:
        session_id: Per-process session number, starting at 1
        base_dir: Directory holding all session directories
        frame_id: Index of the next frame to be written
    """
    session_id: int
    base_dir: Path = BASE_DIR
    frame_id: int = 0

    @property
    def session_dir(self) -> Path:
        """Get the directory for this session's frames."""
        return Path(self.base_dir) / f"{self.session_id:04d}"

    def next_frame_path(self) -> Path:
        """Path the next recorded frame is written to."""
        return self.session_dir / f"{self.frame_id:04d}.pcd"
