"""Domain models for the RealSense viewer."""
from domain.camera_info import CameraInfo
from domain.frame import Frame
from domain.recording_session import RecordingSession
from domain.temporal_filtering import TemporalFilteringType
from domain.viewer_settings import ViewerSettings

__all__ = [
    "CameraInfo",
    "Frame",
    "RecordingSession",
    "TemporalFilteringType",
    "ViewerSettings",
]
