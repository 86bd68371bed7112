"""
Open3D point cloud window with a cv2 status panel.

The 3-D view is an open3d VisualizerWithKeyCallback. Legacy Open3D windows
cannot draw 2-D text, so the status overlay is rendered with cv2.putText into
a small companion window that is refreshed on every spin.
"""

import logging
import time
from typing import Callable, Optional
import cv2
import numpy as np
from domain.frame import Frame
from utils.point_cloud_io import frame_to_open3d
from constants import APP, OVERLAY, VIEWER_KEYS
from config import SPIN_INTERVAL_MS

logger = logging.getLogger(__name__)

# GLFW key action / modifier codes delivered by register_key_action_callback
KEY_RELEASE = 0
MOD_SHIFT = 0x0001

# RealSense frames are y-down, z-forward; Open3D's default camera is y-up, looking down -z
_FLIP_VIEW = np.array([
    [1, 0, 0, 0],
    [0, -1, 0, 0],
    [0, 0, -1, 0],
    [0, 0, 0, 1],
], dtype=np.float64)


def render_status_panel(lines: list[str]) -> np.ndarray:
    """Draw overlay lines onto a BGR image, one entry per line at fixed spacing."""
    step = OVERLAY["FONT_SIZE"] + OVERLAY["LINE_GAP"]
    height = OVERLAY["DY"] + step * max(len(lines), 1)
    panel = np.full((height, OVERLAY["WIDTH"], 3), OVERLAY["BACKGROUND"], dtype=np.uint8)
    for i, line in enumerate(lines):
        cv2.putText(
            panel,
            line,
            (OVERLAY["DX"], OVERLAY["DY"] + i * step),
            cv2.FONT_HERSHEY_SIMPLEX,
            OVERLAY["FONT_SCALE"],
            OVERLAY["COLOR"],
            1,
            cv2.LINE_AA,
        )
    return panel


def key_from_event(key_code: int, action: int, mods: int) -> Optional[str]:
    """
    Translate a GLFW key event to the character the viewer dispatches on.

    Returns None for key releases. GLFW reports letters as upper-case codes,
    so Shift selects the upper-case command.
    """
    if action == KEY_RELEASE:
        return None
    key = chr(key_code)
    return key.upper() if mods & MOD_SHIFT else key.lower()


class PointCloudWindow:
    """
    Interactive display used by the viewer control loop.

    Usage:
        window = PointCloudWindow()
        window.register_keyboard_callback(viewer.handle_key)
        while not window.was_stopped():
            window.show_cloud(frame)
            window.set_status(lines)
            window.spin_once()
        window.close()
    """

    def __init__(self, title: str = APP["TITLE"], width: int = APP["WIDTH"], height: int = APP["HEIGHT"]):
        import open3d as o3d

        self.title = title
        self.vis = o3d.visualization.VisualizerWithKeyCallback()
        self.vis.create_window(window_name=title, width=width, height=height)
        self._pcd = None
        self._stopped = False
        self._status: Optional[np.ndarray] = None

    def register_keyboard_callback(self, callback: Callable[[str], None]):
        """Deliver key-down events for the viewer keys as single characters."""
        for letter in VIEWER_KEYS:
            key_code = ord(letter.upper())

            def on_key(vis, action, mods, key_code=key_code):
                key = key_from_event(key_code, action, mods)
                if key is not None:
                    callback(key)
                return False

            self.vis.register_key_action_callback(key_code, on_key)

    def was_stopped(self) -> bool:
        return self._stopped

    def show_cloud(self, frame: Frame):
        """Update the displayed cloud in place, or add it and reset the camera."""
        if self._pcd is None:
            self._pcd = frame_to_open3d(frame)
            self._pcd.transform(_FLIP_VIEW)
            self.vis.add_geometry(self._pcd, reset_bounding_box=True)
            logger.debug(f"First cloud displayed: {len(self._pcd.points)} points")
            return
        frame_to_open3d(frame, self._pcd)
        self._pcd.transform(_FLIP_VIEW)
        self.vis.update_geometry(self._pcd)

    def set_status(self, lines: list[str]):
        self._status = render_status_panel(lines)
        cv2.imshow(APP["STATUS_TITLE"], self._status)

    def spin_once(self):
        """Process window events and redraw; marks the window stopped once closed."""
        if not self.vis.poll_events():
            self._stopped = True
            return
        self.vis.update_renderer()
        if self._status is not None:
            cv2.waitKey(SPIN_INTERVAL_MS)
        else:
            time.sleep(SPIN_INTERVAL_MS / 1000.0)

    def close(self):
        self._stopped = True
        self.vis.destroy_window()
        if self._status is not None:
            cv2.destroyWindow(APP["STATUS_TITLE"])
