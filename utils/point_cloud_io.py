"""
Point cloud conversion and PCD output.

Frames are converted to open3d.geometry.PointCloud keeping only valid
samples, and written as binary compressed PCD files.
"""

import logging
from pathlib import Path
from typing import Tuple, Optional
import numpy as np
from domain.frame import Frame

logger = logging.getLogger(__name__)


def frame_to_arrays(frame: Frame) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Flatten an organized frame to valid points.

    Returns:
        Tuple of (points [N, 3] float64, colors [N, 3] float64 in [0, 1] or None)
    """
    mask = frame.valid_mask()
    points = frame.points[mask].astype(np.float64)
    colors = None
    if frame.has_color:
        colors = frame.colors[mask].astype(np.float64) / 255.0
    return points, colors


def frame_to_open3d(frame: Frame, pcd=None):
    """
    Build (or refill in place) an Open3D point cloud from a frame.

    Args:
        frame: Frame to convert
        pcd: Existing open3d.geometry.PointCloud to update, or None

    Returns:
        The open3d.geometry.PointCloud holding the frame's valid points
    """
    import open3d as o3d

    if pcd is None:
        pcd = o3d.geometry.PointCloud()
    points, colors = frame_to_arrays(frame)
    pcd.points = o3d.utility.Vector3dVector(points)
    if colors is not None:
        pcd.colors = o3d.utility.Vector3dVector(colors)
    return pcd


def save_point_cloud(path: Path, frame: Frame) -> Path:
    """Write a frame as a binary compressed PCD file."""
    import open3d as o3d

    path = Path(path)
    pcd = frame_to_open3d(frame)
    o3d.io.write_point_cloud(str(path), pcd, write_ascii=False, compressed=True)
    return path


def snapshot_filename(serial_number: str, timestamp: int) -> str:
    """File name for a manual snapshot: RS_<serial>_<timestamp>.pcd"""
    return f"RS_{serial_number}_{timestamp}.pcd"
