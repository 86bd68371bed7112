"""
Intel RealSense camera detection using pyrealsense2 SDK.

This module enumerates connected RealSense devices and resolves the
command-line device id ("" for the first device, "#N" for the N-th device,
or a serial number) to a single CameraInfo.

System requirements:
- pyrealsense2 installed (pip install pyrealsense2)
"""

import logging
from typing import Optional
from domain.camera_info import CameraInfo

logger = logging.getLogger(__name__)


def detect_realsense_cameras() -> list[CameraInfo]:
    """
    Detect Intel RealSense cameras using pyrealsense2 SDK.

    Returns:
        List of CameraInfo objects in SDK order, indexed from 1.
        Devices whose metadata cannot be read are skipped.
    """
    import pyrealsense2 as rs

    cameras: list[CameraInfo] = []
    devices = rs.context().query_devices()
    logger.debug(f"RealSense SDK: Found {len(devices)} RealSense devices")

    for i, dev in enumerate(devices, start=1):
        try:
            serial = dev.get_info(rs.camera_info.serial_number)
            name = dev.get_info(rs.camera_info.name)
            product_line = None
            if dev.supports(rs.camera_info.product_line):
                product_line = dev.get_info(rs.camera_info.product_line)
        except RuntimeError as e:
            logger.warning(f"Error processing RealSense device {i}: {e}")
            continue

        cam = CameraInfo(
            index=i,
            serial_number=serial,
            name=name,
            product_line=product_line,
        )
        logger.debug(f"RealSense device {cam}: {name} ({product_line})")
        cameras.append(cam)

    return cameras


def find_realsense_camera(
    device_id: str,
    cameras: Optional[list[CameraInfo]] = None
) -> Optional[CameraInfo]:
    """
    Resolve a device id against the connected cameras.

    Args:
        device_id: "" for the first device, "#N" (1-based) or a serial number
        cameras: Candidate list; enumerated through the SDK when omitted

    Returns:
        Matching CameraInfo or None
    """
    if cameras is None:
        cameras = detect_realsense_cameras()
    for cam in cameras:
        if cam.matches(device_id):
            return cam
    return None
