"""
Viewer for Intel RealSense devices.

Usage:
    python app.py [--help] [--list] [--xyz] [device_id]
"""

import argparse
import logging
import sys
from config import DEBUG_MODE, BASE_DIR
from constants import HELP_EPILOG

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Viewer for RealSense devices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )

    parser.add_argument(
        '--list', '-l',
        action='store_true',
        help='List connected RealSense devices'
    )

    parser.add_argument(
        '--xyz',
        action='store_true',
        help='View XYZ-only clouds'
    )

    parser.add_argument(
        'device_id',
        nargs='?',
        default='',
        help='Serial number or #index of the device (default: first available device)'
    )

    return parser.parse_args(argv)


def print_device_list():
    """Print index and serial number of every connected device."""
    from utils.realsense_grabber import list_devices

    grabbers = list_devices()
    lines = "".join(f"\n  #{i}  {grabber.serial_number}" for i, grabber in enumerate(grabbers, start=1))
    if grabbers:
        print(f"Connected devices: {lines}")
    else:
        print("Connected devices: none")


def main(argv=None) -> int:
    """Main CLI entry point"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if DEBUG_MODE else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.list:
        print_device_list()
        return 0

    from utils.realsense_grabber import RealSenseGrabber, GrabberError

    if args.device_id:
        logger.info(f"Creating a grabber for device \"{args.device_id}\"")
    else:
        logger.info("Creating a grabber for the first available device")

    try:
        grabber = RealSenseGrabber(args.device_id, xyz_only=args.xyz)
    except GrabberError as e:
        logger.error(f"Failed to create a grabber: {e}")
        return 1

    from screens.point_cloud_window import PointCloudWindow
    from screens.viewer_screen import RealSenseViewer

    viewer = RealSenseViewer(grabber, PointCloudWindow(), output_dir=BASE_DIR)
    try:
        return viewer.run()
    except GrabberError as e:
        logger.error(f"Failed to start the grabber: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
