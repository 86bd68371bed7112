APP = {
    "TITLE": "RealSense Viewer",
    "STATUS_TITLE": "RealSense Viewer - settings",
    "WIDTH": 960,
    "HEIGHT": 640,
}

# Status overlay layout (pixels). Line i is drawn at y = DY + i * (FONT_SIZE + LINE_GAP).
OVERLAY = {
    "DX": 5,
    "DY": 14,
    "FONT_SIZE": 10,
    "LINE_GAP": 2,
    "FONT_SCALE": 0.4,          # cv2 Hershey scale giving ~10px glyphs
    "COLOR": (255, 255, 255),
    "BACKGROUND": (0, 0, 0),
    "WIDTH": 420,
}

# Keys handled by the viewer. Case selects the direction for paired keys.
VIEWER_KEYS = "wtkbazps"

HELP_EPILOG = """
Keyboard commands:

   When the focus is on the viewer window, the following keyboard commands
   are available:
     * w/W : increase or decrease temporal filtering window size
     * t/T : increase or decrease depth data confidence threshold
     * k   : enable next temporal filtering method
     * b   : toggle bilateral filtering
     * a/A : increase or decrease bilateral filter spatial sigma
     * z/Z : increase or decrease bilateral filter range sigma
     * p   : save the last displayed cloud to disk
     * s   : toggle recording of every grabbed cloud to disk

Notes:

   The device to grab data from is selected using device_id argument. It
   could be either:
     * serial number (e.g. 231400041-03)
     * device index (e.g. #2 for the second connected device)

   If device_id is not given, then the first available device will be used.
"""
