from pathlib import Path

DEBUG_MODE          = False
BASE_DIR            = Path(".")         # snapshots and recording sessions land here
FPS                 = 30                # stream frame rate
REALSENSE_WIDTH     = 640
REALSENSE_HEIGHT    = 480
FRAME_TIMEOUT_MS    = 5000              # wait_for_frames timeout
FPS_WINDOW          = 30                # frames used for the framerate estimate
SPIN_INTERVAL_MS    = 1                 # render loop yield per iteration

# ==============================================================================
# ACQUISITION DEFAULTS
# ==============================================================================
#
# Temporal filtering runs on the grabber thread over the last WINDOW depth
# images. The confidence threshold is forwarded to the depth sensor when the
# device exposes rs.option.confidence_threshold.
#
# ==============================================================================

DEFAULT_WINDOW_SIZE             = 3
DEFAULT_CONFIDENCE_THRESHOLD    = 6
MAX_CONFIDENCE_THRESHOLD        = 15

# ==============================================================================
# BILATERAL FILTER DEFAULTS
# ==============================================================================
#
# Spatial sigma is in pixels, range sigma in metres.
#
# ==============================================================================

DEFAULT_BILATERAL_SIGMA_S   = 5.0
DEFAULT_BILATERAL_SIGMA_R   = 0.05
MIN_BILATERAL_SIGMA_S       = 1.0
MIN_BILATERAL_SIGMA_R       = 0.01
