"""
Configuration for Cattle Measurement API
"""

import os

# =============================================================
# CALIBRATION
#
# Scale is stored as cm per image pixel. The default is a rough guess
# until the user drags the calibration line over a known reference.

DEFAULT_CM_PER_PIXEL = 0.2
DEFAULT_CALIBRATION_LENGTH_CM = 50.0
MIN_CALIBRATION_LENGTH_CM = 10.0
MAX_CALIBRATION_LENGTH_CM = 200.0

# Default calibration line: centred horizontally, 80% down the image
CALIBRATION_HALF_SPAN_PX = 50.0
CALIBRATION_HEIGHT_PCT = 0.80
#=============================================================

# Touch radius for grabbing a point (display units)
TOUCH_RADIUS = 30.0

# =============================================================
# DEFAULT POINT PLACEMENT (side view, fractions of image size)

HEIGHT_OFFSET_PCT = 0.15       # belly / spine above and below centre
GIRTH_OFFSET_PCT = 0.20        # girth left / right of centre
LENGTH_OFFSET_PCT = 0.30       # neck / rear left and right of centre
LENGTH_RAISE_PCT = 0.05        # neck / rear sit slightly above centre

# Detector-driven placement
DETECTOR_GIRTH_AXIS_PCT = 0.30     # heart girth ~30% from neck toward rear
DETECTOR_GIRTH_OFFSET_PCT = 0.15
DETECTOR_HEIGHT_OFFSET_PCT = 0.15

USE_ENHANCED_DETECTION = os.environ.get("USE_ENHANCED_DETECTION", "true").lower() in ("1", "true", "yes")
CATTLE_LABELS = {"cow", "cattle", "ox", "animal"}
LABEL_CONFIDENCE_THRESHOLD = 0.7
#=============================================================

# Chest is flatter than an ideal ellipse
GIRTH_CORRECTION = 1.08

# Dressing percentage
BASE_DRESSING_PCT = 0.58
BEEF_BREED_ADJUSTMENT = 0.02
DAIRY_BREED_ADJUSTMENT = -0.03

DEFAULT_BREED = "Angus"
DEFAULT_CONDITION = "Average"

# Sessions
MAX_SESSIONS = max(1, int(os.environ.get("MAX_SESSIONS", "100")))

# Server
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

# Upload validation
MIN_IMAGE_DIMENSION = 100  # pixels
MAX_IMAGE_SIZE_MB = 20
MAX_FILE_SIZE_BYTES = MAX_IMAGE_SIZE_MB * 1024 * 1024

VALID_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
