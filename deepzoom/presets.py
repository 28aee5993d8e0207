# presets.py
#
# Fixed starting points and defaults for a zoom sequence. Centers are kept as
# decimal strings so they can be parsed at the reference orbit's precision
# without first being rounded to a double.

from typing import Dict, List, Tuple

# -----------------------------------------------------------------------------
# Logical bounds of the unzoomed view (zoom == 1).
# -----------------------------------------------------------------------------
MIN_RE = -2.5
MAX_RE = 1.0
MIN_IM = -1.0
MAX_IM = 1.0

# -----------------------------------------------------------------------------
# Center presets (re, im).
# -----------------------------------------------------------------------------
CENTER_PRESETS: Dict[int, Tuple[str, str]] = {
    1: ("-0.75", "0.1"),
    2: ("0.339410819995598", "-0.050668285162643"),
    3: ("-0.10109636384562", "0.95628651080914"),
    4: ("-0.77568377", "0.13646737"),
    5: ("0.272149607027528", "0.005401159465460"),
    6: ("-1.7492046334590113301", "0.00028684660234660531403"),
    7: ("0.2925755", "-0.0149977"),
    8: ("-0.814158841137593", "0.189802029306573"),
    9: ("-0.1182402951560276787014475129283", "0.64949165134945441813936036487738"),
}

DEFAULT_CENTER_PRESET = 6

# -----------------------------------------------------------------------------
# Default palette: dark blue through white to amber, 16 entries, cyclic.
# -----------------------------------------------------------------------------
DEFAULT_PALETTE: List[Tuple[int, int, int]] = [
    (66, 30, 15),
    (25, 7, 26),
    (9, 1, 47),
    (4, 4, 73),
    (0, 7, 100),
    (12, 44, 138),
    (24, 82, 177),
    (57, 125, 209),
    (134, 181, 229),
    (211, 236, 248),
    (241, 233, 191),
    (248, 201, 95),
    (255, 170, 0),
    (204, 128, 0),
    (153, 87, 0),
    (106, 52, 3),
]

# -----------------------------------------------------------------------------
# Sequence defaults. The zoom grows additively by ZOOM_INCREMENT per frame.
# -----------------------------------------------------------------------------
WIDTH = 1920
HEIGHT = 1080
MAX_ITER = 500
START_ZOOM = 1.0
ZOOM_INCREMENT = 10000.0
TOTAL_FRAMES = 600
FPS = 60
PRECISION_BITS = 128
ALPHA = 255
FRAMES_DIR = "frames"
OUTPUT_VIDEO = "mandelbrot_zoom.mp4"
