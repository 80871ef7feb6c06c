import math

# Tolerant point equality (both coordinates)
POINT_TOLERANCE = 0.001

# Handle synthesis and hit testing
DEFAULT_HANDLE_LENGTH = 50.0
HANDLE_HIT_THRESHOLD = 10.0
ANCHOR_HIT_THRESHOLD = 10.0

# Edit mode
EDIT_HIT_THRESHOLD = 8.0
HOVER_DISTANCE = 5.0
SEGMENT_SAMPLES = 50
# A hover point must lie this close to a segment to be inserted on it
INSERT_SNAP_DISTANCE = 1.0

# Pen tool
CLOSE_PATH_THRESHOLD = 10.0
DRAG_THRESHOLD = 3.0
SNAP_ANGLE_INCREMENT = math.pi / 4
MIN_POINTS_TO_CLOSE = 3

# Path defaults
DEFAULT_STROKE = "#000000"
DEFAULT_STROKE_WIDTH = 2.0

ID_PREFIX_PATH = "path"
ID_PREFIX_POINT = "point"

# Interchange grammar: number of arguments per command letter
COMMAND_ARITY = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "A": 7,
    "Z": 0,
}

# Logical key identifiers consumed by the tools
KEY_SHIFT = "Shift"
KEY_ALT = "Alt"
KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"
KEY_DELETE = "Delete"
KEY_BACKSPACE = "Backspace"
