"""System-wide constants for the plate detector."""

# Supported frame formats
FRAME_FORMATS = {
    "yuv420_planar": "Planar YUV 4:2:0 (Y plane, then U plane, then V plane)",
    "bgr": "Interleaved 8-bit BGR color",
    "gray": "Single-channel 8-bit grayscale",
}

# Interpolation modes accepted by the resize step
INTERPOLATION_MODES = [
    "INTER_NEAREST",
    "INTER_LINEAR",
    "INTER_CUBIC",
    "INTER_AREA",
    "INTER_LANCZOS4",
]

# Russian plate cascade bundled with opencv-python
DEFAULT_CLASSIFIER_NAME = "haarcascade_russian_plate_number.xml"

# Detection defaults
DEFAULT_SCALE_FACTOR = 1.05
DEFAULT_MIN_NEIGHBORS = 7

# Annotation defaults
DEFAULT_LABEL_TEXT = "Number plate detected"
DEFAULT_LABEL_OFFSET = (-20, -10)
DEFAULT_BOX_COLOR = (0, 255, 255)  # BGR yellow
DEFAULT_BOX_THICKNESS = 2
DEFAULT_FONT_SCALE = 0.5
DEFAULT_TEXT_THICKNESS = 2
