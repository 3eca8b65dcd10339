"""
Constants and configuration values for Pixel Batch.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the library.
"""

# Operation names (history entries and export file prefixes)
OPERATION_FORMAT = "format"
OPERATION_SIZE = "size"
OPERATION_COLOR = "color"
OPERATION_BALANCE = "balance"
OPERATION_MERGE = "merge"
OPERATION_WATERMARK = "watermark"
OPERATION_NAMES = (
    OPERATION_FORMAT,
    OPERATION_SIZE,
    OPERATION_COLOR,
    OPERATION_BALANCE,
    OPERATION_MERGE,
    OPERATION_WATERMARK,
)

# Export naming
PROCESSED_EXPORT_PREFIX = "processed"
ARCHIVE_SUFFIX = "-images.zip"

# MIME types
MIME_PNG = "image/png"
MIME_JPEG = "image/jpeg"
MIME_WEBP = "image/webp"
MIME_GIF = "image/gif"
DEFAULT_MIME_TYPE = MIME_PNG
ENCODABLE_MIME_TYPES = {MIME_PNG, MIME_JPEG, MIME_WEBP}

# Pillow format names for each encodable MIME type
PIL_FORMAT_BY_MIME = {
    MIME_PNG: "PNG",
    MIME_JPEG: "JPEG",
    MIME_WEBP: "WEBP",
}

# Export file extensions (anything not listed exports as png)
EXTENSION_BY_MIME = {
    MIME_JPEG: "jpg",
    MIME_WEBP: "webp",
}
DEFAULT_EXTENSION = "png"

# Supported input file formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}

# Encode quality (0.1-1.0 as exposed to callers, Pillow uses 1-100)
DEFAULT_JPEG_QUALITY = 0.9
DEFAULT_ENCODE_QUALITY = 0.92
MIN_QUALITY = 0.1
MAX_QUALITY = 1.0

# Format conversion
TARGET_FORMATS = ("png", "jpeg", "webp")
DEFAULT_TARGET_FORMAT = "png"

# Resize
RESIZE_MODES = ("percentage", "fixed", "width", "height", "crop")
DEFAULT_RESIZE_MODE = "percentage"
DEFAULT_RESIZE_PERCENTAGE = 100
MIN_RESIZE_PERCENTAGE = 10
MAX_RESIZE_PERCENTAGE = 200
DEFAULT_RESIZE_WIDTH = 800
DEFAULT_RESIZE_HEIGHT = 600

# Color transform
COLOR_TRANSFORM_TYPES = ("replace", "grayscale", "sepia", "invert")
DEFAULT_SOURCE_COLOR = "#FF0000"
DEFAULT_TARGET_COLOR = "#00FF00"
DEFAULT_TOLERANCE = 30
MAX_TOLERANCE = 100

# Color balance
MIN_BALANCE_DELTA = -100
MAX_BALANCE_DELTA = 100
DEFAULT_OPACITY_PERCENT = 100

# Merge
MERGE_DIRECTIONS = ("horizontal", "vertical")
DEFAULT_MERGE_DIRECTION = "horizontal"
MAX_MERGE_SPACING = 100
DEFAULT_BACKGROUND_COLOR = "#ffffff"
MIN_MERGE_IMAGES = 2
MERGED_NAME_PREFIX = "merged"

# Watermark
WATERMARK_CONTENT_TYPES = ("text", "image")
WATERMARK_POSITIONS = (
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)
DEFAULT_WATERMARK_TEXT = "Watermark"
DEFAULT_WATERMARK_POSITION = "bottom-right"
DEFAULT_WATERMARK_OPACITY = 0.5
DEFAULT_FONT_SIZE = 48
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 200
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_WATERMARK_COLOR = "#ffffff"
DEFAULT_STROKE_COLOR = "#000000"
DEFAULT_STROKE_WIDTH = 2
MIN_STROKE_WIDTH = 1
MAX_STROKE_WIDTH = 10
DEFAULT_IMAGE_SCALE = 1.0
MIN_IMAGE_SCALE = 0.1
MAX_IMAGE_SCALE = 2.0
DEFAULT_WATERMARK_OFFSET = 20
MAX_WATERMARK_OFFSET = 200
MIN_ROTATION = -180
MAX_ROTATION = 180
DEFAULT_TILE_SPACING = 150
MIN_TILE_SPACING = 50
MAX_TILE_SPACING = 500

# Font files tried for common family names before falling back to Pillow's default font
FONT_FILES_BY_FAMILY = {
    "arial": ("arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf", "DejaVuSans.ttf"),
    "helvetica": ("Helvetica.ttc", "LiberationSans-Regular.ttf", "DejaVuSans.ttf"),
    "times new roman": ("times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf", "DejaVuSerif.ttf"),
    "courier new": ("cour.ttf", "Courier New.ttf", "LiberationMono-Regular.ttf", "DejaVuSansMono.ttf"),
    "verdana": ("verdana.ttf", "Verdana.ttf", "DejaVuSans.ttf"),
    "georgia": ("georgia.ttf", "Georgia.ttf", "DejaVuSerif.ttf"),
    "comic sans ms": ("comic.ttf", "Comic Sans MS.ttf", "DejaVuSans.ttf"),
    "impact": ("impact.ttf", "Impact.ttf", "DejaVuSans-Bold.ttf"),
}

# Pipeline states
STATE_IDLE = "idle"
STATE_LOADING = "loading"
STATE_TRANSFORMING = "transforming"
STATE_ENCODING = "encoding"
STATE_DONE = "done"
STATE_FAILED = "failed"

# Slideshow video export
VIDEO_FRAME_WIDTH = 1920
VIDEO_FRAME_HEIGHT = 1080
VIDEO_FRAME_RATE = 1
VIDEO_CODEC = "libx264"
VIDEO_PIXEL_FORMAT = "yuv420p"
VIDEO_PRESET = "medium"
VIDEO_CRF = 23
VIDEO_FRAME_PATTERN = "frame%04d.png"
VIDEO_OUTPUT_NAME = "output.mp4"
VIDEO_MIME_TYPE = "video/mp4"
FFMPEG_EXECUTABLE = "ffmpeg"

# Image dimension guard used by intake validation
MAX_IMAGE_DIMENSION = 4000

# Safe filename characters
SAFE_FILENAME_CHARS = "-_."
FILENAME_REPLACEMENT_CHAR = "_"
