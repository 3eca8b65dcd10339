"""
ImageEditingLib - Core image editing functionality

This module provides the raster buffer, data models and the per-pixel
kernels (color, geometry and watermark) for the Pixel Batch project.
"""

from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer, Rect
from PB_Libs.ImageEditingLib.image_models import (
    BatchResult,
    ColorAdjustmentSpec,
    CropArea,
    ImageRecord,
    ResizeSpec,
    RgbaColor,
    RgbColor,
    SkippedImage,
    WatermarkSpec,
)
from PB_Libs.ImageEditingLib.color_ops import (
    color_balance,
    color_distance,
    color_replace,
    grayscale,
    hex_to_rgb,
    invert,
    parse_hex_color,
    rgb_to_hex,
    sepia,
)
from PB_Libs.ImageEditingLib.geometry_ops import compute_target_size, merge, resize
from PB_Libs.ImageEditingLib.watermark_ops import anchor_center, tile_positions, watermark
from PB_Libs.ImageEditingLib.image_editing_ops import (
    calculate_compression,
    format_file_size,
    sanitize_filename,
    strip_extension,
)

__all__ = [
    "RasterBuffer",
    "Rect",
    "BatchResult",
    "ColorAdjustmentSpec",
    "CropArea",
    "ImageRecord",
    "ResizeSpec",
    "RgbaColor",
    "RgbColor",
    "SkippedImage",
    "WatermarkSpec",
    "color_balance",
    "color_distance",
    "color_replace",
    "grayscale",
    "hex_to_rgb",
    "invert",
    "parse_hex_color",
    "rgb_to_hex",
    "sepia",
    "compute_target_size",
    "merge",
    "resize",
    "anchor_center",
    "tile_positions",
    "watermark",
    "calculate_compression",
    "format_file_size",
    "sanitize_filename",
    "strip_extension",
]
