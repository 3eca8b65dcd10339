"""
Color transform tool for Pixel Batch.

Classes:
    ColorTransformConfig: Configuration for color replace/grayscale/sepia/invert

Functions:
    execute_color_transform_tool: Tool executor for color transforms
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Literal

from PB_Libs.constants import (
    COLOR_TRANSFORM_TYPES,
    DEFAULT_SOURCE_COLOR,
    DEFAULT_TARGET_COLOR,
    DEFAULT_TOLERANCE,
    MAX_TOLERANCE,
    OPERATION_COLOR,
)
from PB_Libs.ImageEditingLib.color_ops import color_replace, grayscale, invert, parse_hex_color, sepia
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number, require_choice

TransformType = Literal["replace", "grayscale", "sepia", "invert"]

_SIMPLE_TRANSFORMS = {
    "grayscale": grayscale,
    "sepia": sepia,
    "invert": invert,
}


@dataclass
class ColorTransformConfig(ToolConfigBase):
    """Configuration for color transforms.

    Attributes:
        transform_type: 'replace', 'grayscale', 'sepia' or 'invert'
        source_color: Hex color to replace (replace only)
        target_color: Hex replacement color (replace only)
        tolerance: RGB distance 0-100 within which pixels are blended (replace only)
    """

    OPERATION: ClassVar[str] = OPERATION_COLOR
    DESCRIPTION: ClassVar[str] = "Color transform"

    transform_type: TransformType = "replace"
    source_color: str = DEFAULT_SOURCE_COLOR
    target_color: str = DEFAULT_TARGET_COLOR
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self) -> None:
        self.transform_type = require_choice(self.transform_type, COLOR_TRANSFORM_TYPES, "color transform")
        parse_hex_color(self.source_color)
        parse_hex_color(self.target_color)
        self.tolerance = clamp_number(self.tolerance, 0, MAX_TOLERANCE, DEFAULT_TOLERANCE)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorTransformConfig":
        """Create from dictionary."""
        return cls(**cls._known_fields(data))


def execute_color_transform_tool(config: ColorTransformConfig, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
    """Tool executor for color transforms. Buffers are modified in place and returned."""
    if config.transform_type == "replace":
        source = parse_hex_color(config.source_color)
        target = parse_hex_color(config.target_color)
        for buffer in buffers:
            color_replace(buffer, source, target, config.tolerance)
    else:
        kernel = _SIMPLE_TRANSFORMS[config.transform_type]
        for buffer in buffers:
            kernel(buffer)
    return list(buffers)
