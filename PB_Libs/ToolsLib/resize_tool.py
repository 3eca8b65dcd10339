"""
Resize and crop tool for Pixel Batch.

Classes:
    ResizeConfig: Configuration for resizing/cropping

Functions:
    execute_resize_tool: Tool executor for resizing/cropping
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List

from PB_Libs.constants import (
    DEFAULT_RESIZE_HEIGHT,
    DEFAULT_RESIZE_MODE,
    DEFAULT_RESIZE_PERCENTAGE,
    DEFAULT_RESIZE_WIDTH,
    MAX_RESIZE_PERCENTAGE,
    MIN_RESIZE_PERCENTAGE,
    OPERATION_SIZE,
    RESIZE_MODES,
)
from PB_Libs.ImageEditingLib.geometry_ops import resize
from PB_Libs.ImageEditingLib.image_models import CropArea, ResizeMode, ResizeSpec
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number, require_choice

# Upper bound for explicit pixel dimensions
_MAX_PIXEL_DIMENSION = 100000


def _crop_area_from_value(value: Any) -> CropArea:
    if isinstance(value, CropArea):
        value = {"x": value.x, "y": value.y, "width": value.width, "height": value.height}
    if not isinstance(value, dict):
        return CropArea()
    return CropArea(
        x=clamp_number(value.get("x"), 0.0, 100.0, 0.0),
        y=clamp_number(value.get("y"), 0.0, 100.0, 0.0),
        width=clamp_number(value.get("width"), 0.0, 100.0, 100.0),
        height=clamp_number(value.get("height"), 0.0, 100.0, 100.0),
    )


@dataclass
class ResizeConfig(ToolConfigBase):
    """Configuration for resizing.

    Attributes:
        mode: 'percentage', 'fixed', 'width', 'height' or 'crop'
        percentage: Scale in percent (10-200), percentage mode
        width: Target width in pixels, fixed and width modes
        height: Target height in pixels, fixed and height modes
        maintain_aspect: Keep the source aspect ratio in fixed/width/height modes
        crop_area: Crop rectangle in percent of the source, crop mode
    """

    OPERATION: ClassVar[str] = OPERATION_SIZE
    DESCRIPTION: ClassVar[str] = "Resize"

    mode: ResizeMode = DEFAULT_RESIZE_MODE
    percentage: float = DEFAULT_RESIZE_PERCENTAGE
    width: int = DEFAULT_RESIZE_WIDTH
    height: int = DEFAULT_RESIZE_HEIGHT
    maintain_aspect: bool = True
    crop_area: CropArea = field(default_factory=CropArea)

    def __post_init__(self) -> None:
        self.mode = require_choice(self.mode, RESIZE_MODES, "resize mode")
        self.percentage = clamp_number(
            self.percentage, MIN_RESIZE_PERCENTAGE, MAX_RESIZE_PERCENTAGE, DEFAULT_RESIZE_PERCENTAGE
        )
        self.width = int(clamp_number(self.width, 1, _MAX_PIXEL_DIMENSION, DEFAULT_RESIZE_WIDTH))
        self.height = int(clamp_number(self.height, 1, _MAX_PIXEL_DIMENSION, DEFAULT_RESIZE_HEIGHT))
        self.maintain_aspect = bool(self.maintain_aspect)
        self.crop_area = _crop_area_from_value(self.crop_area)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResizeConfig":
        """Create from dictionary."""
        return cls(**cls._known_fields(data))

    def get_resize_spec(self) -> ResizeSpec:
        """Get the kernel ResizeSpec for this config."""
        return ResizeSpec(
            mode=self.mode,
            percentage=self.percentage,
            width=self.width,
            height=self.height,
            maintain_aspect=self.maintain_aspect,
            crop_area=self.crop_area,
        )


def execute_resize_tool(config: ResizeConfig, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
    """Tool executor for resizing. Returns one new buffer per input buffer."""
    spec = config.get_resize_spec()
    return [resize(buffer, spec) for buffer in buffers]
