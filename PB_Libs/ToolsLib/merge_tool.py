"""
Merge tool for Pixel Batch.

Concatenates two or more selected images horizontally or vertically onto a
background-filled canvas. The merged image is appended to the working set;
the selected images themselves are left as they were.

Classes:
    MergeConfig: Configuration for merging

Functions:
    execute_merge_tool: Tool executor for merging
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from PB_Libs.constants import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_MERGE_DIRECTION,
    MAX_MERGE_SPACING,
    MERGE_DIRECTIONS,
    MIME_PNG,
    MIN_MERGE_IMAGES,
    OPERATION_MERGE,
)
from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.color_ops import parse_hex_color
from PB_Libs.ImageEditingLib.geometry_ops import merge
from PB_Libs.ImageEditingLib.image_models import ImageRecord, MergeDirection
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number, require_choice


@dataclass
class MergeConfig(ToolConfigBase):
    """Configuration for merging.

    Attributes:
        direction: 'horizontal' or 'vertical'
        spacing: Gap between images in pixels (0-100)
        background_color: Hex color of the canvas behind and between images
        selected_indexes: Working-set positions to merge; merged in ascending order
    """

    OPERATION: ClassVar[str] = OPERATION_MERGE
    DESCRIPTION: ClassVar[str] = "Image merge"
    APPENDS_RESULT: ClassVar[bool] = True

    direction: MergeDirection = DEFAULT_MERGE_DIRECTION
    spacing: int = 0
    background_color: str = DEFAULT_BACKGROUND_COLOR
    selected_indexes: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.direction = require_choice(self.direction, MERGE_DIRECTIONS, "merge direction")
        self.spacing = int(clamp_number(self.spacing, 0, MAX_MERGE_SPACING, 0))
        parse_hex_color(self.background_color)
        self.selected_indexes = sorted({int(index) for index in self.selected_indexes})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MergeConfig":
        """Create from dictionary."""
        return cls(**cls._known_fields(data))

    def get_background(self) -> Tuple[int, int, int, int]:
        """Background as an opaque RGBA tuple."""
        return parse_hex_color(self.background_color) + (255,)

    def validate(self, image_count: int) -> None:
        """
        Raises:
            PreconditionError: If fewer than 2 images are selected or an index is out of range
        """
        if len(self.selected_indexes) < MIN_MERGE_IMAGES:
            raise PreconditionError(
                f"Select at least {MIN_MERGE_IMAGES} images to merge, got {len(self.selected_indexes)}"
            )
        out_of_range = [index for index in self.selected_indexes if not 0 <= index < image_count]
        if out_of_range:
            raise PreconditionError(f"Merge indexes out of range for {image_count} images: {out_of_range}")

    def target_encoding(self, record: ImageRecord) -> Tuple[str, Optional[float]]:
        return MIME_PNG, None


def execute_merge_tool(config: MergeConfig, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
    """
    Tool executor for merging.

    Args:
        config: Merge configuration
        buffers: The selected images, already in merge order

    Returns:
        A single-element list holding the merged buffer

    Raises:
        PreconditionError: If fewer than 2 buffers are given
    """
    merged = merge(buffers, config.direction, config.spacing, config.get_background())
    return [merged]
