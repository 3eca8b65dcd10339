"""
Watermark tool for Pixel Batch.

Classes:
    WatermarkConfig: Configuration for text or image watermarks

Functions:
    execute_watermark_tool: Tool executor for watermarking
"""

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any, ClassVar, Dict, List, Literal, Optional

from PB_Libs.constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_IMAGE_SCALE,
    DEFAULT_STROKE_COLOR,
    DEFAULT_STROKE_WIDTH,
    DEFAULT_TILE_SPACING,
    DEFAULT_WATERMARK_COLOR,
    DEFAULT_WATERMARK_OFFSET,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_POSITION,
    DEFAULT_WATERMARK_TEXT,
    MAX_FONT_SIZE,
    MAX_IMAGE_SCALE,
    MAX_ROTATION,
    MAX_STROKE_WIDTH,
    MAX_TILE_SPACING,
    MAX_WATERMARK_OFFSET,
    MIN_FONT_SIZE,
    MIN_IMAGE_SCALE,
    MIN_ROTATION,
    MIN_STROKE_WIDTH,
    MIN_TILE_SPACING,
    OPERATION_WATERMARK,
    WATERMARK_CONTENT_TYPES,
    WATERMARK_POSITIONS,
)
from PB_Libs.errors import DecodeError, PreconditionError
from PB_Libs.ImageEditingLib.color_ops import parse_hex_color
from PB_Libs.ImageEditingLib.image_models import WatermarkPosition, WatermarkSpec
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ImageEditingLib.watermark_ops import watermark
from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number, require_choice

logger = logging.getLogger(__name__)


@dataclass
class WatermarkConfig(ToolConfigBase):
    """Configuration for watermarking.

    Attributes:
        content_type: 'text' or 'image'
        text: Watermark text (text watermarks)
        font_size: Font size in pixels (12-200)
        font_family: Font family name, e.g. 'Arial'
        color: Hex text color
        stroke: Draw an outline around the text
        stroke_color: Hex outline color
        stroke_width: Outline width in pixels (1-10)
        watermark_image: Encoded watermark image bytes (image watermarks)
        image_scale: Scale factor for the watermark image (0.1-2.0)
        position: One of the nine anchors, e.g. 'bottom-right'
        offset_x: Inward horizontal offset from the anchor edge (0-200)
        offset_y: Inward vertical offset from the anchor edge (0-200)
        rotation: Rotation in degrees (-180..180), clockwise
        opacity: Stamp opacity (0-1)
        tile_mode: Repeat the stamp across the whole image
        tile_spacing_x: Horizontal tile pitch in pixels (50-500)
        tile_spacing_y: Vertical tile pitch in pixels (50-500)
    """

    OPERATION: ClassVar[str] = OPERATION_WATERMARK
    DESCRIPTION: ClassVar[str] = "Watermark"

    content_type: Literal["text", "image"] = "text"
    text: str = DEFAULT_WATERMARK_TEXT
    font_size: int = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    color: str = DEFAULT_WATERMARK_COLOR
    stroke: bool = False
    stroke_color: str = DEFAULT_STROKE_COLOR
    stroke_width: int = DEFAULT_STROKE_WIDTH
    watermark_image: Optional[bytes] = None
    image_scale: float = DEFAULT_IMAGE_SCALE
    position: WatermarkPosition = DEFAULT_WATERMARK_POSITION
    offset_x: int = DEFAULT_WATERMARK_OFFSET
    offset_y: int = DEFAULT_WATERMARK_OFFSET
    rotation: float = 0
    opacity: float = DEFAULT_WATERMARK_OPACITY
    tile_mode: bool = False
    tile_spacing_x: int = DEFAULT_TILE_SPACING
    tile_spacing_y: int = DEFAULT_TILE_SPACING

    def __post_init__(self) -> None:
        self.content_type = require_choice(self.content_type, WATERMARK_CONTENT_TYPES, "watermark type")
        self.position = require_choice(self.position, WATERMARK_POSITIONS, "watermark position")
        parse_hex_color(self.color)
        parse_hex_color(self.stroke_color)
        self.text = "" if self.text is None else str(self.text)
        self.font_size = int(clamp_number(self.font_size, MIN_FONT_SIZE, MAX_FONT_SIZE, DEFAULT_FONT_SIZE))
        self.stroke = bool(self.stroke)
        self.stroke_width = int(clamp_number(self.stroke_width, MIN_STROKE_WIDTH, MAX_STROKE_WIDTH, DEFAULT_STROKE_WIDTH))
        self.image_scale = clamp_number(self.image_scale, MIN_IMAGE_SCALE, MAX_IMAGE_SCALE, DEFAULT_IMAGE_SCALE)
        self.offset_x = int(clamp_number(self.offset_x, 0, MAX_WATERMARK_OFFSET, DEFAULT_WATERMARK_OFFSET))
        self.offset_y = int(clamp_number(self.offset_y, 0, MAX_WATERMARK_OFFSET, DEFAULT_WATERMARK_OFFSET))
        self.rotation = clamp_number(self.rotation, MIN_ROTATION, MAX_ROTATION, 0)
        self.opacity = clamp_number(self.opacity, 0.0, 1.0, DEFAULT_WATERMARK_OPACITY)
        self.tile_mode = bool(self.tile_mode)
        self.tile_spacing_x = int(clamp_number(self.tile_spacing_x, MIN_TILE_SPACING, MAX_TILE_SPACING, DEFAULT_TILE_SPACING))
        self.tile_spacing_y = int(clamp_number(self.tile_spacing_y, MIN_TILE_SPACING, MAX_TILE_SPACING, DEFAULT_TILE_SPACING))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatermarkConfig":
        """Create from dictionary."""
        return cls(**cls._known_fields(data))

    @cached_property
    def watermark_raster(self) -> RasterBuffer:
        """Decoded watermark image, decoded once per config."""
        if not self.watermark_image:
            raise PreconditionError("Image watermark requires a watermark image")
        try:
            return RasterBuffer.load_from_encoded(self.watermark_image)
        except DecodeError as e:
            raise PreconditionError(f"Watermark image cannot be decoded: {str(e)}") from e

    def validate(self, image_count: int) -> None:
        """
        Raises:
            PreconditionError: If the batch is empty, the text is empty (text
                watermarks) or the watermark image is missing or unreadable
                (image watermarks)
        """
        super().validate(image_count)
        if self.content_type == "text" and not self.text.strip():
            raise PreconditionError("Text watermark requires non-empty text")
        if self.content_type == "image":
            logger.debug(f"Watermark image decoded at {self.watermark_raster.size}")

    def get_watermark_spec(self) -> WatermarkSpec:
        """Get the kernel WatermarkSpec for this config."""
        return WatermarkSpec(
            content_type=self.content_type,
            text=self.text,
            font_size=self.font_size,
            font_family=self.font_family,
            color=parse_hex_color(self.color),
            stroke=self.stroke,
            stroke_color=parse_hex_color(self.stroke_color),
            stroke_width=self.stroke_width,
            image=self.watermark_raster if self.content_type == "image" else None,
            image_scale=self.image_scale,
            position=self.position,
            offset_x=self.offset_x,
            offset_y=self.offset_y,
            rotation=self.rotation,
            opacity=self.opacity,
            tile_mode=self.tile_mode,
            tile_spacing_x=self.tile_spacing_x,
            tile_spacing_y=self.tile_spacing_y,
        )


def execute_watermark_tool(config: WatermarkConfig, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
    """Tool executor for watermarking. Buffers are stamped in place and returned."""
    spec = config.get_watermark_spec()
    for buffer in buffers:
        watermark(buffer, spec)
    return list(buffers)
