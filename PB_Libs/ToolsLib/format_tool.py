"""
Format conversion tool for Pixel Batch.

Re-encodes every image to PNG, JPEG or WebP. Conversion always starts from
the original file so repeated conversions do not stack lossy artifacts.

Classes:
    FormatConvertConfig: Configuration for format conversion

Functions:
    execute_format_tool: Tool executor for format conversion
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple

from PB_Libs.constants import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_TARGET_FORMAT,
    MAX_QUALITY,
    MIME_JPEG,
    MIN_QUALITY,
    OPERATION_FORMAT,
    TARGET_FORMATS,
)
from PB_Libs.ImageEditingLib.image_models import ImageRecord
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number, require_choice

TargetFormat = Literal["png", "jpeg", "webp"]


@dataclass
class FormatConvertConfig(ToolConfigBase):
    """Configuration for format conversion.

    Attributes:
        target_format: 'png', 'jpeg' or 'webp'
        quality: Encode quality 0.1-1.0, used for JPEG only
    """

    OPERATION: ClassVar[str] = OPERATION_FORMAT
    DESCRIPTION: ClassVar[str] = "Format conversion"
    CONTINUES_FROM_WORKING: ClassVar[bool] = False

    target_format: TargetFormat = DEFAULT_TARGET_FORMAT
    quality: float = DEFAULT_JPEG_QUALITY

    def __post_init__(self) -> None:
        self.target_format = require_choice(self.target_format, TARGET_FORMATS, "target format")
        self.quality = clamp_number(self.quality, MIN_QUALITY, MAX_QUALITY, DEFAULT_JPEG_QUALITY)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormatConvertConfig":
        """Create from dictionary."""
        return cls(**cls._known_fields(data))

    @property
    def mime_type(self) -> str:
        return f"image/{self.target_format}"

    def target_encoding(self, record: ImageRecord) -> Tuple[str, Optional[float]]:
        mime_type = self.mime_type
        return mime_type, self.quality if mime_type == MIME_JPEG else None


def execute_format_tool(config: FormatConvertConfig, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
    """
    Tool executor for format conversion.

    Pixels pass through unchanged; the conversion happens when the pipeline
    encodes each buffer with the config's target encoding.
    """
    return list(buffers)
