"""
Color balance tool for Pixel Batch.

Classes:
    ColorBalanceConfig: Configuration for channel/brightness/contrast/saturation/opacity adjustment

Functions:
    execute_color_balance_tool: Tool executor for color balance
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List

from PB_Libs.constants import (
    DEFAULT_OPACITY_PERCENT,
    MAX_BALANCE_DELTA,
    MIN_BALANCE_DELTA,
    OPERATION_BALANCE,
)
from PB_Libs.ImageEditingLib.color_ops import color_balance
from PB_Libs.ImageEditingLib.image_models import ColorAdjustmentSpec
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number

_DELTA_FIELDS = ("red", "green", "blue", "brightness", "contrast", "saturation")


@dataclass
class ColorBalanceConfig(ToolConfigBase):
    """Configuration for color balance. Deltas are -100..100, opacity is a percentage."""

    OPERATION: ClassVar[str] = OPERATION_BALANCE
    DESCRIPTION: ClassVar[str] = "Color balance"

    red: float = 0
    green: float = 0
    blue: float = 0
    brightness: float = 0
    contrast: float = 0
    saturation: float = 0
    opacity: float = DEFAULT_OPACITY_PERCENT

    def __post_init__(self) -> None:
        for name in _DELTA_FIELDS:
            setattr(self, name, clamp_number(getattr(self, name), MIN_BALANCE_DELTA, MAX_BALANCE_DELTA, 0))
        self.opacity = clamp_number(self.opacity, 0, 100, DEFAULT_OPACITY_PERCENT)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorBalanceConfig":
        """Create from dictionary."""
        return cls(**cls._known_fields(data))

    @property
    def is_identity(self) -> bool:
        return all(getattr(self, name) == 0 for name in _DELTA_FIELDS) and self.opacity >= 100

    def get_adjustment_spec(self) -> ColorAdjustmentSpec:
        """Get the kernel ColorAdjustmentSpec for this config."""
        return ColorAdjustmentSpec(
            red=self.red,
            green=self.green,
            blue=self.blue,
            brightness=self.brightness,
            contrast=self.contrast,
            saturation=self.saturation,
            opacity=self.opacity,
        )


def execute_color_balance_tool(config: ColorBalanceConfig, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
    """Tool executor for color balance. Buffers are modified in place and returned."""
    if config.is_identity:
        return list(buffers)
    spec = config.get_adjustment_spec()
    for buffer in buffers:
        color_balance(buffer, spec)
    return list(buffers)
