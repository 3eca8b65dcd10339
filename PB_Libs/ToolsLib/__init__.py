"""
Pixel Batch Tools Library.

This module contains the six batch tools. Each tool is a configuration
dataclass (one variant of the ToolConfig union) plus an executor that maps
a list of RasterBuffers to a list of RasterBuffers.

Modules:
    tool_base: Shared configuration behaviour and value coercion
    format_tool: Format conversion (png/jpeg/webp)
    resize_tool: Resize and crop
    color_transform_tool: Color replace, grayscale, sepia, invert
    color_balance_tool: Channel/brightness/contrast/saturation/opacity adjustment
    merge_tool: Horizontal or vertical merge of selected images
    watermark_tool: Text or image watermarks, single or tiled
"""

from typing import Any, Dict, Type, Union

from PB_Libs.ToolsLib.tool_base import ToolConfigBase, clamp_number, require_choice
from PB_Libs.ToolsLib.format_tool import FormatConvertConfig, execute_format_tool
from PB_Libs.ToolsLib.resize_tool import ResizeConfig, execute_resize_tool
from PB_Libs.ToolsLib.color_transform_tool import ColorTransformConfig, execute_color_transform_tool
from PB_Libs.ToolsLib.color_balance_tool import ColorBalanceConfig, execute_color_balance_tool
from PB_Libs.ToolsLib.merge_tool import MergeConfig, execute_merge_tool
from PB_Libs.ToolsLib.watermark_tool import WatermarkConfig, execute_watermark_tool

ToolConfig = Union[
    FormatConvertConfig,
    ResizeConfig,
    ColorTransformConfig,
    ColorBalanceConfig,
    MergeConfig,
    WatermarkConfig,
]

TOOL_CONFIG_TYPES: Dict[str, Type[ToolConfigBase]] = {
    config_type.OPERATION: config_type
    for config_type in (
        FormatConvertConfig,
        ResizeConfig,
        ColorTransformConfig,
        ColorBalanceConfig,
        MergeConfig,
        WatermarkConfig,
    )
}


def tool_config_from_dict(operation: str, data: Dict[str, Any]) -> ToolConfig:
    """
    Build the configuration variant for an operation from a dictionary.

    Args:
        operation: One of 'format', 'size', 'color', 'balance', 'merge', 'watermark'
        data: Configuration fields; unknown keys are ignored

    Returns:
        The matching ToolConfig instance

    Raises:
        ValueError: If the operation is unknown or a value is invalid
    """
    config_type = TOOL_CONFIG_TYPES.get(operation)
    if config_type is None:
        raise ValueError(f"Unknown operation: {operation}")
    return config_type.from_dict(data)


__all__ = [
    "ToolConfig",
    "ToolConfigBase",
    "TOOL_CONFIG_TYPES",
    "tool_config_from_dict",
    "clamp_number",
    "require_choice",
    "FormatConvertConfig",
    "execute_format_tool",
    "ResizeConfig",
    "execute_resize_tool",
    "ColorTransformConfig",
    "execute_color_transform_tool",
    "ColorBalanceConfig",
    "execute_color_balance_tool",
    "MergeConfig",
    "execute_merge_tool",
    "WatermarkConfig",
    "execute_watermark_tool",
]
