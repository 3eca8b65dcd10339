"""
Tool Executors Registry.

This module maps operation names to tool executors. The pipeline looks up
the executor for a configuration's OPERATION here, so tools can be replaced
or added without touching the pipeline.

Classes:
    ToolExecutorRegistry: Registry for tool executors

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_executors: Register the six built-in tool executors
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer

logger = logging.getLogger(__name__)

# Type alias for executor function
ExecutorFunction = Callable[[Any, List[RasterBuffer]], List[RasterBuffer]]


class ToolExecutorRegistry:
    """
    Registry for tool executors.

    Example:
        >>> registry = ToolExecutorRegistry()
        >>> registry.register("color", execute_color_transform_tool)
        >>> outputs = registry.execute("color", config, buffers)
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._executors: Dict[str, ExecutorFunction] = {}

    def register(self, operation: str, executor: ExecutorFunction) -> None:
        """
        Register a tool executor.

        Args:
            operation: Operation name (e.g., "size")
            executor: Callable accepting (config, buffers) and returning buffers

        Raises:
            ValueError: If operation is empty or executor is not callable
            RuntimeError: If operation is already registered
        """
        operation = str(operation).strip()

        if not operation:
            raise ValueError("operation cannot be empty")

        if not callable(executor):
            raise ValueError(f"executor must be callable, got {type(executor)}")

        if operation in self._executors:
            raise RuntimeError(
                f"Operation '{operation}' is already registered. "
                f"Use a fresh registry to replace it."
            )

        self._executors[operation] = executor

        logger.debug(f"Registered executor for operation: {operation}")

    def get_executor(self, operation: str) -> ExecutorFunction:
        """
        Get the executor for an operation.

        Raises:
            KeyError: If operation is not registered
        """
        operation = str(operation).strip()

        if operation not in self._executors:
            available = ", ".join(self.list_operations())
            raise KeyError(
                f"No executor registered for operation '{operation}'. "
                f"Available operations: {available}"
            )

        return self._executors[operation]

    def has_executor(self, operation: str) -> bool:
        return str(operation).strip() in self._executors

    def execute(self, operation: str, config: Any, buffers: List[RasterBuffer]) -> List[RasterBuffer]:
        """
        Execute a tool by looking up its executor.

        Raises:
            KeyError: If operation is not registered
            Exception: Any exception raised by the executor
        """
        executor = self.get_executor(operation)
        return executor(config, buffers)

    def list_operations(self) -> List[str]:
        """Sorted list of registered operation names."""
        return sorted(self._executors.keys())


# Global singleton registry
_default_registry: Optional[ToolExecutorRegistry] = None


def get_default_registry() -> ToolExecutorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers the built-in tools.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = ToolExecutorRegistry()
        register_default_executors(_default_registry)

    return _default_registry


def register_default_executors(registry: ToolExecutorRegistry) -> None:
    """
    Register the built-in tool executors: format, size, color, balance,
    merge and watermark.
    """
    from PB_Libs.ToolsLib import (
        ColorBalanceConfig,
        ColorTransformConfig,
        FormatConvertConfig,
        MergeConfig,
        ResizeConfig,
        WatermarkConfig,
        execute_color_balance_tool,
        execute_color_transform_tool,
        execute_format_tool,
        execute_merge_tool,
        execute_resize_tool,
        execute_watermark_tool,
    )

    for config_class, executor in (
        (FormatConvertConfig, execute_format_tool),
        (ResizeConfig, execute_resize_tool),
        (ColorTransformConfig, execute_color_transform_tool),
        (ColorBalanceConfig, execute_color_balance_tool),
        (MergeConfig, execute_merge_tool),
        (WatermarkConfig, execute_watermark_tool),
    ):
        registry.register(config_class.OPERATION, executor)

    logger.info("Registered default tool executors")
