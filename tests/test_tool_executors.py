"""
Tests for the Tool Executors Registry.

Tests cover:
- Registry creation and basic operations
- Executor registration and lookup
- Executor execution
- Error handling
- Singleton pattern
"""

import unittest

from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.SessionLib.tool_executors import (
    ToolExecutorRegistry,
    get_default_registry,
    register_default_executors,
)
from PB_Libs.ToolsLib import ColorTransformConfig


def _passthrough(config, buffers):
    return list(buffers)


class TestToolExecutorRegistry(unittest.TestCase):
    """Test ToolExecutorRegistry basic functionality."""

    def setUp(self):
        """Create a fresh registry for each test."""
        self.registry = ToolExecutorRegistry()

    def test_registry_creation(self):
        """Test creating a new registry."""
        self.assertEqual(len(self.registry.list_operations()), 0)

    def test_register_executor(self):
        """Test registering an executor."""
        self.registry.register("noop", _passthrough)

        self.assertTrue(self.registry.has_executor("noop"))
        self.assertIn("noop", self.registry.list_operations())

    def test_register_empty_operation_raises_error(self):
        """Test that an empty operation name is rejected."""
        with self.assertRaises(ValueError):
            self.registry.register("  ", _passthrough)

    def test_register_non_callable_raises_error(self):
        """Test that non-callable executors are rejected."""
        with self.assertRaises(ValueError):
            self.registry.register("noop", "not callable")

    def test_register_duplicate_raises_error(self):
        """Test that registering twice is rejected."""
        self.registry.register("noop", _passthrough)

        with self.assertRaises(RuntimeError):
            self.registry.register("noop", _passthrough)

    def test_get_nonexistent_executor_raises_error(self):
        """Test looking up a missing executor."""
        with self.assertRaises(KeyError):
            self.registry.get_executor("missing")

    def test_list_operations_sorted(self):
        """Test operations are listed in sorted order."""
        for name in ("zeta", "alpha", "mid"):
            self.registry.register(name, _passthrough)

        self.assertEqual(self.registry.list_operations(), ["alpha", "mid", "zeta"])


class TestToolExecution(unittest.TestCase):
    """Test executing tools through the registry."""

    def test_execute(self):
        """Test executing a registered tool."""
        registry = ToolExecutorRegistry()
        registry.register("noop", _passthrough)
        buffer = RasterBuffer.blank(1, 1)

        self.assertEqual(registry.execute("noop", None, [buffer]), [buffer])

    def test_execute_missing_raises_error(self):
        """Test executing an unknown operation."""
        with self.assertRaises(KeyError):
            ToolExecutorRegistry().execute("missing", None, [])


class TestDefaultRegistry(unittest.TestCase):
    """Test the global default registry."""

    def test_get_default_registry_singleton(self):
        """Test the default registry is created once."""
        self.assertIs(get_default_registry(), get_default_registry())

    def test_register_default_executors(self):
        """Test all six tools are registered."""
        registry = ToolExecutorRegistry()
        register_default_executors(registry)

        self.assertEqual(
            registry.list_operations(),
            ["balance", "color", "format", "merge", "size", "watermark"],
        )

    def test_execute_color_tool_through_registry(self):
        """Test running a built-in tool through the registry."""
        registry = ToolExecutorRegistry()
        register_default_executors(registry)
        buffer = RasterBuffer.blank(1, 1, (0, 0, 0, 255))

        outputs = registry.execute("color", ColorTransformConfig(transform_type="invert"), [buffer])

        self.assertEqual(outputs[0].get_pixel(0, 0), (255, 255, 255, 255))


if __name__ == "__main__":
    unittest.main()
