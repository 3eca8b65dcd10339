"""
Tests for the tool configurations and executors.

Tests cover:
- Config creation, clamping and validation
- Dictionary round trips
- Encoding policy per tool
- Executors
"""

import unittest

from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.image_models import CropArea, ImageRecord
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.ToolsLib import (
    ColorBalanceConfig,
    ColorTransformConfig,
    FormatConvertConfig,
    MergeConfig,
    ResizeConfig,
    TOOL_CONFIG_TYPES,
    WatermarkConfig,
    clamp_number,
    execute_color_balance_tool,
    execute_color_transform_tool,
    execute_format_tool,
    execute_merge_tool,
    execute_resize_tool,
    execute_watermark_tool,
    require_choice,
    tool_config_from_dict,
)


def _record(mime_type, quality=None):
    return ImageRecord(name="a", source=b"x", mime_type=mime_type, original_size=1, quality=quality)


def _png_bytes(width, height, color):
    buffer = RasterBuffer.blank(width, height, color)
    return buffer.encode("image/png")


class TestValueCoercion(unittest.TestCase):
    """Test clamp_number and require_choice."""

    def test_clamp_number(self):
        """Test clamping and defaults."""
        self.assertEqual(clamp_number(500, 0, 100, 50), 100)
        self.assertEqual(clamp_number("7", 0, 100, 50), 7.0)
        self.assertEqual(clamp_number(None, 0, 100, 50), 50)
        self.assertEqual(clamp_number("abc", 0, 100, 50), 50)
        self.assertEqual(clamp_number(float("nan"), 0, 100, 50), 50)
        self.assertEqual(clamp_number(True, 0, 100, 50), 50)

    def test_require_choice(self):
        """Test enumerated option validation."""
        self.assertEqual(require_choice("a", ("a", "b"), "thing"), "a")
        with self.assertRaises(ValueError):
            require_choice("c", ("a", "b"), "thing")


class TestFormatConvertConfig(unittest.TestCase):
    """Test FormatConvertConfig."""

    def test_defaults(self):
        """Test default config."""
        config = FormatConvertConfig()

        self.assertEqual(config.target_format, "png")
        self.assertEqual(config.mime_type, "image/png")
        self.assertFalse(config.CONTINUES_FROM_WORKING)

    def test_invalid_format(self):
        """Test rejecting unknown target formats."""
        with self.assertRaises(ValueError):
            FormatConvertConfig(target_format="tiff")

    def test_quality_only_for_jpeg(self):
        """Test that quality is applied to JPEG only."""
        jpeg = FormatConvertConfig(target_format="jpeg", quality=0.5)
        webp = FormatConvertConfig(target_format="webp", quality=0.5)

        self.assertEqual(jpeg.target_encoding(_record("image/png")), ("image/jpeg", 0.5))
        self.assertEqual(webp.target_encoding(_record("image/png")), ("image/webp", None))

    def test_quality_clamped(self):
        """Test quality clamping to 0.1-1.0."""
        self.assertEqual(FormatConvertConfig(quality=5).quality, 1.0)
        self.assertEqual(FormatConvertConfig(quality=0).quality, 0.1)

    def test_executor_passes_pixels_through(self):
        """Test the executor leaves pixels unchanged."""
        buffer = RasterBuffer.blank(2, 2, (1, 2, 3, 4))

        outputs = execute_format_tool(FormatConvertConfig(), [buffer])

        self.assertIs(outputs[0], buffer)


class TestInheritedEncoding(unittest.TestCase):
    """Test the default target_encoding of non-format tools."""

    def test_inherits_mime_and_quality(self):
        """Test inheriting the prior encoding."""
        config = ResizeConfig()

        self.assertEqual(config.target_encoding(_record("image/webp", 0.7)), ("image/webp", 0.7))
        self.assertEqual(config.target_encoding(_record("image/png")), ("image/png", None))

    def test_jpeg_defaults_quality(self):
        """Test JPEG without quality gets 0.9."""
        self.assertEqual(ResizeConfig().target_encoding(_record("image/jpeg")), ("image/jpeg", 0.9))

    def test_unencodable_mime_falls_back_to_png(self):
        """Test GIF and other unwritable types fall back to PNG."""
        self.assertEqual(ColorTransformConfig().target_encoding(_record("image/gif")), ("image/png", None))

    def test_empty_batch_fails_validation(self):
        """Test validation of an empty batch."""
        with self.assertRaises(PreconditionError):
            ResizeConfig().validate(0)


class TestResizeConfig(unittest.TestCase):
    """Test ResizeConfig."""

    def test_percentage_clamped(self):
        """Test percentage clamping to 10-200."""
        self.assertEqual(ResizeConfig(percentage=5).percentage, 10)
        self.assertEqual(ResizeConfig(percentage=900).percentage, 200)

    def test_crop_area_from_dict(self):
        """Test crop areas given as dictionaries."""
        config = ResizeConfig(mode="crop", crop_area={"x": 10, "y": 20, "width": 150, "height": 30})

        self.assertEqual(config.crop_area, CropArea(x=10, y=20, width=100, height=30))

    def test_from_dict_ignores_unknown_keys(self):
        """Test creating config from dictionary."""
        config = ResizeConfig.from_dict({"mode": "width", "width": 320, "bogus": 1})

        self.assertEqual(config.mode, "width")
        self.assertEqual(config.width, 320)

    def test_to_dict_round_trip(self):
        """Test converting config to and from a dictionary."""
        config = ResizeConfig(mode="crop", crop_area=CropArea(x=5, y=5, width=50, height=50))

        restored = ResizeConfig.from_dict(config.to_dict())

        self.assertEqual(restored, config)

    def test_executor(self):
        """Test the resize executor."""
        outputs = execute_resize_tool(ResizeConfig(percentage=50), [RasterBuffer.blank(200, 100)])

        self.assertEqual(outputs[0].size, (100, 50))


class TestColorConfigs(unittest.TestCase):
    """Test ColorTransformConfig and ColorBalanceConfig."""

    def test_invalid_hex_rejected(self):
        """Test malformed colors are rejected."""
        with self.assertRaises(ValueError):
            ColorTransformConfig(source_color="#12")

    def test_tolerance_clamped(self):
        """Test tolerance clamping to 0-100."""
        self.assertEqual(ColorTransformConfig(tolerance=250).tolerance, 100)

    def test_transform_executor_invert(self):
        """Test the invert transform."""
        buffer = RasterBuffer.blank(1, 1, (0, 10, 255, 255))

        execute_color_transform_tool(ColorTransformConfig(transform_type="invert"), [buffer])

        self.assertEqual(buffer.get_pixel(0, 0), (255, 245, 0, 255))

    def test_transform_executor_replace(self):
        """Test the replace transform."""
        buffer = RasterBuffer.blank(1, 1, (255, 0, 0, 255))
        config = ColorTransformConfig(source_color="#ff0000", target_color="#0000ff", tolerance=10)

        execute_color_transform_tool(config, [buffer])

        self.assertEqual(buffer.get_pixel(0, 0), (0, 0, 255, 255))

    def test_balance_clamped(self):
        """Test balance value clamping."""
        config = ColorBalanceConfig(red=300, contrast=-150, opacity=120)

        self.assertEqual(config.red, 100)
        self.assertEqual(config.contrast, -100)
        self.assertEqual(config.opacity, 100)

    def test_balance_identity(self):
        """Test an identity balance leaves pixels alone."""
        config = ColorBalanceConfig()
        buffer = RasterBuffer.blank(2, 2, (10, 20, 30, 40))

        self.assertTrue(config.is_identity)
        execute_color_balance_tool(config, [buffer])
        self.assertEqual(buffer.get_pixel(1, 1), (10, 20, 30, 40))

    def test_balance_executor(self):
        """Test the balance executor applies brightness."""
        buffer = RasterBuffer.blank(1, 1, (10, 20, 30, 255))

        execute_color_balance_tool(ColorBalanceConfig(brightness=10), [buffer])

        self.assertEqual(buffer.get_pixel(0, 0), (20, 30, 40, 255))


class TestMergeConfig(unittest.TestCase):
    """Test MergeConfig."""

    def test_selected_indexes_sorted_and_distinct(self):
        """Test index normalization."""
        self.assertEqual(MergeConfig(selected_indexes=[2, 0, 2]).selected_indexes, [0, 2])

    def test_requires_two_selected(self):
        """Test fewer than two selected images fail validation."""
        with self.assertRaises(PreconditionError):
            MergeConfig(selected_indexes=[0]).validate(3)

    def test_out_of_range_index(self):
        """Test indexes outside the working set fail validation."""
        with self.assertRaises(PreconditionError):
            MergeConfig(selected_indexes=[0, 5]).validate(3)

    def test_always_png(self):
        """Test the merged image is always encoded as PNG."""
        self.assertEqual(MergeConfig().target_encoding(_record("image/jpeg", 0.5)), ("image/png", None))

    def test_background(self):
        """Test parsing the background color."""
        self.assertEqual(MergeConfig(background_color="#102030").get_background(), (16, 32, 48, 255))

    def test_executor_returns_single_buffer(self):
        """Test the merge executor."""
        config = MergeConfig(direction="vertical", spacing=4, selected_indexes=[0, 1])

        outputs = execute_merge_tool(config, [RasterBuffer.blank(10, 10), RasterBuffer.blank(6, 6)])

        self.assertEqual(len(outputs), 1)
        self.assertEqual(outputs[0].size, (10, 20))


class TestWatermarkConfig(unittest.TestCase):
    """Test WatermarkConfig."""

    def test_ranges_clamped(self):
        """Test numeric clamping."""
        config = WatermarkConfig(font_size=1000, opacity=3, rotation=-500, tile_spacing_x=1)

        self.assertEqual(config.font_size, 200)
        self.assertEqual(config.opacity, 1.0)
        self.assertEqual(config.rotation, -180)
        self.assertEqual(config.tile_spacing_x, 50)

    def test_invalid_position(self):
        """Test rejecting unknown positions."""
        with self.assertRaises(ValueError):
            WatermarkConfig(position="nowhere")

    def test_empty_text_fails_validation(self):
        """Test text watermarks need text."""
        with self.assertRaises(PreconditionError):
            WatermarkConfig(text="  ").validate(1)

    def test_missing_image_fails_validation(self):
        """Test image watermarks need an image."""
        with self.assertRaises(PreconditionError):
            WatermarkConfig(content_type="image").validate(1)

    def test_undecodable_image_fails_validation(self):
        """Test image watermarks need a decodable image."""
        with self.assertRaises(PreconditionError):
            WatermarkConfig(content_type="image", watermark_image=b"not an image").validate(1)

    def test_image_spec(self):
        """Test the watermark spec carries the decoded watermark image."""
        config = WatermarkConfig(content_type="image", watermark_image=_png_bytes(8, 4, (0, 0, 0, 255)))

        spec = config.get_watermark_spec()

        self.assertEqual(spec.image.size, (8, 4))
        self.assertIs(config.watermark_raster, config.watermark_raster)

    def test_executor_stamps_image(self):
        """Test the watermark executor."""
        config = WatermarkConfig(
            content_type="image",
            watermark_image=_png_bytes(4, 4, (0, 0, 0, 255)),
            position="top-left",
            offset_x=0,
            offset_y=0,
            opacity=1.0,
        )
        buffer = RasterBuffer.blank(10, 10, (255, 255, 255, 255))

        execute_watermark_tool(config, [buffer])

        self.assertEqual(buffer.get_pixel(0, 0), (0, 0, 0, 255))
        self.assertEqual(buffer.get_pixel(9, 9), (255, 255, 255, 255))


class TestToolConfigFromDict(unittest.TestCase):
    """Test tool_config_from_dict."""

    def test_all_operations_registered(self):
        """Test every operation has a config type."""
        self.assertEqual(
            sorted(TOOL_CONFIG_TYPES),
            ["balance", "color", "format", "merge", "size", "watermark"],
        )

    def test_builds_variant(self):
        """Test building a config from its operation name."""
        config = tool_config_from_dict("color", {"transform_type": "sepia"})

        self.assertIsInstance(config, ColorTransformConfig)
        self.assertEqual(config.transform_type, "sepia")

    def test_unknown_operation(self):
        """Test unknown operations raise ValueError."""
        with self.assertRaises(ValueError):
            tool_config_from_dict("blur", {})


if __name__ == "__main__":
    unittest.main()
