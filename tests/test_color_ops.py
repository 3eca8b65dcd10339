"""
Unit tests for the color kernels.

Tests cover:
- Hex color parsing and formatting
- Color replace with tolerance
- Grayscale, sepia and invert
- Color balance steps
"""

import numpy as np
import pytest

from PB_Libs.ImageEditingLib.color_ops import (
    color_balance,
    color_distance,
    color_replace,
    contrast_factor,
    grayscale,
    hex_to_rgb,
    invert,
    parse_hex_color,
    rgb_to_hex,
    sepia,
)
from PB_Libs.ImageEditingLib.image_models import ColorAdjustmentSpec
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer


class TestHexColors:
    """Tests for hex color helpers."""

    def test_parses_with_and_without_hash(self):
        """Should accept an optional leading '#'."""
        assert hex_to_rgb("#FF8000") == (255, 128, 0)
        assert hex_to_rgb("ff8000") == (255, 128, 0)

    @pytest.mark.parametrize("value", ["#fff", "#GG0000", "", "#1234567", None])
    def test_malformed_returns_none(self, value):
        """Should return None for malformed colors."""
        assert hex_to_rgb(value) is None

    def test_parse_hex_color_raises(self):
        """Should raise ValueError for malformed colors."""
        with pytest.raises(ValueError):
            parse_hex_color("red")

    def test_rgb_to_hex_lowercase_and_clamped(self):
        """Should format lowercase and clamp out-of-range components."""
        assert rgb_to_hex(255, 0, 171) == "#ff00ab"
        assert rgb_to_hex(300, -5, 16) == "#ff0010"

    def test_color_distance(self):
        """Should return Euclidean RGB distance ignoring alpha."""
        assert color_distance((0, 0, 0, 0), (3, 4, 0, 255)) == pytest.approx(5.0)


class TestColorReplace:
    """Tests for color_replace."""

    def test_exact_match_fully_replaced(self, solid_buffer):
        """Should fully replace pixels equal to the source color."""
        buffer = solid_buffer(2, 2, (255, 0, 0, 200))

        color_replace(buffer, (255, 0, 0), (0, 255, 0), 30)

        assert buffer.get_pixel(0, 0) == (0, 255, 0, 200)

    def test_pixels_outside_tolerance_untouched(self, solid_buffer):
        """Should leave pixels farther than the tolerance alone."""
        buffer = solid_buffer(2, 2, (0, 0, 255, 255))

        color_replace(buffer, (255, 0, 0), (0, 255, 0), 30)

        assert buffer.get_pixel(0, 0) == (0, 0, 255, 255)

    def test_partial_blend_inside_tolerance(self, solid_buffer):
        """Should blend by 1 - d / tolerance."""
        buffer = solid_buffer(1, 1, (245, 0, 0, 255))

        color_replace(buffer, (255, 0, 0), (255, 100, 0), 20)

        # d = 10, factor = 0.5
        assert buffer.get_pixel(0, 0) == (250, 50, 0, 255)

    def test_zero_tolerance_replaces_exact_matches_only(self):
        """Should replace exact matches and skip everything else."""
        pixels = np.array([[[10, 20, 30, 255], [11, 20, 30, 255]]], dtype=np.uint8)
        buffer = RasterBuffer(pixels)

        color_replace(buffer, (10, 20, 30), (0, 0, 0), 0)

        assert buffer.get_pixel(0, 0) == (0, 0, 0, 255)
        assert buffer.get_pixel(1, 0) == (11, 20, 30, 255)


class TestSimpleTransforms:
    """Tests for grayscale, sepia and invert."""

    def test_grayscale_uses_bt601_weights(self, solid_buffer):
        """Should set each channel to rounded 0.299R + 0.587G + 0.114B."""
        buffer = solid_buffer(1, 1, (255, 0, 0, 77))

        grayscale(buffer)

        assert buffer.get_pixel(0, 0) == (76, 76, 76, 77)

    def test_grayscale_is_idempotent(self, gradient_buffer):
        """Applying grayscale twice should equal applying it once."""
        once = gradient_buffer.snapshot()
        grayscale(once)
        twice = once.snapshot()
        grayscale(twice)

        assert once == twice

    def test_invert_is_an_involution(self, gradient_buffer):
        """Inverting twice should restore the original pixels."""
        buffer = gradient_buffer.snapshot()

        invert(buffer)
        assert buffer != gradient_buffer
        invert(buffer)

        assert buffer == gradient_buffer

    def test_invert_keeps_alpha(self, solid_buffer):
        """Should leave alpha untouched."""
        buffer = solid_buffer(1, 1, (0, 100, 255, 42))

        invert(buffer)

        assert buffer.get_pixel(0, 0) == (255, 155, 0, 42)

    def test_sepia_matrix(self, solid_buffer):
        """Should apply the sepia matrix and clamp to 255."""
        buffer = solid_buffer(1, 1, (100, 100, 100, 255))

        sepia(buffer)

        # 100 * (0.393 + 0.769 + 0.189) = 135.1, 100 * 1.203 = 120.3, 100 * 0.937 = 93.7
        assert buffer.get_pixel(0, 0) == (135, 120, 94, 255)

        white = solid_buffer(1, 1, (255, 255, 255, 255))
        sepia(white)
        assert white.get_pixel(0, 0)[0] == 255


class TestColorBalance:
    """Tests for color_balance."""

    def test_channel_deltas_clamped(self, solid_buffer):
        """Should add channel deltas and clamp to [0, 255]."""
        buffer = solid_buffer(1, 1, (250, 5, 100, 255))

        color_balance(buffer, ColorAdjustmentSpec(red=20, green=-20, blue=10))

        assert buffer.get_pixel(0, 0) == (255, 0, 110, 255)

    def test_brightness(self, solid_buffer):
        """Should add brightness to every channel."""
        buffer = solid_buffer(1, 1, (10, 20, 30, 255))

        color_balance(buffer, ColorAdjustmentSpec(brightness=50))

        assert buffer.get_pixel(0, 0) == (60, 70, 80, 255)

    def test_contrast_pivot_is_128(self, solid_buffer):
        """Should leave mid-gray unchanged and push other values away from it."""
        buffer = solid_buffer(1, 1, (128, 100, 200, 255))

        color_balance(buffer, ColorAdjustmentSpec(contrast=50))
        r, g, b, _ = buffer.get_pixel(0, 0)

        assert r == 128
        assert g < 100
        assert b > 200

    def test_contrast_factor(self):
        """Should be 1 at zero contrast."""
        assert contrast_factor(0) == pytest.approx(1.0)

    def test_saturation_ignores_gray(self, solid_buffer):
        """Gray pixels have no hue and should be left alone."""
        buffer = solid_buffer(1, 1, (90, 90, 90, 255))

        color_balance(buffer, ColorAdjustmentSpec(saturation=80))

        assert buffer.get_pixel(0, 0) == (90, 90, 90, 255)

    def test_full_desaturation_produces_gray(self, solid_buffer):
        """Saturation -100 should collapse a color onto its lightness."""
        buffer = solid_buffer(1, 1, (200, 100, 50, 255))

        color_balance(buffer, ColorAdjustmentSpec(saturation=-100))
        r, g, b, _ = buffer.get_pixel(0, 0)

        assert r == g == b == 125

    def test_opacity_scales_alpha(self, solid_buffer):
        """Should scale alpha by opacity / 100."""
        buffer = solid_buffer(1, 1, (1, 2, 3, 200))

        color_balance(buffer, ColorAdjustmentSpec(opacity=50))

        assert buffer.get_pixel(0, 0) == (1, 2, 3, 100)

    def test_identity_leaves_pixels(self, gradient_buffer):
        """A zero adjustment should not change any pixel."""
        buffer = gradient_buffer.snapshot()

        color_balance(buffer, ColorAdjustmentSpec())

        assert buffer == gradient_buffer
