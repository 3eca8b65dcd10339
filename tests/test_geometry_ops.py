"""
Unit tests for the geometry kernels (resize, crop, merge).
"""

import numpy as np
import pytest

from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.geometry_ops import (
    compute_target_size,
    crop_rect,
    merge,
    merge_canvas_size,
    merged_placements,
    resize,
)
from PB_Libs.ImageEditingLib.image_models import CropArea, ResizeSpec
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer


class TestComputeTargetSize:
    """Tests for compute_target_size."""

    def test_percentage(self):
        """Should scale both dimensions by the percentage."""
        assert compute_target_size(100, 50, ResizeSpec(mode="percentage", percentage=50)) == (50, 25)

    def test_percentage_rounds_half_up(self):
        """Should round halves up."""
        assert compute_target_size(5, 3, ResizeSpec(mode="percentage", percentage=50)) == (3, 2)

    def test_fixed_without_aspect(self):
        """Should use the requested box as is."""
        spec = ResizeSpec(mode="fixed", width=30, height=40, maintain_aspect=False)
        assert compute_target_size(100, 50, spec) == (30, 40)

    def test_fixed_with_aspect_fits_inside_box(self):
        """Should shrink the overflowing dimension to keep the aspect ratio."""
        wide_box = ResizeSpec(mode="fixed", width=400, height=100, maintain_aspect=True)
        tall_box = ResizeSpec(mode="fixed", width=100, height=400, maintain_aspect=True)

        assert compute_target_size(200, 100, wide_box) == (200, 100)
        assert compute_target_size(200, 100, tall_box) == (100, 50)

    def test_width_mode(self):
        """Should set the width and derive the height."""
        spec = ResizeSpec(mode="width", width=50, maintain_aspect=True)
        assert compute_target_size(200, 100, spec) == (50, 25)

    def test_height_mode_without_aspect(self):
        """Should change only the height when aspect is not kept."""
        spec = ResizeSpec(mode="height", height=10, maintain_aspect=False)
        assert compute_target_size(200, 100, spec) == (200, 10)

    def test_never_below_one_pixel(self):
        """Should clamp results to at least 1x1."""
        assert compute_target_size(1, 1, ResizeSpec(mode="percentage", percentage=10)) == (1, 1)

    def test_unknown_mode(self):
        """Should raise ValueError for unknown modes."""
        with pytest.raises(ValueError):
            compute_target_size(10, 10, ResizeSpec(mode="stretch"))


class TestResize:
    """Tests for resize and crop."""

    def test_resize_half(self, solid_buffer):
        """A 100x50 image at 50% should become 50x25."""
        result = resize(solid_buffer(100, 50), ResizeSpec(mode="percentage", percentage=50))

        assert result.size == (50, 25)

    def test_resize_leaves_source(self, solid_buffer):
        """Should return a new buffer and leave the source unchanged."""
        source = solid_buffer(20, 20)

        result = resize(source, ResizeSpec(mode="percentage", percentage=200))

        assert source.size == (20, 20)
        assert result.size == (40, 40)

    def test_same_size_returns_copy(self, gradient_buffer):
        """Should return an identical but independent buffer."""
        result = resize(gradient_buffer, ResizeSpec(mode="percentage", percentage=100))

        assert result == gradient_buffer
        assert result is not gradient_buffer

    def test_crop_rect_conversion(self):
        """Should convert percentages to pixels."""
        area = CropArea(x=25, y=25, width=50, height=50)
        assert crop_rect(400, 200, area) == (100, 50, 200, 100)

    def test_crop_copies_region(self):
        """A 400x200 image cropped to the middle half should be 200x100 from (100, 50)."""
        pixels = np.zeros((200, 400, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        pixels[50, 100] = (1, 2, 3, 255)
        pixels[149, 299] = (4, 5, 6, 255)
        source = RasterBuffer(pixels)

        result = resize(source, ResizeSpec(mode="crop", crop_area=CropArea(x=25, y=25, width=50, height=50)))

        assert result.size == (200, 100)
        assert result.get_pixel(0, 0) == (1, 2, 3, 255)
        assert result.get_pixel(199, 99) == (4, 5, 6, 255)

    def test_crop_past_edge_keeps_crop_size(self, solid_buffer):
        """A crop running past the right edge should keep its size with a transparent overflow."""
        source = solid_buffer(100, 100, (255, 0, 0, 255))
        spec = ResizeSpec(mode="crop", crop_area=CropArea(x=80, y=0, width=50, height=50))

        result = resize(source, spec)

        assert result.size == compute_target_size(100, 100, spec) == (50, 50)
        assert result.get_pixel(19, 10) == (255, 0, 0, 255)
        assert result.get_pixel(20, 10) == (0, 0, 0, 0)
        assert result.get_pixel(49, 49) == (0, 0, 0, 0)


class TestMerge:
    """Tests for merge."""

    def test_canvas_size(self):
        """Should sum along the merge axis and take the max across it."""
        assert merge_canvas_size([(100, 50), (80, 60)], "horizontal", 10) == (190, 60)
        assert merge_canvas_size([(100, 50), (80, 60)], "vertical", 10) == (100, 120)

    def test_placements_center_cross_axis(self):
        """Should center each image on the cross axis, rounding down."""
        assert merged_placements([(100, 50), (80, 60)], "horizontal", 10) == [(0, 5), (110, 0)]
        assert merged_placements([(100, 50), (81, 60)], "vertical", 0) == [(0, 0), (9, 50)]

    def test_horizontal_merge_with_background_margins(self, solid_buffer):
        """A 100x50 and 80x60 image merged with 10px spacing give 190x60 with 5px margins."""
        red = solid_buffer(100, 50, (255, 0, 0, 255))
        blue = solid_buffer(80, 60, (0, 0, 255, 255))

        result = merge([red, blue], "horizontal", 10, (255, 255, 255, 255))

        assert result.size == (190, 60)
        assert result.get_pixel(50, 2) == (255, 255, 255, 255)
        assert result.get_pixel(50, 5) == (255, 0, 0, 255)
        assert result.get_pixel(50, 54) == (255, 0, 0, 255)
        assert result.get_pixel(50, 57) == (255, 255, 255, 255)
        assert result.get_pixel(105, 30) == (255, 255, 255, 255)
        assert result.get_pixel(110, 0) == (0, 0, 255, 255)

    def test_merge_requires_two_buffers(self, solid_buffer):
        """Should raise PreconditionError for a single buffer."""
        with pytest.raises(PreconditionError):
            merge([solid_buffer()], "horizontal", 0, (0, 0, 0, 255))

    def test_unknown_direction(self, solid_buffer):
        """Should raise ValueError for unknown directions."""
        with pytest.raises(ValueError):
            merge([solid_buffer(), solid_buffer()], "diagonal", 0, (0, 0, 0, 255))
