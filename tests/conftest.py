"""
Pytest configuration and shared fixtures for Pixel Batch tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import io

import numpy as np
import pytest
from PIL import Image

from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.SessionLib.image_intake import create_image_record
from PB_Libs.SessionLib.session import ImageSession
from PB_Libs.SessionLib.tool_executors import ToolExecutorRegistry, register_default_executors


def encode_image(width, height, color=(255, 0, 0, 255), fmt="PNG"):
    """Encode a solid-color image and return the bytes."""
    image = Image.new("RGBA", (width, height), color)
    if fmt == "JPEG":
        image = image.convert("RGB")
    output = io.BytesIO()
    image.save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def temp_project_dir(tmp_path):
    """
    Provide a temporary directory for output files.

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def png_bytes():
    """Factory fixture returning encoded solid-color PNG bytes."""
    def _make(width=10, height=10, color=(255, 0, 0, 255)):
        return encode_image(width, height, color, "PNG")
    return _make


@pytest.fixture
def jpeg_bytes():
    """Factory fixture returning encoded solid-color JPEG bytes."""
    def _make(width=10, height=10, color=(255, 0, 0, 255)):
        return encode_image(width, height, color, "JPEG")
    return _make


@pytest.fixture
def solid_buffer():
    """Factory fixture returning a solid-color RasterBuffer."""
    def _make(width=4, height=4, color=(255, 0, 0, 255)):
        return RasterBuffer.blank(width, height, color)
    return _make


@pytest.fixture
def gradient_buffer():
    """A 16x8 buffer with distinct colors per pixel, fully opaque."""
    height, width = 8, 16
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = (xs * 16) % 256
    pixels[..., 1] = (ys * 32) % 256
    pixels[..., 2] = ((xs + ys) * 8) % 256
    pixels[..., 3] = 255
    return RasterBuffer(pixels)


@pytest.fixture
def image_records(png_bytes):
    """Two untouched PNG records: 100x50 red and 80x60 blue."""
    return [
        create_image_record("red.png", png_bytes(100, 50, (255, 0, 0, 255)), "image/png"),
        create_image_record("blue.png", png_bytes(80, 60, (0, 0, 255, 255)), "image/png"),
    ]


@pytest.fixture
def registry():
    """A fresh registry with the built-in tools."""
    registry = ToolExecutorRegistry()
    register_default_executors(registry)
    return registry


@pytest.fixture
def session(registry, png_bytes):
    """A session loaded with two PNG images."""
    session = ImageSession(registry=registry)
    session.load_images([
        ("red.png", png_bytes(100, 50, (255, 0, 0, 255)), "image/png"),
        ("blue.png", png_bytes(80, 60, (0, 0, 255, 255)), "image/png"),
    ])
    return session
