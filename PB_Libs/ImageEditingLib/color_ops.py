"""
Color kernels for Pixel Batch.

All kernels work in place on a RasterBuffer's sample array, vectorized with
numpy. Only the RGB channels are touched unless a kernel says otherwise;
results are rounded half-up and clamped to [0, 255] when stored.

Functions:
    color_distance: Euclidean distance between two RGB colors
    hex_to_rgb: Parse '#rrggbb' into an RGB tuple, None when malformed
    parse_hex_color: Parse '#rrggbb', raising ValueError when malformed
    rgb_to_hex: Format an RGB tuple as '#rrggbb'
    color_replace: Blend pixels near a source color toward a target color
    grayscale: Replace RGB with BT.601 luma
    sepia: Apply the standard sepia matrix
    invert: Invert RGB channels
    color_balance: Channel deltas, brightness, contrast, saturation, opacity
"""

import logging
import math
import re
from typing import Optional, Sequence

import numpy as np

from PB_Libs.ImageEditingLib.image_models import ColorAdjustmentSpec, RgbColor
from PB_Libs.ImageEditingLib.pixel_math import to_byte_array
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer

logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

_LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

_SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float64,
)


def color_distance(c1: Sequence[float], c2: Sequence[float]) -> float:
    """
    Euclidean distance between two RGB colors.

    Only the first three components of each color are used.
    """
    return math.sqrt(sum((float(a) - float(b)) ** 2 for a, b in zip(c1[:3], c2[:3])))


def hex_to_rgb(hex_color: str) -> Optional[RgbColor]:
    """
    Parse a '#rrggbb' color string.

    The leading '#' is optional and hex digits are case-insensitive.

    Args:
        hex_color: Color string such as '#FF0000' or 'ff0000'

    Returns:
        (r, g, b) tuple, or None if the string is not a 6-digit hex color
    """
    if not isinstance(hex_color, str):
        return None
    match = _HEX_COLOR_RE.match(hex_color.strip())
    if match is None:
        return None
    return tuple(int(part, 16) for part in match.groups())


def parse_hex_color(hex_color: str) -> RgbColor:
    """Parse a '#rrggbb' color string, raising ValueError if malformed."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return rgb


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format RGB components (clamped to 0-255) as a lowercase '#rrggbb' string."""
    return "#" + "".join(f"{max(0, min(255, int(c))):02x}" for c in (r, g, b))


def color_replace(buffer: RasterBuffer, source: RgbColor, target: RgbColor, tolerance: float) -> None:
    """
    Blend pixels near ``source`` toward ``target``.

    A pixel at distance d <= tolerance from the source color moves toward the
    target by factor 1 - d / tolerance, so an exact match is fully replaced and
    a pixel at the tolerance boundary is left as is. With tolerance 0 only
    exact matches are replaced. Alpha is untouched.
    """
    tolerance = max(0.0, float(tolerance))
    rgb = buffer.pixels[..., :3].astype(np.float64)
    src = np.asarray(source[:3], dtype=np.float64)
    dst = np.asarray(target[:3], dtype=np.float64)

    distance = np.sqrt(np.sum((rgb - src) ** 2, axis=-1))
    mask = distance <= tolerance
    if not np.any(mask):
        return

    if tolerance == 0:
        factor = np.ones_like(distance)
    else:
        factor = 1.0 - distance / tolerance

    blended = rgb + (dst - rgb) * factor[..., np.newaxis]
    buffer.pixels[..., :3][mask] = to_byte_array(blended[mask])
    logger.debug(f"Color replace touched {int(np.count_nonzero(mask))} pixels")


def grayscale(buffer: RasterBuffer) -> None:
    """Replace RGB with the rounded BT.601 luma of each pixel."""
    rgb = buffer.pixels[..., :3].astype(np.float64)
    gray = to_byte_array(rgb @ _LUMA_WEIGHTS)
    buffer.pixels[..., :3] = gray[..., np.newaxis]


def sepia(buffer: RasterBuffer) -> None:
    """Apply the standard sepia matrix, clamping each channel to 255."""
    rgb = buffer.pixels[..., :3].astype(np.float64)
    buffer.pixels[..., :3] = to_byte_array(rgb @ _SEPIA_MATRIX.T)


def invert(buffer: RasterBuffer) -> None:
    """Invert the RGB channels (255 - c); alpha is untouched."""
    buffer.pixels[..., :3] = 255 - buffer.pixels[..., :3]


def contrast_factor(contrast: float) -> float:
    """Standard contrast factor 259(c + 255) / (255(259 - c))."""
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def color_balance(buffer: RasterBuffer, spec: ColorAdjustmentSpec) -> None:
    """
    Apply a color adjustment in place.

    Steps run in a fixed order, each clamped to [0, 255]:

    1. Per-channel deltas (red, green, blue)
    2. Brightness, when non-zero
    3. Contrast around 128, when non-zero
    4. HSL saturation shift, when non-zero, for pixels that are not gray
    5. Alpha scaled by opacity / 100, when opacity < 100

    RGB values are rounded once, on store.

    Args:
        buffer: Buffer to modify
        spec: Adjustment values
    """
    pixels = buffer.pixels
    rgb = pixels[..., :3].astype(np.float64)

    deltas = np.array([spec.red, spec.green, spec.blue], dtype=np.float64)
    rgb = np.clip(rgb + deltas, 0.0, 255.0)

    if spec.brightness != 0:
        rgb = np.clip(rgb + float(spec.brightness), 0.0, 255.0)

    if spec.contrast != 0:
        factor = contrast_factor(float(spec.contrast))
        rgb = np.clip(factor * (rgb - 128.0) + 128.0, 0.0, 255.0)

    if spec.saturation != 0:
        rgb = _shift_saturation(rgb, float(spec.saturation))

    pixels[..., :3] = to_byte_array(rgb)

    if spec.opacity < 100:
        alpha = pixels[..., 3].astype(np.float64) * max(0.0, float(spec.opacity)) / 100.0
        pixels[..., 3] = to_byte_array(alpha)


def _shift_saturation(rgb: np.ndarray, saturation: float) -> np.ndarray:
    high = rgb.max(axis=-1) / 255.0
    low = rgb.min(axis=-1) / 255.0
    diff = high - low
    total = high + low
    lightness = total / 2.0

    chromatic = diff != 0
    if not np.any(chromatic):
        return rgb

    with np.errstate(divide="ignore", invalid="ignore"):
        current = np.where(lightness < 0.5, diff / total, diff / (2.0 - total))
        target = np.clip(current + saturation / 100.0, 0.0, 1.0)
        ratio = np.where(current == 0, 0.0, target / current)

    shifted = (lightness[..., np.newaxis] + (rgb / 255.0 - lightness[..., np.newaxis]) * ratio[..., np.newaxis]) * 255.0
    shifted = np.clip(shifted, 0.0, 255.0)
    return np.where(chromatic[..., np.newaxis], shifted, rgb)
