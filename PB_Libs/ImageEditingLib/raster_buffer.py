"""
Raster buffer for Pixel Batch.

A RasterBuffer exclusively owns an (height, width, 4) uint8 numpy array of
RGBA samples. Its dimensions are fixed at creation; kernels mutate the
samples in place, so any caller that needs the pre-transform pixels must
take an explicit snapshot() first.

Classes:
    RasterBuffer: Owned, mutable RGBA pixel buffer

Type Aliases:
    Rect: (x, y, width, height) rectangle in pixels
"""

import io
import logging
from typing import Any, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from PB_Libs.constants import (
    DEFAULT_ENCODE_QUALITY,
    MAX_QUALITY,
    MIME_JPEG,
    MIN_QUALITY,
    PIL_FORMAT_BY_MIME,
)
from PB_Libs.errors import DecodeError, EncodeError
from PB_Libs.ImageEditingLib.pixel_math import clamp, round_half_up

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]

_RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


class RasterBuffer:
    """
    Mutable RGBA pixel buffer backed by a numpy array.

    Example:
        >>> buffer = RasterBuffer.blank(4, 2, (255, 0, 0, 255))
        >>> buffer.size
        (4, 2)
        >>> copy = buffer.snapshot()
        >>> copy == buffer
        True
    """

    __hash__ = None

    def __init__(self, pixels: np.ndarray):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"pixels must have shape (height, width, 4), got {pixels.shape}")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise ValueError(f"Raster dimensions must be > 0, got {pixels.shape[1]}x{pixels.shape[0]}")
        if pixels.dtype != np.uint8:
            pixels = np.clip(pixels, 0, 255).astype(np.uint8)
        self._pixels = np.ascontiguousarray(pixels)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def blank(cls, width: int, height: int, color: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> "RasterBuffer":
        """Create a buffer filled with a single RGBA color."""
        width = max(1, int(width))
        height = max(1, int(height))
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = np.asarray(color, dtype=np.uint8)
        return cls(pixels)

    @classmethod
    def from_image(cls, image: Any) -> "RasterBuffer":
        """Create a buffer from a PIL Image (converted to RGBA)."""
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8))

    @classmethod
    def load_from_encoded(cls, data: bytes) -> "RasterBuffer":
        """
        Decode encoded image bytes into a new buffer.

        Args:
            data: Encoded image bytes (PNG, JPEG, WebP, GIF, BMP, ...)

        Returns:
            RasterBuffer with the decoded RGBA pixels

        Raises:
            DecodeError: If the bytes are empty, malformed or in an unsupported encoding
        """
        if not data:
            raise DecodeError("Cannot decode empty image data")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return cls.from_image(img)
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Failed to decode image data: {str(e)}") from e

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def pixels(self) -> np.ndarray:
        """The owned sample array; writes go straight into the buffer."""
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def nbytes(self) -> int:
        return int(self._pixels.nbytes)

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def to_image(self) -> Any:
        """Return a PIL RGBA Image holding a copy of the samples."""
        return Image.fromarray(self._pixels.copy(), "RGBA")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(np.array_equal(self._pixels, other._pixels))

    def __repr__(self) -> str:
        return f"RasterBuffer({self.width}x{self.height})"

    # ------------------------------------------------------------------
    # Copies and regions
    # ------------------------------------------------------------------

    def snapshot(self) -> "RasterBuffer":
        """Deep copy of this buffer."""
        return RasterBuffer(self._pixels.copy())

    def copy_region(self, rect: Rect) -> "RasterBuffer":
        """
        Copy a rectangle 1:1 into a new buffer.

        The rectangle is clipped to the buffer bounds; a rectangle that falls
        entirely outside produces a 1x1 transparent buffer.
        """
        x0, y0, x1, y1 = self._clip_rect(rect)
        if x1 <= x0 or y1 <= y0:
            return RasterBuffer.blank(1, 1)
        return RasterBuffer(self._pixels[y0:y1, x0:x1].copy())

    def fill(self, color: Tuple[int, int, int, int]) -> None:
        """Overwrite every pixel with an RGBA color."""
        self._pixels[...] = np.asarray(color, dtype=np.uint8)

    def draw_region(
        self,
        src: "RasterBuffer",
        src_rect: Optional[Rect] = None,
        dst_rect: Optional[Rect] = None,
        resample: str = "lanczos",
    ) -> None:
        """
        Draw a region of another buffer into this one.

        The source region is resampled to the destination size when the two
        differ, then alpha-composited over this buffer. Anything falling
        outside this buffer is clipped.

        Args:
            src: Buffer to read from
            src_rect: (x, y, width, height) in src; defaults to the whole source
            dst_rect: (x, y, width, height) in this buffer; defaults to src_rect's size at (0, 0)
            resample: 'nearest', 'bilinear', 'bicubic' or 'lanczos'

        Raises:
            ValueError: If resample is unknown
        """
        if resample not in _RESAMPLE_FILTERS:
            raise ValueError(f"Unsupported resample filter: {resample}")

        if src_rect is None:
            src_rect = (0, 0, src.width, src.height)
        region = src.copy_region(src_rect)

        if dst_rect is None:
            dst_rect = (0, 0, region.width, region.height)
        dst_x, dst_y, dst_w, dst_h = (int(v) for v in dst_rect)
        dst_w = max(1, dst_w)
        dst_h = max(1, dst_h)

        stamp = region.to_image()
        if stamp.size != (dst_w, dst_h):
            stamp = stamp.resize((dst_w, dst_h), _RESAMPLE_FILTERS[resample])

        self.composite(stamp, dst_x, dst_y)

    def composite(self, image: Any, x: int, y: int) -> None:
        """
        Alpha-composite a PIL RGBA image over this buffer with its top-left at (x, y).

        Negative and overflowing positions are clipped to the buffer.
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")

        stamp_w, stamp_h = image.size
        left = max(0, x)
        top = max(0, y)
        right = min(self.width, x + stamp_w)
        bottom = min(self.height, y + stamp_h)
        if right <= left or bottom <= top:
            return

        base = Image.fromarray(self._pixels, "RGBA")
        base.alpha_composite(image, dest=(left, top), source=(left - x, top - y, right - x, bottom - y))
        self._pixels[...] = np.asarray(base, dtype=np.uint8)

    def _clip_rect(self, rect: Rect) -> Tuple[int, int, int, int]:
        x, y, w, h = (int(v) for v in rect)
        x0 = max(0, min(self.width, x))
        y0 = max(0, min(self.height, y))
        x1 = max(0, min(self.width, x + w))
        y1 = max(0, min(self.height, y + h))
        return x0, y0, x1, y1

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, mime_type: str, quality: Optional[float] = None) -> bytes:
        """
        Encode the buffer to bytes.

        Args:
            mime_type: 'image/png', 'image/jpeg' or 'image/webp'
            quality: 0.1-1.0 for lossy formats (ignored for PNG)

        Returns:
            Encoded image bytes

        Raises:
            EncodeError: If the MIME type is unsupported or encoding fails
        """
        pil_format = PIL_FORMAT_BY_MIME.get(mime_type)
        if pil_format is None:
            raise EncodeError(f"Unsupported encode format: {mime_type}")

        image = Image.fromarray(self._pixels, "RGBA")
        save_kwargs = {"format": pil_format}

        if pil_format in ("JPEG", "WEBP"):
            if quality is None:
                quality = DEFAULT_ENCODE_QUALITY
            quality = clamp(float(quality), MIN_QUALITY, MAX_QUALITY)
            save_kwargs["quality"] = max(1, min(100, round_half_up(quality * 100)))

        # JPEG has no alpha channel
        if mime_type == MIME_JPEG:
            image = image.convert("RGB")

        output = io.BytesIO()
        try:
            image.save(output, **save_kwargs)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to encode image as {mime_type}: {str(e)}") from e

        return output.getvalue()
