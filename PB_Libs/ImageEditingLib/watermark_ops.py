"""
Watermark kernel for Pixel Batch.

A watermark stamp is either rendered text (Pillow ImageFont, optional
stroke) or a scaled copy of a watermark image. The stamp has its alpha
multiplied by the opacity, is rotated about its own center and is then
alpha-composited over the target buffer, either once at one of nine anchors
or repeatedly on a tile grid that starts half a cell outside the canvas.

Functions:
    load_font: Resolve a font family to a Pillow font, falling back to the default font
    render_text_stamp: Render watermark text into an RGBA image
    render_image_stamp: Scale a watermark image into an RGBA image
    anchor_center: Center point of a single stamp for a position and offsets
    tile_positions: Center points of tiled stamps
    watermark: Stamp a watermark onto a buffer in place
"""

import logging
import math
from functools import lru_cache
from typing import Any, List, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from PB_Libs.constants import FONT_FILES_BY_FAMILY
from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.image_models import WatermarkPosition, WatermarkSpec
from PB_Libs.ImageEditingLib.pixel_math import round_half_up, to_byte_array
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def load_font(family: str, size: int) -> Any:
    """
    Load a TrueType font for a family name.

    Tries the known file names for the family, then the family string itself
    as a file name, then Pillow's built-in scalable default font.
    """
    candidates = list(FONT_FILES_BY_FAMILY.get(family.strip().lower(), ()))
    candidates.append(family)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.debug(f"No font file found for '{family}', using Pillow default font")
    return ImageFont.load_default(size=size)


def render_text_stamp(spec: WatermarkSpec) -> Any:
    """
    Render the watermark text into a tightly cropped RGBA image.

    Raises:
        PreconditionError: If the text is empty
    """
    if not spec.text or not spec.text.strip():
        raise PreconditionError("Text watermark requires non-empty text")

    font = load_font(spec.font_family, int(spec.font_size))
    stroke_width = max(1, round_half_up(spec.stroke_width / 2)) if spec.stroke else 0

    probe = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    left, top, right, bottom = probe.textbbox((0, 0), spec.text, font=font, stroke_width=stroke_width)
    width = max(1, int(math.ceil(right - left)))
    height = max(1, int(math.ceil(bottom - top)))

    stamp = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(stamp)
    draw.text(
        (-left, -top),
        spec.text,
        font=font,
        fill=tuple(spec.color) + (255,),
        stroke_width=stroke_width,
        stroke_fill=tuple(spec.stroke_color) + (255,) if spec.stroke else None,
    )
    return stamp


def render_image_stamp(spec: WatermarkSpec) -> Any:
    """
    Scale the watermark image by ``image_scale``.

    Raises:
        PreconditionError: If no watermark image is set
    """
    if spec.image is None:
        raise PreconditionError("Image watermark requires a watermark image")

    stamp = spec.image.to_image()
    width = max(1, round_half_up(stamp.width * spec.image_scale))
    height = max(1, round_half_up(stamp.height * spec.image_scale))
    if (width, height) != stamp.size:
        stamp = stamp.resize((width, height), Image.Resampling.LANCZOS)
    return stamp


def _apply_opacity(stamp: Any, opacity: float) -> Any:
    arr = np.array(stamp, dtype=np.uint8)
    arr[..., 3] = to_byte_array(arr[..., 3].astype(np.float64) * max(0.0, min(1.0, float(opacity))))
    return Image.fromarray(arr, "RGBA")


def anchor_center(
    canvas_width: int,
    canvas_height: int,
    stamp_width: float,
    stamp_height: float,
    position: WatermarkPosition,
    offset_x: float,
    offset_y: float,
) -> Tuple[float, float]:
    """
    Center point of a single stamp.

    The stamp's bounding box is placed against the anchor edge, pushed inward
    by the offsets. The center column and center row ignore the offset on
    their axis.

    Raises:
        ValueError: If the position is unknown
    """
    if "-" in position:
        vertical, horizontal = position.split("-", 1)
    elif position == "center":
        vertical, horizontal = "center", "center"
    else:
        raise ValueError(f"Unsupported watermark position: {position}")

    if horizontal == "left":
        x = offset_x
    elif horizontal == "center":
        x = (canvas_width - stamp_width) / 2
    elif horizontal == "right":
        x = canvas_width - stamp_width - offset_x
    else:
        raise ValueError(f"Unsupported watermark position: {position}")

    if vertical == "top":
        y = offset_y
    elif vertical == "center":
        y = (canvas_height - stamp_height) / 2
    elif vertical == "bottom":
        y = canvas_height - stamp_height - offset_y
    else:
        raise ValueError(f"Unsupported watermark position: {position}")

    return x + stamp_width / 2, y + stamp_height / 2


def tile_positions(canvas_width: int, canvas_height: int, spacing_x: int, spacing_y: int) -> List[Tuple[float, float]]:
    """
    Stamp centers for tile mode.

    The grid has ceil(W / sx) + 2 columns and ceil(H / sy) + 2 rows, and cell
    (col, row) sits at (col * sx - sx / 2, row * sy - sy / 2), so the first
    row and column start half a cell outside the canvas.
    """
    spacing_x = max(1, int(spacing_x))
    spacing_y = max(1, int(spacing_y))
    cols = math.ceil(canvas_width / spacing_x) + 2
    rows = math.ceil(canvas_height / spacing_y) + 2
    return [
        (col * spacing_x - spacing_x / 2, row * spacing_y - spacing_y / 2)
        for row in range(rows)
        for col in range(cols)
    ]


def watermark(buffer: RasterBuffer, spec: WatermarkSpec) -> None:
    """
    Stamp a watermark onto a buffer in place.

    Args:
        buffer: Buffer to modify
        spec: Stamp content and placement

    Raises:
        PreconditionError: If the text is empty (text stamps) or the image is missing (image stamps)
        ValueError: If the content type or position is unknown
    """
    if spec.content_type == "text":
        stamp = render_text_stamp(spec)
    elif spec.content_type == "image":
        stamp = render_image_stamp(spec)
    else:
        raise ValueError(f"Unsupported watermark type: {spec.content_type}")

    stamp_width, stamp_height = stamp.size
    stamp = _apply_opacity(stamp, spec.opacity)
    if spec.rotation:
        # Canvas rotation is clockwise for positive angles, Pillow's is counter-clockwise
        stamp = stamp.rotate(-float(spec.rotation), resample=Image.Resampling.BICUBIC, expand=True)

    if spec.tile_mode:
        centers = tile_positions(buffer.width, buffer.height, spec.tile_spacing_x, spec.tile_spacing_y)
        if spec.content_type == "image":
            # Image tiles hang from the grid point by their top-left corner
            centers = [(x + stamp_width / 2, y + stamp_height / 2) for x, y in centers]
    else:
        centers = [
            anchor_center(
                buffer.width,
                buffer.height,
                stamp_width,
                stamp_height,
                spec.position,
                spec.offset_x,
                spec.offset_y,
            )
        ]

    half_w = stamp.width / 2
    half_h = stamp.height / 2
    for cx, cy in centers:
        buffer.composite(stamp, int(math.floor(cx - half_w)), int(math.floor(cy - half_h)))

    logger.debug(f"Placed {len(centers)} {spec.content_type} watermark stamp(s) on {buffer.width}x{buffer.height}")
