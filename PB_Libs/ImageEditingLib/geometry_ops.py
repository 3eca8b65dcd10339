"""
Geometry kernels for Pixel Batch: resize, crop and merge.

Unlike the color kernels these produce new buffers, because the output
dimensions differ from the input.

Functions:
    compute_target_size: Output dimensions for a resize spec
    crop_rect: Pixel rectangle for a percent crop area
    resize: Resize or crop a buffer into a new buffer
    merge_canvas_size: Output dimensions for a merge
    merge: Concatenate buffers onto a background canvas
"""

import logging
from typing import List, Sequence, Tuple

from PIL import Image

from PB_Libs.constants import MIN_MERGE_IMAGES
from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.image_models import CropArea, MergeDirection, ResizeSpec, RgbaColor
from PB_Libs.ImageEditingLib.pixel_math import round_half_up
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer, Rect

logger = logging.getLogger(__name__)


def compute_target_size(width: int, height: int, spec: ResizeSpec) -> Tuple[int, int]:
    """
    Compute output dimensions for a resize.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        spec: Resize parameters

    Returns:
        (new_width, new_height), each at least 1

    Raises:
        ValueError: If the mode is unknown
    """
    new_width, new_height = width, height

    if spec.mode == "percentage":
        new_width = round_half_up(width * spec.percentage / 100)
        new_height = round_half_up(height * spec.percentage / 100)

    elif spec.mode == "fixed":
        new_width, new_height = int(spec.width), int(spec.height)
        if spec.maintain_aspect:
            aspect = width / height
            # Shrink whichever dimension would overflow the requested box
            if spec.width / spec.height > aspect:
                new_width = round_half_up(spec.height * aspect)
            else:
                new_height = round_half_up(spec.width / aspect)

    elif spec.mode == "width":
        new_width = int(spec.width)
        if spec.maintain_aspect:
            new_height = round_half_up(height * (spec.width / width))

    elif spec.mode == "height":
        new_height = int(spec.height)
        if spec.maintain_aspect:
            new_width = round_half_up(width * (spec.height / height))

    elif spec.mode == "crop":
        _, _, new_width, new_height = crop_rect(width, height, spec.crop_area)

    else:
        raise ValueError(f"Unsupported resize mode: {spec.mode}")

    return max(1, new_width), max(1, new_height)


def crop_rect(width: int, height: int, area: CropArea) -> Rect:
    """Convert a percent crop area into a pixel rectangle (x, y, w, h)."""
    x = round_half_up(width * area.x / 100)
    y = round_half_up(height * area.y / 100)
    crop_width = max(1, round_half_up(width * area.width / 100))
    crop_height = max(1, round_half_up(height * area.height / 100))
    return x, y, crop_width, crop_height


def resize(buffer: RasterBuffer, spec: ResizeSpec) -> RasterBuffer:
    """
    Resize or crop a buffer.

    Crop copies the selected rectangle 1:1 into a buffer of the crop size;
    any part of the rectangle past the source edge stays transparent. Every
    other mode resamples the whole buffer with Lanczos filtering.

    Args:
        buffer: Source buffer (left unchanged)
        spec: Resize parameters

    Returns:
        New buffer with the target dimensions
    """
    if spec.mode == "crop":
        x, y, crop_width, crop_height = crop_rect(buffer.width, buffer.height, spec.crop_area)
        logger.debug(f"Cropping {buffer.width}x{buffer.height} to {crop_width}x{crop_height} at ({x}, {y})")
        cropped = RasterBuffer.blank(crop_width, crop_height)
        region = buffer.copy_region((x, y, crop_width, crop_height))
        if x < buffer.width and y < buffer.height:
            cropped.pixels[: region.height, : region.width] = region.pixels
        return cropped

    target = compute_target_size(buffer.width, buffer.height, spec)
    if target == buffer.size:
        return buffer.snapshot()

    logger.debug(f"Resizing {buffer.width}x{buffer.height} to {target[0]}x{target[1]}")
    resized = buffer.to_image().resize(target, Image.Resampling.LANCZOS)
    return RasterBuffer.from_image(resized)


def merge_canvas_size(sizes: Sequence[Tuple[int, int]], direction: MergeDirection, spacing: int) -> Tuple[int, int]:
    """Output dimensions for merging images of the given sizes."""
    max_width = max(w for w, _ in sizes)
    max_height = max(h for _, h in sizes)
    gaps = spacing * (len(sizes) - 1)
    if direction == "horizontal":
        return sum(w for w, _ in sizes) + gaps, max_height
    if direction == "vertical":
        return max_width, sum(h for _, h in sizes) + gaps
    raise ValueError(f"Unsupported merge direction: {direction}")


def merge(
    buffers: Sequence[RasterBuffer],
    direction: MergeDirection,
    spacing: int,
    background: RgbaColor,
) -> RasterBuffer:
    """
    Concatenate buffers onto a new canvas.

    The canvas is filled with the background color first. Images are placed
    in order along the merge axis, ``spacing`` pixels apart, and centered on
    the cross axis (offsets rounded down).

    Args:
        buffers: Images to merge, in placement order
        direction: 'horizontal' or 'vertical'
        spacing: Gap between neighbouring images in pixels
        background: RGBA fill for the canvas

    Returns:
        New merged buffer

    Raises:
        PreconditionError: If fewer than 2 buffers are given
    """
    if len(buffers) < MIN_MERGE_IMAGES:
        raise PreconditionError(f"Merge needs at least {MIN_MERGE_IMAGES} images, got {len(buffers)}")

    spacing = max(0, int(spacing))
    sizes = [b.size for b in buffers]
    canvas_width, canvas_height = merge_canvas_size(sizes, direction, spacing)
    canvas = RasterBuffer.blank(canvas_width, canvas_height, background)

    for buffer, (x, y) in zip(buffers, merged_placements(sizes, direction, spacing)):
        canvas.draw_region(buffer, dst_rect=(x, y, buffer.width, buffer.height))

    logger.debug(f"Merged {len(buffers)} images into {canvas_width}x{canvas_height} ({direction})")
    return canvas


def merged_placements(
    sizes: Sequence[Tuple[int, int]], direction: MergeDirection, spacing: int
) -> List[Tuple[int, int]]:
    """Top-left corner of each image on the merge canvas."""
    canvas_width, canvas_height = merge_canvas_size(sizes, direction, spacing)
    placements = []
    cursor = 0
    for width, height in sizes:
        if direction == "horizontal":
            placements.append((cursor, (canvas_height - height) // 2))
            cursor += width + spacing
        else:
            placements.append(((canvas_width - width) // 2, cursor))
            cursor += height + spacing
    return placements
