"""
Shared file and size helpers for Pixel Batch.

Functions:
    format_file_size: Human readable byte count ('1.5 KB')
    calculate_compression: Saved bytes and rounded percentage between two sizes
    strip_extension: File name without its last extension
    sanitize_filename: Replace characters that are unsafe in file names
    validate_image_dimensions: Check dimensions against the intake limit
"""

import math
from typing import Optional, Tuple

from PB_Libs.constants import FILENAME_REPLACEMENT_CHAR, MAX_IMAGE_DIMENSION, SAFE_FILENAME_CHARS
from PB_Libs.ImageEditingLib.pixel_math import round_half_up

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count for display.

    Args:
        size_bytes: Size in bytes

    Returns:
        A string such as '0 Bytes', '512 Bytes', '1.5 KB' or '2 MB'
    """
    if size_bytes <= 0:
        return "0 Bytes"
    index = min(int(math.floor(math.log(size_bytes, 1024))), len(_SIZE_UNITS) - 1)
    value = round(size_bytes / (1024 ** index), 2)
    return f"{value:g} {_SIZE_UNITS[index]}"


def calculate_compression(original_size: int, new_size: int) -> Tuple[int, int]:
    """
    Compare an original and a new size.

    Returns:
        (percentage, saved): percentage saved rounded half-up, and saved bytes.
        Both are negative when the new file is larger, and (0, 0) when the
        original size is 0.
    """
    if original_size == 0:
        return 0, 0
    saved = original_size - new_size
    return round_half_up(saved / original_size * 100), saved


def strip_extension(filename: str) -> str:
    """Remove the last '.ext' suffix, if any, from a file name."""
    stem, dot, ext = filename.rpartition(".")
    if not dot or not stem or not ext or "/" in ext:
        return filename
    return stem


def sanitize_filename(filename: str, fallback: str = "image") -> str:
    """Keep alphanumerics and safe characters, replacing everything else."""
    safe_name = "".join(
        c if c.isalnum() or c in SAFE_FILENAME_CHARS else FILENAME_REPLACEMENT_CHAR
        for c in filename
    ).strip(FILENAME_REPLACEMENT_CHAR + ".")

    return safe_name or fallback


def validate_image_dimensions(
    width: int, height: int, max_size: int = MAX_IMAGE_DIMENSION
) -> Tuple[bool, Optional[str]]:
    """Return (valid, message); message explains why dimensions exceed max_size."""
    if width > max_size or height > max_size:
        return False, f"Maximum image size is {max_size}x{max_size} pixels, got {width}x{height}"
    return True, None
