"""
Image intake for Pixel Batch.

Turns encoded byte blobs (or files on disk) into ImageRecords. Anything that
is not declared as an image is rejected with a logged reason; decoding is
deferred until a tool first touches the image.

Functions:
    get_supported_image_formats: Encodable formats with MIME type, extension and name
    get_supported_extensions: File extensions accepted by load_image_files
    is_supported_format: Check a file path's extension
    is_image_mime: Check a MIME type is an image type
    guess_mime_type: MIME type from a file name
    probe_dimensions: Read width/height from an encoded header
    create_image_record: Build an ImageRecord from a name, bytes and MIME type
    accept_images: Build records for a batch of (name, bytes, mime) items
    load_image_files: Build records for files on disk
"""

import io
import logging
import mimetypes
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from PB_Libs.constants import (
    DEFAULT_JPEG_QUALITY,
    MIME_GIF,
    MIME_JPEG,
    MIME_PNG,
    MIME_WEBP,
    SUPPORTED_STANDARD_IMAGES,
)
from PB_Libs.ImageEditingLib.image_editing_ops import validate_image_dimensions
from PB_Libs.ImageEditingLib.image_models import ImageRecord, SkippedImage

logger = logging.getLogger(__name__)

# (name, encoded bytes, declared MIME type or None to guess from the name)
IntakeItem = Tuple[str, bytes, Optional[str]]

_MIME_BY_EXTENSION = {
    ".png": MIME_PNG,
    ".jpg": MIME_JPEG,
    ".jpeg": MIME_JPEG,
    ".webp": MIME_WEBP,
    ".gif": MIME_GIF,
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
}

_INTAKE_STAGE = "intake"


def get_supported_image_formats() -> List[Dict[str, str]]:
    """
    Formats offered as conversion targets or common inputs.

    Returns:
        List of dicts with 'mime', 'extension' and 'name' keys
    """
    return [
        {"mime": MIME_PNG, "extension": ".png", "name": "PNG"},
        {"mime": MIME_JPEG, "extension": ".jpg", "name": "JPEG"},
        {"mime": MIME_WEBP, "extension": ".webp", "name": "WebP"},
        {"mime": MIME_GIF, "extension": ".gif", "name": "GIF"},
    ]


def get_supported_extensions() -> List[str]:
    """Sorted file extensions accepted from disk (e.g. ['.bmp', '.gif', ...])."""
    return sorted(SUPPORTED_STANDARD_IMAGES)


def is_supported_format(file_path: Path) -> bool:
    return Path(file_path).suffix.lower() in SUPPORTED_STANDARD_IMAGES


def is_image_mime(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("image/")


def guess_mime_type(filename: str) -> Optional[str]:
    """Guess a MIME type from a file name, None when unknown."""
    suffix = Path(filename).suffix.lower()
    if suffix in _MIME_BY_EXTENSION:
        return _MIME_BY_EXTENSION[suffix]
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type


def probe_dimensions(data: bytes) -> Optional[Tuple[int, int]]:
    """Width and height from the encoded header, None if Pillow cannot identify the data."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"Could not probe image dimensions: {str(e)}")
        return None


def create_image_record(name: str, data: bytes, mime_type: Optional[str] = None) -> ImageRecord:
    """
    Build an untouched ImageRecord.

    Args:
        name: Original file name
        data: Encoded image bytes
        mime_type: Declared MIME type; guessed from the name when None

    Returns:
        ImageRecord; JPEG images get the default quality of 0.9

    Raises:
        ValueError: If the input is empty or not an image type
    """
    if not name:
        raise ValueError("Image name cannot be empty")
    if not data:
        raise ValueError(f"Image data for '{name}' is empty")

    if mime_type is None:
        mime_type = guess_mime_type(name)
    if not is_image_mime(mime_type):
        raise ValueError(f"'{name}' is not an image (type: {mime_type or 'unknown'})")
    mime_type = mime_type.lower()

    dimensions = probe_dimensions(data)
    if dimensions is not None:
        valid, message = validate_image_dimensions(*dimensions)
        if not valid:
            logger.warning(f"'{name}': {message}")

    return ImageRecord(
        name=name,
        source=bytes(data),
        mime_type=mime_type,
        original_size=len(data),
        quality=DEFAULT_JPEG_QUALITY if mime_type == MIME_JPEG else None,
    )


def accept_images(items: Iterable[IntakeItem]) -> Tuple[List[ImageRecord], List[SkippedImage]]:
    """
    Build records for a batch, rejecting non-image inputs.

    Returns:
        (accepted records in input order, rejected items with reasons)
    """
    accepted: List[ImageRecord] = []
    rejected: List[SkippedImage] = []
    for name, data, mime_type in items:
        try:
            accepted.append(create_image_record(name, data, mime_type))
        except ValueError as e:
            logger.warning(f"Rejected '{name}': {str(e)}")
            rejected.append(SkippedImage(name=str(name), stage=_INTAKE_STAGE, reason=str(e)))

    logger.info(f"Accepted {len(accepted)} image(s), rejected {len(rejected)}")
    return accepted, rejected


def load_image_files(paths: Sequence[Union[str, Path]]) -> Tuple[List[ImageRecord], List[SkippedImage]]:
    """
    Read image files from disk.

    Files that are missing, unreadable or not images are rejected with a
    logged reason; the rest are returned in input order.
    """
    items: List[IntakeItem] = []
    rejected: List[SkippedImage] = []

    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            reason = f"Image file not found: {path}"
        elif not is_supported_format(path):
            reason = f"Unsupported file type: {path.suffix or '(none)'}"
        else:
            try:
                items.append((path.name, path.read_bytes(), guess_mime_type(path.name)))
                continue
            except OSError as e:
                reason = f"Failed to read {path}: {str(e)}"
        logger.warning(f"Rejected '{path.name}': {reason}")
        rejected.append(SkippedImage(name=path.name, stage=_INTAKE_STAGE, reason=reason))

    accepted, invalid = accept_images(items)
    return accepted, rejected + invalid
