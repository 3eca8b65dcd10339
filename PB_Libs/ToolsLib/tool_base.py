"""
Shared behaviour for Pixel Batch tool configurations.

Every tool configuration is a dataclass carrying four class-level policy
attributes read by the pipeline:

    OPERATION: Operation name ('format', 'size', ...)
    DESCRIPTION: Human-readable history description
    CONTINUES_FROM_WORKING: Start from the working raster when one exists (True)
        or always from the original file bytes (False)
    APPENDS_RESULT: The tool produces one extra image appended to the working
        set instead of replacing images one for one

Classes:
    ToolConfigBase: Mixin with dict conversion, validation and encoding policy

Functions:
    clamp_number: Coerce a value into a numeric range with a fallback default
    require_choice: Validate an enumerated string option
"""

import logging
from dataclasses import asdict
from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple

from PB_Libs.constants import DEFAULT_MIME_TYPE, ENCODABLE_MIME_TYPES, MIME_JPEG, DEFAULT_JPEG_QUALITY
from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.image_models import ImageRecord

logger = logging.getLogger(__name__)


def clamp_number(value: Any, low: float, high: float, default: float) -> float:
    """
    Coerce ``value`` to a float clamped into [low, high].

    Missing or non-numeric values fall back to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric value {value!r}, using default {default}")
        return default
    if number != number:  # NaN
        return default
    return max(low, min(high, number))


def require_choice(value: Any, choices: Sequence[str], label: str) -> str:
    """Return ``value`` if it is one of ``choices``, else raise ValueError."""
    if value not in choices:
        raise ValueError(f"Unsupported {label}: {value!r} (expected one of {', '.join(choices)})")
    return value


class ToolConfigBase:
    """Mixin for tool configuration dataclasses."""

    OPERATION: ClassVar[str] = ""
    DESCRIPTION: ClassVar[str] = ""
    CONTINUES_FROM_WORKING: ClassVar[bool] = True
    APPENDS_RESULT: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if k in cls.__dataclass_fields__}

    def validate(self, image_count: int) -> None:
        """
        Check the operation's preconditions for a working set of ``image_count`` images.

        Raises:
            PreconditionError: If the batch is empty
        """
        if image_count <= 0:
            raise PreconditionError(f"No images loaded for '{self.OPERATION}' operation")

    def target_encoding(self, record: ImageRecord) -> Tuple[str, Optional[float]]:
        """
        MIME type and quality the output of ``record`` is encoded with.

        The default inherits the image's prior encoding. MIME types the encoder
        cannot write (e.g. GIF) fall back to PNG.
        """
        mime_type = record.mime_type
        if mime_type not in ENCODABLE_MIME_TYPES:
            return DEFAULT_MIME_TYPE, None
        quality = record.quality
        if quality is None and mime_type == MIME_JPEG:
            quality = DEFAULT_JPEG_QUALITY
        return mime_type, quality
