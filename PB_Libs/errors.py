"""
Error types raised by Pixel Batch.

DecodeError and EncodeError are per-image failures: the pipeline logs them,
drops the affected image and continues with the rest of the batch.
PreconditionError aborts a whole operation before any image is processed.
"""


class PixelBatchError(Exception):
    """Base class for Pixel Batch errors."""


class DecodeError(PixelBatchError, OSError):
    """Raised when encoded image bytes cannot be decoded."""


class EncodeError(PixelBatchError, OSError):
    """Raised when a raster cannot be encoded to the requested format."""


class PreconditionError(PixelBatchError, ValueError):
    """Raised when an operation's preconditions are not met (e.g. merge with <2 images)."""
