"""
Processing statistics for Pixel Batch.

Summarizes how the sizes of processed images compare to their originals.
Only touched images count.

Classes:
    ProcessingStats: Summary of a processed batch

Functions:
    summarize_batch: Build ProcessingStats for a batch
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from PB_Libs.ImageEditingLib.image_editing_ops import calculate_compression, format_file_size
from PB_Libs.ImageEditingLib.image_models import ImageRecord


@dataclass(frozen=True)
class ProcessingStats:
    """
    Attributes:
        file_count: Number of processed images
        total_original_size: Sum of original file sizes in bytes
        total_new_size: Sum of re-encoded sizes in bytes
        saved_bytes: total_original_size - total_new_size (negative when files grew)
        compression_percentage: Rounded percentage saved over the whole batch
        average_compression: Mean of per-image compression percentages
    """

    file_count: int = 0
    total_original_size: int = 0
    total_new_size: int = 0
    saved_bytes: int = 0
    compression_percentage: int = 0
    average_compression: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def describe(self) -> str:
        """One-line human readable summary."""
        sign = "-" if self.compression_percentage > 0 else "+" if self.compression_percentage < 0 else ""
        return (
            f"{self.file_count} file(s): {format_file_size(self.total_original_size)} -> "
            f"{format_file_size(self.total_new_size)} ({sign}{abs(self.compression_percentage)}%)"
        )


def summarize_batch(images: Sequence[ImageRecord]) -> ProcessingStats:
    """
    Summarize the processed images of a batch.

    Args:
        images: Batch to summarize; untouched images are ignored

    Returns:
        ProcessingStats (all zeros when nothing has been processed)
    """
    processed = [image for image in images if image.is_touched]
    if not processed:
        return ProcessingStats()

    total_original = sum(image.original_size for image in processed)
    total_new = sum(image.new_size or 0 for image in processed)
    percentage, saved = calculate_compression(total_original, total_new)

    per_image = [
        calculate_compression(image.original_size, image.new_size)[0]
        for image in processed
        if image.new_size
    ]
    average = sum(per_image) / len(per_image) if per_image else 0.0

    return ProcessingStats(
        file_count=len(processed),
        total_original_size=total_original,
        total_new_size=total_new,
        saved_bytes=saved,
        compression_percentage=percentage,
        average_compression=average,
    )
