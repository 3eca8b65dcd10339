"""
Undo history for Pixel Batch.

The history is a strictly linear log of tool results. Each entry owns deep
copies of the images it records, so later edits to the live working set
never show up in history. Reverting to an entry discards every entry after
it; there is no redo.

Classes:
    HistoryEntry: One recorded tool result (frozen)
    HistoryStore: Linear log of entries plus the original intake batch
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

from PB_Libs.constants import OPERATION_NAMES
from PB_Libs.ImageEditingLib.image_models import BatchResult, ImageRecord

logger = logging.getLogger(__name__)


def _deep_copy(images: Sequence[ImageRecord]) -> List[ImageRecord]:
    return [image.snapshot() for image in images]


@dataclass(frozen=True)
class HistoryEntry:
    """
    One recorded tool result.

    Attributes:
        entry_id: Unique identifier
        operation: Operation name ('format', 'size', 'color', 'balance', 'merge', 'watermark')
        description: Human-readable description
        created_at: Time the entry was recorded
        images: Owned snapshot of the batch; use restore() to get editable copies
    """

    entry_id: str
    operation: str
    description: str
    created_at: datetime
    images: Tuple[ImageRecord, ...]

    def restore(self) -> List[ImageRecord]:
        """Deep copies of the recorded images."""
        return _deep_copy(self.images)

    @property
    def snapshot_bytes(self) -> int:
        """Bytes held by this entry's raster snapshots."""
        return sum(image.raster.nbytes for image in self.images if image.raster is not None)


class HistoryStore:
    """
    Linear undo log.

    Example:
        >>> history = HistoryStore(originals)
        >>> entry = history.record("size", "Resize", result)
        >>> working = history.revert_to(entry.entry_id)
        >>> working = history.reset_to_original()
        >>> len(history)
        0
    """

    def __init__(self, originals: Sequence[ImageRecord] = ()):
        self._originals: List[ImageRecord] = _deep_copy(originals)
        self._entries: List[HistoryEntry] = []

    def set_originals(self, originals: Sequence[ImageRecord]) -> None:
        """Replace the intake batch and clear the log."""
        self._originals = _deep_copy(originals)
        self._entries.clear()
        logger.debug(f"History reset with {len(self._originals)} original image(s)")

    @property
    def originals(self) -> List[ImageRecord]:
        """Deep copies of the intake batch."""
        return _deep_copy(self._originals)

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record(
        self,
        operation: str,
        description: str,
        batch: Union[BatchResult, Sequence[ImageRecord]],
    ) -> Optional[HistoryEntry]:
        """
        Append a snapshot of a batch.

        Batches without any touched image are not recorded.

        Args:
            operation: Operation name
            description: Human-readable description
            batch: BatchResult or list of images to snapshot

        Returns:
            The new entry, or None if nothing was recorded

        Raises:
            ValueError: If the operation name is unknown
        """
        if operation not in OPERATION_NAMES:
            raise ValueError(f"Unknown operation: {operation}")

        images = batch.images if isinstance(batch, BatchResult) else list(batch)
        if not any(image.is_touched for image in images):
            logger.debug(f"Not recording '{operation}': no touched images")
            return None

        entry = HistoryEntry(
            entry_id=uuid.uuid4().hex,
            operation=operation,
            description=str(description),
            created_at=datetime.now(),
            images=tuple(_deep_copy(images)),
        )
        self._entries.append(entry)
        logger.debug(f"Recorded history entry {len(self._entries)}: {operation} ({entry.entry_id})")
        return entry

    def get(self, entry_id: str) -> HistoryEntry:
        """
        Raises:
            KeyError: If no entry has this id
        """
        return self._entries[self.index_of(entry_id)]

    def index_of(self, entry_id: str) -> int:
        """
        Position of an entry in the log.

        Raises:
            KeyError: If no entry has this id
        """
        for index, entry in enumerate(self._entries):
            if entry.entry_id == entry_id:
                return index
        raise KeyError(f"No history entry with id: {entry_id}")

    def revert_to(self, entry_id: str) -> List[ImageRecord]:
        """
        Truncate the log after an entry and return copies of its images.

        Raises:
            KeyError: If no entry has this id
        """
        index = self.index_of(entry_id)
        dropped = len(self._entries) - index - 1
        del self._entries[index + 1:]
        logger.info(f"Reverted to history entry {index + 1} ({self._entries[index].operation}), dropped {dropped}")
        return self._entries[index].restore()

    def reset_to_original(self) -> List[ImageRecord]:
        """Clear the log and return copies of the intake batch."""
        cleared = len(self._entries)
        self._entries.clear()
        logger.info(f"History cleared ({cleared} entries), restored {len(self._originals)} original image(s)")
        return self.originals

    def snapshot_bytes(self) -> int:
        """Total bytes held by raster snapshots across all entries (not capped)."""
        return sum(entry.snapshot_bytes for entry in self._entries)
