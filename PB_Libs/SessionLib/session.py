"""
Image session for Pixel Batch.

ImageSession ties the pieces together: it owns the original intake batch,
the current working set and the undo history, runs tools over the working
set, and exports results. Only one tool may run at a time.

Classes:
    ImageSession: Coordinator for one batch editing session
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from PB_Libs.constants import PROCESSED_EXPORT_PREFIX, VIDEO_MIME_TYPE
from PB_Libs.errors import DecodeError, PreconditionError
from PB_Libs.ImageEditingLib.image_models import BatchResult, ImageRecord, SkippedImage
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.SessionLib.batch_exporter import ExportArtifact, export_batch, save_artifact
from PB_Libs.SessionLib.history_store import HistoryEntry, HistoryStore
from PB_Libs.SessionLib.image_intake import IntakeItem, accept_images, load_image_files
from PB_Libs.SessionLib.processing_stats import ProcessingStats, summarize_batch
from PB_Libs.SessionLib.tool_executors import ToolExecutorRegistry
from PB_Libs.SessionLib.tool_pipeline import ToolPipeline
from PB_Libs.SessionLib.video_export import SlideshowVideoExporter, slideshow_filename

logger = logging.getLogger(__name__)


class ImageSession:
    """
    One batch editing session.

    Example:
        >>> session = ImageSession()
        >>> session.load_files(["a.png", "b.jpg"])
        >>> session.apply(ResizeConfig(mode="percentage", percentage=50))
        >>> artifact = session.export("size")
        >>> session.reset_to_original()
    """

    def __init__(
        self,
        registry: Optional[ToolExecutorRegistry] = None,
        use_threading: bool = False,
        max_workers: Optional[int] = None,
        video_exporter: Optional[SlideshowVideoExporter] = None,
    ):
        """
        Args:
            registry: Executor registry passed to every pipeline (default: global registry)
            use_threading: Process the images of a batch in a thread pool
            max_workers: Thread pool size
            video_exporter: Slideshow encoder (default: SlideshowVideoExporter())
        """
        self.registry = registry
        self.use_threading = use_threading
        self.max_workers = max_workers
        self.video_exporter = video_exporter if video_exporter is not None else SlideshowVideoExporter()
        self.history = HistoryStore()
        self.working_set: List[ImageRecord] = []
        self.last_skipped: List[SkippedImage] = []
        self._processing_lock = threading.Lock()

    @property
    def originals(self) -> List[ImageRecord]:
        return self.history.originals

    @property
    def is_processing(self) -> bool:
        return self._processing_lock.locked()

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    def _start_batch(self, accepted: List[ImageRecord]) -> None:
        self.history.set_originals(accepted)
        self.working_set = self.history.originals
        self.last_skipped = []
        logger.info(f"Session loaded {len(accepted)} image(s)")

    def load_images(self, items: Iterable[IntakeItem]) -> List[SkippedImage]:
        """
        Start a new batch from (name, bytes, mime) items, clearing history.

        Returns:
            Rejected items
        """
        accepted, rejected = accept_images(items)
        self._start_batch(accepted)
        return rejected

    def load_files(self, paths: Sequence[Union[str, Path]]) -> List[SkippedImage]:
        """Start a new batch from files on disk, clearing history. Returns rejected files."""
        accepted, rejected = load_image_files(paths)
        self._start_batch(accepted)
        return rejected

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def apply(self, config) -> BatchResult:
        """
        Run a tool over the working set.

        A non-empty result replaces the working set and is recorded in
        history. Images dropped by a failed decode or encode leave the
        working set; reset_to_original() brings them back.

        Args:
            config: A ToolsLib configuration

        Returns:
            BatchResult of the run

        Raises:
            RuntimeError: If another tool is still running
            PreconditionError: If the tool's preconditions are not met
        """
        if not self._processing_lock.acquire(blocking=False):
            raise RuntimeError(f"Cannot run '{config.OPERATION}': another operation is in progress")

        try:
            pipeline = ToolPipeline(
                config,
                registry=self.registry,
                use_threading=self.use_threading,
                max_workers=self.max_workers,
            )
            result = pipeline.run(self.working_set)

            self.last_skipped = list(result.skipped)
            if result.images:
                self.working_set = result.images
                self.history.record(config.OPERATION, config.DESCRIPTION, result)
            else:
                logger.warning(f"Operation '{config.OPERATION}' produced no images; working set unchanged")
        finally:
            self._processing_lock.release()
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def revert_to(self, entry_id: str) -> List[ImageRecord]:
        """
        Make a history entry's images the working set and drop later entries.

        Raises:
            KeyError: If no entry has this id
        """
        self.working_set = self.history.revert_to(entry_id)
        return self.working_set

    def reset_to_original(self) -> List[ImageRecord]:
        """Restore the intake batch and clear history."""
        self.working_set = self.history.reset_to_original()
        return self.working_set

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self.history.entries)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, operation_name: str = PROCESSED_EXPORT_PREFIX) -> ExportArtifact:
        """
        Export the processed images of the working set.

        Raises:
            PreconditionError: If nothing has been processed
        """
        return export_batch(self.working_set, operation_name)

    def export_history_entry(self, entry_id: str) -> ExportArtifact:
        """
        Export the images recorded in a history entry, named after its operation.

        Raises:
            KeyError: If no entry has this id
        """
        entry = self.history.get(entry_id)
        return export_batch(entry.images, entry.operation)

    def save_export(
        self,
        output_dir: Union[str, Path],
        operation_name: str = PROCESSED_EXPORT_PREFIX,
        overwrite: bool = False,
    ) -> Path:
        """Export the working set and write the artifact into output_dir."""
        return save_artifact(self.export(operation_name), output_dir, overwrite=overwrite)

    def stats(self) -> ProcessingStats:
        return summarize_batch(self.working_set)

    def _slideshow_rasters(self) -> List[RasterBuffer]:
        processed = [image.raster for image in self.working_set if image.is_touched]
        if processed:
            return processed

        rasters = []
        for image in self.history.originals:
            try:
                rasters.append(RasterBuffer.load_from_encoded(image.source))
            except DecodeError as e:
                logger.warning(f"Leaving '{image.name}' out of the slideshow: {str(e)}")
        return rasters

    def export_slideshow(self, progress: Optional[Callable[[int], None]] = None) -> ExportArtifact:
        """
        Encode the batch into an MP4 slideshow, one image per second.

        Processed images are used when there are any, otherwise the originals.

        Raises:
            PreconditionError: If there are no images
            EncodeError: If the video cannot be encoded
        """
        rasters = self._slideshow_rasters()
        if not rasters:
            raise PreconditionError("No images to put in a slideshow")
        data = self.video_exporter.export(rasters, progress=progress)
        return ExportArtifact(
            filename=slideshow_filename(),
            data=data,
            mime_type=VIDEO_MIME_TYPE,
            file_count=len(rasters),
        )
