"""
Tool pipeline for Pixel Batch.

A ToolPipeline applies one tool configuration to a batch of images. Each
pipeline object is used for exactly one run and walks through the states

    idle -> loading -> transforming -> encoding -> done | failed

Per-image decode and encode failures drop that image from the result (with
a logged warning and a SkippedImage entry) while its siblings continue.
Only precondition violations, or unexpected errors, fail the whole run.

Classes:
    ToolPipeline: Single-use state machine running one tool over a batch

Functions:
    run_tool: Convenience wrapper creating and running a pipeline
"""

import concurrent.futures
import logging
import time
from dataclasses import replace
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from PB_Libs.constants import (
    MIME_PNG,
    MERGED_NAME_PREFIX,
    STATE_DONE,
    STATE_ENCODING,
    STATE_FAILED,
    STATE_IDLE,
    STATE_LOADING,
    STATE_TRANSFORMING,
)
from PB_Libs.errors import DecodeError, EncodeError
from PB_Libs.ImageEditingLib.image_models import BatchResult, ImageRecord, SkippedImage
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from PB_Libs.SessionLib.tool_executors import ToolExecutorRegistry, get_default_registry

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# (record, raster) pair carried between stages
_Loaded = Tuple[ImageRecord, RasterBuffer]


class ToolPipeline:
    """
    Run one tool configuration over a batch of images.

    Example:
        >>> pipeline = ToolPipeline(ResizeConfig(mode="percentage", percentage=50))
        >>> result = pipeline.run(images)
        >>> pipeline.state
        'done'
    """

    def __init__(
        self,
        config: Any,
        registry: Optional[ToolExecutorRegistry] = None,
        use_threading: bool = False,
        max_workers: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            config: A ToolsLib configuration (FormatConvertConfig, ResizeConfig, ...)
            registry: Executor registry (default: the global registry)
            use_threading: Process images of the batch in a thread pool
            max_workers: Thread pool size (default: None = Python's default)
            clock: Time source for merged image names
        """
        self.config = config
        self.registry = registry if registry is not None else get_default_registry()
        self.use_threading = use_threading
        self.max_workers = max_workers
        self._clock = clock
        self.state = STATE_IDLE
        self.state_history: List[str] = [STATE_IDLE]
        self.skipped: List[SkippedImage] = []

    @property
    def operation(self) -> str:
        return self.config.OPERATION

    def _set_state(self, state: str) -> None:
        logger.debug(f"Pipeline '{self.operation}': {self.state} -> {state}")
        self.state = state
        self.state_history.append(state)

    def _skip(self, record: ImageRecord, stage: str, error: Exception) -> None:
        logger.warning(f"Skipping '{record.name}' during {stage} for '{self.operation}': {str(error)}")
        self.skipped.append(SkippedImage(name=record.name, stage=stage, reason=str(error)))

    def _map(self, func: Callable[[T], R], items: Sequence[T]) -> List[R]:
        """Apply func to every item, in a thread pool when enabled. Output order equals input order."""
        if self.use_threading and len(items) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(pool.map(func, items))
        return [func(item) for item in items]

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _load_one(self, record: ImageRecord) -> Tuple[ImageRecord, Optional[RasterBuffer], Optional[Exception]]:
        if self.config.CONTINUES_FROM_WORKING and record.raster is not None:
            return record, record.raster.snapshot(), None
        try:
            return record, RasterBuffer.load_from_encoded(record.source), None
        except DecodeError as e:
            return record, None, e

    def _load(self, records: Sequence[ImageRecord]) -> List[_Loaded]:
        loaded = []
        for record, raster, error in self._map(self._load_one, records):
            if error is not None:
                self._skip(record, STATE_LOADING, error)
            else:
                loaded.append((record, raster))
        return loaded

    def _transform_one(self, item: _Loaded) -> _Loaded:
        record, raster = item
        outputs = self.registry.execute(self.operation, self.config, [raster])
        return record, outputs[0]

    def _transform(self, loaded: List[_Loaded]) -> List[_Loaded]:
        if self.config.APPENDS_RESULT:
            rasters = [raster for _, raster in loaded]
            outputs = self.registry.execute(self.operation, self.config, rasters)
            return [(self._derived_record(), raster) for raster in outputs]
        return self._map(self._transform_one, loaded)

    def _encode_one(self, item: _Loaded) -> Tuple[ImageRecord, Optional[Exception]]:
        record, raster = item
        mime_type, quality = self.config.target_encoding(record)
        try:
            encoded = raster.encode(mime_type, quality)
        except EncodeError as e:
            return record, e

        processed = replace(
            record,
            mime_type=mime_type,
            quality=quality,
            raster=raster,
            encoded=encoded,
            new_size=len(encoded),
        )
        if not record.source:
            # Derived images (merge output) have no original file of their own
            processed = replace(processed, source=encoded, original_size=len(encoded))
        return processed, None

    def _encode(self, transformed: List[_Loaded]) -> List[ImageRecord]:
        encoded = []
        for record, error in self._map(self._encode_one, transformed):
            if error is not None:
                self._skip(record, STATE_ENCODING, error)
            else:
                encoded.append(record)
        return encoded

    def _derived_record(self) -> ImageRecord:
        direction = getattr(self.config, "direction", "horizontal")
        timestamp = int(self._clock() * 1000)
        return ImageRecord(
            name=f"{MERGED_NAME_PREFIX}-{direction}-{timestamp}.png",
            source=b"",
            mime_type=MIME_PNG,
            original_size=0,
        )

    def _select_inputs(self, images: Sequence[ImageRecord]) -> List[ImageRecord]:
        if self.config.APPENDS_RESULT:
            return [images[index] for index in self.config.selected_indexes]
        return list(images)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, images: Sequence[ImageRecord]) -> BatchResult:
        """
        Run the tool over a batch.

        Args:
            images: Current working set, in order

        Returns:
            BatchResult with the processed images in input order. For tools
            that append (merge) the result is the unchanged working set
            followed by the new image.

        Raises:
            RuntimeError: If this pipeline has already been run
            PreconditionError: If the operation's preconditions are not met
            KeyError: If no executor is registered for the operation
        """
        if self.state != STATE_IDLE:
            raise RuntimeError(f"Pipeline for '{self.operation}' has already run (state: {self.state})")

        try:
            self.config.validate(len(images))
            self.registry.get_executor(self.operation)

            self._set_state(STATE_LOADING)
            loaded = self._load(self._select_inputs(images))

            self._set_state(STATE_TRANSFORMING)
            transformed = self._transform(loaded)

            self._set_state(STATE_ENCODING)
            processed = self._encode(transformed)
        except Exception:
            self._set_state(STATE_FAILED)
            raise

        if self.config.APPENDS_RESULT:
            processed = list(images) + processed

        self._set_state(STATE_DONE)
        logger.info(
            f"Operation '{self.operation}' produced {len(processed)} image(s), skipped {len(self.skipped)}"
        )
        return BatchResult(operation=self.operation, images=processed, skipped=list(self.skipped))


def run_tool(
    config: Any,
    images: Sequence[ImageRecord],
    registry: Optional[ToolExecutorRegistry] = None,
    use_threading: bool = False,
    max_workers: Optional[int] = None,
) -> BatchResult:
    """Create a ToolPipeline for ``config`` and run it over ``images``."""
    pipeline = ToolPipeline(config, registry=registry, use_threading=use_threading, max_workers=max_workers)
    return pipeline.run(images)
