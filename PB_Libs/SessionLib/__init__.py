"""
SessionLib - Batch processing, history and export

This module runs tools over batches of images, keeps the undo history and
turns results into downloadable files.
"""

from PB_Libs.SessionLib.tool_executors import ToolExecutorRegistry, get_default_registry
from PB_Libs.SessionLib.tool_pipeline import ToolPipeline, run_tool
from PB_Libs.SessionLib.history_store import HistoryEntry, HistoryStore
from PB_Libs.SessionLib.image_intake import accept_images, create_image_record, load_image_files
from PB_Libs.SessionLib.batch_exporter import (
    ArtifactWriter,
    ExportArtifact,
    export_batch,
    export_image,
    save_artifact,
)
from PB_Libs.SessionLib.processing_stats import ProcessingStats, summarize_batch
from PB_Libs.SessionLib.video_export import SlideshowVideoExporter, render_slideshow_frame
from PB_Libs.SessionLib.session import ImageSession

__all__ = [
    "ToolExecutorRegistry",
    "get_default_registry",
    "ToolPipeline",
    "run_tool",
    "HistoryEntry",
    "HistoryStore",
    "accept_images",
    "create_image_record",
    "load_image_files",
    "ArtifactWriter",
    "ExportArtifact",
    "export_batch",
    "export_image",
    "save_artifact",
    "ProcessingStats",
    "summarize_batch",
    "SlideshowVideoExporter",
    "render_slideshow_frame",
    "ImageSession",
]
