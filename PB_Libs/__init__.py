"""
PB_Libs - Pixel Batch Library Modules

This package contains core functionality for the Pixel Batch editor,
organized into specialized sub-packages:

- ImageEditingLib: Raster buffers, data models and per-pixel kernels
- ToolsLib: Tool configurations and executors (format, size, color, balance, merge, watermark)
- SessionLib: Tool pipeline, undo history, intake, export and the editing session
"""

__version__ = "0.1.0"
