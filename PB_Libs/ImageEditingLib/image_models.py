"""
Image editing data models for Pixel Batch.

This module defines core data structures used throughout the batch editor.

Classes:
    ImageRecord: One image of a batch: original bytes plus its processed state
    SkippedImage: An image dropped from a batch run and why
    BatchResult: Ordered images produced by exactly one pipeline run
    CropArea: Crop rectangle in percent of the source dimensions
    ResizeSpec: Resize/crop parameters for the geometry kernel
    ColorAdjustmentSpec: Color balance parameters
    WatermarkSpec: Watermark stamp and placement parameters

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
    RgbColor: A tuple of 3 integers representing RGB color values (0-255)
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Tuple

from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer

RgbaColor = Tuple[int, int, int, int]
RgbColor = Tuple[int, int, int]

ResizeMode = Literal["percentage", "fixed", "width", "height", "crop"]
MergeDirection = Literal["horizontal", "vertical"]
WatermarkPosition = Literal[
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
]


@dataclass
class ImageRecord:
    """
    One image of a batch.

    ``source`` is the original encoded file and never changes. ``raster``,
    ``encoded`` and ``new_size`` are filled in once a tool has processed the
    image; an image without a raster is untouched.
    """

    name: str
    source: bytes
    mime_type: str
    original_size: int
    quality: Optional[float] = None
    raster: Optional[RasterBuffer] = None
    encoded: Optional[bytes] = None
    new_size: Optional[int] = None

    @property
    def is_touched(self) -> bool:
        return self.raster is not None

    @property
    def dimensions(self) -> Optional[Tuple[int, int]]:
        if self.raster is None:
            return None
        return self.raster.size

    def snapshot(self) -> "ImageRecord":
        """Deep copy of the record; the raster is copied, byte strings are shared."""
        raster = self.raster.snapshot() if self.raster is not None else None
        return replace(self, raster=raster)

    def to_dict(self) -> Dict[str, Any]:
        """Summary of the record without pixel or byte payloads."""
        return {
            "name": self.name,
            "mime_type": self.mime_type,
            "original_size": self.original_size,
            "quality": self.quality,
            "dimensions": self.dimensions,
            "new_size": self.new_size,
            "touched": self.is_touched,
        }


@dataclass(frozen=True)
class SkippedImage:
    name: str
    stage: str
    reason: str


@dataclass
class BatchResult:
    operation: str
    images: List[ImageRecord] = field(default_factory=list)
    skipped: List[SkippedImage] = field(default_factory=list)

    @property
    def has_touched(self) -> bool:
        return any(image.is_touched for image in self.images)

    def __len__(self) -> int:
        return len(self.images)


@dataclass(frozen=True)
class CropArea:
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0


@dataclass(frozen=True)
class ResizeSpec:
    mode: ResizeMode = "percentage"
    percentage: float = 100.0
    width: int = 800
    height: int = 600
    maintain_aspect: bool = True
    crop_area: CropArea = CropArea()


@dataclass(frozen=True)
class ColorAdjustmentSpec:
    """Channel deltas and brightness/contrast/saturation in -100..100, opacity in 0..100."""

    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    opacity: float = 100.0


@dataclass(frozen=True)
class WatermarkSpec:
    """
    Watermark stamp and placement.

    Exactly one of ``text`` (content_type 'text') or ``image`` (content_type
    'image', a RasterBuffer) supplies the stamp.
    """

    content_type: Literal["text", "image"] = "text"
    text: str = "Watermark"
    font_size: int = 48
    font_family: str = "Arial"
    color: RgbColor = (255, 255, 255)
    stroke: bool = False
    stroke_color: RgbColor = (0, 0, 0)
    stroke_width: int = 2
    image: Optional[RasterBuffer] = None
    image_scale: float = 1.0
    position: WatermarkPosition = "bottom-right"
    offset_x: int = 20
    offset_y: int = 20
    rotation: float = 0.0
    opacity: float = 0.5
    tile_mode: bool = False
    tile_spacing_x: int = 150
    tile_spacing_y: int = 150
