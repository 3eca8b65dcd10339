"""
Slideshow video export for Pixel Batch.

Each image becomes one letterboxed frame on a black 1920x1080 canvas. The
frames are written as numbered PNG files to a temporary directory and
encoded to an H.264 MP4 (one frame per second, yuv420p) by the external
ffmpeg executable, which is located once per process.

Classes:
    SlideshowVideoExporter: Frames-in, MP4-bytes-out wrapper around ffmpeg

Functions:
    resolve_ffmpeg: Locate the ffmpeg executable (cached for the process lifetime)
    render_slideshow_frame: Letterbox an image onto a black frame
    slideshow_filename: Default file name for an exported slideshow
"""

import logging
import shutil
import subprocess
import tempfile
import time
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from PB_Libs.constants import (
    FFMPEG_EXECUTABLE,
    VIDEO_CODEC,
    VIDEO_CRF,
    VIDEO_FRAME_HEIGHT,
    VIDEO_FRAME_PATTERN,
    VIDEO_FRAME_RATE,
    VIDEO_FRAME_WIDTH,
    VIDEO_OUTPUT_NAME,
    VIDEO_PIXEL_FORMAT,
    VIDEO_PRESET,
)
from PB_Libs.errors import EncodeError, PreconditionError
from PB_Libs.ImageEditingLib.pixel_math import round_half_up
from PB_Libs.ImageEditingLib.raster_buffer import RasterBuffer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


@lru_cache(maxsize=None)
def resolve_ffmpeg(executable: str = FFMPEG_EXECUTABLE) -> str:
    """
    Locate the ffmpeg executable on PATH.

    The lookup runs once per executable name for the lifetime of the process.

    Raises:
        EncodeError: If the executable cannot be found
    """
    path = shutil.which(executable)
    if path is None:
        raise EncodeError(f"Video encoder '{executable}' not found on PATH")
    logger.debug(f"Using video encoder at {path}")
    return path


def render_slideshow_frame(
    raster: RasterBuffer,
    width: int = VIDEO_FRAME_WIDTH,
    height: int = VIDEO_FRAME_HEIGHT,
) -> RasterBuffer:
    """
    Scale an image to fit a black frame, preserving aspect ratio and centering it.

    Returns:
        New opaque frame buffer of the requested size
    """
    frame = RasterBuffer.blank(width, height, (0, 0, 0, 255))
    scale = min(width / raster.width, height / raster.height)
    scaled_width = max(1, round_half_up(raster.width * scale))
    scaled_height = max(1, round_half_up(raster.height * scale))
    x = round_half_up((width - raster.width * scale) / 2)
    y = round_half_up((height - raster.height * scale) / 2)
    frame.draw_region(raster, dst_rect=(x, y, scaled_width, scaled_height))
    return frame


def slideshow_filename(clock: Callable[[], float] = time.time) -> str:
    return f"slideshow-{int(clock() * 1000)}.mp4"


class SlideshowVideoExporter:
    """
    Encode a sequence of images into an MP4 slideshow.

    Example:
        >>> exporter = SlideshowVideoExporter()
        >>> video_bytes = exporter.export([image.raster for image in images])
    """

    def __init__(
        self,
        executable: str = FFMPEG_EXECUTABLE,
        frame_rate: int = VIDEO_FRAME_RATE,
        codec: str = VIDEO_CODEC,
        pixel_format: str = VIDEO_PIXEL_FORMAT,
        preset: str = VIDEO_PRESET,
        crf: int = VIDEO_CRF,
        frame_width: int = VIDEO_FRAME_WIDTH,
        frame_height: int = VIDEO_FRAME_HEIGHT,
    ):
        self.executable = executable
        self.frame_rate = frame_rate
        self.codec = codec
        self.pixel_format = pixel_format
        self.preset = preset
        self.crf = crf
        self.frame_width = frame_width
        self.frame_height = frame_height

    def build_command(self, executable_path: str) -> List[str]:
        """ffmpeg argument list, run inside the frame directory."""
        return [
            executable_path,
            "-y",
            "-framerate", str(self.frame_rate),
            "-i", VIDEO_FRAME_PATTERN,
            "-c:v", self.codec,
            "-pix_fmt", self.pixel_format,
            "-preset", self.preset,
            "-crf", str(self.crf),
            VIDEO_OUTPUT_NAME,
        ]

    def write_frames(
        self,
        rasters: Sequence[RasterBuffer],
        directory: Path,
        progress: Optional[ProgressCallback] = None,
    ) -> List[Path]:
        """Render and write numbered PNG frames (frame0000.png, ...)."""
        paths = []
        total = len(rasters)
        for index, raster in enumerate(rasters):
            frame = render_slideshow_frame(raster, self.frame_width, self.frame_height)
            path = directory / (VIDEO_FRAME_PATTERN % index)
            path.write_bytes(frame.encode("image/png"))
            paths.append(path)
            _report(progress, 10 + int(index / total * 40))
        return paths

    def export(self, rasters: Sequence[RasterBuffer], progress: Optional[ProgressCallback] = None) -> bytes:
        """
        Encode one frame per image into MP4 bytes.

        Args:
            rasters: Images in slideshow order
            progress: Optional callback receiving a percentage (0-100)

        Returns:
            MP4 file bytes

        Raises:
            PreconditionError: If there are no images
            EncodeError: If ffmpeg is missing or fails
        """
        if not rasters:
            raise PreconditionError("Slideshow export needs at least one image")

        executable_path = resolve_ffmpeg(self.executable)
        _report(progress, 0)

        with tempfile.TemporaryDirectory(prefix="pixel_batch_video_") as tmp:
            work_dir = Path(tmp)
            self.write_frames(rasters, work_dir, progress)
            _report(progress, 50)

            command = self.build_command(executable_path)
            logger.debug(f"Running video encoder: {' '.join(command)}")
            try:
                subprocess.run(command, cwd=work_dir, check=True, capture_output=True)
            except subprocess.CalledProcessError as e:
                stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
                raise EncodeError(f"Video encoding failed with exit code {e.returncode}: {stderr[-500:]}") from e
            except OSError as e:
                raise EncodeError(f"Failed to run video encoder: {str(e)}") from e
            _report(progress, 90)

            output = work_dir / VIDEO_OUTPUT_NAME
            if not output.is_file():
                raise EncodeError("Video encoder produced no output file")
            data = output.read_bytes()

        _report(progress, 100)
        logger.info(f"Encoded slideshow of {len(rasters)} frame(s), {len(data)} bytes")
        return data


def _report(progress: Optional[ProgressCallback], value: int) -> None:
    if progress is not None:
        progress(value)
