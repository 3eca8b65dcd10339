"""
Batch exporter for Pixel Batch.

Turns processed images into downloadable artifacts: a single encoded file
when one image is exported, otherwise a ZIP archive bundling one file per
image. Files are named '<operation>-<original name without extension>.<ext>'
with the extension taken from the image's MIME type.

Classes:
    ExportArtifact: Encoded file or archive ready to be saved
    ArtifactWriter: Writes artifacts to disk with path validation

Functions:
    export_extension: File extension for a MIME type
    build_export_name: File name for one exported image
    export_image: Export a single processed image
    export_batch: Export a batch as a single file or a ZIP archive
    save_artifact: Write one artifact to disk
"""

import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from PB_Libs.constants import ARCHIVE_SUFFIX, DEFAULT_EXTENSION, EXTENSION_BY_MIME
from PB_Libs.errors import PreconditionError
from PB_Libs.ImageEditingLib.image_editing_ops import sanitize_filename, strip_extension
from PB_Libs.ImageEditingLib.image_models import ImageRecord

logger = logging.getLogger(__name__)

ZIP_MIME_TYPE = "application/zip"


@dataclass(frozen=True)
class ExportArtifact:
    """
    Attributes:
        filename: Suggested file name
        data: Encoded file or archive bytes
        mime_type: MIME type of data
        file_count: Number of images contained
    """

    filename: str
    data: bytes
    mime_type: str
    file_count: int = 1

    @property
    def size(self) -> int:
        return len(self.data)


def export_extension(mime_type: str) -> str:
    """'jpg' for JPEG, 'webp' for WebP, 'png' for everything else."""
    return EXTENSION_BY_MIME.get(mime_type, DEFAULT_EXTENSION)


def build_export_name(operation: str, original_name: str, mime_type: str) -> str:
    """
    Build the file name for an exported image.

    Example:
        >>> build_export_name("size", "photo.jpeg", "image/jpeg")
        'size-photo.jpg'
    """
    return f"{operation}-{strip_extension(original_name)}.{export_extension(mime_type)}"


def _encoded_bytes(record: ImageRecord) -> bytes:
    if record.encoded is not None:
        return record.encoded
    return record.raster.encode(record.mime_type, record.quality)


def export_image(record: ImageRecord, operation: str) -> ExportArtifact:
    """
    Export one processed image.

    Raises:
        PreconditionError: If the image has not been processed
        EncodeError: If the image has no encoded bytes and cannot be encoded
    """
    if not record.is_touched:
        raise PreconditionError(f"Image '{record.name}' has not been processed")
    return ExportArtifact(
        filename=build_export_name(operation, record.name, record.mime_type),
        data=_encoded_bytes(record),
        mime_type=record.mime_type,
    )


def _unique_name(name: str, used: set) -> str:
    if name not in used:
        return name
    stem = strip_extension(name)
    extension = name[len(stem):]
    counter = 1
    while f"{stem}_{counter}{extension}" in used:
        counter += 1
    return f"{stem}_{counter}{extension}"


def export_batch(images: Sequence[ImageRecord], operation: str) -> ExportArtifact:
    """
    Export processed images.

    Untouched images are skipped. One processed image is exported as its
    encoded file; several are bundled into '<operation>-images.zip'.

    Args:
        images: Batch to export
        operation: Operation name used as file name prefix

    Returns:
        ExportArtifact

    Raises:
        PreconditionError: If no image in the batch has been processed
    """
    processed = [image for image in images if image.is_touched]
    if not processed:
        raise PreconditionError("No processed images to export")

    skipped = len(images) - len(processed)
    if skipped:
        logger.debug(f"Export '{operation}' skips {skipped} untouched image(s)")

    if len(processed) == 1:
        return export_image(processed[0], operation)

    buffer = io.BytesIO()
    used_names: set = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for record in processed:
            name = _unique_name(build_export_name(operation, record.name, record.mime_type), used_names)
            used_names.add(name)
            archive.writestr(name, _encoded_bytes(record))

    logger.info(f"Bundled {len(processed)} image(s) into {operation}{ARCHIVE_SUFFIX}")
    return ExportArtifact(
        filename=f"{operation}{ARCHIVE_SUFFIX}",
        data=buffer.getvalue(),
        mime_type=ZIP_MIME_TYPE,
        file_count=len(processed),
    )


class ArtifactWriter:
    """Writes export artifacts to disk, rejecting paths that escape the output directory."""

    def __init__(
        self,
        base_directory: Optional[Union[str, Path]] = None,
        create_directories: bool = True,
        overwrite: bool = False,
    ):
        """
        Args:
            base_directory: Optional absolute directory all outputs must stay within
            create_directories: Create the output directory if it does not exist
            overwrite: Replace existing files

        Raises:
            ValueError: If base_directory is not absolute
        """
        self.create_directories = create_directories
        self.overwrite = overwrite
        self._base_dir: Optional[Path] = None
        if base_directory:
            base_path = Path(base_directory)
            if not base_path.is_absolute():
                raise ValueError(f"base_directory must be an absolute path: {base_directory}")
            self._base_dir = base_path.resolve()

    def resolve_path(self, output_dir: Union[str, Path], filename: str) -> Path:
        """
        Resolve where an artifact will be written.

        The file name is sanitized; the directory may not contain '..' and must
        stay within base_directory when one is set.

        Raises:
            ValueError: If the path is unsafe
        """
        directory = Path(output_dir)
        if any(part == ".." for part in directory.parts):
            raise ValueError(f"Path traversal detected: output directory contains '..': {output_dir}")

        if not directory.is_absolute() and self._base_dir:
            directory = self._base_dir / directory
        resolved = (directory.resolve() / sanitize_filename(filename, fallback="export"))

        if self._base_dir:
            try:
                resolved.relative_to(self._base_dir)
            except ValueError:
                raise ValueError(
                    f"Security: output path '{resolved}' is outside the allowed base directory '{self._base_dir}'"
                )
        return resolved

    def save(self, artifact: ExportArtifact, output_dir: Union[str, Path]) -> Path:
        """
        Write an artifact to disk.

        Returns:
            Path the artifact was written to

        Raises:
            ValueError: If the path is unsafe or the file exists and overwrite is False
            OSError: If the file cannot be written
        """
        output_file = self.resolve_path(output_dir, artifact.filename)

        if self.create_directories:
            output_file.parent.mkdir(parents=True, exist_ok=True)

        if output_file.exists() and not self.overwrite:
            raise ValueError(
                f"Output file already exists: {output_file}. "
                f"Set overwrite=True to replace."
            )

        try:
            output_file.write_bytes(artifact.data)
        except OSError as e:
            raise OSError(f"Failed to save {artifact.filename} to {output_file}: {str(e)}") from e

        logger.info(f"Saved {artifact.filename} ({artifact.size} bytes) to {output_file}")
        return output_file


def save_artifact(
    artifact: ExportArtifact,
    output_dir: Union[str, Path],
    overwrite: bool = False,
    base_directory: Optional[Union[str, Path]] = None,
) -> Path:
    """Write one artifact into a directory. See ArtifactWriter.save()."""
    writer = ArtifactWriter(base_directory=base_directory, overwrite=overwrite)
    return writer.save(artifact, output_dir)
