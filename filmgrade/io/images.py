"""
Image acquisition for FilmGrade

Triages input files by format and decodes them into RGBA8 pixel buffers.
Standard formats and TIFF go through Pillow, camera RAW files through rawpy.
"""

import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
import rawpy
from PIL import Image

from ..exceptions import UnsupportedFormatError
from ..grading.models import PixelBuffer

logger = logging.getLogger(__name__)

STANDARD_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp', 'image/bmp'}
HEIC_TYPES = {'image/heic', 'image/heif'}
HEIC_EXTENSIONS = {'.heic', '.heif'}
RAW_EXTENSIONS = {'.cr2', '.nef', '.arw', '.dng', '.raf', '.orf', '.rw2', '.pef', '.srw'}
TIFF_EXTENSIONS = {'.tif', '.tiff'}


@dataclass(frozen=True)
class FileInfo:
    """Result of format triage for an input file"""
    is_supported: bool
    type: str  # standard, heic, raw, tiff, unsupported
    needs_conversion: bool
    message: Optional[str] = None


def _guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return (mime_type or '').lower()


def get_file_info(path: Union[str, Path], mime_type: Optional[str] = None) -> FileInfo:
    """
    Classify an input file by MIME type and extension.

    Args:
        path: File path (only the name is inspected)
        mime_type: MIME type reported by the caller, guessed from the name if omitted
    """
    path = Path(path)
    suffix = path.suffix.lower()
    mime_type = (mime_type or _guess_mime_type(path)).lower()

    if mime_type in STANDARD_TYPES:
        return FileInfo(is_supported=True, type='standard', needs_conversion=False)

    if mime_type in HEIC_TYPES or suffix in HEIC_EXTENSIONS:
        return FileInfo(
            is_supported=True,
            type='heic',
            needs_conversion=True,
            message='HEIC files are converted before grading'
        )

    if suffix in RAW_EXTENSIONS:
        return FileInfo(
            is_supported=True,
            type='raw',
            needs_conversion=True,
            message='RAW files are demosaiced before grading'
        )

    if mime_type == 'image/tiff' or suffix in TIFF_EXTENSIONS:
        return FileInfo(
            is_supported=True,
            type='tiff',
            needs_conversion=False,
            message='TIFF files may take longer to process'
        )

    return FileInfo(
        is_supported=False,
        type='unsupported',
        needs_conversion=True,
        message='Unsupported file format'
    )


def image_to_pixel_buffer(image: Image.Image) -> PixelBuffer:
    """Convert a Pillow image to an RGBA8 pixel buffer"""
    rgba = image.convert('RGBA')
    data = np.asarray(rgba, dtype=np.uint8).copy()
    return PixelBuffer(width=rgba.width, height=rgba.height, data=data)


def pixel_buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    """Convert an RGBA8 pixel buffer to a Pillow image"""
    return Image.fromarray(buffer.data)


def _load_raw(path: Path) -> PixelBuffer:
    try:
        with rawpy.imread(str(path)) as raw:
            rgb = raw.postprocess(use_camera_wb=True, output_bps=8, no_auto_bright=False)
    except (rawpy.LibRawError, OSError) as e:
        raise UnsupportedFormatError(f"Failed to decode RAW file {path.name}: {e}", 'raw') from e

    height, width = rgb.shape[:2]
    data = np.empty((height, width, 4), dtype=np.uint8)
    data[..., :3] = rgb
    data[..., 3] = 255
    return PixelBuffer(width=width, height=height, data=data)


def load_pixel_buffer(path: Union[str, Path], mime_type: Optional[str] = None) -> PixelBuffer:
    """
    Decode an image file into an RGBA8 pixel buffer.

    Raises:
        UnsupportedFormatError: if the format is not supported or cannot be decoded
    """
    path = Path(path)
    info = get_file_info(path, mime_type)

    if not info.is_supported:
        raise UnsupportedFormatError(
            f"File format of {path.name} is not supported. Use JPG, PNG, TIFF or RAW.",
            info.type
        )

    if info.type == 'raw':
        buffer = _load_raw(path)
    else:
        try:
            with Image.open(path) as image:
                image.load()
                buffer = image_to_pixel_buffer(image)
        except OSError as e:
            # UnidentifiedImageError for unknown content, plain OSError for truncated data
            if info.type == 'heic':
                message = f"Could not decode HEIC file {path.name}. Convert it to JPG first."
            else:
                message = f"Could not decode {path.name}. The file may be corrupt ({e})."
            raise UnsupportedFormatError(message, info.type) from e

    logger.debug(f"Loaded {path.name} ({info.type}) as {buffer.width}x{buffer.height}")
    return buffer


def encode_jpeg(buffer: PixelBuffer, quality: int = 90) -> bytes:
    """Encode a pixel buffer as JPEG; alpha is dropped"""
    output = io.BytesIO()
    pixel_buffer_to_image(buffer).convert('RGB').save(output, format='JPEG', quality=quality)
    return output.getvalue()


def save_pixel_buffer(buffer: PixelBuffer, path: Union[str, Path], quality: int = 90) -> Path:
    """
    Write a pixel buffer to disk, choosing the format from the extension.

    JPEG output drops alpha; PNG and TIFF keep it.
    """
    path = Path(path)
    image = pixel_buffer_to_image(buffer)
    if path.suffix.lower() in ('.jpg', '.jpeg'):
        image.convert('RGB').save(path, format='JPEG', quality=quality)
    else:
        image.save(path)
    logger.info(f"Saved {buffer.width}x{buffer.height} image to {path}")
    return path
