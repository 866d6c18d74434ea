"""
Preview proxy generation

Interactive previews are graded on a downscaled copy of the source image.
"""

import logging

from PIL import Image

from ..grading.models import PixelBuffer
from ..io.images import image_to_pixel_buffer, pixel_buffer_to_image

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_WIDTH = 1280


def preview_dimensions(width: int, height: int, max_width: int = DEFAULT_PREVIEW_WIDTH):
    """
    Compute preview dimensions that fit ``max_width``, keeping aspect ratio.
    """
    if width <= max_width:
        return width, height
    ratio = max_width / width
    return max_width, max(1, int(height * ratio))


def make_preview_buffer(buffer: PixelBuffer,
                        max_width: int = DEFAULT_PREVIEW_WIDTH) -> PixelBuffer:
    """
    Downscale a buffer for interactive preview.

    Buffers already narrower than ``max_width`` are returned as-is.
    """
    width, height = preview_dimensions(buffer.width, buffer.height, max_width)
    if (width, height) == buffer.dimensions:
        return buffer

    image = pixel_buffer_to_image(buffer).resize((width, height), Image.Resampling.BILINEAR)
    logger.debug(f"Created {width}x{height} preview from {buffer.width}x{buffer.height}")
    return image_to_pixel_buffer(image)
