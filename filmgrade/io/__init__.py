"""
Image input/output for FilmGrade
"""

from .images import (
    FileInfo,
    get_file_info,
    load_pixel_buffer,
    image_to_pixel_buffer,
    pixel_buffer_to_image,
    encode_jpeg,
    save_pixel_buffer,
)

__all__ = [
    'FileInfo',
    'get_file_info',
    'load_pixel_buffer',
    'image_to_pixel_buffer',
    'pixel_buffer_to_image',
    'encode_jpeg',
    'save_pixel_buffer',
]
