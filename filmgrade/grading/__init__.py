"""
Color grading core for FilmGrade

Tone adjustment, .cube LUT loading and sampling, grain and the shared
per-pixel pipeline.
"""

from .models import PixelBuffer, Lut, AdjustmentParams
from .lut import parse_cube, load_lut, load_lut_file, identity_lut
from .tone import adjust_tone, adjust_pixel
from .sampler import sample_lut, sample_pixel
from .grain import apply_grain
from .pipeline import grade, grade_pixels, GradingPipeline

__all__ = [
    'PixelBuffer',
    'Lut',
    'AdjustmentParams',
    'parse_cube',
    'load_lut',
    'load_lut_file',
    'identity_lut',
    'adjust_tone',
    'adjust_pixel',
    'sample_lut',
    'sample_pixel',
    'apply_grain',
    'grade',
    'grade_pixels',
    'GradingPipeline',
]
