"""
FilmGrade: film-style color grading for photos

Composes a parametric tone adjustment (exposure, white balance, highlights,
shadows, grain) with a 3D .cube LUT, for both interactive preview and
full-resolution export.
"""

__version__ = "0.1.0"

from .config import load_config
from .exceptions import (
    FilmGradeError,
    LutLoadError,
    LutParseError,
    DimensionMismatchError,
)
from .grading import (
    PixelBuffer,
    Lut,
    AdjustmentParams,
    load_lut,
    load_lut_file,
    identity_lut,
    grade,
    GradingPipeline,
)

__all__ = [
    "load_config",
    "FilmGradeError",
    "LutLoadError",
    "LutParseError",
    "DimensionMismatchError",
    "PixelBuffer",
    "Lut",
    "AdjustmentParams",
    "load_lut",
    "load_lut_file",
    "identity_lut",
    "grade",
    "GradingPipeline",
]
