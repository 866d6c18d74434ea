"""
LUT loading for FilmGrade

Parses ``.cube`` 3D LUT descriptions into immutable Lut tables. Loading is
graceful: any failure degrades to a 32-point identity LUT so grading always
has a usable table.
"""

import math
from pathlib import Path
from typing import List, Optional, Union
import numpy as np

from .models import Lut, CHANNELS, to_uint8
from ..exceptions import LutLoadError, LutParseError
from ..utils.logging import StructuredLogger

logger = StructuredLogger(__name__)

IDENTITY_LUT_SIZE = 32
SIZE_DIRECTIVE = 'LUT_3D_SIZE'
TITLE_DIRECTIVE = 'TITLE'


def identity_lut(size: int = IDENTITY_LUT_SIZE,
                 fallback_error: Optional[LutLoadError] = None) -> Lut:
    """
    Build an identity LUT.

    Each entry maps its (r, g, b) indices linearly back to [0, 255] with
    alpha fixed at 255, in red-fastest order.

    Raises:
        ValueError: if size is below 2, which leaves no ramp to span
    """
    if size < 2:
        raise ValueError(f"Identity LUT needs at least 2 points per axis, got {size}")
    ramp = np.arange(size, dtype=np.float64) / (size - 1) * 255.0
    b, g, r = np.meshgrid(ramp, ramp, ramp, indexing='ij')
    table = np.empty((size, size, size, CHANNELS), dtype=np.float64)
    table[..., 0] = r
    table[..., 1] = g
    table[..., 2] = b
    table[..., 3] = 255.0
    return Lut(size=size, data=to_uint8(table), title='Identity',
               fallback_error=fallback_error)


def _parse_row(tokens: List[str]) -> Optional[List[float]]:
    if len(tokens) != 3:
        return None
    try:
        values = [float(token) for token in tokens]
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def parse_cube(text: str, source: Optional[str] = None) -> Lut:
    """
    Parse ``.cube`` content into a Lut.

    Args:
        text: Raw .cube text
        source: Name used in diagnostics

    Returns:
        Parsed Lut

    Raises:
        LutParseError: if no usable LUT_3D_SIZE directive is present
    """
    size = 0
    title = None
    rows = []
    skipped = 0

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        tokens = line.split()
        if tokens[0] == SIZE_DIRECTIVE:
            try:
                size = int(tokens[1])
            except (IndexError, ValueError):
                raise LutParseError(f"Invalid {SIZE_DIRECTIVE} directive: {line!r}", source)
            continue

        if tokens[0] == TITLE_DIRECTIVE:
            title = line[len(TITLE_DIRECTIVE):].strip().strip('"') or None
            continue

        row = _parse_row(tokens)
        if row is None:
            skipped += 1
            continue
        rows.append(row)

    if size <= 0:
        raise LutParseError("Invalid CUBE file format: missing LUT_3D_SIZE", source)

    if rows:
        table = np.asarray(rows, dtype=np.float64) * 255.0
        data = np.empty((len(rows), CHANNELS), dtype=np.float64)
        data[:, :3] = table
        data[:, 3] = 255.0
    else:
        data = np.empty((0, CHANNELS), dtype=np.float64)

    lut = Lut(size=size, data=to_uint8(data), title=title, source=source)

    if not lut.is_complete:
        logger.warning("LUT row count does not match its size",
                       source=source, size=size, expected=size ** 3, rows=len(rows))
    logger.debug("Parsed LUT", source=source, size=size, rows=len(rows), skipped=skipped)

    return lut


def load_lut(text: Optional[str], source: Optional[str] = None) -> Lut:
    """
    Resolve .cube content into a usable Lut.

    A missing source (``None``) or a parse failure is logged and replaced by
    the identity LUT; the returned Lut carries the error in
    ``fallback_error``.
    """
    try:
        if text is None:
            raise LutLoadError("LUT source could not be read", source)
        return parse_cube(text, source=source)
    except LutLoadError as e:
        return fallback_to_identity(e, source)


def load_lut_file(path: Union[str, Path]) -> Lut:
    """Read and resolve a .cube file from disk"""
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        error = LutLoadError(f"Failed to read LUT file {path}: {e}", str(path))
        return fallback_to_identity(error, str(path))
    return load_lut(text, source=str(path))


def fallback_to_identity(error: LutLoadError, source: Optional[str]) -> Lut:
    """Log a LUT load failure and return the identity LUT carrying it"""
    logger.warning("Falling back to identity LUT",
                   source=source, error=str(error), error_type=type(error).__name__)
    return identity_lut(IDENTITY_LUT_SIZE, fallback_error=error)
