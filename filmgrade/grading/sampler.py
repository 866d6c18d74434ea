"""
Nearest-neighbor 3D LUT sampling
"""

from typing import Tuple
import numpy as np

from .models import Lut, CHANNELS


def quantize(values: np.ndarray, size: int) -> np.ndarray:
    """
    Map [0, 255] channel values to the nearest LUT index.

    Halves round up, matching ``Math.round`` style rounding rather than
    numpy's round-half-to-even. Indices are returned as whole-valued
    float64 so that any declared size can be represented.
    """
    return np.floor(values / 255.0 * (size - 1) + 0.5)


def sample_lut(lut: Lut, rgb: np.ndarray) -> np.ndarray:
    """
    Look up each RGB triple in the LUT.

    Args:
        lut: Lookup table
        rgb: Array of shape (..., 3) with values in [0, 255]

    Returns:
        float64 array of shape (..., 3). Triples whose entry lies beyond the
        end of ``lut.data`` are returned unchanged.
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    if lut.data.size < 3:
        return rgb.copy()

    indices = quantize(rgb, lut.size)
    r_idx, g_idx, b_idx = indices[..., 0], indices[..., 1], indices[..., 2]

    # float64 offsets: a declared size far beyond the table must not wrap
    size = float(lut.size)
    offsets = (b_idx * size * size + g_idx * size + r_idx) * CHANNELS
    in_bounds = offsets + 2 < lut.data.size
    safe_offsets = np.where(in_bounds, offsets, 0).astype(np.int64)

    looked_up = np.stack([
        lut.data[safe_offsets],
        lut.data[safe_offsets + 1],
        lut.data[safe_offsets + 2],
    ], axis=-1).astype(np.float64)

    return np.where(in_bounds[..., np.newaxis], looked_up, rgb)


def sample_pixel(lut: Lut, r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Look up a single pixel in the LUT"""
    out = sample_lut(lut, np.array([r, g, b], dtype=np.float64))
    return float(out[0]), float(out[1]), float(out[2])
