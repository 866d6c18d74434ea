"""
Tone adjustment formulas

Applies exposure, white balance, highlights and shadows to RGB values in
the [0, 255] range. Steps run in a fixed order and intermediate values are
not clamped; only the final result is clamped before LUT sampling.
"""

from typing import Tuple
import numpy as np

from .models import AdjustmentParams

SHADOW_THRESHOLD = 128.0


def apply_exposure(rgb: np.ndarray, exposure: float) -> np.ndarray:
    """Shift all channels by exposure * 2.55"""
    return rgb + exposure * 2.55


def apply_white_balance(rgb: np.ndarray, white_balance: float) -> np.ndarray:
    """Red/blue cast shift; green is untouched"""
    delta = white_balance * 2
    result = rgb.copy()
    result[..., 0] += delta
    result[..., 2] -= delta
    return result


def apply_highlights(rgb: np.ndarray, highlights: float) -> np.ndarray:
    """
    Positive values push each channel toward white by the given fraction,
    negative (or zero) values scale every channel down proportionally.
    """
    factor = highlights / 100.0
    if factor > 0:
        return rgb + (255.0 - rgb) * factor
    return rgb + rgb * factor


def apply_shadows(rgb: np.ndarray, shadows: float) -> np.ndarray:
    """
    Positive values brighten only channels below 128, each channel gated
    on its own value. Negative (or zero) values scale every channel.
    """
    factor = shadows / 100.0
    if factor > 0:
        return np.where(rgb < SHADOW_THRESHOLD, rgb * (1 + factor), rgb)
    return rgb * (1 + factor)


def adjust_tone(rgb: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """
    Apply the tone adjustments to an array of RGB values.

    Args:
        rgb: Array of shape (..., 3) with values in [0, 255]
        params: Adjustment parameters

    Returns:
        float64 array of the same shape clamped to [0, 255]
    """
    result = np.asarray(rgb, dtype=np.float64)
    result = apply_exposure(result, params.exposure)
    result = apply_white_balance(result, params.white_balance)
    result = apply_highlights(result, params.highlights)
    result = apply_shadows(result, params.shadows)
    return np.clip(result, 0.0, 255.0)


def adjust_pixel(r: float, g: float, b: float,
                 params: AdjustmentParams) -> Tuple[float, float, float]:
    """Apply the tone adjustments to a single pixel"""
    out = adjust_tone(np.array([r, g, b], dtype=np.float64), params)
    return float(out[0]), float(out[1]), float(out[2])
