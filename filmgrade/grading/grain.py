"""
Film grain injection

One noise sample is drawn per pixel and added to all three channels.
"""

from typing import Optional
import numpy as np


def draw_noise(shape, amount: float, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Draw per-pixel grain noise in [-amount/2, amount/2).

    Args:
        shape: Pixel grid shape, e.g. (height, width)
        amount: Grain amount, 0-100
        rng: Random source; an unseeded generator is created when omitted
    """
    if rng is None:
        rng = np.random.default_rng()
    return (rng.random(shape) - 0.5) * amount


def apply_grain(rgb: np.ndarray, amount: float,
                rng: Optional[np.random.Generator] = None,
                noise: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Add grain to an array of RGB values.

    Args:
        rgb: Array of shape (..., 3)
        amount: Grain amount, 0-100. Zero or less is a no-op.
        rng: Random source used when ``noise`` is not supplied
        noise: Pre-drawn noise of shape rgb.shape[:-1]

    Returns:
        float64 array clamped to [0, 255]
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    if amount <= 0:
        return rgb
    if noise is None:
        noise = draw_noise(rgb.shape[:-1], amount, rng)
    return np.clip(rgb + noise[..., np.newaxis], 0.0, 255.0)
