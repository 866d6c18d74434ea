"""
Data models for the color grading pipeline.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple
import numpy as np

from ..exceptions import DimensionMismatchError, LutLoadError

CHANNELS = 4  # R, G, B, A


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


def to_uint8(values) -> np.ndarray:
    """
    Store real-valued samples as 8-bit values.

    Clamps to [0, 255] and rounds half to even, which is how an 8-bit
    clamped array stores assigned numbers.
    """
    return np.clip(np.rint(np.asarray(values, dtype=np.float64)), 0, 255).astype(np.uint8)


@dataclass
class PixelBuffer:
    """
    Decoded RGBA8 image owned by the caller.

    ``data`` has shape (height, width, 4) and dtype uint8.
    """
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise DimensionMismatchError(
                f"Negative buffer dimensions: {self.width}x{self.height}"
            )
        data = np.asarray(self.data)
        expected = self.width * self.height * CHANNELS
        if data.size != expected:
            raise DimensionMismatchError(
                f"Buffer holds {data.size} samples, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )
        if data.shape != (self.height, self.width, CHANNELS):
            data = data.reshape(self.height, self.width, CHANNELS)
        if data.dtype != np.uint8:
            data = to_uint8(data)
        self.data = data

    @classmethod
    def from_bytes(cls, width: int, height: int, raw) -> 'PixelBuffer':
        """Build a buffer from a flat RGBA8 byte sequence"""
        data = np.frombuffer(bytes(raw), dtype=np.uint8).copy()
        return cls(width=width, height=height, data=data)

    @classmethod
    def blank(cls, width: int, height: int,
              color: Tuple[int, int, int, int] = (0, 0, 0, 255)) -> 'PixelBuffer':
        """Create a buffer filled with a single RGBA color"""
        data = np.empty((height, width, CHANNELS), dtype=np.uint8)
        data[:, :] = color
        return cls(width=width, height=height, data=data)

    def to_bytes(self) -> bytes:
        """Return the flat RGBA8 sample sequence"""
        return self.data.tobytes()

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(width, height)"""
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def copy(self) -> 'PixelBuffer':
        return PixelBuffer(self.width, self.height, self.data.copy())


@dataclass(frozen=True)
class Lut:
    """
    Immutable 3D lookup table.

    ``data`` is a flat uint8 array of ``size**3 * 4`` samples indexed as
    ``(b * size**2 + g * size + r) * 4``. The array is marked read-only so a
    Lut can be shared between concurrent pipeline runs.
    """
    size: int
    data: np.ndarray = field(repr=False, compare=False)
    title: Optional[str] = None
    source: Optional[str] = None
    fallback_error: Optional[LutLoadError] = field(default=None, compare=False)

    def __post_init__(self):
        data = np.asarray(self.data)
        if data.dtype != np.uint8:
            data = to_uint8(data)
        data = np.ascontiguousarray(data).reshape(-1)
        if data.flags.writeable:
            data = data.copy()
            data.setflags(write=False)
        object.__setattr__(self, 'data', data)

    @property
    def entry_count(self) -> int:
        """Number of RGBA entries actually present in ``data``"""
        return self.data.size // CHANNELS

    @property
    def is_complete(self) -> bool:
        """True when the table holds exactly size**3 entries"""
        return self.data.size == self.size ** 3 * CHANNELS

    @property
    def is_identity_fallback(self) -> bool:
        return self.fallback_error is not None

    def entry(self, r: int, g: int, b: int) -> Tuple[int, int, int, int]:
        """Return the RGBA entry stored for quantized indices (r, g, b)"""
        offset = (b * self.size * self.size + g * self.size + r) * CHANNELS
        return tuple(int(v) for v in self.data[offset:offset + CHANNELS])


@dataclass(frozen=True)
class AdjustmentParams:
    """Tone adjustment controls"""
    exposure: float = 0.0       # -100 to +100
    white_balance: float = 0.0  # -100 to +100, positive warms (red up, blue down)
    highlights: float = 0.0     # -100 to +100
    shadows: float = 0.0        # -100 to +100
    grain: float = 0.0          # 0 to 100

    def __post_init__(self):
        for name in ('exposure', 'white_balance', 'highlights', 'shadows'):
            object.__setattr__(self, name, _clamp(getattr(self, name), -100.0, 100.0))
        object.__setattr__(self, 'grain', _clamp(self.grain, 0.0, 100.0))

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'AdjustmentParams':
        """
        Build params from a settings mapping.

        Accepts snake_case keys as well as ``whiteBalance``. Unknown keys
        are ignored.
        """
        aliases = {'whiteBalance': 'white_balance'}
        kwargs = {}
        for key, value in (values or {}).items():
            name = aliases.get(key, key)
            if name in cls.__dataclass_fields__ and value is not None:
                kwargs[name] = float(value)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, float]:
        return {
            'exposure': self.exposure,
            'white_balance': self.white_balance,
            'highlights': self.highlights,
            'shadows': self.shadows,
            'grain': self.grain,
        }

    def with_changes(self, **changes) -> 'AdjustmentParams':
        return replace(self, **changes)

    @property
    def is_neutral(self) -> bool:
        return not any(self.to_dict().values())
