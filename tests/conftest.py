"""
Shared fixtures for FilmGrade tests.
"""

import io
import itertools

import numpy as np
import pytest
from PIL import Image

from filmgrade.grading import PixelBuffer, identity_lut


def cube_rows(size, mapping=None):
    """Yield .cube data rows in red-fastest order, optionally remapped"""
    steps = [i / (size - 1) for i in range(size)]
    for b, g, r in itertools.product(steps, repeat=3):
        out = mapping(r, g, b) if mapping else (r, g, b)
        yield " ".join(f"{v:.6f}" for v in out)


def make_cube(size, mapping=None, header=None):
    lines = list(header or [])
    lines.append(f"LUT_3D_SIZE {size}")
    lines.extend(cube_rows(size, mapping))
    return "\n".join(lines) + "\n"


def truncated_jpeg_bytes():
    """JPEG data cut off halfway through its scan"""
    noise = np.random.default_rng(0).integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
    output = io.BytesIO()
    Image.fromarray(noise).save(output, format='JPEG', quality=95)
    data = output.getvalue()
    return data[:len(data) // 2]


@pytest.fixture
def swap_cube_text():
    """Size-2 cube that swaps the red and blue channels"""
    return make_cube(2, mapping=lambda r, g, b: (b, g, r), header=['TITLE "Swap"'])


@pytest.fixture
def presets_dir(tmp_path, swap_cube_text):
    """Preset directory holding Swap.cube and a broken cube"""
    directory = tmp_path / "presets"
    directory.mkdir()
    (directory / "Swap.cube").write_text(swap_cube_text)
    (directory / "Broken.cube").write_text("# no size directive\n0 0 0\n1 1 1\n")
    return directory


@pytest.fixture(scope="session")
def identity32():
    return identity_lut(32)


@pytest.fixture
def gradient_buffer():
    """12x9 buffer with varied colors and alpha"""
    height, width = 9, 12
    ys, xs = np.mgrid[0:height, 0:width]
    data = np.empty((height, width, 4), dtype=np.uint8)
    data[..., 0] = (xs * 23) % 256
    data[..., 1] = (ys * 31) % 256
    data[..., 2] = ((xs + ys) * 17) % 256
    data[..., 3] = (xs * 20 + 15) % 256
    return PixelBuffer(width, height, data)
