"""
Tests for the shared grading pipeline.
"""

import numpy as np
import pytest

from filmgrade.exceptions import DimensionMismatchError
from filmgrade.grading import (
    AdjustmentParams, GradingPipeline, PixelBuffer,
    adjust_pixel, grade, grade_pixels, parse_cube, sample_pixel,
)

# Half a 32-point LUT cell plus 8-bit rounding of the stored entry
IDENTITY_TOLERANCE = 255 / 31 / 2 + 0.5


def single_pixel(r, g, b, a=255):
    return PixelBuffer(1, 1, np.array([[[r, g, b, a]]], dtype=np.uint8))


def rgb_of(buffer):
    return tuple(int(v) for v in buffer.data[0, 0, :3])


class TestScenarios:
    """Test single-pixel grading scenarios with the identity LUT."""

    def test_neutral_gray(self, identity32):
        out = rgb_of(grade(single_pixel(128, 128, 128), identity32, AdjustmentParams()))
        assert all(abs(v - 128) <= IDENTITY_TOLERANCE for v in out)
        assert out[0] == out[1] == out[2]

    def test_highlights(self, identity32):
        out = rgb_of(grade(single_pixel(200, 50, 50), identity32, AdjustmentParams(highlights=50)))
        expected = (227.5, 152.5, 152.5)
        assert all(abs(v - e) <= IDENTITY_TOLERANCE for v, e in zip(out, expected))

    def test_negative_shadows(self, identity32):
        out = rgb_of(grade(single_pixel(50, 50, 50), identity32, AdjustmentParams(shadows=-50)))
        assert out == (25, 25, 25)

    def test_full_exposure(self, identity32):
        out = rgb_of(grade(single_pixel(0, 0, 0), identity32, AdjustmentParams(exposure=100)))
        assert out == (255, 255, 255)

    def test_lut_applied_after_tone(self, swap_cube_text):
        lut = parse_cube(swap_cube_text)
        out = rgb_of(grade(single_pixel(255, 0, 0), lut, AdjustmentParams()))
        assert out == (0, 0, 255)

    def test_composition_matches_components(self, identity32):
        """Test that the pipeline equals tone adjustment followed by sampling."""
        params = AdjustmentParams(exposure=5, white_balance=-12, highlights=30, shadows=20)
        expected = sample_pixel(identity32, *adjust_pixel(90, 140, 210, params))

        out = rgb_of(grade(single_pixel(90, 140, 210), identity32, params))

        assert out == tuple(int(np.rint(v)) for v in expected)


class TestBufferContract:
    """Test buffer-level guarantees."""

    def test_dimensions_preserved(self, gradient_buffer, identity32):
        result = grade(gradient_buffer, identity32, AdjustmentParams(exposure=20))

        assert result.dimensions == gradient_buffer.dimensions
        assert result.data.shape == gradient_buffer.data.shape
        assert result.data.dtype == np.uint8

    def test_alpha_preserved(self, gradient_buffer, identity32):
        params = AdjustmentParams(exposure=40, grain=60)
        result = grade(gradient_buffer, identity32, params, rng=np.random.default_rng(0))

        np.testing.assert_array_equal(result.data[..., 3], gradient_buffer.data[..., 3])

    def test_input_not_mutated(self, gradient_buffer, identity32):
        before = gradient_buffer.data.copy()
        grade(gradient_buffer, identity32, AdjustmentParams(exposure=50, grain=20))
        np.testing.assert_array_equal(gradient_buffer.data, before)

    def test_deterministic_without_grain(self, gradient_buffer, identity32):
        params = AdjustmentParams(exposure=-15, white_balance=25, highlights=10, shadows=35)

        first = grade(gradient_buffer, identity32, params)
        second = grade(gradient_buffer, identity32, params)

        assert first.to_bytes() == second.to_bytes()

    def test_threaded_matches_single_thread(self, gradient_buffer, identity32):
        """Test that row chunking across workers does not change the output."""
        params = AdjustmentParams(exposure=10, highlights=-20, grain=40)

        single = grade(gradient_buffer, identity32, params,
                       rng=np.random.default_rng(11), workers=1)
        threaded = grade(gradient_buffer, identity32, params,
                         rng=np.random.default_rng(11), workers=4, rows_per_chunk=2)

        assert single.to_bytes() == threaded.to_bytes()

    def test_missing_lut_uses_identity(self, gradient_buffer, identity32):
        params = AdjustmentParams(shadows=15)
        assert (grade(gradient_buffer, None, params).to_bytes()
                == grade(gradient_buffer, identity32, params).to_bytes())

    def test_empty_buffer(self, identity32):
        empty = PixelBuffer(0, 0, np.zeros((0, 0, 4), dtype=np.uint8))
        assert grade(empty, identity32, AdjustmentParams()).dimensions == (0, 0)

    def test_invalid_chunk_size(self, gradient_buffer, identity32):
        with pytest.raises(ValueError):
            grade(gradient_buffer, identity32, AdjustmentParams(), rows_per_chunk=0)

    def test_huge_declared_size_does_not_crash(self):
        """Test that a LUT size beyond the table passes pixels through."""
        lut = parse_cube("LUT_3D_SIZE 3000000\n0 0 0\n1 1 1\n")

        result = grade(single_pixel(255, 255, 255), lut, AdjustmentParams())

        assert rgb_of(result) == (255, 255, 255)


class TestClampInvariant:
    """Test that grading never leaves the byte range."""

    @pytest.mark.parametrize("params", [
        AdjustmentParams(exposure=100, white_balance=100, highlights=100, shadows=100, grain=100),
        AdjustmentParams(exposure=-100, white_balance=-100, highlights=-100, shadows=-100, grain=100),
        AdjustmentParams(exposure=60, white_balance=-80, highlights=-40, shadows=90, grain=50),
    ])
    def test_graded_values_in_range(self, identity32, params):
        rng = np.random.default_rng(21)
        rgb = rng.uniform(0, 255, size=(400, 3))

        result = grade_pixels(rgb, identity32, params, rng=rng)

        assert result.min() >= 0
        assert result.max() <= 255


class TestGradingPipeline:
    """Test the object form used by preview and export callers."""

    def test_run_matches_function(self, gradient_buffer, identity32):
        params = AdjustmentParams(exposure=30, shadows=-10)
        pipeline = GradingPipeline(identity32, workers=3, rows_per_chunk=4)

        assert (pipeline.run(gradient_buffer, params).to_bytes()
                == grade(gradient_buffer, identity32, params).to_bytes())

    def test_with_lut_keeps_settings(self, identity32, swap_cube_text):
        pipeline = GradingPipeline(identity32, workers=2, rows_per_chunk=8)
        swapped = pipeline.with_lut(parse_cube(swap_cube_text))

        assert swapped.workers == 2
        assert swapped.rows_per_chunk == 8
        assert swapped.lut.size == 2


class TestPixelBuffer:
    """Test pixel buffer validation."""

    def test_wrong_sample_count_raises(self):
        with pytest.raises(DimensionMismatchError):
            PixelBuffer(2, 2, np.zeros(15, dtype=np.uint8))

    def test_flat_bytes_round_trip(self):
        raw = bytes(range(24))
        buffer = PixelBuffer.from_bytes(3, 2, raw)

        assert buffer.data.shape == (2, 3, 4)
        assert buffer.to_bytes() == raw

    def test_blank(self):
        buffer = PixelBuffer.blank(4, 3, (10, 20, 30, 40))
        assert tuple(buffer.data[2, 3]) == (10, 20, 30, 40)
