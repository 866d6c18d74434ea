"""
Tests for the command line interface.
"""

import logging

import pytest
import yaml
from click.testing import CliRunner
from PIL import Image

import filmgrade.utils.logging as logging_utils
from cli import main

from conftest import truncated_jpeg_bytes


@pytest.fixture(autouse=True)
def reset_console_logging():
    root = logging.getLogger()
    level = root.level
    yield
    if logging_utils._console_handler is not None:
        root.removeHandler(logging_utils._console_handler)
        logging_utils._console_handler = None
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def swap_lut(tmp_path, swap_cube_text):
    path = tmp_path / "swap.cube"
    path.write_text(swap_cube_text)
    return path


@pytest.fixture
def red_image(tmp_path):
    path = tmp_path / "red.png"
    Image.new('RGBA', (4, 3), (255, 0, 0, 255)).save(path)
    return path


class TestLutInfo:
    """Test the lut-info command."""

    def test_valid_lut(self, runner, swap_lut):
        result = runner.invoke(main, ['lut-info', str(swap_lut)])

        assert result.exit_code == 0
        assert "Size:     2" in result.output
        assert "Title:    Swap" in result.output
        assert "Entries:  8 (expected 8)" in result.output

    def test_broken_lut_reports_fallback(self, runner, presets_dir):
        result = runner.invoke(main, ['lut-info', str(presets_dir / "Broken.cube")])

        assert result.exit_code == 1
        assert "Size:     32" in result.output

    def test_short_lut_warns(self, runner, tmp_path):
        path = tmp_path / "short.cube"
        path.write_text("LUT_3D_SIZE 2\n0 0 0\n1 1 1\n")

        result = runner.invoke(main, ['lut-info', str(path)])

        assert result.exit_code == 0
        assert "Entries:  2 (expected 8)" in result.output
        assert "row count does not match" in result.output


class TestGradeCommand:
    """Test grading a single image."""

    def test_grade_with_lut_file(self, runner, tmp_path, swap_lut, red_image):
        output = tmp_path / "out.png"

        result = runner.invoke(main, ['grade', str(red_image), '--lut', str(swap_lut),
                                      '-o', str(output)])

        assert result.exit_code == 0, result.output
        with Image.open(output) as image:
            assert image.convert('RGBA').getpixel((0, 0)) == (0, 0, 255, 255)

    def test_default_output_name(self, runner, swap_lut, red_image):
        result = runner.invoke(main, ['grade', str(red_image), '--lut', str(swap_lut),
                                      '--exposure', '10', '--grain', '20', '--seed', '3'])

        assert result.exit_code == 0, result.output
        assert (red_image.parent / "red_graded.jpg").exists()

    def test_grade_with_configured_preset(self, runner, tmp_path, presets_dir, red_image):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({'presets': {'directory': str(presets_dir)}}))
        output = tmp_path / "out.png"

        result = runner.invoke(main, ['-c', str(config_path), 'grade', str(red_image),
                                      '-p', 'Swap.cube', '-o', str(output)])

        assert result.exit_code == 0, result.output
        assert "Swap" in result.output
        with Image.open(output) as image:
            assert image.convert('RGBA').getpixel((1, 1)) == (0, 0, 255, 255)

    def test_missing_preset_uses_identity(self, runner, tmp_path, presets_dir, red_image):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({'presets': {'directory': str(presets_dir)}}))

        result = runner.invoke(main, ['-c', str(config_path), 'grade', str(red_image),
                                      '-o', str(tmp_path / "out.png")])

        assert result.exit_code == 0, result.output
        assert "identity LUT" in result.output

    def test_unsupported_image_fails(self, runner, tmp_path, swap_lut):
        notes = tmp_path / "notes.txt"
        notes.write_text("not an image")

        result = runner.invoke(main, ['grade', str(notes), '--lut', str(swap_lut)])

        assert result.exit_code == 1
        assert "not supported" in result.output

    def test_truncated_image_reported(self, runner, tmp_path, swap_lut):
        path = tmp_path / "cut.jpg"
        path.write_bytes(truncated_jpeg_bytes())

        result = runner.invoke(main, ['grade', str(path), '--lut', str(swap_lut)])

        assert result.exit_code == 1
        assert "Error grading cut.jpg" in result.output

    def test_out_of_range_option_rejected(self, runner, swap_lut, red_image):
        result = runner.invoke(main, ['grade', str(red_image), '--lut', str(swap_lut),
                                      '--exposure', '150'])

        assert result.exit_code == 2


class TestBatchCommand:
    """Test directory grading."""

    def test_batch_grades_supported_files(self, runner, tmp_path, swap_lut):
        photos = tmp_path / "photos"
        photos.mkdir()
        for name in ("a.png", "b.jpg"):
            Image.new('RGB', (6, 4), (10, 200, 30)).save(photos / name)
        (photos / "notes.txt").write_text("skip me")

        result = runner.invoke(main, ['batch', str(photos), '--lut', str(swap_lut)])

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in (photos / "graded").iterdir()) == ['a.jpg', 'b.jpg']
        assert "GRADING SUMMARY" in result.output

    def test_batch_reports_failures(self, runner, tmp_path, swap_lut):
        photos = tmp_path / "photos"
        photos.mkdir()
        Image.new('RGB', (2, 2)).save(photos / "good.png")
        (photos / "bad.png").write_bytes(b"corrupt")
        output_dir = tmp_path / "out"

        result = runner.invoke(main, ['batch', str(photos), '--lut', str(swap_lut),
                                      '-o', str(output_dir)])

        assert result.exit_code == 1
        assert (output_dir / "good.jpg").exists()
        assert "bad.png" in result.output

    def test_batch_continues_past_truncated_jpeg(self, runner, tmp_path, swap_lut):
        """Test that one truncated file is counted as failed while the rest are graded."""
        photos = tmp_path / "photos"
        photos.mkdir()
        Image.new('RGB', (6, 4), (10, 200, 30)).save(photos / "a_good.jpg")
        (photos / "b_cut.jpg").write_bytes(truncated_jpeg_bytes())
        Image.new('RGB', (6, 4), (90, 20, 30)).save(photos / "c_good.png")

        result = runner.invoke(main, ['batch', str(photos), '--lut', str(swap_lut)])

        assert result.exit_code == 1
        assert not isinstance(result.exception, OSError)
        assert sorted(p.name for p in (photos / "graded").iterdir()) == ['a_good.jpg', 'c_good.jpg']
        assert "GRADING SUMMARY" in result.output
        assert "b_cut.jpg" in result.output

    def test_batch_empty_directory(self, runner, tmp_path, swap_lut):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(main, ['batch', str(empty), '--lut', str(swap_lut)])

        assert result.exit_code == 1
        assert "No supported photos" in result.output


class TestPresetsCommand:
    """Test listing presets."""

    def test_lists_groups_and_ungrouped_files(self, runner, tmp_path, presets_dir):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({'presets': {
            'directory': str(presets_dir),
            'groups': [{'label': 'Mine', 'options': [
                {'file': 'Swap.cube', 'label': 'Swap'},
                {'file': 'Gone.cube', 'label': 'Gone'},
            ]}],
        }}))

        result = runner.invoke(main, ['-c', str(config_path), 'presets'])

        assert result.exit_code == 0, result.output
        assert "✅ Swap (Swap.cube)" in result.output
        assert "❌ Gone (Gone.cube)" in result.output
        assert "Ungrouped .cube files" in result.output
        assert "Broken.cube" in result.output
