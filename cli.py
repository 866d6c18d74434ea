#!/usr/bin/env python3
"""
FilmGrade Command Line Interface

Grades photos with a .cube LUT preset and tone adjustments, either one at a
time or a whole directory at once.
"""

import sys
import time
import click
import logging
from pathlib import Path
from typing import Optional

import numpy as np

from filmgrade.config import load_config, get_config_value
from filmgrade.exceptions import FilmGradeError
from filmgrade.grading import AdjustmentParams, GradingPipeline, Lut, load_lut_file
from filmgrade.io.images import get_file_info, load_pixel_buffer, save_pixel_buffer
from filmgrade.presets import PresetCatalog
from filmgrade.preview.proxy import make_preview_buffer
from filmgrade.utils.logging import GradingStats, setup_console_logging

logger = logging.getLogger(__name__)


def adjustment_options(func):
    """Attach the tone adjustment options to a command"""
    options = [
        click.option('--exposure', type=click.FloatRange(-100, 100), default=0.0,
                     help='Exposure (-100 to 100)'),
        click.option('--white-balance', type=click.FloatRange(-100, 100), default=0.0,
                     help='White balance, positive is warmer (-100 to 100)'),
        click.option('--highlights', type=click.FloatRange(-100, 100), default=0.0,
                     help='Highlights (-100 to 100)'),
        click.option('--shadows', type=click.FloatRange(-100, 100), default=0.0,
                     help='Shadows (-100 to 100)'),
        click.option('--grain', type=click.FloatRange(0, 100), default=0.0,
                     help='Film grain amount (0 to 100)'),
        click.option('--seed', type=int, default=None,
                     help='Seed for grain noise, for reproducible output'),
        click.option('--preset', '-p', help='Preset file name from the preset catalog'),
        click.option('--lut', 'lut_path', type=click.Path(exists=True, dir_okay=False),
                     help='Path to a .cube LUT file (overrides --preset)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_lut(config: dict, preset: Optional[str], lut_path: Optional[str]) -> Lut:
    if lut_path:
        return load_lut_file(lut_path)

    catalog = PresetCatalog.from_config(config)
    if preset is None:
        default = catalog.default_preset
        if default is None:
            raise click.UsageError("No preset given and the catalog is empty; use --preset or --lut")
        preset = default.file
    return catalog.load(preset)


def _report_lut(lut: Lut, quiet: bool):
    if lut.is_identity_fallback:
        click.echo(f"⚠️  LUT unavailable ({lut.fallback_error}); using identity LUT", err=True)
    elif not quiet:
        click.echo(f"🎨 LUT: {lut.title or lut.source} (size {lut.size})")


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    FilmGrade - film-style color grading for photos

    Applies exposure, white balance, highlight, shadow and grain adjustments
    followed by a 3D LUT preset.
    """
    if ctx.obj is None:
        ctx.obj = {}

    cfg = load_config(config)

    level = get_config_value(cfg, 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    setup_console_logging(level, color=get_config_value(cfg, 'logging.color', True))

    ctx.obj['config'] = cfg
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@adjustment_options
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help='Output file (default: <image>_graded.jpg)')
@click.option('--preview', 'preview_only', is_flag=True,
              help='Grade the downscaled preview instead of full resolution')
@click.pass_context
def grade(ctx, image: str, exposure: float, white_balance: float, highlights: float,
          shadows: float, grain: float, seed: Optional[int], preset: Optional[str],
          lut_path: Optional[str], output: Optional[str], preview_only: bool):
    """
    Grade a single image.

    IMAGE: Path to the photo to grade
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    params = AdjustmentParams(exposure=exposure, white_balance=white_balance,
                              highlights=highlights, shadows=shadows, grain=grain)
    image_path = Path(image)
    suffix = get_config_value(config, 'export.output_suffix', '_graded')
    output_path = Path(output) if output else image_path.with_name(f"{image_path.stem}{suffix}.jpg")

    try:
        lut = _resolve_lut(config, preset, lut_path)
        _report_lut(lut, quiet)

        buffer = load_pixel_buffer(image_path)
        if preview_only:
            buffer = make_preview_buffer(buffer, get_config_value(config, 'preview.max_width', 1280))

        if not quiet:
            click.echo(f"🖼️  Grading {image_path.name} ({buffer.width}x{buffer.height})")

        pipeline = GradingPipeline(
            lut,
            workers=get_config_value(config, 'export.workers', 4),
            rows_per_chunk=get_config_value(config, 'export.rows_per_chunk', 256)
        )
        start = time.time()
        graded = pipeline.run(buffer, params, rng=np.random.default_rng(seed))

        save_pixel_buffer(graded, output_path,
                          quality=get_config_value(config, 'export.jpeg_quality', 90))

        if not quiet:
            click.echo(f"✅ Saved {output_path} in {time.time() - start:.2f}s")

    except FilmGradeError as e:
        click.echo(f"❌ Error grading {image_path.name}: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False, dir_okay=True))
@adjustment_options
@click.option('--output-dir', '-o', type=click.Path(file_okay=False, dir_okay=True),
              help='Output directory (default: <directory>/graded)')
@click.option('--recursive/--no-recursive', default=False, help='Process subdirectories')
@click.pass_context
def batch(ctx, directory: str, exposure: float, white_balance: float, highlights: float,
          shadows: float, grain: float, seed: Optional[int], preset: Optional[str],
          lut_path: Optional[str], output_dir: Optional[str], recursive: bool):
    """
    Grade every supported image in a directory.

    DIRECTORY: Path to directory containing photos
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    params = AdjustmentParams(exposure=exposure, white_balance=white_balance,
                              highlights=highlights, shadows=shadows, grain=grain)
    directory_path = Path(directory)
    output_path = Path(output_dir) if output_dir else directory_path / 'graded'

    pattern = '**/*' if recursive else '*'
    photo_files = sorted(
        p for p in directory_path.glob(pattern)
        if p.is_file() and output_path not in p.parents and get_file_info(p).is_supported
    )

    if not photo_files:
        click.echo("❌ No supported photos found in directory", err=True)
        sys.exit(1)

    lut = _resolve_lut(config, preset, lut_path)
    _report_lut(lut, quiet)

    if not quiet:
        click.echo(f"📸 Found {len(photo_files)} photos")

    output_path.mkdir(parents=True, exist_ok=True)
    pipeline = GradingPipeline(
        lut,
        workers=get_config_value(config, 'export.workers', 4),
        rows_per_chunk=get_config_value(config, 'export.rows_per_chunk', 256)
    )
    quality = get_config_value(config, 'export.jpeg_quality', 90)
    rng = np.random.default_rng(seed)

    stats = GradingStats()
    stats.set_total(len(photo_files))

    with click.progressbar(photo_files, label="Grading photos") as bar:
        for photo_path in bar:
            start = time.time()
            try:
                buffer = load_pixel_buffer(photo_path)
                graded = pipeline.run(buffer, params, rng=rng)
                save_pixel_buffer(graded, output_path / f"{photo_path.stem}.jpg", quality=quality)
                stats.add_result(True, time.time() - start)
            except FilmGradeError as e:
                stats.add_error(str(photo_path), str(e))
                logger.error(f"Failed to grade {photo_path}: {e}")

    if not quiet:
        click.echo(stats.format_summary())

    if stats.failed_files:
        sys.exit(1)


@main.command()
@click.pass_context
def presets(ctx):
    """List configured preset groups."""
    config = ctx.obj.get('config', {})
    catalog = PresetCatalog.from_config(config)

    click.echo(f"📂 Preset directory: {catalog.directory}")
    for group in catalog.groups:
        click.echo(f"\n{group.label}")
        for option in group.options:
            marker = '✅' if catalog.exists(option.file) else '❌'
            click.echo(f"  {marker} {option.label} ({option.file})")

    configured = {p.file for p in catalog.presets}
    extra = [name for name in catalog.available() if name not in configured]
    if extra:
        click.echo("\nUngrouped .cube files")
        for name in extra:
            click.echo(f"  ✅ {name}")


@main.command('lut-info')
@click.argument('lut_file', type=click.Path(exists=True, dir_okay=False))
def lut_info(lut_file: str):
    """
    Show information about a .cube LUT file.

    LUT_FILE: Path to the .cube file
    """
    lut = load_lut_file(lut_file)

    click.echo(f"File:     {lut_file}")
    click.echo(f"Title:    {lut.title or '-'}")
    click.echo(f"Size:     {lut.size}")
    click.echo(f"Entries:  {lut.entry_count} (expected {lut.size ** 3})")

    if lut.is_identity_fallback:
        click.echo(f"Fallback: identity LUT ({lut.fallback_error})", err=True)
        sys.exit(1)
    if not lut.is_complete:
        click.echo("Warning:  row count does not match LUT_3D_SIZE", err=True)


if __name__ == '__main__':
    main()
