"""
FilmGrade editing session - main integration layer

Holds the source image, its preview proxy, the selected preset LUT and the
current adjustment parameters, and routes them to the preview renderer and
the export coordinator. Both call sites run the same grading pipeline.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from .export import ExportCoordinator
from .models import RenderTask
from .proxy import make_preview_buffer
from .renderer import PreviewRenderer
from ..config import get_config_value, get_default_config
from ..exceptions import FilmGradeError
from ..grading.models import AdjustmentParams, Lut, PixelBuffer
from ..io.images import load_pixel_buffer
from ..presets.catalog import PresetCatalog

logger = logging.getLogger(__name__)


class GradingSession:
    """
    Interactive grading session for a single image.
    """

    def __init__(self, catalog: PresetCatalog, config: Optional[Dict[str, Any]] = None,
                 on_preview: Optional[Callable[[RenderTask], None]] = None):
        self.config = config or get_default_config()
        self.catalog = catalog

        self.preview_max_width = get_config_value(self.config, 'preview.max_width', 1280)
        self.renderer = PreviewRenderer(
            grading_workers=get_config_value(self.config, 'preview.workers', 1),
            on_result=on_preview
        )
        self.exporter = ExportCoordinator(
            workers=get_config_value(self.config, 'export.workers', 4),
            rows_per_chunk=get_config_value(self.config, 'export.rows_per_chunk', 256),
            jpeg_quality=get_config_value(self.config, 'export.jpeg_quality', 90)
        )

        self.source: Optional[PixelBuffer] = None
        self.preview_source: Optional[PixelBuffer] = None
        self.preset: Optional[str] = None
        self.lut: Optional[Lut] = None
        self.params = AdjustmentParams()

    @classmethod
    def from_config(cls, config: Dict[str, Any],
                    on_preview: Optional[Callable[[RenderTask], None]] = None) -> 'GradingSession':
        return cls(PresetCatalog.from_config(config), config, on_preview)

    @property
    def is_ready(self) -> bool:
        """Image and preset are both loaded"""
        return self.source is not None and self.lut is not None

    def load_image(self, path: Union[str, Path]) -> PixelBuffer:
        """Decode an image file and make it the session source"""
        buffer = load_pixel_buffer(path)
        self.set_source(buffer)
        logger.info(f"Loaded {path} ({buffer.width}x{buffer.height}) for grading")
        return buffer

    def set_source(self, buffer: PixelBuffer) -> Optional[RenderTask]:
        """Replace the source image and re-render the preview"""
        self.source = buffer
        self.preview_source = make_preview_buffer(buffer, self.preview_max_width)
        return self.render_preview()

    def select_preset(self, name: str) -> Lut:
        """
        Select a preset, reloading its LUT when the selection changes.
        """
        if name != self.preset or self.lut is None:
            self.lut = self.catalog.load(name)
            self.preset = name
            if self.lut.is_identity_fallback:
                logger.warning(f"Preset {name} unavailable, grading with identity LUT")
            self.render_preview()
        return self.lut

    def use_lut(self, lut: Lut, name: Optional[str] = None) -> Optional[RenderTask]:
        """Use an already resolved LUT instead of a catalog preset"""
        self.lut = lut
        self.preset = name or lut.source
        return self.render_preview()

    def update_params(self, params: Optional[AdjustmentParams] = None,
                      **changes) -> Optional[RenderTask]:
        """
        Change adjustment parameters and re-render the preview.

        Args:
            params: Full replacement parameter set
            **changes: Individual fields to change on the current parameters
        """
        if params is None:
            params = self.params
        if changes:
            params = params.with_changes(**changes)
        self.params = params
        return self.render_preview()

    def render_preview(self, rng: Optional[np.random.Generator] = None) -> Optional[RenderTask]:
        """Submit a preview render for the current state, if ready"""
        if not self.is_ready:
            return None
        return self.renderer.submit(self.preview_source, self.lut, self.params, rng=rng)

    def latest_preview(self) -> Optional[PixelBuffer]:
        return self.renderer.latest()

    def export(self, rng: Optional[np.random.Generator] = None,
               timeout: Optional[float] = None) -> PixelBuffer:
        """
        Grade the full-resolution source with the current settings.

        Raises:
            FilmGradeError: if no image or preset has been loaded
            ExportInProgressError: if an export is already running
        """
        self._require_ready()
        return self.exporter.export(self.source, self.lut, self.params, rng=rng, timeout=timeout)

    def export_jpeg(self, rng: Optional[np.random.Generator] = None,
                    timeout: Optional[float] = None) -> bytes:
        """Export and encode as JPEG"""
        self._require_ready()
        return self.exporter.export_jpeg(self.source, self.lut, self.params,
                                         rng=rng, timeout=timeout)

    def close(self):
        self.renderer.shutdown()
        self.exporter.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _require_ready(self):
        if self.source is None or self.lut is None:
            raise FilmGradeError("Image or preset is not ready")
