"""
FilmGrade preview and export

Runs the shared grading pipeline from the interactive preview (downscaled,
latest parameters win) and from the full-resolution export (one at a time).
"""

from .models import RenderTask, RenderKind
from .proxy import make_preview_buffer, preview_dimensions
from .renderer import PreviewRenderer
from .export import ExportCoordinator
from .grading_session import GradingSession

__all__ = [
    'RenderTask',
    'RenderKind',
    'make_preview_buffer',
    'preview_dimensions',
    'PreviewRenderer',
    'ExportCoordinator',
    'GradingSession',
]
