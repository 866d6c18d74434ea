"""
Data models for the FilmGrade preview and export call sites.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time
import uuid

from ..grading.models import AdjustmentParams, PixelBuffer


class RenderKind(Enum):
    """Which call site a render belongs to."""
    PREVIEW = "preview"      # Downscaled, re-rendered on every parameter change
    EXPORT = "export"        # Full resolution, once per export request


@dataclass
class RenderTask:
    """A single grading run submitted by a call site."""
    kind: RenderKind
    params: AdjustmentParams
    generation: int = 0
    task_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    completed_at: Optional[float] = None
    error: Optional[Exception] = None
    result: Optional[PixelBuffer] = None
    stale: bool = False      # Superseded by a newer generation; result discarded

    @property
    def is_completed(self) -> bool:
        """Check if task is completed."""
        return self.completed_at is not None

    @property
    def is_failed(self) -> bool:
        """Check if task failed."""
        return self.error is not None

    @property
    def duration(self) -> Optional[float]:
        """Get task duration if completed."""
        if self.started_at and self.completed_at:
            return self.completed_at - self.started_at
        return None
