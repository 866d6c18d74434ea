"""
Full-resolution export.

Only one export may be in flight at a time; a second request while one is
running is rejected rather than queued.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Optional

import numpy as np

from .models import RenderTask, RenderKind
from ..exceptions import ExportInProgressError
from ..grading.models import AdjustmentParams, Lut, PixelBuffer
from ..grading.pipeline import grade, DEFAULT_ROWS_PER_CHUNK
from ..io.images import encode_jpeg

logger = logging.getLogger(__name__)


class ExportCoordinator:
    """
    Runs full-resolution grading for export requests, one at a time.
    """

    def __init__(self, workers: int = 4, rows_per_chunk: int = DEFAULT_ROWS_PER_CHUNK,
                 jpeg_quality: int = 90):
        self.workers = workers
        self.rows_per_chunk = rows_per_chunk
        self.jpeg_quality = jpeg_quality

        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="FilmGrade-Export")
        self._lock = threading.Lock()
        self._active: Optional[RenderTask] = None

    @property
    def in_progress(self) -> bool:
        with self._lock:
            return self._active is not None

    def submit(self, buffer: PixelBuffer, lut: Lut, params: AdjustmentParams,
               rng: Optional[np.random.Generator] = None) -> Future:
        """
        Start an export in the background.

        Returns:
            Future resolving to the finished RenderTask; grading errors are
            raised from ``Future.result()``

        Raises:
            ExportInProgressError: if another export is still running
        """
        with self._lock:
            if self._active is not None:
                raise ExportInProgressError(
                    f"Export {self._active.task_id} is still in progress"
                )
            task = RenderTask(kind=RenderKind.EXPORT, params=params)
            self._active = task

        logger.info(f"Starting export {task.task_id} ({buffer.width}x{buffer.height})")
        try:
            return self.executor.submit(self._run, task, buffer, lut, params, rng)
        except RuntimeError:
            with self._lock:
                self._active = None
            raise

    def export(self, buffer: PixelBuffer, lut: Lut, params: AdjustmentParams,
               rng: Optional[np.random.Generator] = None,
               timeout: Optional[float] = None) -> PixelBuffer:
        """Run an export and wait for the graded buffer"""
        return self.submit(buffer, lut, params, rng).result(timeout=timeout).result

    def export_jpeg(self, buffer: PixelBuffer, lut: Lut, params: AdjustmentParams,
                    rng: Optional[np.random.Generator] = None,
                    timeout: Optional[float] = None) -> bytes:
        """Run an export and encode the result as JPEG"""
        graded = self.export(buffer, lut, params, rng=rng, timeout=timeout)
        return encode_jpeg(graded, quality=self.jpeg_quality)

    def shutdown(self, wait: bool = True):
        self.executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def _run(self, task: RenderTask, buffer: PixelBuffer, lut: Lut,
             params: AdjustmentParams, rng: Optional[np.random.Generator]) -> RenderTask:
        task.started_at = time.time()
        try:
            task.result = grade(buffer, lut, params, rng=rng, workers=self.workers,
                                rows_per_chunk=self.rows_per_chunk)
        except Exception as e:
            task.error = e
            logger.error(f"Export {task.task_id} failed: {e}")
            raise
        finally:
            task.completed_at = time.time()
            with self._lock:
                self._active = None

        logger.info(f"Export {task.task_id} completed in {task.duration:.3f}s")
        return task
