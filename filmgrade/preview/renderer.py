"""
Interactive preview renderer.

Runs preview grading in the background. Every submission starts a new
generation: a queued older render is cancelled, and an older render that is
already running completes but its result is marked stale and never
delivered. The latest parameters always win.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Callable, Dict, Optional, Any

import numpy as np

from .models import RenderTask, RenderKind
from ..grading.models import AdjustmentParams, Lut, PixelBuffer
from ..grading.pipeline import grade

logger = logging.getLogger(__name__)


class PreviewRenderer:
    """
    Latest-wins background renderer for the interactive preview.

    ``on_result`` runs on the worker thread while the renderer lock is held;
    it may call ``submit`` but should return promptly.
    """

    def __init__(self, max_workers: int = 1, grading_workers: int = 1,
                 on_result: Optional[Callable[[RenderTask], None]] = None):
        self.grading_workers = grading_workers
        self.on_result = on_result

        self.executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="FilmGrade-Preview"
        )

        self._lock = threading.RLock()
        self._generation = 0
        self._current: Optional[RenderTask] = None
        self._current_future: Optional[Future] = None
        self._latest: Optional[RenderTask] = None
        self._shutdown = False

        self.stats = {
            'renders_submitted': 0,
            'renders_delivered': 0,
            'renders_superseded': 0,
            'renders_cancelled': 0,
            'renders_failed': 0,
        }

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, buffer: PixelBuffer, lut: Lut, params: AdjustmentParams,
               rng: Optional[np.random.Generator] = None) -> RenderTask:
        """
        Submit a preview render, superseding any earlier one.

        Returns:
            The task for the new generation
        """
        with self._lock:
            if self._shutdown:
                raise RuntimeError("PreviewRenderer is shut down")

            self._generation += 1
            task = RenderTask(kind=RenderKind.PREVIEW, params=params,
                              generation=self._generation)

            if self._current_future is not None and self._current_future.cancel():
                self._current.stale = True
                self._current.completed_at = time.time()
                self.stats['renders_cancelled'] += 1
                logger.debug(f"Cancelled queued preview generation {self._current.generation}")

            self._current = task
            self._current_future = self.executor.submit(self._run, task, buffer, lut, params, rng)
            self.stats['renders_submitted'] += 1

        logger.debug(f"Submitted preview generation {task.generation}")
        return task

    def is_current(self, task: RenderTask) -> bool:
        """Whether ``task`` belongs to the newest generation"""
        return task.generation == self._generation

    def latest(self) -> Optional[PixelBuffer]:
        """Most recent delivered preview result"""
        with self._lock:
            return self._latest.result if self._latest else None

    def wait(self, timeout: Optional[float] = None) -> Optional[RenderTask]:
        """
        Block until the current generation finishes.

        Returns:
            The finished task, or None if nothing was submitted
        """
        with self._lock:
            future = self._current_future
        if future is None:
            return None
        return future.result(timeout=timeout)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {'generation': self._generation, **self.stats}

    def shutdown(self, wait: bool = True):
        """Stop accepting renders and release worker threads"""
        with self._lock:
            self._shutdown = True
            if self._current_future is not None:
                self._current_future.cancel()
        self.executor.shutdown(wait=wait)
        logger.debug("PreviewRenderer shut down")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def _run(self, task: RenderTask, buffer: PixelBuffer, lut: Lut,
             params: AdjustmentParams, rng: Optional[np.random.Generator]) -> RenderTask:
        task.started_at = time.time()
        result = None

        try:
            result = grade(buffer, lut, params, rng=rng, workers=self.grading_workers)
        except Exception as e:
            task.error = e
            logger.error(f"Preview generation {task.generation} failed: {e}")

        task.completed_at = time.time()

        with self._lock:
            if not self.is_current(task):
                task.stale = True
                self.stats['renders_superseded'] += 1
                logger.debug(f"Discarded stale preview generation {task.generation}")
                return task

            if task.error is not None:
                self.stats['renders_failed'] += 1
                return task

            task.result = result
            self._latest = task
            self.stats['renders_delivered'] += 1

            # Delivered under the lock so no newer submit can land in between
            if self.on_result:
                try:
                    self.on_result(task)
                except Exception as e:
                    logger.error(f"Preview callback failed: {e}")

        logger.debug(f"Delivered preview generation {task.generation} in {task.duration:.3f}s")
        return task
