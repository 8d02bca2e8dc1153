"""
Execution strategies for the fast Gaussian blur.

Provides two interchangeable executors with the same contract:
- SequentialExecutor: every pass on the calling thread
- ParallelExecutor: every pass split into contiguous row bands that are
  computed by a thread pool, joined before the next pass starts

Both produce bit-identical output. Each row of the output is written by
exactly one worker and each pass only reads the previous pass's buffer, so
no locking is required.
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from fastblur.errors import ConfigurationError
from .blur import BlurConfig, Orientation, PassRunner, box_pass, gaussian_blur

if TYPE_CHECKING:
    from fastblur.raster import Raster

logger = logging.getLogger(__name__)

SINGLE_THREAD = -1
ALL_THREADS = 0


@dataclass
class PassMetrics:
    """Timing of a single box pass.

    :param iteration: Iteration index, 0-based
    :param orientation: 'horizontal' or 'vertical'
    :param bands: Number of row bands the pass was split into
    :param time_ms: Wall time of the pass in milliseconds
    """
    iteration: int
    orientation: str
    bands: int
    time_ms: float


@dataclass
class ExecutorMetrics:
    """Performance metrics of one blur run.

    :param executor: 'sequential' or 'parallel'
    :param threads: Number of threads used
    :param passes: Per-pass timings in execution order
    :param start_time: Start timestamp (perf_counter)
    :param end_time: End timestamp (perf_counter)
    """
    executor: str
    threads: int
    passes: list[PassMetrics] = field(default_factory=list)
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def total_time_s(self) -> float:
        """Total execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def total_time_ms(self) -> float:
        return self.total_time_s * 1000

    def summary(self) -> str:
        """Generate human-readable summary of metrics."""
        lines = [
            "=== Blur Execution Metrics ===",
            f"Executor: {self.executor} ({self.threads} thread(s))",
            f"Total time: {self.total_time_ms:.3f}ms",
            "",
            "Per-pass breakdown:",
        ]
        for p in self.passes:
            lines.append(
                f"  {p.iteration}/{p.orientation}: {p.time_ms:.3f}ms ({p.bands} band(s))"
            )
        return "\n".join(lines)


@dataclass
class BlurResult:
    """Result of an executor run.

    :param raster: The blurred raster
    :param elapsed_s: Wall time of the blur in seconds
    :param threads: Number of threads used
    :param metrics: Detailed per-pass metrics
    """
    raster: 'Raster'
    elapsed_s: float
    threads: int
    metrics: ExecutorMetrics

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_s * 1000


def resolve_thread_count(threads: int) -> int:
    """Map a thread setting to the number of threads actually used.

    :param threads: -1 = single thread, 0 = all hardware threads, n > 0 = n
    :returns: The effective thread count, >= 1
    :raises ConfigurationError: If threads < -1
    """
    if threads < SINGLE_THREAD:
        raise ConfigurationError("Number of threads should be >= -1")
    if threads == SINGLE_THREAD:
        return 1
    if threads == ALL_THREADS:
        return os.cpu_count() or 1
    return threads


def split_rows(height: int, parts: int) -> list[tuple[int, int]]:
    """Split rows 0..height into at most parts contiguous, disjoint bands.

    Band sizes differ by at most one row; no band is empty.
    """
    parts = max(1, min(parts, height))
    base, extra = divmod(height, parts)
    bands = []
    start = 0
    for i in range(parts):
        stop = start + base + (1 if i < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


class BlurExecutor(ABC):
    """Base class of the execution strategies.

    Executors hold no state between runs, every call to run() is an
    independent computation.
    """

    name: ClassVar[str] = ''

    def run(self, raster: 'Raster', box_count: int, sigma: float) -> BlurResult:
        """Blur a raster and measure the elapsed wall time.

        :param raster: The input raster, not modified
        :param box_count: Number of boxes the radius is derived for
        :param sigma: Standard deviation of the approximated Gaussian
        :returns: The blurred raster with timing information
        """
        BlurConfig(sigma=sigma, box_count=box_count).validate()
        threads = self.get_thread_count()
        metrics = ExecutorMetrics(executor=self.name, threads=threads)

        metrics.start_time = time.perf_counter()
        blurred = self._blur(raster, box_count, sigma, threads, metrics)
        metrics.end_time = time.perf_counter()

        logger.info("Time (%i thread(s)): %g ms", threads, metrics.total_time_ms)
        logger.debug(metrics.summary())
        return BlurResult(
            raster=blurred,
            elapsed_s=metrics.total_time_s,
            threads=threads,
            metrics=metrics,
        )

    @abstractmethod
    def get_thread_count(self) -> int:
        """The number of threads a run started now would use."""

    @abstractmethod
    def _blur(
        self,
        raster: 'Raster',
        box_count: int,
        sigma: float,
        threads: int,
        metrics: ExecutorMetrics,
    ) -> 'Raster':
        pass

    @staticmethod
    def _timed(run_pass: PassRunner, metrics: ExecutorMetrics, bands: int) -> PassRunner:
        """Wrap a pass runner so every pass is recorded in metrics."""

        def timed_pass(src: np.ndarray, radius: int, orientation: Orientation, iteration: int) -> np.ndarray:
            start = time.perf_counter()
            result = run_pass(src, radius, orientation, iteration)
            metrics.passes.append(PassMetrics(
                iteration=iteration,
                orientation=orientation.value,
                bands=min(bands, src.shape[0]),
                time_ms=(time.perf_counter() - start) * 1000,
            ))
            return result

        return timed_pass


class SequentialExecutor(BlurExecutor):
    """Runs all passes on the calling thread."""

    name = 'sequential'

    def get_thread_count(self) -> int:
        return 1

    def _blur(self, raster, box_count, sigma, threads, metrics):
        def run_pass(src: np.ndarray, radius: int, orientation: Orientation, iteration: int) -> np.ndarray:
            dst = np.empty_like(src)
            box_pass(src, dst, radius, orientation, 0, src.shape[0])
            return dst

        return gaussian_blur(raster, sigma, box_count, run_pass=self._timed(run_pass, metrics, 1))


class ParallelExecutor(BlurExecutor):
    """Splits every pass into row bands computed by a thread pool.

    Example::

        result = ParallelExecutor(threads=4).run(raster, box_count=1, sigma=2.0)
        result.raster  # identical to SequentialExecutor().run(...).raster

    :param threads: Worker count, 0 = all hardware threads, resolved on
        every run
    """

    name = 'parallel'

    def __init__(self, threads: int = ALL_THREADS):
        if threads < 0:
            raise ConfigurationError(
                f"Parallel executor requires threads >= 0, got {threads}"
            )
        self._threads = threads

    @property
    def threads(self) -> int:
        """The configured thread setting (0 = all hardware threads)."""
        return self._threads

    def get_thread_count(self) -> int:
        return resolve_thread_count(self._threads)

    def _blur(self, raster, box_count, sigma, threads, metrics):
        def run_pass(src: np.ndarray, radius: int, orientation: Orientation, iteration: int) -> np.ndarray:
            dst = np.empty_like(src)
            # one pool per pass, leaving the with block joins every band
            with ThreadPoolExecutor(max_workers=threads, thread_name_prefix='BlurWorker') as pool:
                futures: list[Future] = [
                    pool.submit(box_pass, src, dst, radius, orientation, start, stop)
                    for start, stop in split_rows(src.shape[0], threads)
                ]
            for future in futures:
                future.result()
            return dst

        return gaussian_blur(raster, sigma, box_count, run_pass=self._timed(run_pass, metrics, threads))


def create_executor(threads: int) -> BlurExecutor:
    """Create the executor for a thread setting.

    :param threads: -1 = SequentialExecutor, 0 = ParallelExecutor on all
        hardware threads, n > 0 = ParallelExecutor with n threads
    :raises ConfigurationError: If threads < -1
    """
    if threads < SINGLE_THREAD:
        raise ConfigurationError("Number of threads should be >= -1")
    if threads == SINGLE_THREAD:
        return SequentialExecutor()
    return ParallelExecutor(threads)


def blur(raster: 'Raster', threads: int, box_count: int, sigma: float) -> BlurResult:
    """Validate the parameters and blur a raster with the matching executor.

    :param raster: The input raster, not modified
    :param threads: -1, 0 or a positive worker count
    :param box_count: Number of boxes, >= 1
    :param sigma: Standard deviation, > 0
    :returns: The blurred raster with timing information
    :raises ConfigurationError: If a parameter is out of range
    """
    BlurConfig(sigma=sigma, box_count=box_count, threads=threads).validate()
    return create_executor(threads).run(raster, box_count, sigma)


__all__ = [
    'SINGLE_THREAD',
    'ALL_THREADS',
    'PassMetrics',
    'ExecutorMetrics',
    'BlurResult',
    'BlurExecutor',
    'SequentialExecutor',
    'ParallelExecutor',
    'resolve_thread_count',
    'split_rows',
    'create_executor',
    'blur',
]
