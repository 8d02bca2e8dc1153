# fastblur Filters - Box & Fast Gaussian Blur
"""
Separable box blur kernels and the three pass fast Gaussian approximation.

A Gaussian of standard deviation sigma is approximated by repeating a
horizontal and a vertical box (moving average) pass three times. Windows are
clamped at the image border, so edge pixels average over fewer samples.

All kernels read one buffer and write a freshly allocated one, the input
raster is never modified.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

import numpy as np

from fastblur.errors import ConfigurationError
from .base import Filter, FilterContext, register_alias, register_filter

if TYPE_CHECKING:
    from fastblur.raster import Raster

NUMBER_OF_ITERATIONS = 3
"""Horizontal/vertical pass pairs used to approximate a Gaussian"""


class Orientation(Enum):
    """Direction of a single box pass."""
    HORIZONTAL = 'horizontal'
    VERTICAL = 'vertical'

    @property
    def axis(self) -> int:
        """The numpy axis the window slides along."""
        return 1 if self is Orientation.HORIZONTAL else 0


PassRunner = Callable[[np.ndarray, int, Orientation, int], np.ndarray]
"""(source pixels, radius, orientation, iteration) -> new pixels"""


@dataclass
class BlurConfig:
    """Parameters of a fast Gaussian blur run.

    :param sigma: Standard deviation of the approximated Gaussian, > 0
    :param box_count: Number of box passes the radius is derived for, >= 1
    :param threads: -1 = single thread, 0 = all hardware threads,
        > 0 = explicit worker count
    """
    sigma: float = 1.0
    box_count: int = 1
    threads: int = -1

    def validate(self) -> 'BlurConfig':
        """Check all parameters before any work starts.

        :raises ConfigurationError: If a parameter is out of range
        """
        if self.threads < -1:
            raise ConfigurationError("Number of threads should be >= -1")
        if self.box_count < 1:
            raise ConfigurationError("Number of boxes should be >= 1")
        if not self.sigma > 0:
            raise ConfigurationError("Sigma value must be > 0")
        if not math.isfinite(self.sigma):
            raise ConfigurationError("Sigma value must be finite")
        return self

    @property
    def radius(self) -> int:
        return calculate_box_radius(self.sigma, self.box_count)


def calculate_box_radius(sigma: float, box_count: int) -> int:
    """Half width of the box filter approximating a Gaussian.

    ``round(sqrt(12 * sigma^2 / box_count + 1))``, rounding halves away
    from zero. The same radius is used for every iteration.

    :param sigma: Standard deviation, > 0
    :param box_count: Number of boxes, >= 1
    :returns: The box radius
    """
    squared = 12 * sigma * sigma / box_count + 1
    if math.isfinite(squared):
        return int(math.floor(math.sqrt(squared) + 0.5))
    # beyond float range sigma is integral, round(sqrt(x)) == (isqrt(4x) + 1) // 2
    scaled = 4 * (12 * int(sigma) ** 2 + box_count) // box_count
    return (math.isqrt(scaled) + 1) // 2


def _window_bounds(length: int, radius: int, start: int, stop: int) -> tuple[np.ndarray, np.ndarray]:
    """Clamped [lo, hi) windows for the output positions start..stop-1."""
    positions = np.arange(start, stop, dtype=np.int64)
    lo = np.maximum(positions - radius, 0)
    hi = np.minimum(positions + radius + 1, length)
    return lo, hi


def _rounded_mean(sums: np.ndarray, counts: np.ndarray) -> np.ndarray:
    # round(sums / counts) with halves rounded up, exact in integers
    return ((2 * sums + counts) // (2 * counts)).astype(np.uint8)


def box_pass(
    src: np.ndarray,
    dst: np.ndarray,
    radius: int,
    orientation: Orientation,
    start: int,
    stop: int,
) -> None:
    """Compute the output rows [start, stop) of one box pass.

    Only ``src`` is read and only ``dst[start:stop]`` is written, so
    disjoint row bands can be computed concurrently.

    :param src: The pass input, shape (height, width), uint8
    :param dst: The pass output, same shape as src
    :param radius: Box half width
    :param orientation: Horizontal (along rows) or vertical (along columns)
    :param start: First output row
    :param stop: Output row after the last one
    """
    if start >= stop:
        return
    height, width = src.shape
    # windows wider than the axis are clamped to the same samples
    radius = min(radius, width if orientation is Orientation.HORIZONTAL else height)

    if orientation is Orientation.HORIZONTAL:
        band = src[start:stop]
        csum = np.zeros((stop - start, width + 1), dtype=np.int64)
        np.cumsum(band, axis=1, dtype=np.int64, out=csum[:, 1:])
        lo, hi = _window_bounds(width, radius, 0, width)
        sums = csum[:, hi] - csum[:, lo]
        dst[start:stop] = _rounded_mean(sums, hi - lo)
    else:
        lo, hi = _window_bounds(height, radius, start, stop)
        first, last = int(lo[0]), int(hi[-1])
        csum = np.zeros((last - first + 1, width), dtype=np.int64)
        np.cumsum(src[first:last], axis=0, dtype=np.int64, out=csum[1:])
        sums = csum[hi - first] - csum[lo - first]
        dst[start:stop] = _rounded_mean(sums, (hi - lo)[:, np.newaxis])


def run_pass_sequential(
    src: np.ndarray, radius: int, orientation: Orientation, iteration: int = 0
) -> np.ndarray:
    """Run a complete box pass on the calling thread."""
    dst = np.empty_like(src)
    box_pass(src, dst, radius, orientation, 0, src.shape[0])
    return dst


def blur_horizontal(raster: 'Raster', radius: int) -> 'Raster':
    """Average every pixel with its row neighbours within radius.

    :param raster: The input raster, not modified
    :param radius: Box half width
    :returns: A new raster
    """
    return raster.with_pixels(run_pass_sequential(raster.pixels, radius, Orientation.HORIZONTAL))


def blur_vertical(raster: 'Raster', radius: int) -> 'Raster':
    """Average every pixel with its column neighbours within radius.

    :param raster: The input raster, not modified
    :param radius: Box half width
    :returns: A new raster
    """
    return raster.with_pixels(run_pass_sequential(raster.pixels, radius, Orientation.VERTICAL))


def gaussian_blur(
    raster: 'Raster',
    sigma: float,
    box_count: int = 1,
    run_pass: PassRunner | None = None,
) -> 'Raster':
    """Approximate a Gaussian blur by three horizontal/vertical box passes.

    :param raster: The input raster. Stays unmodified and usable.
    :param sigma: Standard deviation of the Gaussian, > 0
    :param box_count: Number of boxes the radius is derived for, >= 1
    :param run_pass: Evaluates a single pass. Defaults to the sequential
        kernel, execution strategies pass their own.
    :returns: The blurred raster with the input's size and max intensity
    """
    radius = calculate_box_radius(sigma, box_count)
    run_pass = run_pass or run_pass_sequential

    pixels = raster.pixels.copy()
    for iteration in range(NUMBER_OF_ITERATIONS):
        pixels = run_pass(pixels, radius, Orientation.HORIZONTAL, iteration)
        pixels = run_pass(pixels, radius, Orientation.VERTICAL, iteration)
    return raster.with_pixels(pixels)


@register_filter
@dataclass
class HorizontalBoxBlur(Filter):
    """Single horizontal box pass with clamped borders.

    radius: Box half width in pixels
    """

    radius: int = 1

    def __post_init__(self):
        if self.radius < 0:
            raise ConfigurationError(f"Box radius must be >= 0, got {self.radius}")

    def apply(self, raster: 'Raster', context: FilterContext | None = None) -> 'Raster':
        return blur_horizontal(raster, self.radius)


@register_filter
@dataclass
class VerticalBoxBlur(Filter):
    """Single vertical box pass with clamped borders.

    radius: Box half width in pixels
    """

    radius: int = 1

    def __post_init__(self):
        if self.radius < 0:
            raise ConfigurationError(f"Box radius must be >= 0, got {self.radius}")

    def apply(self, raster: 'Raster', context: FilterContext | None = None) -> 'Raster':
        return blur_vertical(raster, self.radius)


@register_filter
@dataclass
class FastGaussianBlur(Filter):
    """Fast Gaussian blur approximation using three box blur iterations.

    Parameters:
        sigma: Standard deviation of the approximated Gaussian
        box_count: Number of boxes the box radius is derived for
        threads: -1 = single thread, 0 = all cores, n = n worker threads,
            None = FASTBLUR_DEFAULT_THREADS

    When a context is passed the elapsed time is stored as 'blur_time_ms'
    and the thread count used as 'blur_threads'.

    Example:
        'blur 2.5' or 'blur sigma=1.5 threads=0'
    """

    sigma: float = 1.0
    box_count: int = 1
    threads: int | None = None

    def __post_init__(self):
        self.config.validate()

    @property
    def config(self) -> BlurConfig:
        from fastblur.config import settings

        threads = settings.DEFAULT_THREADS if self.threads is None else self.threads
        return BlurConfig(sigma=self.sigma, box_count=self.box_count, threads=threads)

    def apply(self, raster: 'Raster', context: FilterContext | None = None) -> 'Raster':
        from .executor import create_executor

        config = self.config
        result = create_executor(config.threads).run(raster, config.box_count, config.sigma)
        if context is not None:
            context['blur_time_ms'] = result.elapsed_ms
            context['blur_threads'] = result.threads
        return result.raster


register_alias('blur', FastGaussianBlur)
register_alias('gaussian', FastGaussianBlur)
register_alias('hbox', HorizontalBoxBlur)
register_alias('vbox', VerticalBoxBlur)


__all__ = [
    'NUMBER_OF_ITERATIONS',
    'Orientation',
    'BlurConfig',
    'calculate_box_radius',
    'box_pass',
    'run_pass_sequential',
    'blur_horizontal',
    'blur_vertical',
    'gaussian_blur',
    'HorizontalBoxBlur',
    'VerticalBoxBlur',
    'FastGaussianBlur',
]
