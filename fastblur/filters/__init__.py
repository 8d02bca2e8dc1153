# fastblur Filters Module
"""
Dataclass-based filter system for grayscale rasters.

All filters are JSON-serializable and can be composed into pipelines.
"""

from .base import (
    Filter,
    FilterContext,
    FILTER_REGISTRY,
    FILTER_ALIASES,
    register_filter,
    register_alias,
)

from .blur import (
    NUMBER_OF_ITERATIONS,
    Orientation,
    BlurConfig,
    calculate_box_radius,
    box_pass,
    blur_horizontal,
    blur_vertical,
    gaussian_blur,
    HorizontalBoxBlur,
    VerticalBoxBlur,
    FastGaussianBlur,
)

from .pipeline import FilterPipeline

from .executor import (
    SINGLE_THREAD,
    ALL_THREADS,
    BlurExecutor,
    SequentialExecutor,
    ParallelExecutor,
    BlurResult,
    ExecutorMetrics,
    PassMetrics,
    create_executor,
    resolve_thread_count,
    split_rows,
    blur,
)

from .benchmark import (
    Benchmark,
    BenchmarkConfig,
    BenchmarkResult,
    ExecutorResult,
)

__all__ = [
    # Base
    'Filter',
    'FilterContext',
    'FILTER_REGISTRY',
    'FILTER_ALIASES',
    'register_filter',
    'register_alias',
    # Blur
    'NUMBER_OF_ITERATIONS',
    'Orientation',
    'BlurConfig',
    'calculate_box_radius',
    'box_pass',
    'blur_horizontal',
    'blur_vertical',
    'gaussian_blur',
    'HorizontalBoxBlur',
    'VerticalBoxBlur',
    'FastGaussianBlur',
    # Pipeline
    'FilterPipeline',
    # Executors
    'SINGLE_THREAD',
    'ALL_THREADS',
    'BlurExecutor',
    'SequentialExecutor',
    'ParallelExecutor',
    'BlurResult',
    'ExecutorMetrics',
    'PassMetrics',
    'create_executor',
    'resolve_thread_count',
    'split_rows',
    'blur',
    # Benchmark
    'Benchmark',
    'BenchmarkConfig',
    'BenchmarkResult',
    'ExecutorResult',
]
