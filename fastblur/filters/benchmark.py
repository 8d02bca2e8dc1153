# fastblur Filters - Benchmark Utilities
"""
Benchmark utilities comparing the sequential and parallel blur executors.

Every executor blurs the same source several times, the best and mean wall
time are reported and all outputs are checked for bit-identity.

Results are serializable dataclasses with ASCII table output.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from typing import TYPE_CHECKING, Any

from .executor import SINGLE_THREAD, create_executor, resolve_thread_count

if TYPE_CHECKING:
    from fastblur.raster import Raster


@dataclass
class ExecutorResult:
    """Result from the runs of a single executor."""
    executor: str  # 'sequential' or 'parallel'
    threads: int
    best_ms: float
    mean_ms: float
    runs: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BenchmarkResult:
    """Complete benchmark result - serializable."""
    source_size: tuple[int, int]
    sigma: float
    box_count: int
    num_cpus: int
    results: list[ExecutorResult] = field(default_factory=list)
    identical: bool = True  # All executors produced the same output

    @property
    def baseline(self) -> ExecutorResult | None:
        """The first sequential result, if any."""
        return next((r for r in self.results if r.executor == 'sequential'), None)

    def speedup(self, result: ExecutorResult) -> float | None:
        """Best-time speedup of a result relative to the sequential baseline."""
        baseline = self.baseline
        if baseline is None or result.best_ms <= 0:
            return None
        return baseline.best_ms / result.best_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d['results'] = [r.to_dict() for r in self.results]
        return d

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> 'BenchmarkResult':
        """Create from dictionary."""
        d = dict(d)
        results = [ExecutorResult(**r) for r in d.pop('results', [])]
        d['source_size'] = tuple(d['source_size'])
        return cls(**d, results=results)

    def ascii_table(self) -> str:
        """Generate ASCII table representation."""
        lines = []
        lines.append("=" * 60)
        lines.append(f"BENCHMARK: sigma={self.sigma} boxes={self.box_count}")
        lines.append("=" * 60)
        lines.append(f"Source: {self.source_size[0]}x{self.source_size[1]}")
        lines.append(f"CPUs: {self.num_cpus}")
        lines.append("")

        lines.append("-" * 60)
        lines.append(f"{'Executor':<14} {'Threads':>8} {'Best':>12} {'Mean':>12} {'Speedup':>9}")
        lines.append("-" * 60)
        for r in self.results:
            speedup = self.speedup(r)
            speedup_str = f"{speedup:>8.2f}x" if speedup is not None else f"{'-':>9}"
            lines.append(
                f"{r.executor:<14} {r.threads:>8} {r.best_ms:>10.2f}ms {r.mean_ms:>10.2f}ms {speedup_str}"
            )
        lines.append("-" * 60)

        status = "identical ✓" if self.identical else "MISMATCH ✗"
        lines.append(f"Outputs: {status}")
        lines.append("=" * 60)
        return "\n".join(lines)

    def print(self) -> None:
        """Print ASCII table to terminal."""
        print(self.ascii_table())


@dataclass
class BenchmarkConfig:
    """Configuration for benchmark runs.

    thread_counts uses the executor convention: -1 = sequential,
    0 = all hardware threads, n = n worker threads.
    """
    runs: int | None = None  # None = FASTBLUR_BENCHMARK_RUNS
    warmup_runs: int | None = None  # None = FASTBLUR_BENCHMARK_WARMUP_RUNS
    thread_counts: list[int] = field(default_factory=lambda: [SINGLE_THREAD, 2, 0])

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Benchmark:
    """Benchmark runner for the blur executors.

    Example::

        from fastblur.filters import Benchmark, BenchmarkConfig

        result = Benchmark.run(raster, sigma=3.0, config=BenchmarkConfig(runs=5))
        result.print()
        print(result.to_json())
    """

    @staticmethod
    def run(
        raster: 'Raster',
        sigma: float,
        box_count: int = 1,
        config: BenchmarkConfig | None = None,
    ) -> BenchmarkResult:
        """Benchmark every configured thread count on the same source.

        :param raster: Source raster
        :param sigma: Standard deviation of the blur
        :param box_count: Number of boxes
        :param config: Benchmark configuration
        :returns: BenchmarkResult with timing data
        """
        from fastblur.config import settings

        config = config or BenchmarkConfig()
        runs = max(1, config.runs if config.runs is not None else settings.BENCHMARK_RUNS)
        warmup_runs = (
            config.warmup_runs if config.warmup_runs is not None else settings.BENCHMARK_WARMUP_RUNS
        )

        results: list[ExecutorResult] = []
        reference_hash: str | None = None
        identical = True

        for threads in config.thread_counts:
            executor = create_executor(threads)

            for _ in range(warmup_runs):
                executor.run(raster, box_count, sigma)

            times = []
            for _ in range(runs):
                result = executor.run(raster, box_count, sigma)
                times.append(result.elapsed_ms)

                output_hash = result.raster.get_hash()
                if reference_hash is None:
                    reference_hash = output_hash
                elif output_hash != reference_hash:
                    identical = False

            results.append(ExecutorResult(
                executor=executor.name,
                threads=resolve_thread_count(threads),
                best_ms=min(times),
                mean_ms=sum(times) / len(times),
                runs=runs,
            ))

        return BenchmarkResult(
            source_size=raster.size,
            sigma=sigma,
            box_count=box_count,
            num_cpus=os.cpu_count() or 1,
            results=results,
            identical=identical,
        )


__all__ = [
    'Benchmark',
    'BenchmarkConfig',
    'BenchmarkResult',
    'ExecutorResult',
]
