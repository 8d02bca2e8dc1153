"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Blur defaults
    DEFAULT_THREADS: int = -1  # -1 = single thread, 0 = all cores

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(message)s"

    # Benchmark
    BENCHMARK_RUNS: int = 3
    BENCHMARK_WARMUP_RUNS: int = 1

    model_config = {"env_prefix": "FASTBLUR_"}


settings = Settings()
