"""
Exception types raised by fastblur.

The blur kernels themselves never raise for well-formed rasters; errors only
originate from configuration validation, raster construction and raster
file I/O.
"""

from __future__ import annotations

from pathlib import Path


class FastBlurError(Exception):
    """Base class for all fastblur errors."""


class ConfigurationError(FastBlurError, ValueError):
    """Invalid blur parameters (sigma, thread count or box count)."""


class RasterFormatError(FastBlurError, ValueError):
    """Data is not a valid binary graymap."""


class RasterIOError(FastBlurError, OSError):
    """A raster file could not be opened.

    :param path: The file that failed
    :param message: Human readable description
    """

    def __init__(self, path: str | Path, message: str):
        super().__init__(message)
        self.path = Path(path)
        self.message = message

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


class RasterReadError(RasterIOError):
    """Input file not found or unreadable."""

    def __init__(self, path: str | Path, message: str = "Input file not found"):
        super().__init__(path, message)


class RasterWriteError(RasterIOError):
    """Output file could not be opened for writing."""

    def __init__(self, path: str | Path, message: str = "Output file could not be written"):
        super().__init__(path, message)


__all__ = [
    'FastBlurError',
    'ConfigurationError',
    'RasterFormatError',
    'RasterIOError',
    'RasterReadError',
    'RasterWriteError',
]
