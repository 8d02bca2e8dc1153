"""
fastblur - Fast Gaussian blur approximation for 8-bit grayscale images
"""

from .raster import Raster
from .errors import (
    FastBlurError,
    ConfigurationError,
    RasterFormatError,
    RasterIOError,
    RasterReadError,
    RasterWriteError,
)
from .formats import decode_pgm, encode_pgm, read_pgm, write_pgm
from .filters import (
    BlurConfig,
    BlurResult,
    FastGaussianBlur,
    SequentialExecutor,
    ParallelExecutor,
    blur,
    calculate_box_radius,
    gaussian_blur,
)

__all__ = [
    # Raster
    "Raster",
    # Errors
    "FastBlurError",
    "ConfigurationError",
    "RasterFormatError",
    "RasterIOError",
    "RasterReadError",
    "RasterWriteError",
    # Codec
    "decode_pgm",
    "encode_pgm",
    "read_pgm",
    "write_pgm",
    # Blur
    "BlurConfig",
    "BlurResult",
    "FastGaussianBlur",
    "SequentialExecutor",
    "ParallelExecutor",
    "blur",
    "calculate_box_radius",
    "gaussian_blur",
]

__version__ = "0.1.0"
