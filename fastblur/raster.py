"""
In-memory 8-bit grayscale raster used by all blur operations.
"""

from __future__ import annotations

import hashlib

import numpy as np
import PIL.Image

from .errors import RasterFormatError


class Raster:
    """
    An 8-bit grayscale image held in a single contiguous numpy buffer.

    The pixel buffer has the shape (height, width) and dtype uint8, row-major,
    so pixel (row, col) lives at flat index ``row * width + col``.
    """

    def __init__(self, pixels: np.ndarray, max_intensity: int = 255):
        """
        Creates a raster from a 2D array.

        The array is taken over as is when it already is a C-contiguous uint8
        array, otherwise a converted copy is stored.

        :param pixels: The intensities, shape (height, width)
        :param max_intensity: The nominal maximum sample value of the source
            format. Not enforced during blurring.
        :raises RasterFormatError: If the array is not 2D or has an empty axis
        """
        if pixels.ndim != 2:
            raise RasterFormatError(f"Expected a 2D grayscale array, got shape {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise RasterFormatError(f"Raster dimensions must be positive, got {pixels.shape[1]}x{pixels.shape[0]}")
        self.pixels: np.ndarray = np.ascontiguousarray(pixels, dtype=np.uint8)
        self.max_intensity = int(max_intensity)

    @property
    def width(self) -> int:
        """The raster's width in pixels"""
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        """The raster's height in pixels"""
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """
        The raster's size as (width, height) tuple
        """
        return self.width, self.height

    def copy(self) -> Raster:
        """
        Creates a deep copy with its own pixel storage.

        :return: The copy
        """
        return Raster(self.pixels.copy(), max_intensity=self.max_intensity)

    def with_pixels(self, pixels: np.ndarray) -> Raster:
        """
        Creates a new raster sharing this raster's max intensity.

        :param pixels: The new pixel buffer, same shape as this raster's
        :return: The new raster
        """
        return Raster(pixels, max_intensity=self.max_intensity)

    @staticmethod
    def from_array(data: np.ndarray, max_intensity: int = 255) -> Raster:
        """
        Creates a raster from an array of intensities.

        Values are clipped to 0..255 before conversion to uint8.

        :param data: 2D array of intensities
        :param max_intensity: The nominal maximum intensity
        :return: The raster
        """
        data = np.asarray(data)
        if data.dtype != np.uint8:
            data = np.clip(data, 0, 255).astype(np.uint8)
        return Raster(data, max_intensity=max_intensity)

    @staticmethod
    def from_pil(image: PIL.Image.Image) -> Raster:
        """
        Creates a raster from a PIL image, converting it to grayscale first.

        :param image: The PIL image
        :return: The raster
        """
        if image.mode != "L":
            image = image.convert("L")
        return Raster(np.asarray(image, dtype=np.uint8).copy())

    def to_pil(self) -> PIL.Image.Image:
        """
        Converts the raster to a PIL image in mode L

        :return: The PIL image
        """
        return PIL.Image.fromarray(self.pixels)

    def get_raw_data(self) -> bytes:
        """
        Returns the samples as flat row-major byte string
        """
        return self.pixels.tobytes()

    def get_hash(self) -> str:
        """
        Returns a hash uniquely identifying dimensions and samples

        :return: The raster's hash
        """
        digest = hashlib.md5(f"{self.width}x{self.height}:".encode())
        digest.update(self.get_raw_data())
        return digest.hexdigest()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return (
            self.max_intensity == other.max_intensity
            and self.pixels.shape == other.pixels.shape
            and bool(np.array_equal(self.pixels, other.pixels))
        )

    __hash__ = None

    def __str__(self) -> str:
        return f"Raster ({self.width}x{self.height} max={self.max_intensity})"

    def __repr__(self) -> str:
        return str(self)


__all__ = ["Raster"]
