# fastblur - Raster Codec
"""
Binary portable graymap ("P5") encoding and decoding.

Layout::

    P5 <ws> width <ws> height <ws> max_intensity <single ws byte> samples

Samples are ``width * height`` unsigned bytes in row-major order. Only
8-bit graymaps (max_intensity <= 255) are supported.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .errors import RasterFormatError, RasterReadError, RasterWriteError
from .raster import Raster

logger = logging.getLogger(__name__)

PGM_MAGIC = b"P5"
PGM_WHITESPACE = b" \t\n\r\v\f"


class _HeaderReader:
    """Cursor over the ASCII header of a graymap."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def _current(self) -> int | None:
        if self.pos < len(self.data):
            return self.data[self.pos]
        return None

    def _is_space(self) -> bool:
        cur = self._current()
        return cur is not None and cur in PGM_WHITESPACE

    def magic(self) -> None:
        if self.data[:2] != PGM_MAGIC:
            raise RasterFormatError(
                f"Wrong magic number {self.data[:2]!r}, expected {PGM_MAGIC!r}"
            )
        self.pos = 2

    def whitespace(self) -> None:
        """Skips at least one whitespace character, including comments."""
        if not self._is_space() and self._current() != ord("#"):
            raise RasterFormatError(f"Expected whitespace at offset {self.pos}")
        while self._is_space() or self._current() == ord("#"):
            if self._current() == ord("#"):
                # comments run to the end of the line
                while self._current() is not None and self._current() not in b"\r\n":
                    self.pos += 1
            else:
                self.pos += 1

    def integer(self, name: str) -> int:
        start = self.pos
        while self._current() is not None and ord("0") <= self._current() <= ord("9"):
            self.pos += 1
        if start == self.pos:
            raise RasterFormatError(f"Expected a number for {name} at offset {start}")
        return int(self.data[start:self.pos])

    def single_whitespace(self) -> None:
        if not self._is_space():
            raise RasterFormatError(
                f"Expected a single whitespace byte after the header at offset {self.pos}"
            )
        self.pos += 1


def decode_pgm(data: bytes) -> Raster:
    """
    Decodes a binary graymap.

    Trailing bytes after the sample data are ignored.

    :param data: The file content
    :return: The decoded raster
    :raises RasterFormatError: If the data is not a valid 8-bit P5 graymap
    """
    reader = _HeaderReader(data)
    reader.magic()
    reader.whitespace()
    width = reader.integer("width")
    reader.whitespace()
    height = reader.integer("height")
    reader.whitespace()
    max_intensity = reader.integer("max intensity")
    reader.single_whitespace()

    if width <= 0 or height <= 0:
        raise RasterFormatError(f"Invalid dimensions {width}x{height}")
    if not 0 < max_intensity <= 255:
        raise RasterFormatError(
            f"Unsupported max intensity {max_intensity}, only 8-bit graymaps are supported"
        )

    count = width * height
    samples = data[reader.pos:reader.pos + count]
    if len(samples) < count:
        raise RasterFormatError(
            f"Truncated sample data: expected {count} bytes, got {len(samples)}"
        )
    pixels = np.frombuffer(samples, dtype=np.uint8).reshape(height, width).copy()
    return Raster(pixels, max_intensity=max_intensity)


def encode_pgm(raster: Raster) -> bytes:
    """
    Encodes a raster as binary graymap.

    :param raster: The raster to encode
    :return: The file content
    """
    header = f"P5\n{raster.width} {raster.height}\n{raster.max_intensity}\n".encode("ascii")
    return header + raster.get_raw_data()


def read_pgm(path: str | Path) -> Raster:
    """
    Loads a binary graymap from disk.

    :param path: The file to read
    :return: The decoded raster
    :raises RasterReadError: If the file can not be opened
    :raises RasterFormatError: If the file is not a valid graymap
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise RasterReadError(path) from e
    raster = decode_pgm(data)
    logger.debug("Read %s from %s", raster, path)
    return raster


def write_pgm(path: str | Path, raster: Raster) -> None:
    """
    Stores a raster as binary graymap.

    :param path: The target file
    :param raster: The raster to store
    :raises RasterWriteError: If the target can not be opened for writing
    """
    path = Path(path)
    data = encode_pgm(raster)
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise RasterWriteError(path) from e
    logger.debug("Wrote %s to %s", raster, path)


__all__ = [
    'PGM_MAGIC',
    'decode_pgm',
    'encode_pgm',
    'read_pgm',
    'write_pgm',
]
