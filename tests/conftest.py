"""
Pytest fixtures for fastblur tests
"""

import math

import numpy as np
import pytest

from fastblur import Raster


def reference_box_pass(pixels: np.ndarray, radius: int, horizontal: bool) -> np.ndarray:
    """Straightforward per-pixel box pass used as ground truth."""
    height, width = pixels.shape
    out = np.zeros_like(pixels)
    for i in range(height):
        for j in range(width):
            if horizontal:
                window = pixels[i, max(j - radius, 0):min(j + radius + 1, width)]
            else:
                window = pixels[max(i - radius, 0):min(i + radius + 1, height), j]
            out[i, j] = math.floor(int(window.sum()) / len(window) + 0.5)
    return out


def reference_gaussian(pixels: np.ndarray, radius: int, iterations: int = 3) -> np.ndarray:
    """Three horizontal/vertical reference passes."""
    for _ in range(iterations):
        pixels = reference_box_pass(pixels, radius, horizontal=True)
        pixels = reference_box_pass(pixels, radius, horizontal=False)
    return pixels


@pytest.fixture
def impulse_raster() -> Raster:
    """4x4 black raster with a single white pixel at (row 2, col 2)."""
    pixels = np.zeros((4, 4), dtype=np.uint8)
    pixels[2, 2] = 255
    return Raster(pixels)


@pytest.fixture
def noise_raster() -> Raster:
    """Reproducible random 29x37 raster."""
    rng = np.random.default_rng(1234)
    return Raster(rng.integers(0, 256, (29, 37), dtype=np.uint8))


@pytest.fixture
def gradient_raster() -> Raster:
    """Horizontal gradient 40x24 with a max intensity of 200."""
    pixels = np.tile(np.linspace(0, 200, 40).astype(np.uint8), (24, 1))
    return Raster(pixels, max_intensity=200)


@pytest.fixture
def reference_blur():
    """The per-pixel reference implementation of the three pass blur."""
    return reference_gaussian


@pytest.fixture
def reference_pass():
    """The per-pixel reference implementation of a single box pass."""
    return reference_box_pass
