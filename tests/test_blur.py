"""
Tests for the box blur kernels and the fast Gaussian compositor.

Tests verify actual pixel values against a per-pixel reference.
"""

import math

import numpy as np
import pytest

from fastblur import Raster
from fastblur.filters import (
    NUMBER_OF_ITERATIONS,
    Orientation,
    BlurConfig,
    box_pass,
    blur_horizontal,
    blur_vertical,
    calculate_box_radius,
    gaussian_blur,
)
from fastblur.errors import ConfigurationError


def row(*values: int) -> Raster:
    """1xN raster from values."""
    return Raster(np.array([values], dtype=np.uint8))


class TestBoxRadius:
    """Tests for calculate_box_radius."""

    def test_sigma_one_single_box(self):
        """round(sqrt(13)) == 4"""
        assert calculate_box_radius(1.0, 1) == 4

    def test_sigma_half_three_boxes(self):
        """round(sqrt(2)) == 1"""
        assert calculate_box_radius(0.5, 3) == 1

    def test_larger_sigma(self):
        """round(sqrt(12 * 9 / 3 + 1)) == round(sqrt(37)) == 6"""
        assert calculate_box_radius(3.0, 3) == 6

    def test_tiny_sigma_gives_radius_one(self):
        assert calculate_box_radius(0.01, 1) == 1

    def test_returns_int(self):
        assert isinstance(calculate_box_radius(2.5, 2), int)

    def test_monotonic_in_sigma(self):
        radii = [calculate_box_radius(s, 1) for s in (0.5, 1.0, 2.0, 4.0, 8.0)]
        assert radii == sorted(radii)

    @pytest.mark.parametrize('sigma', [1e150, 1e154, 1e200, 1e300])
    def test_sigma_beyond_float_range(self, sigma):
        """12 * sigma^2 overflows a float from about 1e154 upwards."""
        radius = calculate_box_radius(sigma, 1)
        assert isinstance(radius, int)
        assert radius == pytest.approx(math.sqrt(12) * sigma, rel=1e-12)

    def test_overflow_keeps_box_count(self):
        assert calculate_box_radius(1e200, 3) == pytest.approx(2 * 1e200, rel=1e-12)


class TestBoxKernel:
    """Tests for single horizontal and vertical passes."""

    def test_horizontal_impulse(self):
        """Interior windows hold 3 samples, the borders only 2."""
        result = blur_horizontal(row(0, 0, 255, 0, 0), 1)
        assert result.pixels.tolist() == [[0, 85, 85, 85, 0]]

    def test_clamped_window_covers_row(self):
        """With radius >= width every sample becomes the rounded row mean."""
        result = blur_horizontal(row(10, 20, 30, 41), 10)
        # mean 25.25
        assert result.pixels.tolist() == [[25, 25, 25, 25]]

    def test_radius_beyond_int64(self):
        assert blur_horizontal(row(10, 20, 30, 41), 2 ** 70).pixels.tolist() == [[25, 25, 25, 25]]
        column = Raster(np.array([[10], [20], [30], [41]], dtype=np.uint8))
        assert blur_vertical(column, 2 ** 70).pixels.tolist() == [[25], [25], [25], [25]]

    def test_half_rounds_up(self):
        result = blur_horizontal(row(0, 1), 1)
        assert result.pixels.tolist() == [[1, 1]]

    def test_border_averages_fewer_samples(self):
        """The first pixel only sees itself and its right neighbour."""
        result = blur_horizontal(row(100, 0, 0, 0, 0, 0), 1)
        assert result.pixels[0, 0] == 50
        assert result.pixels[0, 1] == 33

    def test_vertical_on_single_row_is_identity(self):
        source = row(3, 200, 17, 0)
        assert blur_vertical(source, 5) == source

    def test_vertical_is_transposed_horizontal(self, noise_raster):
        transposed = Raster(noise_raster.pixels.T)
        vertical = blur_vertical(noise_raster, 3)
        horizontal = blur_horizontal(transposed, 3)
        np.testing.assert_array_equal(vertical.pixels, horizontal.pixels.T)

    @pytest.mark.parametrize('radius', [0, 1, 2, 5, 40])
    def test_horizontal_matches_reference(self, noise_raster, reference_pass, radius):
        result = blur_horizontal(noise_raster, radius)
        np.testing.assert_array_equal(
            result.pixels, reference_pass(noise_raster.pixels, radius, horizontal=True)
        )

    @pytest.mark.parametrize('radius', [0, 1, 2, 5, 40])
    def test_vertical_matches_reference(self, noise_raster, reference_pass, radius):
        result = blur_vertical(noise_raster, radius)
        np.testing.assert_array_equal(
            result.pixels, reference_pass(noise_raster.pixels, radius, horizontal=False)
        )

    def test_radius_zero_is_identity(self, noise_raster):
        assert blur_horizontal(noise_raster, 0) == noise_raster

    def test_kernel_allocates_new_buffer(self, noise_raster):
        before = noise_raster.pixels.copy()
        result = blur_horizontal(noise_raster, 2)
        assert result.pixels is not noise_raster.pixels
        np.testing.assert_array_equal(noise_raster.pixels, before)

    @pytest.mark.parametrize('orientation', list(Orientation))
    def test_bands_compose_to_full_pass(self, noise_raster, orientation):
        """Computing disjoint row bands separately gives the full pass."""
        src = noise_raster.pixels
        full = np.empty_like(src)
        box_pass(src, full, 4, orientation, 0, src.shape[0])

        banded = np.zeros_like(src)
        for start, stop in [(0, 5), (5, 6), (6, 20), (20, src.shape[0])]:
            box_pass(src, banded, 4, orientation, start, stop)
        np.testing.assert_array_equal(banded, full)

    def test_band_writes_only_its_rows(self, noise_raster):
        src = noise_raster.pixels
        dst = np.full_like(src, 7)
        box_pass(src, dst, 2, Orientation.VERTICAL, 10, 12)
        assert (dst[:10] == 7).all()
        assert (dst[12:] == 7).all()

    def test_empty_band_is_noop(self, noise_raster):
        dst = np.full_like(noise_raster.pixels, 9)
        box_pass(noise_raster.pixels, dst, 2, Orientation.HORIZONTAL, 5, 5)
        assert (dst == 9).all()


class TestGaussianBlur:
    """Tests for the three iteration compositor."""

    def test_iteration_count(self):
        assert NUMBER_OF_ITERATIONS == 3

    @pytest.mark.parametrize('sigma', [1e19, 1e200])
    def test_huge_sigma_averages_whole_image(self, sigma):
        """Row means 25.25 and 1 round to 25 and 1, their column mean to 13."""
        raster = Raster(np.array([[10, 20, 30, 41], [0, 0, 0, 4]], dtype=np.uint8))
        assert gaussian_blur(raster, sigma).pixels.tolist() == [[13] * 4, [13] * 4]

    def test_impulse_fixture(self, impulse_raster):
        """Radius 4 covers the whole 4x4 image in every pass.

        First horizontal pass: row 2 becomes round(255 / 4) = 64, the other
        rows stay 0. First vertical pass: every column becomes
        round(64 / 4) = 16. The uniform result is stable afterwards.
        """
        result = gaussian_blur(impulse_raster, sigma=1.0, box_count=1)
        expected = np.full((4, 4), 16, dtype=np.uint8)
        np.testing.assert_array_equal(result.pixels, expected)
        assert result.pixels[2, 2] < 255
        assert result.pixels[1, 2] > 0
        assert result.pixels[2, 1] > 0

    def test_small_sigma_fixture(self):
        """7x7 impulse, sigma 0.5 with 3 boxes -> radius 1.

        The border pixels only average two samples, so after the third
        iteration even the corners pick up intensity.
        """
        pixels = np.zeros((7, 7), dtype=np.uint8)
        pixels[3, 3] = 255
        result = gaussian_blur(Raster(pixels), sigma=0.5, box_count=3)
        expected = np.array([
            [1, 2, 3, 4, 3, 2, 1],
            [2, 3, 6, 7, 6, 3, 2],
            [3, 6, 13, 15, 13, 6, 3],
            [4, 7, 15, 17, 15, 7, 4],
            [3, 6, 13, 15, 13, 6, 3],
            [2, 3, 6, 7, 6, 3, 2],
            [1, 2, 3, 4, 3, 2, 1],
        ], dtype=np.uint8)
        np.testing.assert_array_equal(result.pixels, expected)

    @pytest.mark.parametrize('sigma,box_count', [(0.5, 3), (1.0, 1), (2.0, 2), (6.0, 1)])
    def test_matches_reference(self, noise_raster, reference_blur, sigma, box_count):
        result = gaussian_blur(noise_raster, sigma, box_count)
        radius = calculate_box_radius(sigma, box_count)
        np.testing.assert_array_equal(result.pixels, reference_blur(noise_raster.pixels, radius))

    def test_input_not_modified(self, noise_raster):
        before = noise_raster.copy()
        gaussian_blur(noise_raster, 2.0)
        assert noise_raster == before

    def test_shape_and_max_intensity_preserved(self, gradient_raster):
        result = gaussian_blur(gradient_raster, 1.5)
        assert result.size == gradient_raster.size
        assert result.max_intensity == 200

    @pytest.mark.parametrize('value', [0, 1, 128, 255])
    def test_uniform_input_unchanged(self, value):
        source = Raster(np.full((13, 9), value, dtype=np.uint8))
        assert gaussian_blur(source, 3.0) == source

    def test_smooths_noise(self, noise_raster):
        result = gaussian_blur(noise_raster, 2.0)
        assert result.pixels.std() < noise_raster.pixels.std()

    def test_custom_pass_runner(self, noise_raster):
        """The compositor calls the runner 3 x (horizontal, vertical)."""
        calls = []

        def run_pass(src, radius, orientation, iteration):
            calls.append((iteration, orientation))
            return src.copy()

        gaussian_blur(noise_raster, 1.0, run_pass=run_pass)
        assert calls == [
            (0, Orientation.HORIZONTAL), (0, Orientation.VERTICAL),
            (1, Orientation.HORIZONTAL), (1, Orientation.VERTICAL),
            (2, Orientation.HORIZONTAL), (2, Orientation.VERTICAL),
        ]


class TestBlurConfig:
    """Tests for upfront parameter validation."""

    def test_defaults_are_valid(self):
        config = BlurConfig().validate()
        assert config.threads == -1
        assert config.radius == 4

    @pytest.mark.parametrize('threads', [-1, 0, 1, 16])
    def test_valid_threads(self, threads):
        BlurConfig(threads=threads).validate()

    def test_threads_below_minus_one(self):
        with pytest.raises(ConfigurationError, match='threads'):
            BlurConfig(threads=-2).validate()

    @pytest.mark.parametrize('sigma', [0.0, -1.0, float('nan'), float('inf')])
    def test_invalid_sigma(self, sigma):
        with pytest.raises(ConfigurationError, match='Sigma'):
            BlurConfig(sigma=sigma).validate()

    def test_invalid_box_count(self):
        with pytest.raises(ConfigurationError, match='boxes'):
            BlurConfig(box_count=0).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            BlurConfig(sigma=0).validate()
