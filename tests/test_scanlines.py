"""Scanline modulation factors and in-place darkening."""

import math

import numpy as np
import pytest

from bands import run_in_bands
from errors import InvalidConfiguration
from scanlines import apply_scanlines, scanline_factors


class TestScanlineFactors:
    def test_bounded(self):
        f = scanline_factors(480, 37)
        assert f.shape == (480,)
        assert f.min() >= 0.7
        assert f.max() <= 1.0

    def test_integer_phase_rows_hit_the_floor(self):
        """density = 5/100; rows 0, 20, 40 have integer density*y."""
        f = scanline_factors(100, 5)
        assert f[0] == 0.7
        assert f[20] == 0.7
        assert f[40] == 0.7

    def test_half_phase_rows_are_full_brightness(self):
        f = scanline_factors(100, 1)
        assert f[50] == pytest.approx(1.0)

    def test_zero_count_is_uniform(self):
        f = scanline_factors(64, 0)
        assert (f == 0.7).all()

    def test_band_slice_matches_full(self):
        full = scanline_factors(90, 7)
        part = scanline_factors(90, 7, row_offset=30, rows=25)
        np.testing.assert_array_equal(part, full[30:55])

    def test_matches_closed_form(self):
        f = scanline_factors(50, 3)
        for y in (1, 7, 13, 49):
            expected = 0.3 * math.sin(math.pi * (3 / 50) * y) ** 2 + 0.7
            assert f[y] == pytest.approx(expected, rel=1e-12)

    def test_zero_height_rejected(self):
        with pytest.raises(InvalidConfiguration):
            scanline_factors(0, 3)

    def test_negative_count_rejected(self):
        with pytest.raises(InvalidConfiguration):
            scanline_factors(10, -1)


class TestApplyScanlines:
    def test_zero_count_darkens_every_row_equally(self, solid_buffer):
        buf = solid_buffer(8, 5, (100, 200, 255))
        apply_scanlines(buf, 0)
        expected = (int(100 * 0.7), int(200 * 0.7), int(255 * 0.7))
        for y in range(8):
            for x in range(5):
                assert tuple(buf[y, x]) == expected

    def test_truncates_instead_of_rounding(self, solid_buffer):
        buf = solid_buffer(100, 1, (255, 255, 255))
        factors = scanline_factors(100, 3)
        apply_scanlines(buf, 3)
        for y in range(100):
            assert buf[y, 0, 0] == int(255 * factors[y])

    def test_never_brightens(self, noise_buffer):
        src = noise_buffer(64, 32)
        buf = src.copy()
        apply_scanlines(buf, 11)
        assert (buf <= src).all()
        assert (buf.astype(np.int32) >= (src.astype(np.int32) * 7) // 10 - 1).all()

    def test_banded_equals_single_pass(self, noise_buffer):
        src = noise_buffer(53, 17)
        whole = src.copy()
        apply_scanlines(whole, 9)

        banded = src.copy()
        run_in_bands(
            banded,
            lambda view, start: apply_scanlines(view, 9, total_height=53, row_offset=start),
            workers=3,
        )
        np.testing.assert_array_equal(whole, banded)

    def test_empty_image_rejected(self):
        with pytest.raises(InvalidConfiguration):
            apply_scanlines(np.zeros((0, 4, 3), dtype=np.uint8), 2)
