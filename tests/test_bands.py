import numpy as np
import pytest

from bands import run_in_bands, split_rows


class TestSplitRows:
    def test_covers_height_without_overlap(self):
        bands = split_rows(10, 3)
        assert bands == [(0, 4), (4, 7), (7, 10)]

    def test_never_more_bands_than_rows(self):
        assert split_rows(2, 8) == [(0, 1), (1, 2)]

    def test_single_band(self):
        assert split_rows(5, 1) == [(0, 5)]

    def test_empty(self):
        assert split_rows(0, 4) == []


class TestRunInBands:
    def test_each_band_sees_its_absolute_start(self):
        buf = np.zeros((9, 2, 3), dtype=np.uint8)

        def stamp(view, start):
            for i in range(view.shape[0]):
                view[i] = start + i

        run_in_bands(buf, stamp, workers=4)
        assert [int(buf[y, 0, 0]) for y in range(9)] == list(range(9))

    def test_errors_propagate(self):
        buf = np.zeros((6, 1, 3), dtype=np.uint8)

        def boom(view, start):
            if start > 0:
                raise RuntimeError("band failed")

        with pytest.raises(RuntimeError, match="band failed"):
            run_in_bands(buf, boom, workers=2)
