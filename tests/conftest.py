import numpy as np
import pytest
from PIL import Image

from presets import CrtSettings


@pytest.fixture
def solid_buffer():
    """Factory: (h, w, 3) uint8 buffer filled with one color."""
    def make(h, w, rgb):
        buf = np.zeros((h, w, 3), dtype=np.uint8)
        buf[...] = rgb
        return buf
    return make


@pytest.fixture
def noise_buffer():
    def make(h, w, seed=1234):
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)
    return make


@pytest.fixture
def image_file(tmp_path):
    """Factory: write an RGB image to tmp_path and return its path as str."""
    def make(name="source.png", size=(16, 12), rgb=(200, 120, 40)):
        path = tmp_path / name
        Image.new("RGB", size, rgb).save(path)
        return str(path)
    return make


@pytest.fixture
def settings():
    return CrtSettings(pixel_size=6, scanlines=3, brightness=0, contrast=0.0, upsampling=2)
