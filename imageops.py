from __future__ import annotations
import logging

import numpy as np
from PIL import Image, ImageFilter

from errors import InvalidConfiguration

logger = logging.getLogger(__name__)

# Pillow's BICUBIC kernel uses a = -0.5, i.e. Catmull-Rom
FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "triangle": Image.Resampling.BILINEAR,
    "catmull-rom": Image.Resampling.BICUBIC,
    "lanczos3": Image.Resampling.LANCZOS,
    "box": Image.Resampling.BOX,
}


def resize(img: Image.Image, width: int, height: int, filter: str = "catmull-rom") -> Image.Image:
    try:
        resample = FILTERS[filter]
    except KeyError:
        raise InvalidConfiguration(f"unknown resample filter {filter!r}") from None
    if width < 1 or height < 1:
        raise InvalidConfiguration(f"cannot resize to {width}x{height}")
    return img.resize((int(width), int(height)), resample)


def blur(img: Image.Image, radius: float) -> Image.Image:
    if radius <= 0:
        return img.copy()
    return img.filter(ImageFilter.GaussianBlur(radius))


def brighten_in_place(buffer: np.ndarray, offset: int) -> np.ndarray:
    if offset:
        buffer[...] = np.clip(buffer.astype(np.int32) + int(offset), 0, 255).astype(np.uint8)
    return buffer


def contrast_in_place(buffer: np.ndarray, contrast: float) -> np.ndarray:
    """
    Percent-style contrast: 0 leaves the image unchanged, positive values
    stretch around mid-grey, -100 flattens everything to 127.

    Computed in float32 so values on a truncation boundary land where the
    reference image library puts them.
    """
    if contrast == 0:
        return buffer
    top = np.float32(255.0)
    half = np.float32(0.5)
    percent = ((np.float32(100.0) + np.float32(contrast)) / np.float32(100.0)) ** 2
    c = buffer.astype(np.float32) / top
    c = ((c - half) * percent + half) * top
    buffer[...] = np.clip(c, np.float32(0.0), top).astype(np.uint8)
    return buffer
