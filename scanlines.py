# scanline modulation: sin^2 row darkening, 70% floor
from __future__ import annotations
from typing import Optional
import logging

import numpy as np

from errors import InvalidConfiguration

logger = logging.getLogger(__name__)

FLOOR = 0.7
DEPTH = 0.3


def scanline_factors(height: int, count: int, *, row_offset: int = 0, rows: Optional[int] = None) -> np.ndarray:
    """
    Per-row brightness factor in [0.7, 1.0] for `count` dark/bright cycles
    across an image `height` rows tall. `rows` limits the output to a band
    starting at `row_offset`.
    """
    if height <= 0:
        raise InvalidConfiguration("scanlines need an image with at least one row")
    if count < 0:
        raise InvalidConfiguration(f"scanline count must be >= 0, got {count}")
    if rows is None:
        rows = height - row_offset
    density = count / height
    y = np.arange(row_offset, row_offset + rows, dtype=np.float64)
    return DEPTH * np.sin(np.pi * density * y) ** 2 + FLOOR


def apply_scanlines(
    buffer: np.ndarray,
    count: int,
    *,
    total_height: Optional[int] = None,
    row_offset: int = 0,
) -> np.ndarray:
    """Darken each row of buffer (H, W, 3 uint8) in place by its scanline factor, truncating."""
    if buffer.ndim != 3 or buffer.dtype != np.uint8:
        raise InvalidConfiguration(f"expected an (H, W, C) uint8 buffer, got {buffer.shape} {buffer.dtype}")
    height = buffer.shape[0] if total_height is None else total_height
    factor = scanline_factors(height, count, row_offset=row_offset, rows=buffer.shape[0])
    # factor <= 1.0, so the product never leaves 0..255
    buffer[...] = (buffer.astype(np.float64) * factor[:, None, None]).astype(np.uint8)
    return buffer
