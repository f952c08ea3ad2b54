from __future__ import annotations
from typing import Sequence, Tuple
import enum
import math
import logging

import numpy as np

from errors import InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_AMPLIFICATION = 40
DEFAULT_REPRESENTATIONS: Tuple[Tuple[int, int, int], ...] = (
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
)


class Stripe(enum.IntEnum):
    # values double as the source channel index for the three active stripes
    RED = 0
    GREEN = 1
    BLUE = 2
    GUTTER = 3


# ---------- geometry ----------
def gap_width(pixel_size: int) -> int:
    # half-away-from-zero, not Python's banker's rounding: 10 px -> 1, not 0
    return int(math.floor(0.05 * pixel_size + 0.5))

def _require_pixel_size(pixel_size: int) -> None:
    if int(pixel_size) < 1:
        raise InvalidConfiguration(f"pixel size must be >= 1, got {pixel_size}")

def classify_grid(xs, ys, pixel_size: int) -> np.ndarray:
    """
    Stripe code for every (y, x) pair, shape (len(ys), len(xs)).

    Columns in the second half of each 2*pixel_size span are shifted down by
    half a cell, giving the staggered brick layout of a slot mask.
    """
    _require_pixel_size(pixel_size)
    xs = np.asarray(xs, dtype=np.int64).reshape(-1)
    ys = np.asarray(ys, dtype=np.int64).reshape(-1)

    one_third = pixel_size // 3
    two_thirds = 2 * pixel_size // 3
    gap = gap_width(pixel_size)

    offset = np.where(xs % (2 * pixel_size) > pixel_size, pixel_size // 2, 0)
    gx = (xs % pixel_size)[None, :]
    gy = (ys[:, None] + offset[None, :]) % pixel_size

    rows_ok = (gy > gap) & (gy < pixel_size - gap)
    red = rows_ok & (gx > gap) & (gx < one_third - gap)
    green = rows_ok & (gx > one_third + gap) & (gx < two_thirds - gap)
    blue = rows_ok & (gx > two_thirds + gap) & (gx < pixel_size - gap)

    out = np.full(gy.shape, int(Stripe.GUTTER), dtype=np.uint8)
    out[blue] = Stripe.BLUE
    out[green] = Stripe.GREEN
    out[red] = Stripe.RED
    return out

def classify(x: int, y: int, pixel_size: int) -> Stripe:
    return Stripe(int(classify_grid([x], [y], pixel_size)[0, 0]))


# ---------- channel arithmetic ----------
def attenuate(source: int, repr_channel: int, amplification: int = DEFAULT_AMPLIFICATION) -> int:
    """Scale source by repr_channel/256; saturate to 255 once amplification headroom is used up."""
    q = int(source) * int(repr_channel) // 256
    return q if q + amplification < 256 else 255

def _attenuate_array(source: np.ndarray, reprs: np.ndarray, amplification: int) -> np.ndarray:
    q = source[..., None] * reprs // 256
    # headroom past 255 always saturates; clamp so the sum stays in int32
    headroom = min(int(amplification), 256)
    return np.where(q + headroom < 256, q, 255)

def _representation_table(representations: Sequence[Sequence[int]]) -> np.ndarray:
    table = np.asarray(representations, dtype=np.int32)
    if table.shape != (3, 3):
        raise InvalidConfiguration(f"need three RGB representations, got shape {table.shape}")
    if table.min() < 0 or table.max() > 255:
        raise InvalidConfiguration("representation components must be within 0..255")
    return table


# ---------- mask ----------
def apply_mask(
    buffer: np.ndarray,
    pixel_size: int,
    representations: Sequence[Sequence[int]] = DEFAULT_REPRESENTATIONS,
    amplification: int = DEFAULT_AMPLIFICATION,
    *,
    row_offset: int = 0,
) -> np.ndarray:
    """
    Overwrite buffer (H, W, 3 uint8) with the phosphor stripe pattern, in place.

    A pixel inside a stripe keeps only its own source channel (red stripe ->
    red intensity), routed through that stripe's representation color into all
    three outputs. Gutters become black. row_offset is the absolute row of
    buffer[0] when buffer is a band of a taller image.
    """
    if buffer.ndim != 3 or buffer.shape[2] != 3 or buffer.dtype != np.uint8:
        raise InvalidConfiguration(f"expected an (H, W, 3) uint8 buffer, got {buffer.shape} {buffer.dtype}")
    if amplification < 0:
        raise InvalidConfiguration(f"amplification must be >= 0, got {amplification}")
    table = _representation_table(representations)

    h, w, _ = buffer.shape
    stripes = classify_grid(np.arange(w), np.arange(row_offset, row_offset + h), pixel_size)

    channel = np.minimum(stripes, int(Stripe.BLUE)).astype(np.intp)
    source = np.take_along_axis(buffer, channel[..., None], axis=2)[..., 0].astype(np.int32)
    out = _attenuate_array(source, table[channel], amplification)
    out[stripes == Stripe.GUTTER] = 0

    buffer[...] = out.astype(np.uint8)
    return buffer
