from __future__ import annotations
from typing import Callable, List, Tuple
import concurrent.futures as cf
import logging

import numpy as np

logger = logging.getLogger(__name__)

BandFn = Callable[[np.ndarray, int], None]


def split_rows(height: int, parts: int) -> List[Tuple[int, int]]:
    """Contiguous (start, stop) row ranges covering [0, height); never empty."""
    parts = max(1, min(int(parts), int(height)))
    if height <= 0:
        return []
    base, extra = divmod(height, parts)
    out = []
    start = 0
    for i in range(parts):
        stop = start + base + (1 if i < extra else 0)
        out.append((start, stop))
        start = stop
    return out


def run_in_bands(buffer: np.ndarray, fn: BandFn, workers: int = 1) -> None:
    """
    Call fn(view, row_start) on disjoint row bands of buffer.

    Views share memory with buffer, so fn mutates it in place. Each band only
    touches its own rows; the join is the only synchronisation.
    """
    bands = split_rows(buffer.shape[0], workers)
    if len(bands) <= 1:
        fn(buffer, 0)
        return

    logger.debug("Running %s over %d bands", getattr(fn, "__name__", fn), len(bands))
    with cf.ThreadPoolExecutor(max_workers=len(bands)) as ex:
        futures = [ex.submit(fn, buffer[start:stop], start) for start, stop in bands]
        # surface the first failure; remaining bands still finish on exit
        for fut in futures:
            fut.result()
