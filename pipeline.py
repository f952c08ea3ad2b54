from __future__ import annotations
from typing import Iterable, List
import concurrent.futures as cf
import logging
import time

from PIL import Image

import imageops
from bands import run_in_bands
from errors import CrtError, InvalidConfiguration
from io_utils import load_image, to_rgb_array, from_rgb_array, save_png, make_output_path
from phosphor import apply_mask
from presets import CrtSettings
from scanlines import apply_scanlines

logger = logging.getLogger(__name__)


def render(image: Image.Image, settings: CrtSettings) -> Image.Image:
    """Full CRT chain in memory; the result has the same size as `image`."""
    settings.validate()
    rgb = image.convert("RGB") if image.mode != "RGB" else image
    res_x, res_y = rgb.size
    if res_x < 1 or res_y < 1:
        raise InvalidConfiguration(f"cannot render an empty {res_x}x{res_y} image")
    u = settings.upsampling
    t0 = time.perf_counter()

    up = imageops.resize(rgb, res_x * u, res_y * u, settings.resample_filter)
    up = imageops.blur(up, settings.blur_radius)

    buf = to_rgb_array(up)
    reprs = settings.representations

    def mask_band(view, row_start):
        apply_mask(view, settings.pixel_size, reprs, settings.amplification, row_offset=row_start)

    run_in_bands(buf, mask_band, settings.workers)
    logger.debug("Mask applied (%dx%d, pixel=%d)", buf.shape[1], buf.shape[0], settings.pixel_size)

    buf = to_rgb_array(imageops.blur(from_rgb_array(buf), settings.blur_radius))
    total_height = buf.shape[0]

    def scan_band(view, row_start):
        apply_scanlines(view, settings.scanlines, total_height=total_height, row_offset=row_start)

    run_in_bands(buf, scan_band, settings.workers)

    out = to_rgb_array(imageops.resize(from_rgb_array(buf), res_x, res_y, settings.resample_filter))
    imageops.brighten_in_place(out, settings.brightness)
    imageops.contrast_in_place(out, settings.contrast)

    logger.debug("Rendered %dx%d in %.3fs", res_x, res_y, time.perf_counter() - t0)
    return from_rgb_array(out)


def process_image(image_path: str, output_directory: str, settings: CrtSettings) -> str:
    img = load_image(image_path)
    result = render(img, settings)
    dst = make_output_path(output_directory, image_path)
    save_png(result, dst, overwrite=True)
    logger.info("Wrote %s", dst)
    return dst


def process_many(paths: Iterable[str], output_directory: str, settings: CrtSettings, workers: int = 1) -> List[str]:
    """Render each path; a failing file is logged and skipped, the rest still run."""
    paths = list(paths)
    written: List[str] = []
    with cf.ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
        futures = {ex.submit(process_image, p, output_directory, settings): p for p in paths}
        for fut in cf.as_completed(futures):
            try:
                written.append(fut.result())
            except CrtError as e:
                logger.error("Failed %s: %s", futures[fut], e)
    return sorted(written)
