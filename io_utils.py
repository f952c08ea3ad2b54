from __future__ import annotations
from io import BytesIO
from PIL import Image, ImageOps, UnidentifiedImageError
import numpy as np
import os
import tempfile
import logging

from errors import DecodeFailure, EncodeFailure, IOFailure

logger = logging.getLogger(__name__)


def load_image(path: str) -> Image.Image:
    try:
        img = Image.open(path)
        img = ImageOps.exif_transpose(img)
        # Pillow lazy loads; ensure it's loaded now so corrupt data fails here
        img.load()
    except FileNotFoundError as e:
        raise DecodeFailure(f"no such image: {path}") from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise DecodeFailure(f"cannot decode {path}: {e}") from e
    logger.debug("Loaded %s (%s, %dx%d)", path, img.mode, img.width, img.height)
    return img


def to_rgb_array(img: Image.Image) -> np.ndarray:
    if img.mode != "RGB":
        img = img.convert("RGB")
    # np.array copies; asarray on a PIL image can be read-only
    return np.array(img, dtype=np.uint8)


def from_rgb_array(buffer: np.ndarray) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8), "RGB")


def encode_png(img: Image.Image) -> bytes:
    buf = BytesIO()
    try:
        img.convert("RGB").save(buf, format="PNG")
    except (OSError, ValueError) as e:
        raise EncodeFailure(f"PNG encoding failed: {e}") from e
    return buf.getvalue()


def save_png(img: Image.Image, path: str, overwrite: bool = True) -> None:
    """Encode fully in memory, then write a temp file beside `path` and rename it into place."""
    data = encode_png(img)
    out_dir = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(out_dir, exist_ok=True)
    except OSError as e:
        raise IOFailure(f"cannot create output directory {out_dir}: {e}") from e
    if os.path.exists(path) and not overwrite:
        raise IOFailure(f"refusing to overwrite {path}")

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".crt-", suffix=".png.part", dir=out_dir)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise IOFailure(f"cannot write {path}: {e}") from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
    logger.debug("Wrote %d bytes to %s", len(data), path)


def make_output_path(out_dir: str, in_path: str) -> str:
    base = os.path.splitext(os.path.basename(in_path))[0]
    return os.path.join(out_dir, f"{base}.png")
