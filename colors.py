from __future__ import annotations
from typing import Sequence, Tuple, Union
import re

from errors import InvalidConfiguration

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")
_RGB_RE = re.compile(r"^\s*(-?\d+)\s*,\s*(-?\d+)\s*,\s*(-?\d+)\s*$")
_RGB_FN_RE = re.compile(r"^\s*rgb\(\s*(-?\d+)\s*,\s*(-?\d+)\s*,\s*(-?\d+)\s*\)\s*$", re.IGNORECASE)

# Phosphor tints people actually ask for
_NAMED = {
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
    "white": (255, 255, 255),
    "black": (0, 0, 0),
    "amber": (255, 176, 0),
}

def _check(components: Sequence[int], source: object) -> RGB:
    if len(components) != 3:
        raise InvalidConfiguration(f"color needs 3 components, got {source!r}")
    out = tuple(int(c) for c in components)
    if any(c < 0 or c > 255 for c in out):
        raise InvalidConfiguration(f"color components must be within 0..255, got {source!r}")
    return out  # type: ignore[return-value]

def parse_color(value: Union[str, Sequence[int]]) -> RGB:
    """Accepts #RRGGBB / #RGB / r,g,b / rgb(r,g,b) / a few names, or an existing triple."""
    if not isinstance(value, str):
        return _check(list(value), value)
    t = value.strip()
    m = _HEX_RE.match(t)
    if m:
        s = m.group(1)
        if len(s) == 3:
            s = "".join(c * 2 for c in s)
        return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
    m = _RGB_RE.match(t) or _RGB_FN_RE.match(t)
    if m:
        return _check([int(m.group(i)) for i in (1, 2, 3)], value)
    named = _NAMED.get(t.lower())
    if named is not None:
        return named
    raise InvalidConfiguration(f"unrecognised color {value!r}")

def to_hex(rgb: Sequence[int]) -> str:
    r, g, b = _check(list(rgb), rgb)
    return f"#{r:02x}{g:02x}{b:02x}"
