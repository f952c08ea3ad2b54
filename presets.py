from __future__ import annotations
import json
from dataclasses import dataclass, asdict, field
from typing import Dict, Any, Tuple

from colors import parse_color, to_hex
from errors import InvalidConfiguration, IOFailure
from phosphor import DEFAULT_AMPLIFICATION

RESAMPLE_FILTERS = ("nearest", "triangle", "catmull-rom", "lanczos3", "box")


@dataclass
class CrtSettings:
    pixel_size: int
    scanlines: int
    brightness: int
    contrast: float
    upsampling: int = 2
    red_repr: Tuple[int, int, int] = (255, 0, 0)
    green_repr: Tuple[int, int, int] = (0, 255, 0)
    blue_repr: Tuple[int, int, int] = (0, 0, 255)
    amplification: int = DEFAULT_AMPLIFICATION
    resample_filter: str = "catmull-rom"
    workers: int = 1
    version: int = field(default=1)

    @property
    def representations(self) -> Tuple[Tuple[int, int, int], ...]:
        return (self.red_repr, self.green_repr, self.blue_repr)

    @property
    def blur_radius(self) -> float:
        return 2.0 * self.upsampling

    def validate(self) -> "CrtSettings":
        if self.upsampling < 1:
            raise InvalidConfiguration(f"upsampling must be >= 1, got {self.upsampling}")
        if self.pixel_size < 1:
            raise InvalidConfiguration(f"pixel size must be >= 1, got {self.pixel_size}")
        if self.scanlines < 0:
            raise InvalidConfiguration(f"scanline count must be >= 0, got {self.scanlines}")
        if self.amplification < 0:
            raise InvalidConfiguration(f"amplification must be >= 0, got {self.amplification}")
        if self.workers < 1:
            raise InvalidConfiguration(f"workers must be >= 1, got {self.workers}")
        if self.resample_filter not in RESAMPLE_FILTERS:
            raise InvalidConfiguration(
                f"unknown resample filter {self.resample_filter!r}; expected one of {', '.join(RESAMPLE_FILTERS)}"
            )
        for name in ("red_repr", "green_repr", "blue_repr"):
            setattr(self, name, parse_color(getattr(self, name)))
        return self

    def to_json(self) -> str:
        obj: Dict[str, Any] = asdict(self)
        for name in ("red_repr", "green_repr", "blue_repr"):
            obj[name] = to_hex(obj[name])
        return json.dumps(obj, indent=2)

    @staticmethod
    def from_json(s: str) -> "CrtSettings":
        try:
            obj = json.loads(s)
        except json.JSONDecodeError as e:
            raise InvalidConfiguration(f"preset is not valid JSON: {e}") from e
        try:
            settings = CrtSettings(
                version=int(obj.get("version", 1)),
                pixel_size=int(obj["pixel_size"]),
                scanlines=int(obj["scanlines"]),
                brightness=int(obj.get("brightness", 0)),
                contrast=float(obj.get("contrast", 0.0)),
                upsampling=int(obj.get("upsampling", 2)),
                red_repr=parse_color(obj.get("red_repr", (255, 0, 0))),
                green_repr=parse_color(obj.get("green_repr", (0, 255, 0))),
                blue_repr=parse_color(obj.get("blue_repr", (0, 0, 255))),
                amplification=int(obj.get("amplification", DEFAULT_AMPLIFICATION)),
                resample_filter=str(obj.get("resample_filter", "catmull-rom")),
                workers=int(obj.get("workers", 1)),
            )
        except InvalidConfiguration:
            raise
        except KeyError as e:
            raise InvalidConfiguration(f"preset is missing required key {e.args[0]!r}") from e
        except (AttributeError, TypeError, ValueError) as e:
            raise InvalidConfiguration(f"preset has a malformed value: {e}") from e
        return settings.validate()

    @staticmethod
    def load(path: str) -> "CrtSettings":
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise IOFailure(f"cannot read preset {path}: {e}") from e
        return CrtSettings.from_json(text)

    def save(self, path: str) -> None:
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.to_json())
        except OSError as e:
            raise IOFailure(f"cannot write preset {path}: {e}") from e
