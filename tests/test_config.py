"""Color parsing and CrtSettings presets."""

import json

import pytest

from colors import parse_color, to_hex
from errors import InvalidConfiguration, IOFailure
from presets import CrtSettings


class TestParseColor:
    @pytest.mark.parametrize(
        "text, rgb",
        [
            ("#ff0000", (255, 0, 0)),
            ("00FF00", (0, 255, 0)),
            ("#00f", (0, 0, 255)),
            ("255, 176, 0", (255, 176, 0)),
            ("rgb(10, 20, 30)", (10, 20, 30)),
            ("Amber", (255, 176, 0)),
        ],
    )
    def test_accepted_forms(self, text, rgb):
        assert parse_color(text) == rgb

    def test_sequences_pass_through(self):
        assert parse_color([1, 2, 3]) == (1, 2, 3)

    @pytest.mark.parametrize("text", ["#12345", "300,0,0", "1,2", "chartreuse-ish", "-1,0,0"])
    def test_rejected_forms(self, text):
        with pytest.raises(InvalidConfiguration):
            parse_color(text)

    def test_to_hex(self):
        assert to_hex((255, 176, 0)) == "#ffb000"


class TestCrtSettings:
    def test_defaults_follow_cli(self):
        s = CrtSettings(pixel_size=12, scanlines=100, brightness=0, contrast=0.0)
        assert s.upsampling == 2
        assert s.amplification == 40
        assert s.representations == ((255, 0, 0), (0, 255, 0), (0, 0, 255))
        assert s.blur_radius == 4.0

    def test_json_round_trip(self):
        s = CrtSettings(
            pixel_size=9, scanlines=240, brightness=-5, contrast=12.5, upsampling=3,
            red_repr=(250, 10, 0), workers=2, resample_filter="lanczos3",
        ).validate()
        back = CrtSettings.from_json(s.to_json())
        assert back == s

    def test_json_stores_colors_as_hex(self):
        s = CrtSettings(pixel_size=9, scanlines=1, brightness=0, contrast=0.0)
        obj = json.loads(s.to_json())
        assert obj["red_repr"] == "#ff0000"

    def test_missing_required_key(self):
        with pytest.raises(InvalidConfiguration, match="pixel_size"):
            CrtSettings.from_json(json.dumps({"scanlines": 3}))

    def test_malformed_json(self):
        with pytest.raises(InvalidConfiguration):
            CrtSettings.from_json("{not json")

    def test_non_object_json(self):
        with pytest.raises(InvalidConfiguration):
            CrtSettings.from_json("[1, 2, 3]")

    @pytest.mark.parametrize(
        "field, value",
        [
            ("upsampling", 0),
            ("pixel_size", 0),
            ("scanlines", -1),
            ("amplification", -1),
            ("workers", 0),
            ("resample_filter", "mitchell"),
            ("red_repr", (256, 0, 0)),
        ],
    )
    def test_validate_rejects(self, field, value):
        s = CrtSettings(pixel_size=9, scanlines=1, brightness=0, contrast=0.0)
        setattr(s, field, value)
        with pytest.raises(InvalidConfiguration):
            s.validate()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "preset.json"
        s = CrtSettings(pixel_size=7, scanlines=2, brightness=3, contrast=1.0).validate()
        s.save(str(path))
        assert CrtSettings.load(str(path)) == s

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(IOFailure):
            CrtSettings.load(str(tmp_path / "nope.json"))
