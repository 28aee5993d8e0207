import json

import pytest
from mpmath import mp, mpf

from deepzoom import presets
from deepzoom.config import (
    default_config,
    load_config,
    normalise_config,
    settings_from_config,
    viewport_from_config,
)


def test_defaults_normalise_to_the_default_preset():
    cfg = normalise_config(load_config(None))
    assert cfg["center"] == list(presets.CENTER_PRESETS[presets.DEFAULT_CENTER_PRESET])
    assert cfg["width"] == presets.WIDTH
    assert cfg["palette"][0] == list(presets.DEFAULT_PALETTE[0])
    assert "center_preset" not in cfg


def test_json_overrides_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"width": 32, "center": ["-0.75", 0.1], "zoom_increment": 2}), encoding="utf-8")
    cfg = normalise_config(load_config(str(path)))
    assert cfg["width"] == 32
    assert cfg["height"] == presets.HEIGHT
    assert cfg["center"] == ["-0.75", "0.1"]
    assert cfg["zoom_increment"] == 2.0


def test_center_preset_selects_coordinates():
    cfg = default_config()
    cfg["center_preset"] = 4
    assert normalise_config(cfg)["center"] == ["-0.77568377", "0.13646737"]


def test_non_object_json_rejected(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize(
    "override",
    [
        {"width": 0},
        {"height": -3},
        {"total_frames": 0},
        {"max_iter": -1},
        {"start_zoom": 0},
        {"zoom_increment": -5},
        {"palette": []},
        {"palette": [[300, 0, 0]]},
        {"center_preset": 42},
        {"center": [1.0]},
        {"center": [None, 0]},
        {"alpha": 999},
        {"workers": 0},
        {"width": None},
        {"max_iter": "lots"},
        {"fps": [60]},
        {"palette": [1, 2, 3]},
        {"palette": [["red", 0, 0]]},
        {"center_preset": None},
    ],
)
def test_bad_config_rejected(override):
    cfg = default_config()
    cfg.update(override)
    with pytest.raises(ValueError):
        normalise_config(cfg)


def test_missing_field_rejected():
    cfg = default_config()
    del cfg["palette"]
    with pytest.raises(ValueError, match="palette"):
        normalise_config(cfg)


def test_viewport_and_settings_from_config(tiny_config):
    cfg = normalise_config(dict(tiny_config, precision_bits=192, clamp_to_reference_escape=True))
    vp = viewport_from_config(cfg)
    assert (vp.width, vp.height, vp.iterations, vp.zoom, vp.zoom_increment) == (8, 6, 20, 1.0, 0.5)
    with mp.workprec(192):
        assert vp.center[1] == mpf("0.1")

    settings = settings_from_config(cfg)
    assert settings.precision_bits == 192
    assert settings.workers == 1
    assert settings.clamp_to_reference_escape is True
