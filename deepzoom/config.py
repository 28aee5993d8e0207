import json
from typing import Any, Dict, Optional

from deepzoom import presets
from deepzoom.core.palette import validate_palette
from deepzoom.core.viewport import Viewport, parse_center
from deepzoom.renderers.frame import RenderSettings

def default_config() -> Dict[str, Any]:
    return {
        "width": presets.WIDTH,
        "height": presets.HEIGHT,
        "max_iter": presets.MAX_ITER,
        "total_frames": presets.TOTAL_FRAMES,
        "start_zoom": presets.START_ZOOM,
        "zoom_increment": presets.ZOOM_INCREMENT,
        "center_preset": presets.DEFAULT_CENTER_PRESET,
        "palette": [list(c) for c in presets.DEFAULT_PALETTE],
        "precision_bits": presets.PRECISION_BITS,
        "alpha": presets.ALPHA,
        "band_height": 16,
        "workers": None,
        "clamp_to_reference_escape": False,
        "frames_dir": presets.FRAMES_DIR,
        "output_video": presets.OUTPUT_VIDEO,
        "fps": presets.FPS,
    }

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Read a JSON config; fields it omits take their defaults."""
    cfg = default_config()
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            user = json.load(f)
        if not isinstance(user, dict):
            raise ValueError("Config JSON must be an object.")
        if "center" in user:
            cfg.pop("center_preset", None)
        cfg.update(user)
    return cfg

_MISSING = object()

def _number(cfg: Dict[str, Any], key: str, kind=int, default: Any = _MISSING):
    value = cfg[key] if default is _MISSING else cfg.get(key, default)
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be a number, got {value!r}") from e

def _resolve_center(cfg: Dict[str, Any]) -> list:
    center = cfg.get("center")
    if center is not None:
        if not (isinstance(center, (list, tuple)) and len(center) == 2):
            raise ValueError("center must be [re, im].")
        for part in center:
            if isinstance(part, bool) or not isinstance(part, (str, int, float)):
                raise ValueError(f"center parts must be decimal strings or numbers, got {part!r}")
        return [str(center[0]), str(center[1])]

    preset = _number(cfg, "center_preset", int, presets.DEFAULT_CENTER_PRESET)
    if preset not in presets.CENTER_PRESETS:
        raise ValueError(f"Unknown center_preset {preset}; choose from {sorted(presets.CENTER_PRESETS)}")
    return list(presets.CENTER_PRESETS[preset])

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    required = ["width", "height", "max_iter", "total_frames", "start_zoom", "palette", "frames_dir"]
    for r in required:
        if r not in cfg:
            raise ValueError(f"Missing config field: {r}")

    width = _number(cfg, "width")
    height = _number(cfg, "height")
    total_frames = _number(cfg, "total_frames")
    if width <= 0 or height <= 0 or total_frames <= 0:
        raise ValueError("width/height/total_frames must be positive.")

    max_iter = _number(cfg, "max_iter")
    if max_iter < 0:
        raise ValueError("max_iter must be >= 0.")

    start_zoom = _number(cfg, "start_zoom", float)
    zoom_increment = _number(cfg, "zoom_increment", float, 0.0)
    if start_zoom <= 0:
        raise ValueError("start_zoom must be > 0.")
    if zoom_increment < 0:
        raise ValueError("zoom_increment must be >= 0.")

    workers = cfg.get("workers")

    out = dict(cfg)
    out["width"] = width
    out["height"] = height
    out["total_frames"] = total_frames
    out["max_iter"] = max_iter
    out["start_zoom"] = start_zoom
    out["zoom_increment"] = zoom_increment
    out["center"] = _resolve_center(cfg)
    out["palette"] = [list(c) for c in validate_palette(cfg["palette"])]
    out["precision_bits"] = _number(cfg, "precision_bits", int, presets.PRECISION_BITS)
    out["alpha"] = _number(cfg, "alpha", int, presets.ALPHA)
    out["band_height"] = _number(cfg, "band_height", int, 16)
    out["workers"] = None if workers is None else _number(cfg, "workers")
    out["clamp_to_reference_escape"] = bool(cfg.get("clamp_to_reference_escape", False))
    out["fps"] = _number(cfg, "fps", int, presets.FPS)
    out["frames_dir"] = str(cfg.get("frames_dir", presets.FRAMES_DIR))
    out["output_video"] = str(cfg.get("output_video", presets.OUTPUT_VIDEO))
    out.pop("center_preset", None)

    # Surface bad settings now rather than mid-render.
    settings_from_config(out)
    return out

def settings_from_config(cfg: Dict[str, Any]) -> RenderSettings:
    return RenderSettings(
        precision_bits=int(cfg["precision_bits"]),
        alpha=int(cfg["alpha"]),
        band_height=int(cfg["band_height"]),
        workers=cfg["workers"],
        clamp_to_reference_escape=bool(cfg["clamp_to_reference_escape"]),
    )

def viewport_from_config(cfg: Dict[str, Any]) -> Viewport:
    re, im = cfg["center"]
    return Viewport(
        width=int(cfg["width"]),
        height=int(cfg["height"]),
        iterations=int(cfg["max_iter"]),
        zoom=float(cfg["start_zoom"]),
        center=parse_center(re, im, int(cfg["precision_bits"])),
        zoom_increment=float(cfg["zoom_increment"]),
    )
