from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import replace
from typing import Any, Dict, Optional

import numpy as np
from PIL import Image
from tqdm import tqdm

from deepzoom.config import settings_from_config, viewport_from_config
from deepzoom.renderers.frame import FrameAssembler
from deepzoom.util.logging_setup import get_logger

def _ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)

def frame_digest(buf: np.ndarray) -> str:
    return hashlib.sha256(np.ascontiguousarray(buf).tobytes()).hexdigest()

def save_frame(buf: np.ndarray, path: str) -> str:
    img = Image.fromarray(buf)
    img.save(path, format="PNG", optimize=True)
    return path

def _frame_path(frames_dir: str, frame_index: int) -> str:
    return os.path.join(frames_dir, f"frame_{frame_index:06d}.png")

def render_single(*, cfg: Dict[str, Any], zoom: float, output: str, log_queue=None, log_level: int = logging.INFO) -> Dict[str, Any]:
    """Render one frame of the configured center at ``zoom`` and save it as PNG."""
    logger = get_logger()
    settings = settings_from_config(cfg)
    viewport = replace(viewport_from_config(cfg), zoom=float(zoom))

    assembler = FrameAssembler(cfg["palette"], settings, log_queue=log_queue, log_level=log_level)
    buf = assembler.render(viewport, frame_id="single")
    parent = os.path.dirname(output)
    if parent:
        _ensure_dir(parent)
    save_frame(buf, output)
    digest = frame_digest(buf)
    logger.info("Saved frame -> %s (zoom=%s sha256=%s)", output, zoom, digest)
    return {"path": output, "zoom": float(zoom), "sha256": digest}

def render_sequence(
    *,
    cfg: Dict[str, Any],
    log_queue=None,
    log_level: int = logging.INFO,
    total_frames: Optional[int] = None,
    progress: bool = True,
) -> Dict[str, Any]:
    """Drive the zoom: render, save, then advance the zoom by its fixed increment."""
    logger = get_logger()

    frames_dir = str(cfg["frames_dir"])
    total = int(total_frames if total_frames is not None else cfg["total_frames"])
    if total <= 0:
        raise ValueError("total_frames must be positive.")

    settings = settings_from_config(cfg)
    viewport = viewport_from_config(cfg)
    assembler = FrameAssembler(cfg["palette"], settings, log_queue=log_queue, log_level=log_level)

    _ensure_dir(frames_dir)

    logger.info("Render start total_frames=%s size=%sx%s zoom=%s(+%s/frame) iter=%s center=(%s, %s)",
                total, viewport.width, viewport.height, viewport.zoom, viewport.zoom_increment,
                viewport.iterations, cfg["center"][0], cfg["center"][1])

    frames = []
    for i in tqdm(range(total), desc="Rendering frames", disable=not progress):
        frame_id = f"{i:06d}"
        buf = assembler.render(viewport, frame_id=frame_id)
        path = save_frame(buf, _frame_path(frames_dir, i))
        digest = frame_digest(buf)
        frames.append({"index": i, "zoom": viewport.zoom, "path": path, "sha256": digest})
        logger.info("Saved frame %s -> %s (zoom=%s)", i, path, viewport.zoom)
        viewport = viewport.advance()

    logger.info("Render complete frames_dir=%s reference_orbits_built=%s", frames_dir, assembler.orbits.misses)
    return {
        "frames_dir": frames_dir,
        "total_frames": total,
        "width": viewport.width,
        "height": viewport.height,
        "frames": frames,
    }
