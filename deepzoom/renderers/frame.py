from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from deepzoom.core.escape import evaluate_pixel
from deepzoom.core.orbit import DEFAULT_PRECISION_BITS, ReferenceOrbit, ReferenceOrbitCache
from deepzoom.core.palette import RGB, interpolate, validate_palette
from deepzoom.core.viewport import Viewport, parse_center, pixel_to_complex
from deepzoom.util.logging_setup import frame_tag, get_logger, logging_initialiser


@dataclass(frozen=True)
class RenderSettings:
    precision_bits: int = DEFAULT_PRECISION_BITS
    alpha: int = 255

    # Rows per pool task.
    band_height: int = 16

    # None: one worker per CPU. 1: render bands in this process.
    workers: Optional[int] = None

    # Stop perturbing where the reference orbit escapes and finish in direct mode.
    clamp_to_reference_escape: bool = False

    def __post_init__(self) -> None:
        if self.precision_bits < 53:
            raise ValueError("precision_bits must be at least 53.")
        if not 0 <= self.alpha <= 255:
            raise ValueError("alpha must be in 0..255.")
        if self.band_height <= 0:
            raise ValueError("band_height must be > 0.")
        if self.workers is not None and self.workers <= 0:
            raise ValueError("workers must be > 0 or None.")


_G: Dict[str, Any] = {}

def _init_worker(state: Dict[str, Any], log_queue, log_level: int) -> None:
    _G.clear()
    _G.update(state)
    logging_initialiser(log_queue, log_level)

def _render_band(rows: Tuple[int, int]) -> Tuple[int, np.ndarray]:
    row0, row1 = rows
    width = _G["width"]
    height = _G["height"]
    zoom = _G["zoom"]
    center = _G["center"]
    iterations = _G["iterations"]
    palette = _G["palette"]
    orbit_re = _G["orbit_re"]
    orbit_im = _G["orbit_im"]
    reference_escape = _G["reference_escape"]
    alpha = _G["alpha"]
    palette_size = len(palette)

    band = np.empty((row1 - row0, width, 4), dtype=np.uint8)
    band[:, :, 3] = alpha

    for yi, py in enumerate(range(row0, row1)):
        for px in range(width):
            x0, y0 = pixel_to_complex(px, py, width, height, zoom, center)
            index = evaluate_pixel(
                x0, y0, center, zoom, orbit_re, orbit_im,
                iterations, palette_size, reference_escape,
            )
            band[yi, px, :3] = interpolate(index, palette)

    get_logger().debug("%s Rendered rows %s..%s/%s", _G["tag"], row0, row1, height)
    return row0, band


def _bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands


class FrameAssembler:
    """Renders viewports into RGBA pixel buffers.

    Holds the reference orbit cache, so successive frames of one zoom sequence
    reuse the orbit.
    """

    def __init__(
        self,
        palette: Sequence[Sequence[int]],
        settings: Optional[RenderSettings] = None,
        *,
        log_queue=None,
        log_level: int = logging.INFO,
    ):
        self.settings = settings or RenderSettings()
        self.palette: Tuple[RGB, ...] = validate_palette(palette)
        self.orbits = ReferenceOrbitCache(self.settings.precision_bits)
        self.log_queue = log_queue
        self.log_level = log_level

    def render(self, viewport: Viewport, *, frame_id: Optional[object] = None) -> np.ndarray:
        logger = get_logger()
        tag = frame_tag(frame_id)
        settings = self.settings
        start = time.time()

        orbit: ReferenceOrbit = self.orbits.get(viewport.center, viewport.iterations)

        state = {
            "width": viewport.width,
            "height": viewport.height,
            "zoom": float(viewport.zoom),
            "center": viewport.center_float,
            "iterations": viewport.iterations,
            "palette": self.palette,
            "orbit_re": orbit.re.tolist(),
            "orbit_im": orbit.im.tolist(),
            "reference_escape": orbit.escape_index if settings.clamp_to_reference_escape else None,
            "alpha": settings.alpha,
            "tag": tag,
        }

        logger.info("%s Render start size=%sx%s zoom=%s iter=%s workers=%s",
                    tag, viewport.width, viewport.height, viewport.zoom, viewport.iterations,
                    settings.workers or "auto")

        buf = np.zeros((viewport.height, viewport.width, 4), dtype=np.uint8)
        bands = _bands(viewport.height, settings.band_height)

        if settings.workers == 1:
            _init_worker(state, None, self.log_level)
            try:
                for band_rows in bands:
                    y0, band = _render_band(band_rows)
                    buf[y0:y0 + band.shape[0]] = band
            finally:
                _G.clear()
        else:
            with ProcessPoolExecutor(
                max_workers=settings.workers,
                initializer=_init_worker,
                initargs=(state, self.log_queue, self.log_level),
            ) as pool:
                for y0, band in pool.map(_render_band, bands):
                    buf[y0:y0 + band.shape[0]] = band

        logger.info("%s Render done in %.2fs", tag, time.time() - start)
        return buf


def generate_frame(
    width: int,
    height: int,
    iterations: int,
    zoom: float,
    center_re: object,
    center_im: object,
    palette: Sequence[Sequence[int]],
    settings: Optional[RenderSettings] = None,
) -> np.ndarray:
    """Render one frame and return its ``(height, width, 4)`` uint8 buffer.

    ``center_re``/``center_im`` may be decimal strings, floats or mpf values;
    strings are parsed at the reference orbit's precision.
    """
    settings = settings or RenderSettings()
    assembler = FrameAssembler(palette, settings)
    viewport = Viewport(
        width=int(width),
        height=int(height),
        iterations=int(iterations),
        zoom=float(zoom),
        center=parse_center(center_re, center_im, settings.precision_bits),
    )
    return assembler.render(viewport)
