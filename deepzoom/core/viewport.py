from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple, Union

from mpmath import mp, mpf

from deepzoom.presets import MAX_IM, MAX_RE, MIN_IM, MIN_RE

Number = Union[str, float, int, mpf]


def parse_center(re: Number, im: Number, precision_bits: int) -> Tuple[mpf, mpf]:
    """Parse a center at ``precision_bits`` so decimal strings keep every digit."""
    with mp.workprec(precision_bits):
        return mpf(re), mpf(im)


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
    iterations: int
    zoom: float
    center: Tuple[mpf, mpf]
    zoom_increment: float = 0.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width/height must be positive.")
        if self.iterations < 0:
            raise ValueError("iterations must be >= 0.")
        if not self.zoom > 0:
            raise ValueError("zoom must be > 0.")
        if self.zoom_increment < 0:
            raise ValueError("zoom_increment must be >= 0 (zoom never decreases).")

    @property
    def center_float(self) -> Tuple[float, float]:
        return float(self.center[0]), float(self.center[1])

    def advance(self) -> "Viewport":
        """Return the viewport for the next tick: same center, zoom + increment."""
        return replace(self, zoom=self.zoom + self.zoom_increment)

    def pixel_to_complex(self, px: float, py: float) -> Tuple[float, float]:
        return pixel_to_complex(px, py, self.width, self.height, self.zoom, self.center_float)


def pixel_to_complex(
    px: float,
    py: float,
    width: int,
    height: int,
    zoom: float,
    center: Tuple[float, float],
) -> Tuple[float, float]:
    """Map a pixel to the complex plane in double precision.

    Rows grow downward on screen, so the imaginary part decreases with ``py``.
    """
    center_re, center_im = center
    x0 = center_re + (px - width / 2) * (MAX_RE - MIN_RE) / (width * zoom)
    y0 = center_im - (py - height / 2) * (MAX_IM - MIN_IM) / (height * zoom)
    return x0, y0
