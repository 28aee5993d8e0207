from __future__ import annotations

import math
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence, Tuple

ESCAPE_RADIUS_SQ = 2.0 ** 16

# Perturbation is only used very close to the reference point and below this zoom.
PERTURBATION_DISTANCE_SQ = 1e-15
PERTURBATION_MAX_ZOOM = 1e8

_LN2 = math.log(2.0)


class IterationMode(Enum):
    DIRECT = "direct"
    PERTURBATION = "perturbation"


def select_mode(x0: float, y0: float, center: Tuple[float, float], zoom: float) -> IterationMode:
    dx = x0 - center[0]
    dy = y0 - center[1]
    if dx * dx + dy * dy > PERTURBATION_DISTANCE_SQ or zoom > PERTURBATION_MAX_ZOOM:
        return IterationMode.DIRECT
    return IterationMode.PERTURBATION


def smooth_color_index(i: int, mag2: float, palette_size: int) -> float:
    """Fractional escape count for an escape at step ``i`` with ``|z|^2 == mag2``."""
    if palette_size == 1:
        return 0.0
    log_zn = math.log(mag2, 256) / 2
    nu = math.log(log_zn / _LN2, 256) / _LN2
    return (i + 1 - nu) % palette_size


def inside_color_index(iterations: int, palette_size: int) -> float:
    return float(iterations % palette_size)


def direct_steps(x0: float, y0: float, iterations: int) -> Iterator[Tuple[int, float, float]]:
    """Yield ``(i, x, y)`` after each step of z -> z^2 + c with z0 = 0."""
    x = 0.0
    y = 0.0
    x2 = 0.0
    y2 = 0.0
    for i in range(iterations):
        y = 2.0 * x * y + y0
        x = x2 - y2 + x0
        x2 = x * x
        y2 = y * y
        yield i, x, y


def perturbation_steps(
    orbit_re: Sequence[float],
    orbit_im: Sequence[float],
    dz_re: float,
    dz_im: float,
    iterations: int,
) -> Iterator[Tuple[int, float, float]]:
    """Yield ``(i, x, y)`` where (x, y) = reference[i + 1] + e.

    e starts at 0 and follows e' = 2 * reference[i] * e + e^2 + dz.
    """
    er = 0.0
    ei = 0.0
    for i in range(iterations):
        zr = orbit_re[i]
        zi = orbit_im[i]
        er, ei = (
            2.0 * (zr * er - zi * ei) + (er * er - ei * ei) + dz_re,
            2.0 * (zr * ei + zi * er) + 2.0 * er * ei + dz_im,
        )
        yield i, orbit_re[i + 1] + er, orbit_im[i + 1] + ei


def first_escape(steps: Iterable[Tuple[int, float, float]]) -> Optional[Tuple[int, float]]:
    for i, x, y in steps:
        mag2 = x * x + y * y
        if mag2 > ESCAPE_RADIUS_SQ:
            return i, mag2
    return None


def evaluate_direct(x0: float, y0: float, iterations: int, palette_size: int) -> float:
    hit = first_escape(direct_steps(x0, y0, iterations))
    if hit is None:
        return inside_color_index(iterations, palette_size)
    return smooth_color_index(hit[0], hit[1], palette_size)


def evaluate_perturbed(
    orbit_re: Sequence[float],
    orbit_im: Sequence[float],
    dz_re: float,
    dz_im: float,
    iterations: int,
    palette_size: int,
) -> float:
    hit = first_escape(perturbation_steps(orbit_re, orbit_im, dz_re, dz_im, iterations))
    if hit is None:
        return inside_color_index(iterations, palette_size)
    return smooth_color_index(hit[0], hit[1], palette_size)


def evaluate_pixel(
    x0: float,
    y0: float,
    center: Tuple[float, float],
    zoom: float,
    orbit_re: Sequence[float],
    orbit_im: Sequence[float],
    iterations: int,
    palette_size: int,
    reference_escape: Optional[int] = None,
) -> float:
    """Colour index of one pixel.

    ``reference_escape`` caps perturbation at the step where the reference
    orbit escaped; a pixel still bounded at that point falls back to direct
    iteration. Pass None to iterate the full orbit regardless.
    """
    if select_mode(x0, y0, center, zoom) is IterationMode.DIRECT:
        return evaluate_direct(x0, y0, iterations, palette_size)

    dz_re = x0 - center[0]
    dz_im = y0 - center[1]
    if reference_escape is None or reference_escape >= iterations:
        return evaluate_perturbed(orbit_re, orbit_im, dz_re, dz_im, iterations, palette_size)

    hit = first_escape(perturbation_steps(orbit_re, orbit_im, dz_re, dz_im, reference_escape))
    if hit is None:
        return evaluate_direct(x0, y0, iterations, palette_size)
    return smooth_color_index(hit[0], hit[1], palette_size)
