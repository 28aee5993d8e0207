"""Arbitrary-precision reference orbit for perturbation rendering.

The orbit is computed once at the zoom center with mpmath at a fixed working
precision, then stored as float64 arrays. Pixels near the center iterate only
a small double-precision delta against it, so the expensive arithmetic is paid
per center rather than per pixel.

Element 0 is the center itself and element k is the k-th iterate of
``z -> z^2 + c`` started from ``z0 = c``. The orbit is always generated to full
length; if the center itself escapes, the later values are meaningless (they
overflow to inf once converted to float64). That index is recorded in
``escape_index`` and logged, not corrected here.

Only the float64 copies are kept. Every pixel iterates its delta in double
precision, so the mpmath values are dropped as soon as they are converted;
the center itself stays available at full precision in ``center``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from mpmath import mp, mpc, mpf

from deepzoom.core.escape import ESCAPE_RADIUS_SQ
from deepzoom.util.logging_setup import get_logger

DEFAULT_PRECISION_BITS = 128


@dataclass(frozen=True)
class ReferenceOrbit:
    center: Tuple[mpf, mpf]
    iterations: int
    precision_bits: int
    re: np.ndarray
    im: np.ndarray
    escape_index: Optional[int]

    def __len__(self) -> int:
        return int(self.re.shape[0])

    @property
    def escaped(self) -> bool:
        return self.escape_index is not None


def compute_reference_orbit(
    center: Tuple[object, object],
    iterations: int,
    precision_bits: int = DEFAULT_PRECISION_BITS,
) -> ReferenceOrbit:
    if iterations < 0:
        raise ValueError("iterations must be >= 0.")
    if precision_bits < 53:
        raise ValueError("precision_bits must be at least 53.")

    logger = get_logger()

    re = np.empty(iterations + 1, dtype=np.float64)
    im = np.empty(iterations + 1, dtype=np.float64)
    escape_index: Optional[int] = None

    with mp.workprec(precision_bits):
        cx, cy = mpf(center[0]), mpf(center[1])
        c = mpc(cx, cy)
        z = c
        for n in range(iterations + 1):
            re[n] = float(z.real)
            im[n] = float(z.imag)
            if escape_index is None and z.real * z.real + z.imag * z.imag > ESCAPE_RADIUS_SQ:
                escape_index = n
            if n < iterations:
                z = z * z + c

    if escape_index is not None:
        logger.warning(
            "Reference orbit escapes at step %s/%s; perturbed pixels past that step use post-escape values",
            escape_index, iterations,
        )

    return ReferenceOrbit(
        center=(cx, cy),
        iterations=iterations,
        precision_bits=precision_bits,
        re=re,
        im=im,
        escape_index=escape_index,
    )


class ReferenceOrbitCache:
    """Keep the last reference orbit and rebuild it only when its inputs change.

    The center is fixed for a whole zoom sequence, so in practice the orbit is
    built once.
    """

    def __init__(self, precision_bits: int = DEFAULT_PRECISION_BITS):
        self.precision_bits = precision_bits
        self._key = None
        self._orbit: Optional[ReferenceOrbit] = None
        self.misses = 0

    def get(self, center: Tuple[mpf, mpf], iterations: int) -> ReferenceOrbit:
        key = (center[0], center[1], iterations, self.precision_bits)
        if self._orbit is not None and key == self._key:
            return self._orbit

        logger = get_logger()
        logger.info("Computing reference orbit iter=%s prec=%s bits", iterations, self.precision_bits)
        self._orbit = compute_reference_orbit(center, iterations, self.precision_bits)
        self._key = key
        self.misses += 1
        return self._orbit

    def invalidate(self) -> None:
        self._key = None
        self._orbit = None
