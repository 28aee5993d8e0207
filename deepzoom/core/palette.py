from __future__ import annotations

import math
from typing import Sequence, Tuple

RGB = Tuple[int, int, int]


def validate_palette(palette: Sequence[Sequence[int]]) -> Tuple[RGB, ...]:
    if not isinstance(palette, (list, tuple)) or not palette:
        raise ValueError("palette must be a non-empty list of [r, g, b] colours.")
    out = []
    for entry in palette:
        if not isinstance(entry, (list, tuple)) or len(entry) != 3:
            raise ValueError(f"palette entries must be [r, g, b], got {entry!r}")
        try:
            r, g, b = (int(c) for c in entry)
        except (TypeError, ValueError) as e:
            raise ValueError(f"palette channels must be integers, got {entry!r}") from e
        if not all(0 <= c <= 255 for c in (r, g, b)):
            raise ValueError(f"palette channels must be in 0..255, got {entry!r}")
        out.append((r, g, b))
    return tuple(out)


def _channel(value: float) -> int:
    # Round half up, then saturate to a byte.
    return min(255, max(0, int(math.floor(value + 0.5))))


def lerp_rgb(c1: Sequence[int], c2: Sequence[int], t: float) -> RGB:
    return (
        _channel(c1[0] * (1.0 - t) + c2[0] * t),
        _channel(c1[1] * (1.0 - t) + c2[1] * t),
        _channel(c1[2] * (1.0 - t) + c2[2] * t),
    )


def interpolate(color_index: float, palette: Sequence[RGB]) -> RGB:
    """Blend the two palette entries around ``color_index``; the table wraps."""
    size = len(palette)
    i1 = int(math.floor(color_index))
    t = color_index - i1
    i1 %= size
    i2 = (i1 + 1) % size
    return lerp_rgb(palette[i1], palette[i2], t)
