"""
Color math helpers shared by the extraction stages.

All colors are normalized RGB in [0,1] unless a name says ``u8``.
"""

import math
from typing import Sequence, Tuple

import numpy as np


def rgb_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """
    Convert normalized RGB to HSL.

    Returns:
        (hue, saturation, lightness) with hue in [0,1) and S/L in [0,1].
        Achromatic colors get hue 0 and saturation 0.
    """
    max_v = max(r, g, b)
    min_v = min(r, g, b)
    lightness = 0.5 * (max_v + min_v)
    if max_v == min_v:
        return 0.0, 0.0, lightness

    d = max_v - min_v
    if lightness > 0.5:
        saturation = d / (2.0 - max_v - min_v)
    else:
        saturation = d / (max_v + min_v)
    saturation = min(1.0, saturation)

    if max_v == r:
        hue = (g - b) / d + (6.0 if g < b else 0.0)
    elif max_v == g:
        hue = (b - r) / d + 2.0
    else:
        hue = (r - g) / d + 4.0
    hue /= 6.0
    # (g - b) / d can round to exactly 6.0 for tiny negative offsets
    if hue >= 1.0:
        hue -= 1.0
    return hue, saturation, lightness


def hue_arc_distance(h1: float, h2: float) -> float:
    """Shortest distance between two hues on the [0,1) circle, in [0, 0.5]."""
    d = abs(h1 - h2)
    if d > 0.5:
        d = 1.0 - d
    return d


def squared_rgb_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Squared Euclidean distance between two normalized RGB colors, in [0, 3]."""
    dr = float(a[0]) - float(b[0])
    dg = float(a[1]) - float(b[1])
    db = float(a[2]) - float(b[2])
    return dr * dr + dg * dg + db * db


def unit_to_u8(value: float) -> int:
    """Map a normalized channel to 0..255 with clamping and rounding half away from zero."""
    clamped = min(1.0, max(0.0, float(value)))
    return int(math.floor(clamped * 255.0 + 0.5))


def rgb_to_hex(rgb_u8: Sequence[int]) -> str:
    """Convert an 8-bit RGB triple to a lowercase #rrggbb string."""
    r, g, b = [int(x) for x in rgb_u8]
    return f"#{r:02x}{g:02x}{b:02x}"


def pairwise_squared_distances(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """
    Squared distances between every point and every center.

    Args:
        points: (n, 3) float array
        centers: (k, 3) float array

    Returns:
        (n, k) float array
    """
    diff = points[:, None, :] - centers[None, :, :]
    return np.einsum('nkc,nkc->nk', diff, diff)
