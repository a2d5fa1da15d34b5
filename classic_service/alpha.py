"""
Distance-keyed alpha mask.

Opacity is a smoothstep of the squared RGB distance between each pixel and
the estimated background color:

    tol2  = tol ** 2
    soft2 = lerp(tol ** 2, hard ** 2, 0.5) * feather
    alpha = round(255 * smoothstep(tol2, soft2, d2))

Distances stay squared throughout; no square roots are taken.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .errors import InvalidParameter
from .params import MattingParams


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    """
    Cubic ease t^2 (3 - 2t) of x between edge0 and edge1.

    When edge1 <= edge0 there is no ramp left and the result is a step:
    0 at or below edge0, 1 above it.
    """
    x = np.asarray(x, dtype=np.float64)
    if edge1 <= edge0:
        return (x > edge0).astype(np.float64)
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp to 0..255."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def squared_distance(rgba: np.ndarray, color: Sequence[int]) -> np.ndarray:
    """Squared Euclidean RGB distance of every pixel to `color`, shape (H, W)."""
    diff = rgba[..., :3].astype(np.int32) - np.asarray(color[:3], dtype=np.int32)
    return np.einsum("ijk,ijk->ij", diff, diff)


def soft_upper_bound(params: MattingParams) -> float:
    return lerp(params.tol2, params.hard2, 0.5) * params.feather


def build_alpha(rgba: np.ndarray, background: Sequence[int], params: MattingParams) -> np.ndarray:
    """Raw (pre-despeckle) alpha buffer: 0 for background, 255 for subject."""
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise InvalidParameter(f"expected an (H, W, 4) image, got shape {rgba.shape}")
    d2 = squared_distance(rgba, background)
    return to_uint8(smoothstep(params.tol2, soft_upper_bound(params), d2) * 255.0)
