"""Merge original colors with the final alpha mask and encode the result."""

from __future__ import annotations

from io import BytesIO
from typing import Optional, Sequence

import numpy as np
from PIL import Image

from .alpha import to_uint8
from .errors import DimensionMismatch, InvalidParameter


def compose_rgba(
    rgba: np.ndarray,
    alpha: np.ndarray,
    matte: Optional[Sequence[int]] = None,
) -> np.ndarray:
    """
    Attach `alpha` to the original colors.

    Without a matte the result keeps variable alpha. With a matte every pixel
    is flattened onto the matte color, weighted by alpha, and made opaque.
    """
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise InvalidParameter(f"expected an (H, W, 4) image, got shape {rgba.shape}")
    if alpha.shape != rgba.shape[:2]:
        raise DimensionMismatch(
            f"alpha is {alpha.shape[1]}x{alpha.shape[0]} but image is {rgba.shape[1]}x{rgba.shape[0]}"
        )

    out = np.array(rgba, dtype=np.uint8, copy=True)
    if matte is None:
        out[..., 3] = alpha
        return out

    weight = alpha.astype(np.float64)[..., None] / 255.0
    matte_rgb = np.asarray(matte[:3], dtype=np.float64)
    rgb = rgba[..., :3].astype(np.float64)
    out[..., :3] = to_uint8(matte_rgb + (rgb - matte_rgb) * weight)
    out[..., 3] = 255
    return out


def encode_png(rgba: np.ndarray) -> bytes:
    out = Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
    buf = BytesIO()
    out.save(buf, format="PNG")
    return buf.getvalue()
