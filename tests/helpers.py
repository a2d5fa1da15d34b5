from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image


def make_bordered_image(
    size: int = 4,
    border=(255, 255, 255),
    center=(255, 0, 0),
    inset: int = 1,
) -> np.ndarray:
    """Solid `border` color with a `center` block `inset` pixels in from each edge."""
    img = np.zeros((size, size, 4), dtype=np.uint8)
    img[..., :3] = border
    img[..., 3] = 255
    img[inset : size - inset, inset : size - inset, :3] = center
    return img


def to_png_bytes(rgba: np.ndarray) -> bytes:
    buf = BytesIO()
    Image.fromarray(rgba).save(buf, format="PNG")
    return buf.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    with Image.open(BytesIO(data)) as img:
        return np.asarray(img.convert("RGBA"))
