"""
Image loading and preprocessing.

Decodes uploaded bytes into a straight-alpha sRGB RGBA buffer and resizes by
the longest edge so the per-pixel stages have a bounded worst-case cost.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import InvalidParameter


@dataclass
class PreprocessResult:
    rgba: np.ndarray  # (H, W, 4) uint8
    orig_size: Tuple[int, int]  # (width, height)
    resized_size: Tuple[int, int]


def _compute_resize_dims(width: int, height: int, max_long_edge: int) -> Tuple[int, int]:
    """Preserve aspect ratio while constraining the longest edge. Never enlarges."""
    if max_long_edge <= 0:
        return width, height
    long_edge = max(width, height)
    if long_edge <= max_long_edge:
        return width, height
    scale = max_long_edge / long_edge
    new_w = max(1, int(round(width * scale)))
    new_h = max(1, int(round(height * scale)))
    return new_w, new_h


def decode_image(image_bytes: bytes) -> Image.Image:
    if not image_bytes:
        raise InvalidParameter("Missing image data")
    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
    except Image.DecompressionBombError as exc:
        raise InvalidParameter("Image has too many pixels to decode") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidParameter("Invalid image data") from exc
    return image


def image_to_rgba(image: Image.Image, max_long_edge: int) -> PreprocessResult:
    """Convert a PIL image to an RGBA buffer no larger than `max_long_edge`."""
    image = image.convert("RGBA")
    orig_w, orig_h = image.size
    if orig_w < 1 or orig_h < 1:
        raise InvalidParameter("Image has no pixels")

    new_w, new_h = _compute_resize_dims(orig_w, orig_h, max_long_edge)
    if (new_w, new_h) != (orig_w, orig_h):
        image = image.resize((new_w, new_h), Image.LANCZOS)

    rgba = np.ascontiguousarray(np.asarray(image, dtype=np.uint8))
    return PreprocessResult(
        rgba=rgba,
        orig_size=(orig_w, orig_h),
        resized_size=(new_w, new_h),
    )


def load_rgba_from_bytes(image_bytes: bytes, max_long_edge: int) -> PreprocessResult:
    """
    Decode an image and resize its longest edge down to `max_long_edge`.

    Raises:
        InvalidParameter: when the bytes are empty or not a decodable image.
    """
    return image_to_rgba(decode_image(image_bytes), max_long_edge)
