"""
High-level classic background-removal pipeline.

`process_image_bytes` is the main entry point used by both the HTTP API and
the local helper script. It keeps orchestration simple:
bytes in -> decode/resize -> border sampling -> background estimate ->
alpha -> despeckle -> compose -> RGBA PNG bytes out.

`remove_background` runs the same stages on an already decoded buffer.
"""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Optional

import cv2
import numpy as np

from . import config
from .alpha import build_alpha, soft_upper_bound
from .background import estimate_background
from .compositing import compose_rgba, encode_png
from .despeckle import despeckle
from .errors import InvalidParameter
from .params import MattingParams
from .preprocessing import load_rgba_from_bytes

logger = logging.getLogger(__name__)


def _validate_rgba(rgba: np.ndarray) -> None:
    if not isinstance(rgba, np.ndarray):
        raise InvalidParameter("image buffer must be a numpy array")
    if rgba.dtype != np.uint8 or rgba.ndim != 3 or rgba.shape[2] != 4:
        raise InvalidParameter(
            f"image buffer must be (H, W, 4) uint8, got {rgba.shape} {rgba.dtype}"
        )
    if rgba.shape[0] < 1 or rgba.shape[1] < 1:
        raise InvalidParameter("image buffer has no pixels")


def _maybe_dump_debug(raw_alpha: np.ndarray, final_alpha: np.ndarray, debug_dir: Path) -> None:
    """Optionally write the intermediate masks when DEBUG is enabled."""
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(debug_dir / "alpha_raw.png"), raw_alpha)
        cv2.imwrite(str(debug_dir / "alpha_final.png"), final_alpha)
        logger.debug("pipeline: wrote debug outputs to %s", debug_dir)
    except Exception as exc:  # noqa: BLE001
        logger.warning("pipeline: failed to write debug outputs: %s", exc)


def remove_background(
    rgba: np.ndarray,
    params: Optional[MattingParams] = None,
    debug_dir: Optional[Path] = None,
) -> np.ndarray:
    """
    Key out the border-estimated background of an RGBA buffer.

    The buffer is not resized here; callers decoding bytes should use
    `process_image_bytes`, which bounds the long edge first.

    Raises:
        InvalidParameter: when `rgba` is not an (H, W, 4) uint8 array.
    """
    params = params or MattingParams()
    _validate_rgba(rgba)
    h, w = rgba.shape[:2]
    started = time.perf_counter()

    background = estimate_background(rgba)
    logger.debug(
        "pipeline: size=%dx%d background=%s tol2=%.1f soft2=%.1f",
        w,
        h,
        background,
        params.tol2,
        soft_upper_bound(params),
    )

    raw_alpha = build_alpha(rgba, background, params)
    final_alpha = despeckle(raw_alpha, params.despeckle)

    if debug_dir is not None:
        _maybe_dump_debug(raw_alpha, final_alpha, Path(debug_dir))

    out = compose_rgba(rgba, final_alpha, params.matte)
    logger.debug(
        "pipeline: despeckle=%d matte=%s elapsed=%.3fs",
        params.despeckle,
        params.matte,
        time.perf_counter() - started,
    )
    return out


def process_image_bytes(
    image_bytes: bytes,
    params: Optional[MattingParams] = None,
) -> bytes:
    """
    Full pipeline from raw bytes to RGBA PNG bytes.

    Raises:
        InvalidParameter: when the input is missing or not a decodable image.
    """
    settings = config.get_settings()
    params = params or MattingParams(max_size=settings.default_max_size)

    preprocessed = load_rgba_from_bytes(image_bytes, params.max_size)
    logger.debug(
        "pipeline: decoded %dx%d -> %dx%d",
        *preprocessed.orig_size,
        *preprocessed.resized_size,
    )

    debug_dir = Path(settings.debug_output_dir) if settings.debug else None
    out = remove_background(preprocessed.rgba, params, debug_dir=debug_dir)
    return encode_png(out)
