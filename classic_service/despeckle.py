"""Despeckle: repeated 3x3 box blur and soft re-threshold of an alpha mask."""

from __future__ import annotations

import logging

import cv2
import numpy as np

from .alpha import smoothstep, to_uint8
from .errors import InvalidParameter

logger = logging.getLogger(__name__)

BLUR_KERNEL = (3, 3)
RETHRESHOLD_LOW = 0.35
RETHRESHOLD_HIGH = 0.65
MAX_ROUNDS = 3


def _box_sum(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """3x3 neighbourhood sum; out-of-bounds neighbours contribute nothing."""
    return cv2.boxFilter(
        src,
        cv2.CV_64F,
        BLUR_KERNEL,
        dst=dst,
        normalize=False,
        borderType=cv2.BORDER_CONSTANT,
    )


def _neighbour_counts(height: int, width: int) -> np.ndarray:
    """Number of in-bounds pixels in each 3x3 window."""
    ones = np.ones((height, width), dtype=np.float64)
    return _box_sum(ones, np.empty_like(ones))


def despeckle(alpha: np.ndarray, rounds: int) -> np.ndarray:
    """
    Suppress isolated mask noise while keeping soft edges.

    Each round averages every pixel over its in-bounds 3x3 neighbourhood,
    rounds to 8 bits, then re-hardens with smoothstep(0.35, 0.65). Rounds run
    strictly in sequence on two alternating buffers. Zero rounds returns an
    unchanged copy.
    """
    if alpha.ndim != 2:
        raise InvalidParameter(f"expected an (H, W) alpha buffer, got shape {alpha.shape}")
    if not 0 <= rounds <= MAX_ROUNDS:
        raise InvalidParameter(f"despeckle rounds must be within 0..{MAX_ROUNDS}, got {rounds}")
    if rounds == 0 or alpha.size == 0:
        return alpha.copy()

    front = alpha.astype(np.float64)
    back = np.empty_like(front)
    counts = _neighbour_counts(*alpha.shape)

    for round_idx in range(rounds):
        _box_sum(front, back)
        np.divide(back, counts, out=back)
        blurred = np.floor(back + 0.5) / 255.0
        back[...] = np.floor(smoothstep(RETHRESHOLD_LOW, RETHRESHOLD_HIGH, blurred) * 255.0 + 0.5)
        front, back = back, front
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "despeckle: round %d/%d opaque=%d transparent=%d",
                round_idx + 1,
                rounds,
                int(np.count_nonzero(front == 255)),
                int(np.count_nonzero(front == 0)),
            )

    return to_uint8(front)
