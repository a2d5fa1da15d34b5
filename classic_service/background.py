"""Background color estimation from the image border."""

from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np

from .errors import EmptyInput, InvalidParameter

logger = logging.getLogger(__name__)

MAX_EDGE_SAMPLES = 5000
STEP_DIVISOR = 256


def border_step(width: int, height: int) -> int:
    """Sampling stride along each edge; roughly 256 samples per edge at most."""
    return max(1, max(width, height) // STEP_DIVISOR)


def sample_border(rgba: np.ndarray, step: int, max_samples: int = MAX_EDGE_SAMPLES) -> np.ndarray:
    """
    Collect RGB samples from the outermost ring of pixels.

    Samples are ordered as (top, bottom) pairs walking along x, followed by
    (left, right) pairs walking along y. When there are more than
    `max_samples`, every k-th sample is kept with k = ceil(count / max_samples).

    Returns:
        (N, 3) uint8 array of samples.
    """
    if rgba.ndim != 3 or rgba.shape[2] < 3:
        raise InvalidParameter(f"expected an (H, W, 4) image, got shape {rgba.shape}")
    if step < 1:
        raise InvalidParameter("border sampling step must be >= 1")

    h, w = rgba.shape[:2]
    if h == 0 or w == 0:
        raise EmptyInput(f"cannot sample the border of a {w}x{h} image")
    rgb = rgba[..., :3]
    xs = np.arange(0, w, step)
    ys = np.arange(0, h, step)

    rows = np.stack((rgb[0, xs], rgb[h - 1, xs]), axis=1).reshape(-1, 3)
    cols = np.stack((rgb[ys, 0], rgb[ys, w - 1]), axis=1).reshape(-1, 3)
    samples = np.concatenate((rows, cols), axis=0)

    if max_samples > 0 and len(samples) > max_samples:
        keep_every = math.ceil(len(samples) / max_samples)
        samples = samples[::keep_every]
    return samples


def median_color(samples: np.ndarray) -> Tuple[int, int, int]:
    """Per-channel median; for an even count the upper middle value is used."""
    if len(samples) == 0:
        raise EmptyInput("no border samples to estimate the background from")
    ordered = np.sort(np.asarray(samples)[:, :3], axis=0)
    mid = len(ordered) // 2
    r, g, b = ordered[mid]
    return int(r), int(g), int(b)


def estimate_background(rgba: np.ndarray) -> Tuple[int, int, int]:
    h, w = rgba.shape[:2]
    step = border_step(w, h)
    samples = sample_border(rgba, step)
    background = median_color(samples)
    logger.debug("background: step=%d samples=%d estimate=%s", step, len(samples), background)
    return background
