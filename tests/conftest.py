from __future__ import annotations

import numpy as np
import pytest

from tests.helpers import make_bordered_image


@pytest.fixture
def bordered_image() -> np.ndarray:
    return make_bordered_image()


@pytest.fixture
def noisy_image() -> np.ndarray:
    rng = np.random.default_rng(1234)
    img = rng.integers(0, 256, size=(40, 60, 4), dtype=np.uint8)
    img[:4, :, :3] = (30, 200, 40)
    img[-4:, :, :3] = (30, 200, 40)
    img[:, :4, :3] = (30, 200, 40)
    img[:, -4:, :3] = (30, 200, 40)
    return img
