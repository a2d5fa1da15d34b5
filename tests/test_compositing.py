import numpy as np
import pytest

from classic_service.compositing import compose_rgba, encode_png
from classic_service.errors import DimensionMismatch, InvalidParameter
from tests.helpers import decode_png


@pytest.fixture
def image_and_alpha():
    rng = np.random.default_rng(11)
    rgba = rng.integers(0, 256, size=(8, 5, 4), dtype=np.uint8)
    alpha = rng.integers(0, 256, size=(8, 5), dtype=np.uint8)
    alpha[0, 0] = 0
    alpha[0, 1] = 255
    return rgba, alpha


def test_compose_keeps_colors_and_replaces_alpha(image_and_alpha):
    rgba, alpha = image_and_alpha
    out = compose_rgba(rgba, alpha)
    np.testing.assert_array_equal(out[..., :3], rgba[..., :3])
    np.testing.assert_array_equal(out[..., 3], alpha)
    assert out is not rgba


def test_compose_does_not_mutate_input(image_and_alpha):
    rgba, alpha = image_and_alpha
    before = rgba.copy()
    compose_rgba(rgba, alpha, matte=(1, 2, 3))
    np.testing.assert_array_equal(rgba, before)


def test_matte_flattens_to_opaque(image_and_alpha):
    rgba, alpha = image_and_alpha
    matte = (20, 140, 250)
    out = compose_rgba(rgba, alpha, matte=matte)

    assert (out[..., 3] == 255).all()
    weight = alpha.astype(np.float64)[..., None] / 255.0
    expected = np.asarray(matte, dtype=np.float64) + (rgba[..., :3] - np.asarray(matte, dtype=np.float64)) * weight
    np.testing.assert_allclose(out[..., :3], expected, atol=0.5 + 1e-9)
    # fully transparent shows the matte, fully opaque shows the original
    assert out[0, 0, :3].tolist() == list(matte)
    assert out[0, 1, :3].tolist() == rgba[0, 1, :3].tolist()


def test_dimension_mismatch(image_and_alpha):
    rgba, alpha = image_and_alpha
    with pytest.raises(DimensionMismatch):
        compose_rgba(rgba, alpha.T)
    with pytest.raises(DimensionMismatch):
        compose_rgba(rgba, alpha[:-1])


def test_rejects_rgb_image(image_and_alpha):
    rgba, alpha = image_and_alpha
    with pytest.raises(InvalidParameter):
        compose_rgba(rgba[..., :3], alpha)


def test_encode_png_roundtrip(image_and_alpha):
    rgba, alpha = image_and_alpha
    out = compose_rgba(rgba, alpha)
    png = encode_png(out)
    assert png.startswith(b"\x89PNG\r\n\x1a\n")
    np.testing.assert_array_equal(decode_png(png), out)
