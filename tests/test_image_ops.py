import numpy as np
import pytest

from conftest import encode_image, gradient_rgb8, solid_rgb8
from photo_develop.filter_chain import FilterKind, FilterOp
from photo_develop.image_ops import (
    apply_filter_chain,
    apply_ops,
    apply_warm_cool_shift,
    decode_source,
    hue_rotate_matrix,
    probe_size,
    resize_for_preview,
    saturate_matrix,
    sepia_matrix,
)


def test_empty_chain_returns_input_unchanged():
    rgb8 = gradient_rgb8()
    assert apply_filter_chain(rgb8, ()) is rgb8


def test_brightness_scales_and_clips():
    rgb8 = solid_rgb8(2, 2, (100, 200, 50))
    out = apply_filter_chain(rgb8, (FilterOp(FilterKind.BRIGHTNESS, 1.5),))
    assert out[0, 0].tolist() == [150, 255, 75]


def test_contrast_pivots_on_mid_gray():
    rgb8 = solid_rgb8(1, 1, (128, 128, 128))
    out = apply_filter_chain(rgb8, (FilterOp(FilterKind.CONTRAST, 3.0),))
    assert abs(int(out[0, 0, 0]) - 128) <= 2

    dark = solid_rgb8(1, 1, (64, 64, 64))
    out = apply_filter_chain(dark, (FilterOp(FilterKind.CONTRAST, 0.0),))
    assert out[0, 0].tolist() == [128, 128, 128]


def test_saturate_zero_gives_gray():
    rgb8 = solid_rgb8(1, 1, (200, 40, 90))
    out = apply_filter_chain(rgb8, (FilterOp(FilterKind.SATURATE, 0.0),))
    r, g, b = out[0, 0].tolist()
    assert abs(r - g) <= 1 and abs(g - b) <= 1


@pytest.mark.parametrize("make", [lambda: saturate_matrix(1.0), lambda: hue_rotate_matrix(0.0), lambda: sepia_matrix(0.0)])
def test_identity_matrices(make):
    np.testing.assert_allclose(make(), np.eye(3), atol=1e-6)


def test_gray_is_fixed_point_of_hue_rotate():
    rgb8 = solid_rgb8(1, 1, (120, 120, 120))
    out = apply_filter_chain(rgb8, (FilterOp(FilterKind.HUE_ROTATE, 90.0),))
    assert np.all(np.abs(out.astype(int) - 120) <= 1)


def test_warm_shift_pushes_red_over_blue():
    rgb01 = np.full((1, 1, 3), 0.5, dtype=np.float32)
    warm = np.clip(apply_warm_cool_shift(rgb01, 1.0), 0, 1)[0, 0]
    assert warm[0] > warm[2]


def test_cool_shift_differs_from_warm():
    rgb01 = np.full((1, 1, 3), 0.5, dtype=np.float32)
    warm = apply_warm_cool_shift(rgb01, 0.5)
    cool = apply_warm_cool_shift(rgb01, -0.5)
    assert not np.allclose(warm, cool)
    assert apply_warm_cool_shift(rgb01, 0.0) is rgb01


def test_ops_stay_in_unit_range():
    rgb01 = gradient_rgb8().astype(np.float32) / 255.0
    ops = (
        FilterOp(FilterKind.BRIGHTNESS, 4.0),
        FilterOp(FilterKind.CONTRAST, 5.0),
        FilterOp(FilterKind.SATURATE, 3.0),
        FilterOp(FilterKind.WARM_COOL_SHIFT, -1.0),
    )
    out = apply_ops(rgb01, ops)
    assert out.min() >= 0.0
    assert out.max() <= 1.0


def test_unknown_op_kind_raises():
    with pytest.raises(ValueError):
        apply_ops(np.zeros((1, 1, 3), dtype=np.float32), (FilterOp("blur", 1.0),))


def test_non_uint8_input_is_rejected():
    with pytest.raises(TypeError):
        apply_filter_chain(np.zeros((1, 1, 3), dtype=np.float32), (FilterOp(FilterKind.BRIGHTNESS, 1.1),))


def test_decode_bytes_and_path(png_bytes, png_file):
    from_bytes = decode_source(png_bytes)
    assert from_bytes.shape == (16, 32, 3)
    assert from_bytes.dtype == np.uint8

    from_path = decode_source(png_file)
    assert from_path.shape == (20, 40, 3)
    assert probe_size(png_file) == (40, 20)


def test_decode_failure_returns_none():
    assert decode_source(b"definitely not an image") is None


def test_decode_converts_grayscale_to_rgb():
    gray = encode_image(np.full((4, 6), 77, dtype=np.uint8))
    out = decode_source(gray)
    assert out.shape == (4, 6, 3)
    assert out[0, 0].tolist() == [77, 77, 77]


def test_resize_for_preview_caps_longest_side():
    big = solid_rgb8(400, 100)
    out = resize_for_preview(big, max_side=200)
    assert out.shape == (50, 200, 3)
    small = solid_rgb8(50, 20)
    assert resize_for_preview(small, max_side=200) is small
