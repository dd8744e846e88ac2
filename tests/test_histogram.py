import numpy as np
import pytest

from conftest import encode_image, gradient_rgb8, make_photo, solid_rgb8
from photo_develop.histogram import (
    BACKGROUND,
    BINS,
    SAMPLE_SIZE,
    HistogramEngine,
    bar_heights,
    compute_histogram,
    render_histogram,
    render_placeholder,
    sample_source,
)


def test_sample_is_64_square():
    sample = sample_source(gradient_rgb8(300, 100))
    assert sample.shape == (SAMPLE_SIZE, SAMPLE_SIZE, 3)


def test_single_colour_fills_one_bucket_per_channel():
    hist = compute_histogram(solid_rgb8(64, 64, (200, 100, 50)))
    assert hist.shape == (3, BINS)

    heights = bar_heights(hist, 96)
    for channel, value in enumerate((200, 100, 50)):
        assert heights[channel, value] == pytest.approx(96)
        others = np.delete(heights[channel], value)
        assert np.all(others == 0)


def test_channels_share_global_max():
    rgb8 = np.zeros((64, 64, 3), dtype=np.uint8)
    rgb8[..., 0] = 10
    # Green split across two values, so its tallest bucket is half of red's.
    rgb8[:32, :, 1] = 20
    rgb8[32:, :, 1] = 30
    hist = compute_histogram(rgb8)
    assert hist[0, 10] == pytest.approx(1.0)
    assert hist[1, 20] == pytest.approx(0.5)
    assert hist[1, 30] == pytest.approx(0.5)
    assert hist.max() == pytest.approx(1.0)


def test_render_histogram_size_and_background():
    hist = compute_histogram(solid_rgb8(8, 8, (255, 255, 255)))
    img = render_histogram(hist, 240, 96)
    assert img.shape == (96, 240, 3)
    assert img.dtype == np.uint8
    # Far-left columns hold empty buckets, so only background/grid shows there.
    assert img[50, 0].tolist() == list(BACKGROUND)


def test_render_histogram_overlap_is_brighter_than_single_channel():
    rgb8 = np.zeros((64, 64, 3), dtype=np.uint8)
    rgb8[..., :] = 128
    img = render_histogram(compute_histogram(rgb8), 256, 50)
    col = img[:, 128]
    # All three channels overlap at bucket 128, so the bar is near-neutral and bright.
    r, g, b = col[40].tolist()
    assert abs(r - g) <= 2 and abs(g - b) <= 2
    assert r > BACKGROUND[0]


def test_placeholder_has_requested_size():
    img = render_placeholder(240, 96)
    assert img.shape == (96, 240, 3)
    # Bottom centre is under the bell curve, top corner is background.
    assert img[95, 120].tolist() != list(BACKGROUND)
    assert img[0, 0].tolist() == list(BACKGROUND)


def test_engine_analyzes_source_not_adjustments():
    photo = make_photo("p", source=encode_image(solid_rgb8(16, 16, (40, 80, 120))))
    engine = HistogramEngine()
    hist = engine.analyze(photo)
    assert hist[0, 40] == pytest.approx(1.0)
    assert hist[2, 120] == pytest.approx(1.0)


def test_engine_placeholder_on_failure_or_no_photo():
    engine = HistogramEngine()
    assert engine.analyze(None) is None
    bad = make_photo("bad", source=b"garbage")
    assert engine.analyze(bad) is None
    np.testing.assert_array_equal(engine.render(bad, 120, 48), render_placeholder(120, 48))
    np.testing.assert_array_equal(engine.render(None, 120, 48), render_placeholder(120, 48))
