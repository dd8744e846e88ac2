import numpy as np
from PIL import Image

from conftest import encode_image, make_photo, solid_rgb8
from photo_develop.adjustments import AdjustmentSet
from photo_develop.export import export_filename, export_photo, export_photos


def test_export_filename_uses_first_dot_stem():
    assert export_filename("IMG_001.jpg") == "IMG_001_edited.jpeg"
    assert export_filename("shot.raw.tif", "png") == "shot_edited.png"


def test_export_png_applies_export_chain(tmp_path):
    source = encode_image(solid_rgb8(8, 4, (100, 100, 100)))
    photo = make_photo("p", name="gray.png", source=source, adjustments=AdjustmentSet(exposure=50))
    result = export_photo(photo, tmp_path, fmt="png")

    assert result.ok
    assert result.path == tmp_path / "gray_edited.png"
    with Image.open(result.path) as img:
        assert img.size == (8, 4)
        out = np.asarray(img.convert("RGB"))
    # Export maps exposure 50 to brightness 1.5.
    assert out[0, 0].tolist() == [150, 150, 150]


def test_export_jpeg_default(tmp_path):
    photo = make_photo("p", name="pic.png")
    result = export_photo(photo, tmp_path)
    assert result.ok
    assert result.path.name == "pic_edited.jpeg"
    with Image.open(result.path) as img:
        assert img.format == "JPEG"


def test_export_failure_reports_error(tmp_path):
    photo = make_photo("bad", source=b"nope")
    result = export_photo(photo, tmp_path, fmt="png")
    assert not result.ok
    assert result.error
    assert result.photo_id == "bad"


def test_export_unsupported_format(tmp_path):
    result = export_photo(make_photo("p"), tmp_path, fmt="xyz")
    assert not result.ok
    assert "xyz" in result.error


def test_batch_export_runs_in_order(tmp_path):
    photos = [make_photo("a", name="a.png"), make_photo("b", name="b.png")]
    batch = export_photos(photos, tmp_path, fmt="png", delay=0)
    assert batch.ok
    assert [r.photo_id for r in batch.results] == ["a", "b"]
    assert batch.exported == (tmp_path / "a_edited.png", tmp_path / "b_edited.png")


def test_batch_export_stops_at_first_failure(tmp_path):
    photos = [
        make_photo("a", name="a.png"),
        make_photo("bad", name="bad.png", source=b"broken"),
        make_photo("c", name="c.png"),
    ]
    batch = export_photos(photos, tmp_path, fmt="png", delay=0)
    assert not batch.ok
    assert batch.failed.photo_id == "bad"
    assert [r.photo_id for r in batch.results] == ["a", "bad"]
    assert not (tmp_path / "c_edited.png").exists()
