from datetime import datetime

from photo_develop.adjustments import DEFAULT_ADJUSTMENTS
from photo_develop.importer import ImportSource, format_from_mime, import_sources, source_from_path


def test_format_from_mime():
    assert format_from_mime("image/jpeg") == "JPEG"
    assert format_from_mime("image/png") == "PNG"
    assert format_from_mime(None) == "UNKNOWN"
    assert format_from_mime("") == "UNKNOWN"
    assert format_from_mime("garbage") == "UNKNOWN"


def test_import_bytes_reads_dimensions(png_bytes):
    when = datetime(2024, 5, 1, 12, 0)
    (photo,) = import_sources(
        [ImportSource(name="a.png", data=png_bytes, size=len(png_bytes), last_modified=when, mime_type="image/png")]
    )
    assert photo.name == "a.png"
    assert photo.source == png_bytes
    assert photo.metadata.width == 32
    assert photo.metadata.height == 16
    assert photo.metadata.size == len(png_bytes)
    assert photo.metadata.format == "PNG"
    assert photo.metadata.date_created == when
    assert photo.adjustments == DEFAULT_ADJUSTMENTS
    assert photo.is_selected is False


def test_import_undecodable_keeps_zero_dimensions():
    (photo,) = import_sources([ImportSource(name="broken.jpg", data=b"xx", mime_type="image/jpeg")])
    assert (photo.metadata.width, photo.metadata.height) == (0, 0)
    assert photo.metadata.format == "JPEG"


def test_ids_are_unique(png_bytes):
    photos = import_sources([ImportSource(name=f"{i}.png", data=png_bytes) for i in range(5)])
    assert len({p.id for p in photos}) == 5
    assert [p.name for p in photos] == [f"{i}.png" for i in range(5)]


def test_source_from_path(png_file):
    source = source_from_path(png_file)
    assert source.name == "sample.png"
    assert source.data == png_file
    assert source.size == png_file.stat().st_size
    assert source.mime_type == "image/png"
    assert isinstance(source.last_modified, datetime)

    (photo,) = import_sources([source])
    assert (photo.metadata.width, photo.metadata.height) == (40, 20)
