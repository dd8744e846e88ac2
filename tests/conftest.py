import io
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]

# Ensure the project sources are importable when running from a checkout.
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from photo_develop.models import PhotoEntity, PhotoMetadata  # noqa: E402


def encode_image(rgb8: np.ndarray, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.fromarray(rgb8).save(buf, format=fmt)
    return buf.getvalue()


def solid_rgb8(width: int, height: int, color=(128, 128, 128)) -> np.ndarray:
    arr = np.empty((height, width, 3), dtype=np.uint8)
    arr[...] = color
    return arr


def gradient_rgb8(width: int = 32, height: int = 16) -> np.ndarray:
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    r = np.broadcast_to(xs[None, :], (height, width))
    g = np.broadcast_to(ys[:, None], (height, width))
    b = np.full((height, width), 96.0, dtype=np.float32)
    return np.stack([r, g, b], axis=-1).astype(np.uint8)


def make_photo(photo_id: str, name: str | None = None, source: bytes | None = None, **kwargs) -> PhotoEntity:
    return PhotoEntity(
        id=photo_id,
        name=name or f"{photo_id}.png",
        source=source if source is not None else encode_image(solid_rgb8(8, 8)),
        metadata=kwargs.pop("metadata", PhotoMetadata(width=8, height=8, format="PNG")),
        **kwargs,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image(gradient_rgb8())


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.png"
    path.write_bytes(encode_image(gradient_rgb8(40, 20)))
    return path
