import io

import pytest
from PIL import Image


def _encode(image: Image.Image, fmt: str, **kwargs: object) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture()
def large_jpeg_bytes() -> bytes:
    """A 4000x3000 JPEG, larger than the default bounding box."""
    return _encode(Image.new("RGB", (4000, 3000), (200, 120, 40)), "JPEG", quality=95)


@pytest.fixture()
def small_jpeg_bytes() -> bytes:
    """A 640x480 JPEG that already fits the default bounding box."""
    return _encode(Image.new("RGB", (640, 480), (10, 160, 90)), "JPEG")


@pytest.fixture()
def rgba_png_bytes() -> bytes:
    """A 3000x1000 PNG with an alpha channel."""
    return _encode(Image.new("RGBA", (3000, 1000), (255, 0, 0, 128)), "PNG")


@pytest.fixture()
def rotated_jpeg_bytes() -> bytes:
    """A 300x200 JPEG whose EXIF orientation says 'rotate 90 degrees'."""
    image = Image.new("RGB", (300, 200), (0, 0, 255))
    exif = Image.Exif()
    exif[0x0112] = 6
    return _encode(image, "JPEG", exif=exif.tobytes())
