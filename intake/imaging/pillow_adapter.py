import io

from PIL import Image, ImageOps

from intake.imaging.base import BaseImageTranscoder
from intake.imaging.exceptions import TranscodeError
from intake.pipeline.models import ImageBlob

_QUALITY_FORMATS = frozenset({"JPEG", "WEBP"})
_ALPHA_MODES = frozenset({"RGBA", "LA", "P"})


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale (width, height) down to fit the box, preserving aspect ratio."""
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


class PillowTranscoder(BaseImageTranscoder):
    """Downsizes and re-encodes images with Pillow, keeping the source format."""

    def transcode(
        self,
        image: ImageBlob,
        max_width: int,
        max_height: int,
        quality: int,
    ) -> ImageBlob:
        try:
            with Image.open(io.BytesIO(image.data)) as source:
                fmt = source.format or "JPEG"
                oriented = ImageOps.exif_transpose(source)
                size = fit_within(*oriented.size, max_width, max_height)
                if size != oriented.size:
                    oriented = oriented.resize(size, Image.LANCZOS)
                if fmt == "JPEG" and oriented.mode in _ALPHA_MODES:
                    oriented = oriented.convert("RGB")

                buf = io.BytesIO()
                if fmt in _QUALITY_FORMATS:
                    oriented.save(buf, format=fmt, quality=quality, optimize=True)
                else:
                    oriented.save(buf, format=fmt, optimize=True)
        except Exception as exc:
            raise TranscodeError(f"Image transcoding failed: {exc}") from exc

        return ImageBlob(
            filename=image.filename,
            content_type=Image.MIME.get(fmt, image.content_type),
            data=buf.getvalue(),
        )
