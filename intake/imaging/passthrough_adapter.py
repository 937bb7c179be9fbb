from intake.imaging.base import BaseImageTranscoder
from intake.pipeline.models import ImageBlob


class PassthroughTranscoder(BaseImageTranscoder):
    """Returns images untouched. Useful when uploads are already optimized."""

    def transcode(
        self,
        image: ImageBlob,
        max_width: int,
        max_height: int,
        quality: int,
    ) -> ImageBlob:
        _ = max_width, max_height, quality
        return image
