from abc import ABC, abstractmethod

from intake.pipeline.models import ImageBlob


class BaseImageTranscoder(ABC):
    """Contract for all image transcoding adapters."""

    @abstractmethod
    def transcode(
        self,
        image: ImageBlob,
        max_width: int,
        max_height: int,
        quality: int,
    ) -> ImageBlob:
        """Fit an image inside max_width x max_height and re-encode it.

        Args:
            image: Raw uploaded image.
            max_width: Bounding box width in pixels.
            max_height: Bounding box height in pixels.
            quality: Encoder quality, 1-100.

        Returns:
            Transcoded image carrying the original filename.

        Raises:
            TranscodeError: if the image cannot be processed.
        """
