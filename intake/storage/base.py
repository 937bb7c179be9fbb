from abc import ABC, abstractmethod

from intake.pipeline.models import ImageBlob


class BaseBlobStore(ABC):
    """Contract for durable object storage adapters."""

    @abstractmethod
    def put(self, key: str, blob: ImageBlob) -> None:
        """Store blob under key.

        Raises:
            BlobStoreError: if the object could not be written.
        """

    @abstractmethod
    def public_ref(self, key: str) -> str:
        """Return a dereferenceable URI for a stored key.

        Raises:
            BlobStoreError: if no URI can be produced.
        """
