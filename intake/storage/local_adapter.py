from pathlib import Path

from intake.pipeline.models import ImageBlob
from intake.storage.base import BaseBlobStore
from intake.storage.exceptions import BlobStoreError


class LocalBlobStore(BaseBlobStore):
    """Writes objects below a root directory. For local development and tests."""

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    def put(self, key: str, blob: ImageBlob) -> None:
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(blob.data)
        except OSError as exc:
            raise BlobStoreError(f"Failed to write {key}: {exc}") from exc

    def public_ref(self, key: str) -> str:
        path = self._resolve(key)
        if not path.exists():
            raise BlobStoreError(f"Object not found: {key}")
        return path.as_uri()

    def _resolve(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise BlobStoreError(f"Key escapes storage root: {key}")
        return path
