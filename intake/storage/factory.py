from pathlib import Path

from intake.config.settings import Settings
from intake.storage.base import BaseBlobStore
from intake.storage.local_adapter import LocalBlobStore
from intake.storage.s3_adapter import S3BlobStore


class BlobStoreFactory:
    """Creates the configured blob store."""

    BACKENDS = ("s3", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        backend = settings.storage_backend.lower()
        if backend == "s3":
            return S3BlobStore(
                bucket=settings.storage_bucket,
                region=settings.storage_region,
                endpoint_url=settings.storage_endpoint_url,
                access_key=settings.storage_access_key,
                secret_key=settings.storage_secret_key,
                public_base_url=settings.storage_public_base_url,
            )
        if backend == "local":
            return LocalBlobStore(Path(settings.storage_local_root) / settings.storage_bucket)
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
