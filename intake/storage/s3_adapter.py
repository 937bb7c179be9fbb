from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from intake.pipeline.models import ImageBlob
from intake.storage.base import BaseBlobStore
from intake.storage.exceptions import BlobStoreError


class S3BlobStore(BaseBlobStore):
    """Stores objects in an S3-compatible bucket (AWS, Spaces, Supabase, MinIO)."""

    def __init__(
        self,
        *,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        public_base_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url or None
        self._public_base_url = (public_base_url or "").rstrip("/")
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=self._endpoint_url,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
        )

    def put(self, key: str, blob: ImageBlob) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=blob.data,
                ContentType=blob.content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise BlobStoreError(f"put_object failed for {key}: {exc}") from exc

    def public_ref(self, key: str) -> str:
        if not key:
            raise BlobStoreError("Cannot build a public URL for an empty key")
        if self._public_base_url:
            return f"{self._public_base_url}/{key}"
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"
