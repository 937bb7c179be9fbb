from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from intake.pipeline.models import ImageBlob
from intake.storage.exceptions import BlobStoreError
from intake.storage.factory import BlobStoreFactory
from intake.storage.local_adapter import LocalBlobStore
from intake.storage.s3_adapter import S3BlobStore

BLOB = ImageBlob("dish.jpg", "image/jpeg", b"jpeg-bytes")


def _s3(client: MagicMock, **kwargs: str) -> S3BlobStore:
    return S3BlobStore(bucket="food-vision-images", region="eu-central-1", client=client, **kwargs)


class TestS3BlobStore:
    def test_put_uploads_with_content_type(self) -> None:
        client = MagicMock()
        _s3(client).put("c-1/dish/a/b.jpg", BLOB)
        client.put_object.assert_called_once_with(
            Bucket="food-vision-images",
            Key="c-1/dish/a/b.jpg",
            Body=b"jpeg-bytes",
            ContentType="image/jpeg",
        )

    def test_put_wraps_client_error(self) -> None:
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchBucket", "Message": "missing"}}, "PutObject"
        )
        with pytest.raises(BlobStoreError, match="NoSuchBucket"):
            _s3(client).put("k", BLOB)

    def test_public_ref_prefers_public_base_url(self) -> None:
        store = _s3(MagicMock(), public_base_url="https://cdn.example/public/")
        assert store.public_ref("a/b.jpg") == "https://cdn.example/public/a/b.jpg"

    def test_public_ref_from_endpoint(self) -> None:
        store = _s3(MagicMock(), endpoint_url="https://fra1.digitaloceanspaces.com")
        assert (
            store.public_ref("a/b.jpg")
            == "https://fra1.digitaloceanspaces.com/food-vision-images/a/b.jpg"
        )

    def test_public_ref_defaults_to_aws_host(self) -> None:
        assert (
            _s3(MagicMock()).public_ref("a/b.jpg")
            == "https://food-vision-images.s3.eu-central-1.amazonaws.com/a/b.jpg"
        )

    def test_public_ref_rejects_empty_key(self) -> None:
        with pytest.raises(BlobStoreError):
            _s3(MagicMock()).public_ref("")


class TestLocalBlobStore:
    def test_put_then_public_ref(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)
        store.put("guest/dish/x/y.jpg", BLOB)
        ref = store.public_ref("guest/dish/x/y.jpg")
        assert ref.startswith("file://")
        assert (tmp_path / "guest/dish/x/y.jpg").read_bytes() == b"jpeg-bytes"

    def test_public_ref_for_missing_key(self, tmp_path: Path) -> None:
        with pytest.raises(BlobStoreError, match="not found"):
            LocalBlobStore(tmp_path).public_ref("nope.jpg")

    def test_rejects_keys_escaping_root(self, tmp_path: Path) -> None:
        with pytest.raises(BlobStoreError, match="escapes"):
            LocalBlobStore(tmp_path / "root").put("../outside.jpg", BLOB)


class TestBlobStoreFactory:
    def test_creates_local_store(self) -> None:
        settings = MagicMock(
            storage_backend="local", storage_local_root="/tmp/x", storage_bucket="b"
        )
        assert isinstance(BlobStoreFactory.create(settings), LocalBlobStore)

    def test_creates_s3_store(self) -> None:
        settings = MagicMock(storage_backend="S3")
        with patch("intake.storage.s3_adapter.boto3.client") as mock_client:
            store = BlobStoreFactory.create(settings)
        assert isinstance(store, S3BlobStore)
        mock_client.assert_called_once()

    def test_raises_for_unknown_backend(self) -> None:
        settings = MagicMock(storage_backend="ftp")
        with pytest.raises(ValueError, match="Unknown storage backend"):
            BlobStoreFactory.create(settings)
