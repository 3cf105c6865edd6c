"""Tests for upload validation and S3 storage error mapping."""
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from winereview.core.exceptions import StorageError, ValidationError
from winereview.services.files import (
    MAX_FILE_SIZE_BYTES,
    FileIngestionService,
    FileIngestionValidator,
    S3FileStorage,
    build_storage_key,
)

PNG_2KB = b"\x89PNG\r\n\x1a\n" + b"\x00" * 2040


class TestValidator:
    def setup_method(self):
        self.validator = FileIngestionValidator()

    def test_accepts_small_png(self):
        validated = self.validator.validate("glass.png", "image/png", PNG_2KB)

        assert validated.file_size_bytes == 2048
        assert validated.content_type == "image/png"
        assert validated.storage_key.startswith("uploads/")
        assert validated.storage_key.endswith("-glass.png")

    def test_rejects_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.validator.validate("empty.png", "image/png", b"")

    def test_rejects_file_over_limit(self):
        with pytest.raises(ValidationError, match="maximum size of 10 MB"):
            self.validator.validate("big.jpg", "image/jpeg", b"\x00" * (11 * 1024 * 1024))

    def test_accepts_file_exactly_at_limit(self):
        validated = self.validator.validate("edge.webp", "image/webp", b"\x00" * MAX_FILE_SIZE_BYTES)
        assert validated.file_size_bytes == MAX_FILE_SIZE_BYTES

    def test_rejects_pdf(self):
        with pytest.raises(ValidationError, match="unsupported file type: application/pdf") as excinfo:
            self.validator.validate("label.pdf", "application/pdf", b"%PDF-1.7")
        assert excinfo.value.field == "contentType"

    def test_rejects_missing_content_type(self):
        with pytest.raises(ValidationError, match="unsupported file type"):
            self.validator.validate("mystery", None, b"data")

    def test_size_is_checked_before_type(self):
        with pytest.raises(ValidationError, match="empty"):
            self.validator.validate("label.pdf", "application/pdf", b"")


def test_storage_keys_are_unique_and_safe():
    first = build_storage_key("my photo (1).png")
    second = build_storage_key("my photo (1).png")

    assert first != second
    assert " " not in first and "(" not in first
    assert first.endswith("my-photo-1-.png")


class TestIngestionService:
    def test_valid_file_is_written_once(self, storage):
        response = FileIngestionService(storage).ingest("glass.png", "image/png", PNG_2KB)

        assert len(storage.puts) == 1
        key, data, content_type = storage.puts[0]
        assert key == response.bucket_key
        assert data == PNG_2KB
        assert content_type == "image/png"
        assert response.file_url.endswith(key)
        assert response.file_size_bytes == 2048

    @pytest.mark.parametrize("content_type,data", [
        ("image/png", b""),
        ("image/jpeg", b"\x00" * (11 * 1024 * 1024)),
        ("application/pdf", b"%PDF"),
    ])
    def test_invalid_file_is_never_written(self, storage, content_type, data):
        with pytest.raises(ValidationError):
            FileIngestionService(storage).ingest("file", content_type, data)
        assert storage.puts == []

    def test_storage_failure_propagates(self, storage):
        storage.fail = True
        with pytest.raises(StorageError):
            FileIngestionService(storage).ingest("glass.png", "image/png", PNG_2KB)


class TestS3FileStorage:
    def test_put_object_and_url(self):
        client = MagicMock()
        s3 = S3FileStorage(bucket="wines", region="eu-west-1", endpoint_url="", client=client)

        location = s3.put("uploads/abc-glass.png", PNG_2KB, "image/png")

        client.put_object.assert_called_once_with(
            Bucket="wines",
            Key="uploads/abc-glass.png",
            Body=PNG_2KB,
            ContentType="image/png",
            ContentLength=len(PNG_2KB),
        )
        assert location.url == "https://wines.s3.eu-west-1.amazonaws.com/uploads/abc-glass.png"

    def test_custom_endpoint_uses_path_style_url(self):
        s3 = S3FileStorage(bucket="wines", region="us-east-1", endpoint_url="http://localhost:9000/", client=MagicMock())
        assert s3.url_for("uploads/x.png") == "http://localhost:9000/wines/uploads/x.png"

    def test_client_error_becomes_storage_error(self):
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )
        s3 = S3FileStorage(bucket="wines", region="us-east-1", endpoint_url="", client=client)

        with pytest.raises(StorageError) as excinfo:
            s3.put("k", b"x", "image/png")
        assert excinfo.value.details == "Access Denied"
        assert excinfo.value.status_code == 502

    def test_connection_error_becomes_storage_error(self):
        client = MagicMock()
        client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example")
        s3 = S3FileStorage(bucket="wines", region="us-east-1", endpoint_url="", client=client)

        with pytest.raises(StorageError):
            s3.put("k", b"x", "image/png")
