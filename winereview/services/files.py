"""
File Ingestion - validate uploaded images, then hand them to storage.

Validation rules, checked in this order:
1. The file must not be empty
2. The file must not exceed 10 MiB
3. The declared content type must be image/jpeg, image/png or image/webp

Nothing is written to storage unless all three pass, and a passing file
is written exactly once. Storage failures raise StorageError, which the
API reports separately from validation errors.
"""
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from winereview.core.config import get_settings
from winereview.core.exceptions import StorageError, ValidationError
from winereview.core.logging_config import LoggerMixin
from winereview.models.files import FileUploadResponse

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class ValidatedFile:
    file_name: str
    storage_key: str
    file_size_bytes: int
    content_type: str
    uploaded_at: datetime
    data: bytes


@dataclass(frozen=True)
class StorageLocation:
    key: str
    url: str


class FileStorage(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> StorageLocation:
        """Store the bytes under key; raise StorageError on failure."""
        ...


def build_storage_key(file_name: str) -> str:
    """
    Derive a collision-free object key that keeps the original name readable.

    >>> build_storage_key("my photo.png")  # doctest: +SKIP
    'uploads/3f2b...-my-photo.png'
    """
    safe_name = _UNSAFE_KEY_CHARS.sub("-", file_name).strip("-.") or "file"
    return f"uploads/{uuid.uuid4().hex}-{safe_name[-100:]}"


class FileIngestionValidator:
    """Applies the upload policy. Pure: no I/O, no side effects."""

    def __init__(self, max_size_bytes: int = MAX_FILE_SIZE_BYTES, allowed_types=ALLOWED_CONTENT_TYPES):
        self.max_size_bytes = max_size_bytes
        self.allowed_types = frozenset(allowed_types)

    def validate(self, file_name: Optional[str], content_type: Optional[str], data: bytes) -> ValidatedFile:
        """
        Raises:
            ValidationError: Empty file, file too large, or content type
                missing/not allowed. The message names the violated rule.
        """
        size = len(data) if data is not None else 0

        if size == 0:
            raise ValidationError("file is empty", field="file")

        if size > self.max_size_bytes:
            max_mb = self.max_size_bytes / 1024 / 1024
            raise ValidationError(
                f"file exceeds the maximum size of {max_mb:g} MB "
                f"(size: {size / 1024 / 1024:.2f} MB)",
                field="file"
            )

        if content_type is None or content_type not in self.allowed_types:
            raise ValidationError(
                f"unsupported file type: {content_type}. "
                f"Allowed types: {', '.join(sorted(self.allowed_types))}",
                field="contentType"
            )

        name = (file_name or "").strip() or "upload"
        return ValidatedFile(
            file_name=name,
            storage_key=build_storage_key(name),
            file_size_bytes=size,
            content_type=content_type,
            uploaded_at=datetime.now(timezone.utc),
            data=data,
        )


class S3FileStorage(LoggerMixin):
    """
    Stores uploads in an S3 bucket via boto3.

    A custom endpoint (MinIO, LocalStack) is supported; URLs are then
    path-style under that endpoint.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        settings = get_settings()
        self.bucket = bucket or settings.aws_s3_bucket_name
        self.region = region or settings.aws_region
        self.endpoint_url = endpoint_url if endpoint_url is not None else settings.aws_s3_endpoint_url

        if client is None:
            client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
            )
        self.client = client
        self.logger.info(f"S3 storage ready: bucket={self.bucket} region={self.region}")

    def put(self, key: str, data: bytes, content_type: str) -> StorageLocation:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ContentLength=len(data),
            )
        except ClientError as e:
            message = e.response.get("Error", {}).get("Message") or str(e)
            self.logger.error(f"S3 rejected upload of {key}: {message}")
            raise StorageError("Failed to upload file to storage", details=message)
        except BotoCoreError as e:
            self.logger.error(f"S3 upload of {key} failed: {e}")
            raise StorageError("Failed to upload file to storage", details=str(e))

        return StorageLocation(key=key, url=self.url_for(key))

    def url_for(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


class FileIngestionService(LoggerMixin):
    """Validates an upload and writes it to the injected storage."""

    def __init__(self, storage: FileStorage, validator: Optional[FileIngestionValidator] = None):
        self.storage = storage
        self.validator = validator or FileIngestionValidator()

    def ingest(self, file_name: Optional[str], content_type: Optional[str], data: bytes) -> FileUploadResponse:
        """
        Raises:
            ValidationError: The file breaks the upload policy (no write happens)
            StorageError: The storage write failed
        """
        try:
            validated = self.validator.validate(file_name, content_type, data)
        except ValidationError as e:
            self.logger.warning(f"Rejected upload {file_name!r}: {e.message}")
            raise

        self.logger.info(
            f"Uploading \"{validated.file_name}\" ({validated.file_size_bytes} bytes, "
            f"{validated.content_type}) as {validated.storage_key}"
        )
        location = self.storage.put(validated.storage_key, validated.data, validated.content_type)

        return FileUploadResponse(
            file_name=validated.file_name,
            file_url=location.url,
            bucket_key=location.key,
            file_size_bytes=validated.file_size_bytes,
            content_type=validated.content_type,
            uploaded_at=validated.uploaded_at,
        )
