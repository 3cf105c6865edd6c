"""
File Routes - image uploads for reviews and wines.

The returned fileUrl is what clients then send as imageUrl.
"""
from fastapi import APIRouter, Depends, File, UploadFile

from winereview.api.dependencies import get_file_service
from winereview.core.logging_config import get_logger
from winereview.models.common import ErrorResponse
from winereview.models.files import FileUploadResponse
from winereview.services.files import FileIngestionService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/files",
    tags=["Files"],
    responses={
        400: {"model": ErrorResponse, "description": "Empty, too large, or not an allowed image type"},
        502: {"model": ErrorResponse, "description": "Storage backend failed"},
    },
)


@router.post("/upload", response_model=FileUploadResponse, summary="Upload an image")
async def upload_file(
    file: UploadFile = File(..., description="JPEG, PNG or WebP image, at most 10 MB"),
    service: FileIngestionService = Depends(get_file_service),
) -> FileUploadResponse:
    data = await file.read()
    logger.debug(f"Received upload {file.filename!r} ({len(data)} bytes, {file.content_type})")
    return service.ingest(file.filename, file.content_type, data)
