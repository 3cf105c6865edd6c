"""Response model for file uploads."""
from datetime import datetime

from winereview.models.common import CamelModel


class FileUploadResponse(CamelModel):
    """Metadata of a stored upload; fileUrl is what clients put in imageUrl."""
    file_name: str
    file_url: str
    bucket_key: str
    file_size_bytes: int
    content_type: str
    uploaded_at: datetime
