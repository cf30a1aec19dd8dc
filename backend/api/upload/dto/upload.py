"""Upload Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel


class UploadResponse(BaseModel):
    code: str
    filename: str
    content_type: str
    size: int
    expires_at: datetime
    expiry_minutes: int
