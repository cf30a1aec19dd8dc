"""Transfer Data Transfer Objects."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class TransferStatus(str, Enum):
    WAITING = "WAITING"
    DOWNLOADED = "DOWNLOADED"


class TransferResponse(BaseModel):
    id: int
    filename: str
    content_type: str
    size: int
    storage_handle: str
    connection_code: str
    status: TransferStatus
    download_token: str | None = None
    token_expires_at: datetime | None = None
    expires_at: datetime
    uploader_id: str
    downloader_id: str | None = None
    created_at: datetime


class IssuedToken(BaseModel):
    token: str
    expires_at: datetime
