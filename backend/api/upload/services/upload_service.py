"""Upload service — stores the bytes, then opens a transfer for them."""

from pathlib import PurePosixPath

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

import storage
from config import MAX_FILE_SIZE, MAX_FILE_SIZE_BYTES
from api.transfers.services import transfers_service
from api.upload.dto.upload import UploadResponse

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def clean_filename(filename: str) -> str:
    """Keep only the last path component of a client-supplied name."""
    return PurePosixPath(filename.replace("\\", "/")).name.strip()


def parse_expiry_minutes(value: str | None) -> int | None:
    """Parse the X-Expiry-Minutes header. Raises ValueError on garbage."""
    if value is None or not value.strip():
        return None
    minutes = int(value.strip())
    if minutes < 0:
        raise ValueError("Expiry minutes cannot be negative")
    return minutes


async def save_upload(
    request: Request,
    filename: str,
    uploader_id: str,
    expiry_minutes: int | None = None,
) -> UploadResponse:
    """Stream request body to storage and create the WAITING transfer."""
    content_type = request.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE

    try:
        handle, size = await storage.save_stream(request.stream(), MAX_FILE_SIZE_BYTES)
    except ValueError as e:
        raise ValueError(f"File exceeds max size of {MAX_FILE_SIZE}") from e

    try:
        transfer = await run_in_threadpool(
            transfers_service.create,
            filename=filename,
            content_type=content_type,
            size=size,
            storage_handle=handle,
            uploader_id=uploader_id,
            expiry_minutes=expiry_minutes,
        )
    except Exception:
        storage.delete(handle)
        raise

    return UploadResponse(
        code=transfer.connection_code,
        filename=transfer.filename,
        content_type=transfer.content_type,
        size=transfer.size,
        expires_at=transfer.expires_at,
        expiry_minutes=transfers_service.resolve_expiry_minutes(expiry_minutes),
    )
