"""Download controller — streams the bytes behind a download token."""

from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from auth import require_user
from api.download.services import download_service

router = APIRouter(prefix="/api/download", tags=["Download"])

CHUNK_SIZE = 1024 * 1024  # 1MB


@router.get("/{token}")
def download_file(request: Request, token: str):
    """Stream a file download. Each token serves one download."""
    user_id = require_user(request)

    claimed = download_service.claim_download(token, user_id)
    if not claimed:
        raise HTTPException(status_code=404, detail="Invalid or expired download link")
    record, filepath = claimed

    def iterfile():
        with open(filepath, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                yield chunk

    return StreamingResponse(
        iterfile(),
        media_type=record.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.filename)}",
            "Content-Length": str(filepath.stat().st_size),
        },
    )
