"""Upload controller — handles file uploads via PUT."""

from fastapi import APIRouter, HTTPException, Request, status

from auth import require_user
from api.upload.services import upload_service
from api.upload.dto.upload import UploadResponse

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.put("/{filename}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(request: Request, filename: str):
    """Upload a file via streaming PUT request and get its connection code."""
    user_id = require_user(request)

    filename = upload_service.clean_filename(filename)
    if not filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    try:
        expiry_minutes = upload_service.parse_expiry_minutes(request.headers.get("X-Expiry-Minutes"))
    except ValueError:
        raise HTTPException(status_code=400, detail="X-Expiry-Minutes must be a non-negative integer")

    try:
        return await upload_service.save_upload(
            request=request,
            filename=filename,
            uploader_id=user_id,
            expiry_minutes=expiry_minutes,
        )
    except ValueError as e:
        raise HTTPException(status_code=413, detail=str(e))
