"""Redeem controller — exchanges a connection code for a download link."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from auth import client_id, require_user
from errors import RateLimited
from api.abuse.services import abuse_service
from api.redeem.dto.redeem import RedeemRequest, RedeemResponse
from api.transfers.dto.results import NotFound
from api.transfers.services import transfers_service

router = APIRouter(prefix="/api/redeem", tags=["Redeem"])


@router.post("", response_model=RedeemResponse)
def redeem_code(request: Request, data: RedeemRequest):
    user_id = require_user(request)
    client = client_id(request)

    # Blocked clients never reach the code lookup
    abuse_service.ensure_not_blocked(client)

    result = transfers_service.redeem(data.code, user_id)
    if isinstance(result, NotFound):
        status = abuse_service.record_failure(client)
        if status.blocked:
            raise RateLimited(status.remaining_seconds)
        return JSONResponse(
            status_code=404,
            content={
                "detail": "Invalid or expired connection code",
                "attempts_left": status.attempts_left,
            },
        )

    abuse_service.record_success(client)
    record = result.record
    issued = transfers_service.issue_token(record.id)

    base_url = str(request.base_url).rstrip("/")
    return RedeemResponse(
        transfer_id=record.id,
        filename=record.filename,
        content_type=record.content_type,
        size=record.size,
        download_url=f"{base_url}/api/download/{issued.token}",
        expires_at=issued.expires_at,
    )
