"""Transfers service — the transfer lifecycle.

WAITING --(redeem + issue_token)--> WAITING with a token --(complete)--> DOWNLOADED

There is no EXPIRED state: a WAITING transfer past its expiry just stops
being redeemable.
"""

import logging
import secrets
from datetime import timedelta

import timeutil
from config import CODE_INSERT_ATTEMPTS, DEFAULT_EXPIRY_MINUTES, MAX_EXPIRY_MINUTES
from errors import StorageFault
from api.transfers.dto.results import CodeConflict, Found, Lookup, NotFound
from api.transfers.dto.transfer import IssuedToken, TransferResponse, TransferStatus
from api.transfers.repositories import transfers_repository
from api.transfers.services import code_service

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(minutes=3)


def resolve_expiry_minutes(expiry_minutes: int | None) -> int:
    if not expiry_minutes or expiry_minutes <= 0:
        return DEFAULT_EXPIRY_MINUTES
    return min(expiry_minutes, MAX_EXPIRY_MINUTES)


def create(
    filename: str,
    content_type: str,
    size: int,
    storage_handle: str,
    uploader_id: str,
    expiry_minutes: int | None = None,
) -> TransferResponse:
    now = timeutil.utcnow()
    expires_at = now + timedelta(minutes=resolve_expiry_minutes(expiry_minutes))

    for _ in range(CODE_INSERT_ATTEMPTS):
        code = code_service.generate_unique_code()
        result = transfers_repository.create(
            code=code,
            filename=filename,
            content_type=content_type,
            size=size,
            storage_handle=storage_handle,
            uploader_id=uploader_id,
            expires_at=expires_at,
            created_at=now,
        )
        if isinstance(result, CodeConflict):
            logger.warning("Connection code taken at insert time, drawing another")
            continue
        logger.info("Transfer %d created by %s (%d bytes)", result.id, uploader_id, size)
        return result

    raise StorageFault(f"No free connection code after {CODE_INSERT_ATTEMPTS} attempts")


def redeem(code: str, requester_id: str) -> Lookup:
    """Find the transfer a redeemer may download.

    Every reason for refusal yields the same ``NotFound``.
    """
    record = transfers_repository.get_by_code(code.strip().upper())
    if record is None:
        return NotFound()
    if record.expires_at <= timeutil.utcnow():
        return NotFound()
    if record.status != TransferStatus.WAITING:
        return NotFound()
    if record.uploader_id == requester_id:
        return NotFound()
    return Found(record)


def issue_token(transfer_id: int) -> IssuedToken:
    """Attach a fresh download token, replacing any earlier one."""
    token = secrets.token_urlsafe(32)
    expires_at = timeutil.utcnow() + TOKEN_TTL
    if not transfers_repository.set_token(transfer_id, token, expires_at):
        raise LookupError(f"Transfer {transfer_id} does not exist")
    return IssuedToken(token=token, expires_at=expires_at)


def fetch_by_token(token: str) -> Lookup:
    record = transfers_repository.get_by_token(token)
    if record is None or record.token_expires_at is None:
        return NotFound()
    if record.token_expires_at <= timeutil.utcnow():
        return NotFound()
    return Found(record)


def complete(transfer_id: int, downloader_id: str) -> bool:
    """Mark the transfer DOWNLOADED. Only one concurrent caller gets True."""
    completed = transfers_repository.mark_downloaded(transfer_id, downloader_id)
    if completed:
        logger.info("Transfer %d downloaded by %s", transfer_id, downloader_id)
    return completed
