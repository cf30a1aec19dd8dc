"""Abuse guard — per-client failure counting with exponential backoff.

After ``MAX_FAILED_ATTEMPTS`` consecutive failed redemptions a client id is
blocked for ``INITIAL_BLOCK_SECONDS``. Each later block is ``BLOCK_MULTIPLIER``
times the previous one, until a successful redemption clears the history.

Status reads are side-effect free. Expired blocks are cleared explicitly with
``release_expired_block`` (the redemption gate does this via
``ensure_not_blocked``).
"""

import logging
import math
from datetime import datetime, timedelta

import timeutil
from config import BLOCK_MULTIPLIER, INITIAL_BLOCK_SECONDS, MAX_FAILED_ATTEMPTS
from errors import RateLimited, StorageFault
from api.abuse.dto.abuse import AbuseRecord, AbuseStatus
from api.abuse.repositories import abuse_repository

logger = logging.getLogger(__name__)

# Compare-and-set retries before giving up on a hot record.
MAX_WRITE_ATTEMPTS = 50


def _remaining(record: AbuseRecord | None, now: datetime) -> int:
    if record is None or record.block_until is None or record.block_until <= now:
        return 0
    return math.ceil((record.block_until - now).total_seconds())


def _status(record: AbuseRecord, now: datetime) -> AbuseStatus:
    remaining = _remaining(record, now)
    return AbuseStatus(
        blocked=remaining > 0,
        failure_count=record.failure_count,
        attempts_left=max(0, MAX_FAILED_ATTEMPTS - record.failure_count),
        remaining_seconds=remaining,
    )


def next_block_seconds(last_block_seconds: int) -> int:
    if last_block_seconds > 0:
        return last_block_seconds * BLOCK_MULTIPLIER
    return INITIAL_BLOCK_SECONDS


def record_failure(client_id: str) -> AbuseStatus:
    for _ in range(MAX_WRITE_ATTEMPTS):
        now = timeutil.utcnow()
        record = abuse_repository.get_or_create(client_id, now)

        failure_count = record.failure_count + 1
        block_until = record.block_until
        last_block_seconds = record.last_block_seconds
        # Failures that land while a block is in force are counted but
        # never move or escalate that block.
        if failure_count >= MAX_FAILED_ATTEMPTS and _remaining(record, now) == 0:
            last_block_seconds = next_block_seconds(record.last_block_seconds)
            block_until = now + timedelta(seconds=last_block_seconds)

        if abuse_repository.compare_and_set(
            client_id,
            expected_version=record.version,
            failure_count=failure_count,
            last_attempt_at=now,
            block_until=block_until,
            last_block_seconds=last_block_seconds,
        ):
            updated = record.model_copy(
                update={
                    "failure_count": failure_count,
                    "last_attempt_at": now,
                    "block_until": block_until,
                    "last_block_seconds": last_block_seconds,
                    "version": record.version + 1,
                }
            )
            if block_until is not None and block_until != record.block_until:
                logger.warning(
                    "Blocking %s for %ds after %d failed attempts",
                    client_id, last_block_seconds, failure_count,
                )
            return _status(updated, now)

    raise StorageFault(f"Could not record failure for {client_id}: too much contention")


def record_success(client_id: str) -> None:
    abuse_repository.reset(client_id)


def is_blocked(client_id: str) -> bool:
    return remaining_block_seconds(client_id) > 0


def remaining_block_seconds(client_id: str) -> int:
    return _remaining(abuse_repository.get_by_client_id(client_id), timeutil.utcnow())


def release_expired_block(client_id: str) -> bool:
    released = abuse_repository.release_expired_block(client_id, timeutil.utcnow())
    if released:
        logger.info("Block on %s expired", client_id)
    return released


def ensure_not_blocked(client_id: str) -> None:
    """Gate for the redemption path. Raises ``RateLimited`` while blocked."""
    release_expired_block(client_id)
    remaining = remaining_block_seconds(client_id)
    if remaining > 0:
        raise RateLimited(remaining)
