"""Abuse guard Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel


class AbuseRecord(BaseModel):
    client_id: str
    failure_count: int
    last_attempt_at: datetime
    block_until: datetime | None = None
    last_block_seconds: int = 0
    version: int


class AbuseStatus(BaseModel):
    blocked: bool
    failure_count: int
    attempts_left: int
    remaining_seconds: int = 0
