"""Redeem Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel, Field


class RedeemRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)


class RedeemResponse(BaseModel):
    transfer_id: int
    filename: str
    content_type: str
    size: int
    download_url: str
    expires_at: datetime
