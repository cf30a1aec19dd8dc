"""Central ORM module — imports all models for Alembic metadata discovery."""

from api.abuse.orm import AbuseModel
from api.transfers.orm import TransferModel

__all__ = [
    "AbuseModel",
    "TransferModel",
]
