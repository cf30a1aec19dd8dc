"""Tagged results for transfer lookups and inserts."""

from dataclasses import dataclass

from api.transfers.dto.transfer import TransferResponse


@dataclass(frozen=True)
class Found:
    record: TransferResponse


@dataclass(frozen=True)
class NotFound:
    """Wrong code, expired, already downloaded or self-redeem. Deliberately opaque."""


Lookup = Found | NotFound


@dataclass(frozen=True)
class CodeConflict:
    """The store rejected an insert because the connection code is taken."""

    code: str
