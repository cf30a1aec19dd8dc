"""Download service — validates a token and consumes the transfer."""

from pathlib import Path

import storage
from api.transfers.dto.results import NotFound
from api.transfers.dto.transfer import TransferResponse
from api.transfers.services import transfers_service


def claim_download(token: str, downloader_id: str) -> tuple[TransferResponse, Path] | None:
    """Return the transfer and its bytes, or None if the token can't be used.

    The transfer is marked DOWNLOADED here, before any bytes go out, so a
    token is good for exactly one download.
    """
    result = transfers_service.fetch_by_token(token)
    if isinstance(result, NotFound):
        return None

    record = result.record
    filepath = storage.path_for(record.storage_handle)
    if filepath is None:
        return None

    if not transfers_service.complete(record.id, downloader_id):
        return None

    return record, filepath
