"""Local byte storage. Transfers only ever hold the handle returned here."""

import logging
import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from uuid import uuid4

from config import FILES_DIR
from errors import StorageFault

logger = logging.getLogger(__name__)


async def save_stream(chunks: AsyncIterator[bytes], max_size: int) -> tuple[str, int]:
    """Stream ``chunks`` to disk and return ``(handle, size)``.

    Raises ValueError when the stream grows past ``max_size`` bytes.
    """
    try:
        tmp = tempfile.NamedTemporaryFile(delete=False, dir=str(FILES_DIR))
    except OSError as e:
        raise StorageFault("Could not open upload file") from e

    size = 0
    try:
        async for chunk in chunks:
            size += len(chunk)
            if max_size and size > max_size:
                raise ValueError(f"File exceeds max size of {max_size} bytes")
            tmp.write(chunk)
        tmp.close()

        handle = uuid4().hex
        os.replace(tmp.name, FILES_DIR / handle)
        return handle, size
    except OSError as e:
        logger.exception("Failed to store upload")
        raise StorageFault("Could not store upload") from e
    finally:
        if not tmp.closed:
            tmp.close()
        if os.path.exists(tmp.name):
            os.unlink(tmp.name)


def path_for(handle: str) -> Path | None:
    """Resolve a handle to its file, or None if the bytes are gone."""
    # Handles are uuid hex strings; anything else never names a stored file.
    if not handle or Path(handle).name != handle:
        return None
    path = FILES_DIR / handle
    return path if path.is_file() else None


def delete(handle: str) -> None:
    path = path_for(handle)
    if path:
        path.unlink(missing_ok=True)
