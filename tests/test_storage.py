import asyncio

import pytest

import storage
from config import FILES_DIR


async def _chunks(*parts):
    for part in parts:
        yield part


def save(*parts, max_size=1024):
    return asyncio.run(storage.save_stream(_chunks(*parts), max_size))


def test_save_stream_writes_bytes_under_new_handle():
    handle, size = save(b"hello ", b"world")

    assert size == 11
    assert storage.path_for(handle).read_bytes() == b"hello world"
    storage.delete(handle)
    assert storage.path_for(handle) is None


def test_save_stream_rejects_oversized_upload_and_leaves_nothing_behind():
    before = set(FILES_DIR.iterdir())

    with pytest.raises(ValueError):
        save(b"x" * 600, b"x" * 600, max_size=1000)

    assert set(FILES_DIR.iterdir()) == before


@pytest.mark.parametrize("handle", ["", "../handoff.db", "a/b", "missing"])
def test_path_for_only_resolves_stored_handles(handle):
    assert storage.path_for(handle) is None
