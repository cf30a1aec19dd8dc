from datetime import datetime, timezone

from sqlalchemy import text

from database import SessionLocal, WriteSessionLocal
from api.abuse.repositories import abuse_repository
from api.transfers.repositories import transfers_repository


def test_write_sessions_begin_immediate():
    with WriteSessionLocal() as session:
        assert session.connection().get_execution_options().get("begin_immediate") is True
    with SessionLocal() as session:
        assert not session.connection().get_execution_options().get("begin_immediate")


def test_reads_do_not_wait_for_a_pending_writer():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    with WriteSessionLocal() as writer:
        # Holds the RESERVED lock until the session closes
        writer.execute(text("SELECT 1"))

        assert transfers_repository.get_by_code("NOPE") is None
        assert transfers_repository.count_active(now) == 0
        assert abuse_repository.get_by_client_id("10.0.0.1") is None
