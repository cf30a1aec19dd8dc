"""Abuse repository — data access layer.

Records are shared by every request from the same client id, so writes are
single UPDATE statements: either a compare-and-set on ``version`` or a
conditional reset. Nothing here reads a row and writes it back unguarded.
"""

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from database import SessionLocal, WriteSessionLocal
from timeutil import as_utc
from api.abuse.dto.abuse import AbuseRecord
from api.abuse.orm.abuse_model import AbuseModel


def _get_session():
    return SessionLocal()


def _get_write_session():
    return WriteSessionLocal()


def _model_to_dto(model: AbuseModel) -> AbuseRecord:
    return AbuseRecord(
        client_id=model.client_id,
        failure_count=model.failure_count or 0,
        last_attempt_at=as_utc(model.last_attempt_at),
        block_until=as_utc(model.block_until),
        last_block_seconds=model.last_block_seconds or 0,
        version=model.version or 0,
    )


def get_by_client_id(client_id: str) -> AbuseRecord | None:
    with _get_session() as session:
        model = session.query(AbuseModel).filter_by(client_id=client_id).first()
        return _model_to_dto(model) if model else None


def get_or_create(client_id: str, now: datetime) -> AbuseRecord:
    """Return the record for ``client_id``, inserting a zeroed one if absent."""
    existing = get_by_client_id(client_id)
    if existing:
        return existing

    with _get_write_session() as session:
        session.add(
            AbuseModel(
                client_id=client_id,
                failure_count=0,
                last_attempt_at=now,
                last_block_seconds=0,
                version=0,
            )
        )
        try:
            session.commit()
        except IntegrityError:
            # Another request inserted it first
            session.rollback()

    return get_by_client_id(client_id)


def compare_and_set(
    client_id: str,
    expected_version: int,
    failure_count: int,
    last_attempt_at: datetime,
    block_until: datetime | None,
    last_block_seconds: int,
) -> bool:
    """Write the new state only if nobody else wrote since ``expected_version``."""
    with _get_write_session() as session:
        updated = (
            session.query(AbuseModel)
            .filter_by(client_id=client_id, version=expected_version)
            .update(
                {
                    AbuseModel.failure_count: failure_count,
                    AbuseModel.last_attempt_at: last_attempt_at,
                    AbuseModel.block_until: block_until,
                    AbuseModel.last_block_seconds: last_block_seconds,
                    AbuseModel.version: expected_version + 1,
                },
                synchronize_session=False,
            )
        )
        session.commit()
        return updated == 1


def reset(client_id: str) -> bool:
    """Zero the record, forgetting the escalation history too."""
    with _get_write_session() as session:
        updated = (
            session.query(AbuseModel)
            .filter_by(client_id=client_id)
            .update(
                {
                    AbuseModel.failure_count: 0,
                    AbuseModel.block_until: None,
                    AbuseModel.last_block_seconds: 0,
                    AbuseModel.version: AbuseModel.version + 1,
                },
                synchronize_session=False,
            )
        )
        session.commit()
        return updated == 1


def release_expired_block(client_id: str, now: datetime) -> bool:
    """Clear a block whose end is at or before ``now``, keeping ``last_block_seconds``."""
    with _get_write_session() as session:
        updated = (
            session.query(AbuseModel)
            .filter(
                AbuseModel.client_id == client_id,
                AbuseModel.block_until.isnot(None),
                AbuseModel.block_until <= now,
            )
            .update(
                {
                    AbuseModel.failure_count: 0,
                    AbuseModel.block_until: None,
                    AbuseModel.version: AbuseModel.version + 1,
                },
                synchronize_session=False,
            )
        )
        session.commit()
        return updated == 1
