"""Transfers repository — data access layer."""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from database import SessionLocal, WriteSessionLocal
from timeutil import as_utc
from api.transfers.orm.transfer_model import TransferModel
from api.transfers.dto.results import CodeConflict
from api.transfers.dto.transfer import TransferResponse, TransferStatus


def _get_session():
    return SessionLocal()


def _get_write_session():
    return WriteSessionLocal()


def _model_to_dto(model: TransferModel) -> TransferResponse:
    return TransferResponse(
        id=model.id,
        filename=model.filename,
        content_type=model.content_type,
        size=model.size or 0,
        storage_handle=model.storage_handle,
        connection_code=model.connection_code,
        status=model.status,
        download_token=model.download_token,
        token_expires_at=as_utc(model.token_expires_at),
        expires_at=as_utc(model.expires_at),
        uploader_id=model.uploader_id,
        downloader_id=model.downloader_id,
        created_at=as_utc(model.created_at),
    )


def create(
    code: str,
    filename: str,
    content_type: str,
    size: int,
    storage_handle: str,
    uploader_id: str,
    expires_at: datetime,
    created_at: datetime,
) -> TransferResponse | CodeConflict:
    """Insert a WAITING transfer, or report that the code is already taken."""
    with _get_write_session() as session:
        model = TransferModel(
            connection_code=code,
            filename=filename,
            content_type=content_type,
            size=size,
            storage_handle=storage_handle,
            status=TransferStatus.WAITING.value,
            uploader_id=uploader_id,
            expires_at=expires_at,
            created_at=created_at,
        )
        session.add(model)
        try:
            session.commit()
        except IntegrityError:
            # connection_code is the only unique column set on insert
            session.rollback()
            return CodeConflict(code=code)
        session.refresh(model)
        return _model_to_dto(model)


def get_by_code(code: str) -> TransferResponse | None:
    with _get_session() as session:
        model = session.query(TransferModel).filter_by(connection_code=code).first()
        return _model_to_dto(model) if model else None


def get_by_token(token: str) -> TransferResponse | None:
    with _get_session() as session:
        model = session.query(TransferModel).filter_by(download_token=token).first()
        return _model_to_dto(model) if model else None


def code_exists(code: str) -> bool:
    with _get_session() as session:
        return session.query(TransferModel.id).filter_by(connection_code=code).first() is not None


def count_active(now: datetime) -> int:
    """WAITING transfers whose expiry is still ahead of ``now``."""
    with _get_session() as session:
        total = (
            session.query(func.count(TransferModel.id))
            .filter(
                TransferModel.status == TransferStatus.WAITING.value,
                TransferModel.expires_at > now,
            )
            .scalar()
        )
        return total or 0


def set_token(transfer_id: int, token: str, expires_at: datetime) -> bool:
    with _get_write_session() as session:
        updated = (
            session.query(TransferModel)
            .filter_by(id=transfer_id)
            .update(
                {
                    TransferModel.download_token: token,
                    TransferModel.token_expires_at: expires_at,
                },
                synchronize_session=False,
            )
        )
        session.commit()
        return updated == 1


def mark_downloaded(transfer_id: int, downloader_id: str) -> bool:
    """Move WAITING -> DOWNLOADED in one conditional UPDATE.

    Returns True only for the caller whose statement changed the row.
    """
    with _get_write_session() as session:
        updated = (
            session.query(TransferModel)
            .filter_by(id=transfer_id, status=TransferStatus.WAITING.value)
            .update(
                {
                    TransferModel.status: TransferStatus.DOWNLOADED.value,
                    TransferModel.downloader_id: downloader_id,
                },
                synchronize_session=False,
            )
        )
        session.commit()
        return updated == 1
