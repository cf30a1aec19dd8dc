"""Transfer ORM model."""

from sqlalchemy import Column, DateTime, Integer, String

from database import Base


class TransferModel(Base):
    __tablename__ = "transfers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String, nullable=False)
    content_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    storage_handle = Column(String, nullable=False)
    # The unique index is what actually guarantees code uniqueness.
    connection_code = Column(String, unique=True, nullable=False, index=True)
    status = Column(String, nullable=False, default="WAITING")
    download_token = Column(String, unique=True, nullable=True, index=True)
    token_expires_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=False)
    uploader_id = Column(String, nullable=False)
    downloader_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False)
