"""Abuse record ORM model."""

from sqlalchemy import Column, DateTime, Integer, String

from database import Base


class AbuseModel(Base):
    __tablename__ = "abuse_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String, unique=True, nullable=False, index=True)
    failure_count = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(DateTime, nullable=False)
    block_until = Column(DateTime, nullable=True)
    last_block_seconds = Column(Integer, nullable=False, default=0)
    # Bumped on every write; compare-and-set updates match on it.
    version = Column(Integer, nullable=False, default=0)
