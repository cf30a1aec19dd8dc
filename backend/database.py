"""Database configuration and session management."""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from config import DATA_DIR

DATABASE_URL = f"sqlite:///{DATA_DIR}/handoff.db"

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
    echo=False,
)

@event.listens_for(engine, "connect")
def _disable_pysqlite_begin(dbapi_connection, connection_record):
    # Let SQLAlchemy emit BEGIN itself (see below) instead of pysqlite.
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _begin(conn):
    # Writers take the lock up front. Deferred transactions that upgrade from
    # a read lock get SQLITE_BUSY straight away under concurrent writers.
    if conn.get_execution_options().get("begin_immediate"):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
    else:
        conn.exec_driver_sql("BEGIN")


# Same pool, but transactions take the write lock when they begin.
write_engine = engine.execution_options(begin_immediate=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
WriteSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=write_engine)


class Base(DeclarativeBase):
    pass


def init_db():
    Base.metadata.create_all(bind=engine)
