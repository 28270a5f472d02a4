from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import DATABASE_URL, DB_ECHO

Base = declarative_base()


def get_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        return _sqlite_engine(database_url, echo)
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def _sqlite_engine(database_url: str, echo: bool) -> AsyncEngine:
    """
    SQLite takes its write lock lazily, so two claims racing on the same row can
    deadlock on lock promotion instead of waiting. Start every transaction with
    BEGIN IMMEDIATE so writers queue up the way they do on Postgres.
    """
    engine = create_async_engine(database_url, echo=echo, connect_args={"timeout": 30})

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def get_session(engine: AsyncEngine):
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
    )


engine = get_engine(DATABASE_URL, echo=DB_ECHO)

SessionLocal = get_session(engine)


async def get_db():
    async with SessionLocal() as session:
        yield session
