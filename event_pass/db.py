import asyncio
import logging
import pathlib

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from event_pass.config import settings

logger = logging.getLogger(__name__)

ROOT_PATH = pathlib.Path(__file__).resolve().parent.parent

# Seconds a writer waits for the SQLite write lock before giving up
BUSY_TIMEOUT = 30


def _set_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def make_engine(db_path: pathlib.Path) -> AsyncEngine:
    """Async engine over *db_path*.

    Every write in the core is a short transaction whose first statement is the
    write itself, so with WAL and a busy timeout concurrent writers simply queue.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        connect_args={"timeout": BUSY_TIMEOUT},
    )
    event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
    return engine


def make_session_pool(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=bind,
        autoflush=False,
        expire_on_commit=False,
    )


# Create an async engine
engine = make_engine(settings.DB_PATH)

# Create a sync engine for Alembic migrations
sync_engine = create_engine(f"sqlite:///{settings.DB_PATH}")

# Create a session factory
SessionLocal = make_session_pool(engine)


async def _run_migrations() -> None:
    alembic_ini = ROOT_PATH / "alembic.ini"
    if not alembic_ini.exists():
        return
    cfg = AlembicConfig(str(alembic_ini))
    cfg.set_main_option("script_location", str(ROOT_PATH / "alembic"))
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{settings.DB_PATH}")
    # Logging is already configured by the entry point
    cfg.attributes["configure_logger"] = False
    # Alembic is synchronous, run it off the event loop
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, command.upgrade, cfg, "head")


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create tables if they don't exist.

    On the default database Alembic migrations run first; an explicit *bind*
    (tests, tools) only gets ``create_all``.
    """
    if bind is None:
        bind = engine
        try:
            await _run_migrations()
        except Exception:
            # e.g. tables created by an earlier create_all; fall through to it
            logger.exception("alembic_migration_error")

    # Ensure all models are imported so SQLModel metadata includes them
    import event_pass.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
