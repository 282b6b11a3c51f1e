"""Database configuration and session management."""

import asyncio
import re
from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from alembic.autogenerate import compare_metadata
from alembic.command import downgrade, upgrade
from alembic.config import Config
from alembic.migration import MigrationContext
from conduit.config import settings


def use_explicit_sqlite_transactions(async_engine: AsyncEngine) -> None:
    """
    Have SQLAlchemy emit BEGIN itself on SQLite.

    The sqlite3 driver defers BEGIN until the first DML statement, which breaks
    SAVEPOINT scoping; the stores rely on savepoints for insert-or-reject writes.
    """
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)
use_explicit_sqlite_transactions(engine)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


def _alembic_config(db_url: str | None = None) -> Config:
    root = Path(__file__).resolve().parents[1]
    config = Config(str(root / "alembic.ini"))
    config.set_main_option("script_location", str(root / "alembic"))
    config.attributes["configure_logger"] = False
    if db_url:
        config.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))
    return config


def run_migrations(revision: str = "head", db_url: str | None = None) -> None:
    """Run Alembic migrations to a target revision."""
    config = _alembic_config(db_url)
    if revision == "base":
        downgrade(config, revision)
    else:
        upgrade(config, revision)


async def migrate_db(revision: str = "head", db_url: str | None = None) -> None:
    """Async wrapper to run migrations without blocking the event loop."""
    url = db_url or settings.database_url
    await asyncio.to_thread(run_migrations, revision, url)


async def init_db(db_url: str | None = None) -> None:
    """Initialize database schema via Alembic migrations."""
    await migrate_db("head", db_url)


def compare_schema(connection) -> list[object]:
    """Diff the live schema behind a sync connection against the ORM models."""
    context = MigrationContext.configure(connection, opts={"compare_type": True})
    return compare_metadata(context, Base.metadata)


# Where each driver names the violated key in its error text.
_PG_CONSTRAINT = re.compile(r'violates unique constraint "([^"]+)"')
_MYSQL_CONSTRAINT = re.compile(r"for key '(?:[^'.]+\.)?([^']+)'")
_SQLITE_COLUMNS = re.compile(r"UNIQUE constraint failed: (.+)")


def violated_constraint(exc: IntegrityError) -> str | None:
    """Name of the unique key behind an IntegrityError, when the driver reports one."""
    orig = exc.orig
    for source in (orig, getattr(orig, "__cause__", None)):
        name = getattr(source, "constraint_name", None)
        if name:
            return name
        diag = getattr(source, "diag", None)
        if diag is not None and getattr(diag, "constraint_name", None):
            return diag.constraint_name

    message = str(orig)
    match = _PG_CONSTRAINT.search(message)
    if match:
        return match.group(1)
    matches = _MYSQL_CONSTRAINT.findall(message)
    if matches:
        return matches[-1]
    return None


def is_unique_violation(exc: IntegrityError, constraint: str, *columns: str) -> bool:
    """
    Tell whether an IntegrityError was raised by a specific unique key.

    PostgreSQL and MySQL name the constraint; SQLite reports the offending
    ``table.column`` list instead. Only those parts are compared, never the
    duplicate value the message may echo.
    """
    name = violated_constraint(exc)
    if name is not None:
        return name == constraint
    match = _SQLITE_COLUMNS.search(str(exc.orig))
    if match is None or not columns:
        return False
    failed = {column.strip() for column in match.group(1).split(",")}
    return failed == set(columns)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
