import json
import logging
import os
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import Text, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from app.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class JSONText(TypeDecorator):
    """JSON value stored as a TEXT column.

    Callers only ever see decoded Python objects. Rows written by older
    clients with malformed JSON decode to ``None`` instead of failing the read.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value: str | None, dialect: Any) -> Any:
        if value is None or value == "":
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("Undecodable JSON column value: %.80s", value)
            return None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    """Build the async engine for the configured database.

    SQLite gets foreign key enforcement on every new connection and its
    parent directory created on demand.
    """
    if settings.is_sqlite:
        if ":///" in settings.database_url:
            db_path = settings.database_url.split("///", 1)[1].split("?")[0]
            db_dir = os.path.dirname(db_path)
            if db_dir and db_path != ":memory:" and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)
        engine = create_async_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(settings.database_url, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def register_models() -> None:
    """Import every model module so Base.metadata knows all tables."""
    from app.models import access, bid, chat, content, forum, job, machinery, user  # noqa: F401


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    register_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.ctx.session_factory() as session:
        yield session
