"""Explicitly constructed application context.

Everything a request handler needs beyond its own arguments (database
engine, session factory, broadcaster, redis pool) hangs off one
``AppContext`` created by ``create_app`` and stored on ``app.state.ctx``.
"""

from dataclasses import dataclass

import redis.asyncio as aioredis
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.config import Settings
from app.database import create_engine, create_session_factory, init_models
from app.redis import create_redis_pool
from app.services.broadcast import Broadcaster
from app.services.content import seed_defaults


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    broadcaster: Broadcaster
    redis_pool: aioredis.ConnectionPool

    @classmethod
    def build(cls, settings: Settings) -> "AppContext":
        engine = create_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=create_session_factory(engine),
            broadcaster=Broadcaster(send_timeout=settings.broadcast_send_timeout),
            redis_pool=create_redis_pool(settings.redis_url),
        )

    async def start(self) -> None:
        """Create missing tables and, if enabled, seed default content."""
        await init_models(self.engine)
        if self.settings.seed_defaults:
            async with self.session_factory() as db:
                await seed_defaults(db)

    async def close(self) -> None:
        await self.broadcaster.close_all()
        await self.redis_pool.disconnect()
        await self.engine.dispose()


def get_context(request: Request) -> AppContext:
    return request.app.state.ctx


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.ctx.broadcaster


def get_settings(request: Request) -> Settings:
    return request.app.state.ctx.settings
