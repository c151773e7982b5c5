from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from fastapi import Request


def create_redis_pool(redis_url: str) -> aioredis.ConnectionPool:
    return aioredis.ConnectionPool.from_url(redis_url)


async def get_redis(request: Request) -> AsyncGenerator[aioredis.Redis, None]:
    client = aioredis.Redis(connection_pool=request.app.state.ctx.redis_pool)
    try:
        yield client
    finally:
        await client.aclose()
