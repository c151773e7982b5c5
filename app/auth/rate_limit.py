"""Token bucket rate limiter backed by Redis."""

import logging
import time

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, Response

from app.config import Settings
from app.context import get_settings
from app.redis import get_redis

logger = logging.getLogger(__name__)

# Lua script for atomic token bucket check-and-consume
_TOKEN_BUCKET_SCRIPT = """
local key = KEYS[1]
local capacity = tonumber(ARGV[1])
local refill_rate = tonumber(ARGV[2])
local now = tonumber(ARGV[3])

local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
local tokens = tonumber(bucket[1])
local last_refill = tonumber(bucket[2])

if tokens == nil then
    tokens = capacity
    last_refill = now
end

local elapsed = now - last_refill
local new_tokens = math.min(capacity, tokens + elapsed * (refill_rate / 60.0))

if new_tokens >= 1 then
    new_tokens = new_tokens - 1
    redis.call('HMSET', key, 'tokens', new_tokens, 'last_refill', now)
    redis.call('EXPIRE', key, 120)
    return {1, math.floor(new_tokens), 0}
else
    local retry_after = math.ceil((1 - new_tokens) * 60 / refill_rate)
    redis.call('HMSET', key, 'tokens', new_tokens, 'last_refill', now)
    redis.call('EXPIRE', key, 120)
    return {0, 0, retry_after}
end
"""


def get_rate_config(settings: Settings, method: str, path: str) -> tuple[int, int, str] | None:
    """Return (capacity, refill_per_min, category), or None for unlimited reads."""
    if "/admin" in path:
        return (
            settings.rate_limit_admin_capacity,
            settings.rate_limit_admin_refill_per_min,
            "admin",
        )
    if method in ("POST", "PUT", "PATCH", "DELETE"):
        return (
            settings.rate_limit_write_capacity,
            settings.rate_limit_write_refill_per_min,
            "write",
        )
    return None


def get_client_ip(request: Request) -> str:
    """Extract client IP, respecting X-Forwarded-For for reverse proxies."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First IP in the chain is the original client
        return forwarded_for.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


async def check_rate_limit(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    redis: aioredis.Redis = Depends(get_redis),
) -> None:
    """Rate limit dependency, bucketed per client IP and route category."""
    if not settings.rate_limit_enabled:
        return

    config = get_rate_config(settings, request.method.upper(), request.url.path)
    if config is None:
        return
    capacity, refill_rate, category = config

    bucket_key = f"ratelimit:ip:{get_client_ip(request)}:{category}"
    result = await redis.eval(
        _TOKEN_BUCKET_SCRIPT, 1, bucket_key, capacity, refill_rate, time.time()
    )

    allowed, remaining, retry_after = int(result[0]), int(result[1]), int(result[2])

    response.headers["X-RateLimit-Limit"] = str(capacity)
    response.headers["X-RateLimit-Remaining"] = str(remaining)

    if not allowed:
        logger.warning("Rate limited %s on %s bucket (retry in %ss)", bucket_key, category, retry_after)
        raise HTTPException(
            status_code=429,
            detail="Too many requests, please try again later.",
            headers={"Retry-After": str(retry_after)},
        )
