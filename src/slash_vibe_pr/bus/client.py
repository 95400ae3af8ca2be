"""Redis connection factory."""

from __future__ import annotations

import logging

import redis

from slash_vibe_pr.config import RelaySettings

logger = logging.getLogger(__name__)


def create_redis_client(settings: RelaySettings) -> redis.Redis:
    """Build a client for the configured bus. Responses are decoded to str."""

    return redis.Redis(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        password=settings.redis_password or None,
        decode_responses=True,
    )


def connect(settings: RelaySettings) -> redis.Redis:
    """Create a client and verify the bus is reachable.

    Raises:
        redis.RedisError: the server could not be reached.
    """

    client = create_redis_client(settings)
    client.ping()
    logger.info("Connected to Redis", extra={"addr": settings.redis.addr})
    return client
