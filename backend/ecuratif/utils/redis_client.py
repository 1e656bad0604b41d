"""Redis client factory shared by progress tracking and health checks."""

from __future__ import annotations

import ssl
from typing import Any

from redis import Redis


def create_redis_client(url: str, **kwargs: Any) -> Redis:
    """Create a Redis client, relaxing certificate checks for ``rediss://`` URLs.

    Args:
        url: Redis connection URL (redis:// or rediss://)
        **kwargs: Passed to ``Redis.from_url`` (decode_responses, socket_connect_timeout...)
    """
    client = Redis.from_url(url, **kwargs)
    if url.startswith("rediss://"):
        client.connection_pool.connection_kwargs["ssl_cert_reqs"] = ssl.CERT_NONE
    return client
