"""Redis URL handling shared by the Celery app and the readiness probe."""

from __future__ import annotations

import ssl
from typing import Any

from redis import Redis

HOSTED_REDIS_DOMAIN = ".upstash.io"


def normalize_redis_url(url: str) -> tuple[str, bool]:
    """Return ``(url, uses_tls)``, switching hosted Redis URLs to ``rediss://``."""
    if HOSTED_REDIS_DOMAIN in url and url.startswith("redis://"):
        url = url.replace("redis://", "rediss://", 1)
    return url, url.startswith("rediss://")


def create_redis_client(url: str, **kwargs: Any) -> Redis:
    """Create a Redis client for ``url``.

    TLS connections skip certificate verification.

    Args:
        url: Redis connection URL (redis:// or rediss://)
        **kwargs: Passed through to ``Redis.from_url``

    Returns:
        Configured Redis client
    """
    url, uses_tls = normalize_redis_url(url)
    client = Redis.from_url(url, **kwargs)
    if uses_tls:
        client.connection_pool.connection_kwargs["ssl_cert_reqs"] = ssl.CERT_NONE
    return client
