"""HTTP client construction for connection pooling.

Clients are built from the httpx pool and timeout settings. init_http_client()
owns one pooled client for the lifetime of a block, to be passed into every
GitHubClient so they share connections.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx

from hubgate.app.core.config import settings


def _default_limits(**kwargs) -> httpx.Limits:
    return httpx.Limits(
        max_connections=kwargs.get("max_connections", settings.httpx_max_connections),
        max_keepalive_connections=kwargs.get(
            "max_keepalive_connections", settings.httpx_max_keepalive_connections
        ),
        keepalive_expiry=kwargs.get("keepalive_expiry", settings.httpx_keepalive_expiry),
    )


def _default_timeout(**kwargs) -> httpx.Timeout:
    timeout_override = kwargs.get("timeout")
    if timeout_override is not None:
        return httpx.Timeout(timeout_override)
    return httpx.Timeout(
        connect=kwargs.get("connect_timeout", settings.httpx_connect_timeout),
        read=kwargs.get("read_timeout", settings.httpx_read_timeout),
        write=kwargs.get("write_timeout", settings.httpx_write_timeout),
        pool=kwargs.get("pool_timeout", settings.httpx_pool_timeout),
    )


@asynccontextmanager
async def init_http_client(**kwargs) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Yield a pooled HTTP client, closed when the block exits.

        async with init_http_client() as client:
            github = GitHubClient(executor, http_client=client)
            ...
    """
    client = create_http_client(**kwargs)
    try:
        yield client
    finally:
        await client.aclose()


def create_http_client(**kwargs) -> httpx.AsyncClient:
    """Create a new HTTP client with default settings.

    The returned client should be closed when done:
        async with create_http_client() as client:
            ...

    Args:
        **kwargs: Override default settings. Can include:
            - timeout: Single timeout value (overrides all granular timeouts)
            - connect_timeout, read_timeout, write_timeout, pool_timeout
            - max_connections, max_keepalive_connections, keepalive_expiry
            - transport: Custom httpx transport (e.g. httpx.MockTransport)

    Returns:
        A new httpx.AsyncClient instance.
    """
    config = {
        "timeout": _default_timeout(**kwargs),
        "limits": _default_limits(**kwargs),
    }
    if kwargs.get("transport") is not None:
        config["transport"] = kwargs["transport"]
    return httpx.AsyncClient(**config)
