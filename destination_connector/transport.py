from __future__ import annotations

from typing import Callable

import httpx

from destination_connector.settings import Settings

# Builds one client per outbound call; the argument is the forward proxy, if any.
ClientFactory = Callable[[httpx.Proxy | None], httpx.AsyncClient]


def build_client_factory(settings: Settings) -> ClientFactory:
    timeout = httpx.Timeout(
        settings.connector_timeout_seconds,
        connect=settings.connector_connect_timeout_seconds,
    )

    def _factory(proxy: httpx.Proxy | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(proxy=proxy, timeout=timeout)

    return _factory
