from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from destination_connector.bindings import (
    ResolvedBindings,
    ServiceBindingResolver,
    ServiceCredentials,
)
from destination_connector.destinations import fetch_destination
from destination_connector.models import CallOptions, Destination
from destination_connector.settings import Settings
from destination_connector.tokens import acquire_client_credentials_token
from destination_connector.transport import ClientFactory

MOCK_LOCAL_ACCESS_TOKEN = "mockLocalAccessToken"
MOCK_LOCAL_PROXY_TOKEN = "mockLocalProxyToken"

logger = logging.getLogger(__name__)


class TokenScope(str, Enum):
    DESTINATION = "destination"
    PROXY = "proxy"


class ConnectivityEnvironment(Protocol):
    is_local: bool

    def resolve_bindings(self, options: CallOptions) -> ResolvedBindings: ...

    async def acquire_token(
        self,
        credentials: ServiceCredentials,
        auth_server_url: str,
        scope: TokenScope,
    ) -> str: ...

    async def resolve_destination(
        self,
        name: str,
        destination_api_url: str,
        bearer_token: str,
    ) -> Destination: ...

    def proxy_target(self, bindings: ResolvedBindings) -> str | None: ...


def is_local_mode(settings: Settings) -> bool:
    return settings.is_local_mode


class PlatformEnvironment:
    """Resolves everything against the bound platform services."""

    is_local = False

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory,
        *,
        binding_resolver: ServiceBindingResolver | None = None,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._binding_resolver = binding_resolver

    def resolve_bindings(self, options: CallOptions) -> ResolvedBindings:
        resolver = self._binding_resolver or ServiceBindingResolver.from_settings(
            self._settings
        )
        return ResolvedBindings(
            connectivity=resolver.resolve(options.connectivity_instance),
            uaa=resolver.resolve(options.uaa_instance),
            destination=resolver.resolve(options.destination_instance),
            destination_api_path=self._settings.destination_api_path,
        )

    async def acquire_token(
        self,
        credentials: ServiceCredentials,
        auth_server_url: str,
        scope: TokenScope,
    ) -> str:
        logger.debug(
            "oauth_token_start scope=%s auth_server=%s", scope.value, auth_server_url
        )
        async with self._client_factory(None) as client:
            return await acquire_client_credentials_token(
                client,
                client_id=credentials.client_id,
                client_secret=credentials.client_secret,
                auth_server_url=auth_server_url,
            )

    async def resolve_destination(
        self,
        name: str,
        destination_api_url: str,
        bearer_token: str,
    ) -> Destination:
        async with self._client_factory(None) as client:
            return await fetch_destination(
                client,
                name=name,
                destination_api_url=destination_api_url,
                bearer_token=bearer_token,
            )

    def proxy_target(self, bindings: ResolvedBindings) -> str | None:
        return bindings.proxy_url


class LocalEnvironment:
    """Offline stand-in: fixed tokens, the destination name used as its URL, no proxy."""

    is_local = True

    _TOKENS = {
        TokenScope.DESTINATION: MOCK_LOCAL_ACCESS_TOKEN,
        TokenScope.PROXY: MOCK_LOCAL_PROXY_TOKEN,
    }

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def resolve_bindings(self, options: CallOptions) -> ResolvedBindings:
        placeholder = ServiceCredentials(
            client_id="local",
            client_secret="local",
            url="http://localhost",
            uri="http://localhost",
        )
        return ResolvedBindings(
            connectivity=placeholder,
            uaa=placeholder,
            destination=placeholder,
            destination_api_path=self._settings.destination_api_path,
        )

    async def acquire_token(
        self,
        credentials: ServiceCredentials,
        auth_server_url: str,
        scope: TokenScope,
    ) -> str:
        return self._TOKENS[scope]

    async def resolve_destination(
        self,
        name: str,
        destination_api_url: str,
        bearer_token: str,
    ) -> Destination:
        return Destination.for_url(name)

    def proxy_target(self, bindings: ResolvedBindings) -> str | None:
        return None


def build_environment(
    settings: Settings,
    client_factory: ClientFactory,
) -> ConnectivityEnvironment:
    if is_local_mode(settings):
        return LocalEnvironment(settings)
    return PlatformEnvironment(settings, client_factory)
