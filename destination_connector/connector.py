from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from destination_connector.composer import compose_request, send_composed_request
from destination_connector.environment import (
    ConnectivityEnvironment,
    TokenScope,
    build_environment,
)
from destination_connector.errors import error_details
from destination_connector.models import CallOptions, CallResult
from destination_connector.settings import Settings, load_settings
from destination_connector.transport import ClientFactory, build_client_factory
from destination_connector.validation import parse_call_options

logger = logging.getLogger(__name__)


class DestinationConnector:
    """Calls a resource behind a platform destination.

    The environment (platform-backed or local) is fixed at construction time from
    ``settings``; every ``call`` re-acquires both tokens and re-reads the destination.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        environment: ConnectivityEnvironment | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.settings = settings
        self.client_factory = client_factory or build_client_factory(settings)
        self.environment = environment or build_environment(
            settings, self.client_factory
        )

    async def call(self, options: CallOptions | Mapping[str, Any]) -> CallResult:
        destination_name = _option(options, "destination_name")
        verb = _option(options, "http_verb")
        try:
            call_options = parse_call_options(options)
            logger.info(
                "destination_call_start destination=%s verb=%s url=%s local=%s",
                call_options.destination_name,
                call_options.http_verb.value,
                call_options.url,
                self.environment.is_local,
            )
            return await self._run(call_options)
        except Exception as exc:
            logger.error(
                "destination_call_error destination=%s verb=%s details=%s",
                destination_name,
                verb,
                json.dumps(error_details(exc), default=str, sort_keys=True),
            )
            raise

    async def _run(self, options: CallOptions) -> CallResult:
        environment = self.environment
        bindings = environment.resolve_bindings(options)
        proxy = environment.proxy_target(bindings)

        destination_token = await environment.acquire_token(
            bindings.destination,
            bindings.auth_server_url,
            TokenScope.DESTINATION,
        )
        destination = await environment.resolve_destination(
            options.destination_name,
            bindings.destination_api_url,
            destination_token,
        )
        proxy_token = await environment.acquire_token(
            bindings.connectivity,
            bindings.auth_server_url,
            TokenScope.PROXY,
        )

        request = compose_request(
            options,
            destination,
            proxy=proxy,
            proxy_token=proxy_token,
            scc_location_header=self.settings.scc_location_header,
        )
        return await send_composed_request(request, self.client_factory)


async def call_destination(
    options: CallOptions | Mapping[str, Any],
    *,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> CallResult:
    connector = DestinationConnector(
        settings or load_settings(),
        client_factory=client_factory,
    )
    return await connector.call(options)


def _option(options: Any, name: str) -> Any:
    if isinstance(options, CallOptions):
        value = getattr(options, name)
        return value.value if name == "http_verb" else value
    if isinstance(options, Mapping):
        return options.get(name)
    return None
