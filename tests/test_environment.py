from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qsl

import httpx
import pytest

from destination_connector.bindings import ServiceCredentials
from destination_connector.environment import (
    MOCK_LOCAL_ACCESS_TOKEN,
    MOCK_LOCAL_PROXY_TOKEN,
    LocalEnvironment,
    PlatformEnvironment,
    TokenScope,
)
from destination_connector.models import CallOptions, HttpVerb
from tests.connector_test_utils import (
    local_settings,
    mock_client_factory,
    platform_settings,
    vcap_services_document,
)

CREDENTIALS = ServiceCredentials(clientid="someid", clientsecret="somesecret")


def test_local_tokens_are_fixed_per_scope() -> None:
    environment = LocalEnvironment(local_settings())
    destination_token = asyncio.run(
        environment.acquire_token(CREDENTIALS, "http://ex.org", TokenScope.DESTINATION)
    )
    proxy_token = asyncio.run(
        environment.acquire_token(CREDENTIALS, "http://ex.org", TokenScope.PROXY)
    )
    assert destination_token == MOCK_LOCAL_ACCESS_TOKEN == "mockLocalAccessToken"
    assert proxy_token == MOCK_LOCAL_PROXY_TOKEN == "mockLocalProxyToken"
    assert (
        asyncio.run(
            environment.acquire_token(CREDENTIALS, "http://other", TokenScope.DESTINATION)
        )
        == destination_token
    )


@pytest.mark.parametrize("name", ["http://ex.org", "my-destination", "", "http://h:1/a b"])
def test_local_destination_uses_name_as_url(name: str) -> None:
    destination = asyncio.run(
        LocalEnvironment(local_settings()).resolve_destination(
            name, "http://ex.org/api", "someToken"
        )
    )
    assert destination.as_document() == {"destinationConfiguration": {"URL": name}}


def test_local_environment_has_no_proxy() -> None:
    environment = LocalEnvironment(local_settings())
    options = CallOptions(url="/x", destination_name="d", http_verb=HttpVerb.GET)
    assert environment.proxy_target(environment.resolve_bindings(options)) is None


def test_platform_environment_uses_bound_services() -> None:
    requests: list[httpx.Request] = []
    seen_proxies: list[httpx.Proxy | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/oauth/token":
            form = dict(parse_qsl(request.content.decode("utf-8")))
            return httpx.Response(200, json={"access_token": f"token-{form['client_id']}"})
        return httpx.Response(
            200, json={"destinationConfiguration": {"URL": "http://onprem:8080"}}
        )

    environment = PlatformEnvironment(
        platform_settings(vcap_services_document()),
        mock_client_factory(handler, seen_proxies),
    )
    options = CallOptions(
        url="/x",
        destination_name="backend",
        http_verb=HttpVerb.GET,
        connectivity_instance="my-connectivity",
        uaa_instance="my-uaa",
        destination_instance="my-destination",
    )
    bindings = environment.resolve_bindings(options)

    async def _run() -> tuple[str, str]:
        token = await environment.acquire_token(
            bindings.destination, bindings.auth_server_url, TokenScope.DESTINATION
        )
        destination = await environment.resolve_destination(
            "backend", bindings.destination_api_url, token
        )
        return token, destination.url

    token, url = asyncio.run(_run())
    assert token == "token-dest-client"
    assert url == "http://onprem:8080"
    assert environment.proxy_target(bindings) == "http://10.0.1.23:20003"
    assert str(requests[0].url) == "https://tenant.auth.example.com/oauth/token"
    assert str(requests[1].url) == (
        "https://destination-configuration.example.com"
        "/destination-configuration/v1/destinations/backend"
    )
    assert requests[1].headers["authorization"] == "Bearer token-dest-client"
    # token and destination calls never go through the connectivity proxy
    assert seen_proxies == [None, None]


def test_platform_settings_document_round_trips() -> None:
    settings = platform_settings(vcap_services_document())
    assert json.loads(settings.vcap_services or "{}") == vcap_services_document()
    assert settings.is_local_mode is False
