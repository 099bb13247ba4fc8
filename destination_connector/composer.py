from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, assert_never

import httpx

from destination_connector.errors import RequestError
from destination_connector.models import (
    CallOptions,
    CallResult,
    Destination,
    FullResponse,
    HttpVerb,
    ResponseBody,
)
from destination_connector.transport import ClientFactory

PROXY_AUTHORIZATION = "Proxy-Authorization"
REDIRECTABLE_METHODS = frozenset({"GET", "HEAD"})

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ComposedRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    proxy: str | None = None
    json_body: Any = None
    json_encoded: bool = False
    form: dict[str, Any] | None = None
    binary: bool = False
    full_response: bool = False
    tech_error_only: bool = False

    def origin_headers(self) -> dict[str, str]:
        return {
            name: value
            for name, value in self.headers.items()
            if name != PROXY_AUTHORIZATION
        }

    def proxy_config(self) -> httpx.Proxy | None:
        # Proxy credentials go to the proxy only, including the CONNECT of a tunnel.
        if self.proxy is None:
            return None
        proxy_headers: dict[str, str] = {}
        proxy_authorization = self.headers.get(PROXY_AUTHORIZATION)
        if proxy_authorization:
            proxy_headers[PROXY_AUTHORIZATION] = proxy_authorization
        return httpx.Proxy(url=self.proxy, headers=proxy_headers)


def compose_request(
    options: CallOptions,
    destination: Destination,
    *,
    proxy: str | None,
    proxy_token: str | None,
    scc_location_header: str,
) -> ComposedRequest:
    headers: dict[str, str] = {}

    auth_token = destination.primary_auth_token
    if auth_token is not None:
        headers["Authorization"] = auth_token.header_value
    if options.scc_name:
        headers[scc_location_header] = options.scc_name
    if proxy is not None:
        headers[PROXY_AUTHORIZATION] = f"Bearer {proxy_token}"

    request = ComposedRequest(
        method=options.http_verb.method,
        url=f"{destination.url}{options.url}",
        headers=headers,
        proxy=proxy,
        binary=options.binary,
        full_response=options.full_response,
        tech_error_only=options.tech_error_only,
    )

    verb = options.http_verb
    match verb:
        case HttpVerb.GET | HttpVerb.HEAD:
            headers["Content-type"] = options.content_type
        case HttpVerb.OPTIONS | HttpVerb.DELETE:
            pass
        case HttpVerb.POST | HttpVerb.PUT | HttpVerb.PATCH:
            headers["Content-type"] = options.content_type
            request.json_body = options.payload
            request.json_encoded = True
        case HttpVerb.POST_FORM:
            request.form = dict(options.form_data or {})
        case _:
            assert_never(verb)

    return request


async def send_composed_request(
    request: ComposedRequest,
    client_factory: ClientFactory,
) -> CallResult:
    started = time.perf_counter()
    async with client_factory(request.proxy_config()) as client:
        try:
            response = await client.request(
                request.method,
                request.url,
                headers=request.origin_headers(),
                json=request.json_body,
                data=request.form,
                follow_redirects=request.method in REDIRECTABLE_METHODS,
            )
        except httpx.RequestError as exc:
            raise RequestError(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc

    logger.info(
        "destination_request_done method=%s url=%s status=%d latency_ms=%.2f",
        request.method,
        request.url,
        response.status_code,
        (time.perf_counter() - started) * 1000.0,
    )

    envelope = FullResponse(
        status_code=response.status_code,
        headers=dict(response.headers.items()),
        body=_decode_body(response, request),
    )
    if not envelope.is_success and not request.tech_error_only:
        raise RequestError(
            f"{request.method} {request.url} answered with status {response.status_code}.",
            status_code=response.status_code,
            response=envelope,
        )

    if request.full_response:
        return envelope
    return envelope.body


def _decode_body(response: httpx.Response, request: ComposedRequest) -> ResponseBody:
    if request.binary:
        return response.content
    if request.json_encoded and response.content:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text
