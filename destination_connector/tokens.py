from __future__ import annotations

import logging
from urllib.parse import parse_qsl

import httpx

from destination_connector.errors import AuthError

TOKEN_PATH = "oauth/token"

logger = logging.getLogger(__name__)


def token_url_for(auth_server_url: str) -> str:
    return f"{auth_server_url.rstrip('/')}/{TOKEN_PATH}"


async def acquire_client_credentials_token(
    client: httpx.AsyncClient,
    *,
    client_id: str,
    client_secret: str,
    auth_server_url: str,
) -> str:
    token_url = token_url_for(auth_server_url)
    payload = {
        "grant_type": "client_credentials",
        "client_id": client_id,
        "client_secret": client_secret,
    }
    try:
        response = await client.post(
            token_url,
            data=payload,
            headers={"Accept": "application/json"},
        )
    except httpx.RequestError as exc:
        raise AuthError(
            f"Token request to '{token_url}' failed: {exc}",
            token_url=token_url,
        ) from exc

    if not response.is_success:
        raise AuthError(
            f"Token endpoint '{token_url}' answered with status {response.status_code}.",
            token_url=token_url,
            status_code=response.status_code,
        )

    body = _parse_token_body(response)
    if body is None:
        raise AuthError(
            f"Token endpoint '{token_url}' returned an unreadable body.",
            token_url=token_url,
            status_code=response.status_code,
        )

    raw_access = body.get("access_token")
    access_token = str(raw_access).strip() if raw_access is not None else ""
    if not access_token:
        raise AuthError(
            f"Token endpoint '{token_url}' returned no access_token.",
            token_url=token_url,
            status_code=response.status_code,
        )

    logger.debug(
        "oauth_token_acquired token_url=%s client_id=%s", token_url, client_id
    )
    return access_token


def _parse_token_body(response: httpx.Response) -> dict[str, object] | None:
    try:
        body = response.json()
    except ValueError:
        # Some authorization servers answer form-encoded.
        pairs = parse_qsl(response.text, keep_blank_values=True)
        return dict(pairs) if pairs else None
    if isinstance(body, dict):
        return body
    return None
