from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from destination_connector.errors import DestinationLookupError
from destination_connector.models import Destination

logger = logging.getLogger(__name__)


async def fetch_destination(
    client: httpx.AsyncClient,
    *,
    name: str,
    destination_api_url: str,
    bearer_token: str,
) -> Destination:
    lookup_url = f"{destination_api_url}/{name}"
    try:
        response = await client.get(
            lookup_url,
            headers={"Authorization": f"Bearer {bearer_token}"},
        )
    except httpx.RequestError as exc:
        raise DestinationLookupError(
            f"Destination lookup for '{name}' failed: {exc}",
            destination_name=name,
        ) from exc

    if not response.is_success:
        raise DestinationLookupError(
            f"Destination lookup for '{name}' answered with status {response.status_code}.",
            destination_name=name,
            status_code=response.status_code,
        )

    try:
        document = response.json()
    except ValueError as exc:
        raise DestinationLookupError(
            f"Destination lookup for '{name}' returned a non-JSON body.",
            destination_name=name,
            status_code=response.status_code,
        ) from exc

    try:
        destination = Destination.model_validate(document)
    except PydanticValidationError as exc:
        raise DestinationLookupError(
            f"Destination lookup for '{name}' returned an invalid destination document.",
            destination_name=name,
            status_code=response.status_code,
        ) from exc

    logger.debug(
        "destination_resolved destination=%s url=%s auth_tokens=%d",
        name,
        destination.url,
        len(destination.auth_tokens),
    )
    return destination
