from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from destination_connector.errors import ServiceBindingError
from destination_connector.settings import Settings


class ServiceCredentials(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    client_id: str = Field(default="", alias="clientid")
    client_secret: str = Field(default="", alias="clientsecret")
    url: str | None = None
    uri: str | None = None
    proxy_host: str | None = Field(default=None, alias="onpremise_proxy_host")
    proxy_port: int | None = Field(default=None, alias="onpremise_proxy_port")


@dataclass(slots=True, frozen=True)
class ResolvedBindings:
    connectivity: ServiceCredentials
    uaa: ServiceCredentials
    destination: ServiceCredentials
    destination_api_path: str

    @property
    def auth_server_url(self) -> str:
        return _require(self.uaa.url, "url", "uaa")

    @property
    def destination_api_url(self) -> str:
        base = _require(self.destination.uri, "uri", "destination")
        return f"{base}{self.destination_api_path}"

    @property
    def proxy_url(self) -> str:
        host = _require(self.connectivity.proxy_host, "onpremise_proxy_host", "connectivity")
        if self.connectivity.proxy_port is None:
            raise ServiceBindingError(
                "connectivity binding is missing 'onpremise_proxy_port'."
            )
        return f"http://{host}:{self.connectivity.proxy_port}"


class ServiceBindingResolver:
    def __init__(self, services: dict[str, Any] | None) -> None:
        self._services = services

    @classmethod
    def from_settings(cls, settings: Settings) -> ServiceBindingResolver:
        raw = (settings.vcap_services or "").strip()
        if not raw:
            return cls(None)
        try:
            services = json.loads(raw)
        except ValueError as exc:
            raise ServiceBindingError("VCAP_SERVICES is not valid JSON.") from exc
        if not isinstance(services, dict):
            raise ServiceBindingError("VCAP_SERVICES must be a JSON object.")
        return cls(services)

    def resolve(self, name: str | None) -> ServiceCredentials:
        if not name:
            raise ServiceBindingError("A service instance name is required.")
        if self._services is None:
            raise ServiceBindingError(
                f"Cannot resolve service instance '{name}': VCAP_SERVICES is not set.",
                instance_name=name,
            )

        for instances in self._services.values():
            if not isinstance(instances, list):
                continue
            for instance in instances:
                if not isinstance(instance, dict) or instance.get("name") != name:
                    continue
                credentials = instance.get("credentials") or {}
                try:
                    return ServiceCredentials.model_validate(credentials)
                except PydanticValidationError as exc:
                    raise ServiceBindingError(
                        f"Service instance '{name}' has malformed credentials.",
                        instance_name=name,
                    ) from exc

        raise ServiceBindingError(
            f"Service instance '{name}' is not bound to this application.",
            instance_name=name,
        )


def _require(value: str | None, field_name: str, binding: str) -> str:
    if not value:
        raise ServiceBindingError(f"{binding} binding is missing '{field_name}'.")
    return value.rstrip("/")
