from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_CONTENT_TYPE = "application/json"


class HttpVerb(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    POST = "POST"
    POST_FORM = "POST_FORM"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def method(self) -> str:
        if self is HttpVerb.POST_FORM:
            return "POST"
        return self.value


class AuthToken(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    value: str

    @property
    def header_value(self) -> str:
        return f"{self.type} {self.value}"


class DestinationConfiguration(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str = Field(alias="URL")


class Destination(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    destination_configuration: DestinationConfiguration = Field(
        alias="destinationConfiguration"
    )
    auth_tokens: list[AuthToken] = Field(default_factory=list, alias="authTokens")

    @classmethod
    def for_url(cls, url: str) -> Destination:
        return cls.model_validate({"destinationConfiguration": {"URL": url}})

    @property
    def url(self) -> str:
        return self.destination_configuration.url

    @property
    def primary_auth_token(self) -> AuthToken | None:
        if not self.auth_tokens:
            return None
        return self.auth_tokens[0]

    def as_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class CallOptions(BaseModel):
    """Caller-facing description of one request to a destination."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    destination_name: str
    http_verb: HttpVerb
    connectivity_instance: str | None = None
    uaa_instance: str | None = None
    destination_instance: str | None = None
    payload: Any = None
    form_data: dict[str, Any] | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    full_response: bool = False
    tech_error_only: bool = False
    binary: bool = False
    scc_name: str | None = None

    @model_validator(mode="after")
    def _check_form_submission(self) -> CallOptions:
        if self.form_data is not None and self.http_verb is not HttpVerb.POST_FORM:
            raise ValueError(
                f"form_data requires http_verb '{HttpVerb.POST_FORM.value}', "
                f"got '{self.http_verb.value}'"
            )
        if self.http_verb is HttpVerb.POST_FORM and self.form_data is None:
            raise ValueError(f"http_verb '{HttpVerb.POST_FORM.value}' requires form_data")
        if self.form_data is not None and self.payload is not None:
            raise ValueError("form_data and payload are mutually exclusive")
        return self


@dataclass(slots=True)
class FullResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }


ResponseBody = str | bytes | dict[str, Any] | list[Any] | None
CallResult = ResponseBody | FullResponse
