from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from destination_connector.models import FullResponse


class ConnectorError(Exception):
    """Base class for every failure raised while calling a destination."""


class ValidationError(ConnectorError):
    """Raised before any network I/O when the call options are not acceptable."""


class ServiceBindingError(ConnectorError):
    """Raised when a named service instance cannot be found in the bindings."""

    def __init__(self, message: str, *, instance_name: str | None = None) -> None:
        super().__init__(message)
        self.instance_name = instance_name


class AuthError(ConnectorError):
    """Raised when the client-credentials grant fails."""

    def __init__(
        self,
        message: str,
        *,
        token_url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.token_url = token_url
        self.status_code = status_code


class DestinationLookupError(ConnectorError):
    def __init__(
        self,
        message: str,
        *,
        destination_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.destination_name = destination_name
        self.status_code = status_code


class RequestError(ConnectorError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response: FullResponse | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


def error_details(exc: BaseException) -> dict[str, Any]:
    error_repr = repr(exc)
    details: dict[str, Any] = {
        "error": str(exc).strip() or error_repr,
        "error_type": exc.__class__.__name__,
        "error_repr": error_repr,
        "status_code": getattr(exc, "status_code", None),
    }
    for attribute in ("token_url", "destination_name", "instance_name"):
        value = getattr(exc, attribute, None)
        if value is not None:
            details[attribute] = value
    cause = exc.__cause__
    if cause is not None:
        details["cause_type"] = cause.__class__.__name__
        details["cause"] = str(cause).strip() or repr(cause)
    return details
