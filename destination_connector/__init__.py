from destination_connector.connector import DestinationConnector, call_destination
from destination_connector.errors import (
    AuthError,
    ConnectorError,
    DestinationLookupError,
    RequestError,
    ServiceBindingError,
    ValidationError,
)
from destination_connector.models import CallOptions, Destination, FullResponse, HttpVerb
from destination_connector.settings import Settings

__all__ = [
    "AuthError",
    "CallOptions",
    "ConnectorError",
    "Destination",
    "DestinationConnector",
    "DestinationLookupError",
    "FullResponse",
    "HttpVerb",
    "RequestError",
    "ServiceBindingError",
    "Settings",
    "ValidationError",
    "call_destination",
]
