from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from destination_connector.errors import ValidationError
from destination_connector.models import CallOptions, HttpVerb

SUPPORTED_VERBS = tuple(verb.value for verb in HttpVerb)


def parse_call_options(options: CallOptions | Mapping[str, Any]) -> CallOptions:
    if isinstance(options, CallOptions):
        return options
    if not isinstance(options, Mapping):
        raise ValidationError(
            f"Call options must be a mapping, got {type(options).__name__}."
        )

    verb = options.get("http_verb")
    if verb not in SUPPORTED_VERBS:
        raise ValidationError(
            f"Unsupported http_verb {verb!r}. Expected one of: {', '.join(SUPPORTED_VERBS)}."
        )

    try:
        return CallOptions.model_validate(dict(options))
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc


def _format_errors(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = str(error.get("msg", "invalid value"))
        messages.append(f"{location}: {message}" if location else message)
    return "Invalid call options: " + "; ".join(messages)
