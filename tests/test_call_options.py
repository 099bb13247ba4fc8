from __future__ import annotations

import pytest

from destination_connector.errors import ValidationError
from destination_connector.models import DEFAULT_CONTENT_TYPE, CallOptions, HttpVerb
from destination_connector.validation import parse_call_options


def _options(**overrides):
    options = {"url": "/builds/1", "destination_name": "http://backend", "http_verb": "GET"}
    options.update(overrides)
    return options


@pytest.mark.parametrize("verb", ["BLA", "get", "TRACE", "", None, 42])
def test_rejects_unsupported_verbs(verb) -> None:
    with pytest.raises(ValidationError, match="Unsupported http_verb"):
        parse_call_options(_options(http_verb=verb))


def test_rejects_empty_options() -> None:
    with pytest.raises(ValidationError):
        parse_call_options({})


def test_rejects_form_data_without_form_verb() -> None:
    with pytest.raises(ValidationError, match="POST_FORM"):
        parse_call_options(_options(http_verb="POST", form_data={"key": "value"}))


def test_rejects_form_verb_without_form_data() -> None:
    with pytest.raises(ValidationError, match="requires form_data"):
        parse_call_options(_options(http_verb="POST_FORM"))


def test_rejects_missing_url() -> None:
    options = _options()
    del options["url"]
    with pytest.raises(ValidationError, match="url"):
        parse_call_options(options)


def test_rejects_unknown_option_keys() -> None:
    with pytest.raises(ValidationError, match="proxy_type"):
        parse_call_options(_options(proxy_type="OnPremise"))


def test_applies_defaults() -> None:
    options = parse_call_options(_options())
    assert options.http_verb is HttpVerb.GET
    assert options.content_type == DEFAULT_CONTENT_TYPE
    assert options.full_response is False
    assert options.tech_error_only is False
    assert options.binary is False
    assert options.payload is None
    assert options.scc_name is None


def test_accepts_form_submission() -> None:
    options = parse_call_options(_options(http_verb="POST_FORM", form_data={"a": "1"}))
    assert options.http_verb is HttpVerb.POST_FORM
    assert options.http_verb.method == "POST"
    assert options.form_data == {"a": "1"}


def test_passes_through_parsed_options() -> None:
    options = CallOptions(url="/x", destination_name="d", http_verb=HttpVerb.DELETE)
    assert parse_call_options(options) is options


def test_rejects_form_data_combined_with_payload() -> None:
    with pytest.raises(ValidationError, match="mutually exclusive"):
        parse_call_options(
            _options(http_verb="POST_FORM", form_data={"a": "1"}, payload={"b": 2})
        )
