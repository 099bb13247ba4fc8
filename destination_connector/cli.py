from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from destination_connector.connector import call_destination
from destination_connector.errors import ConnectorError
from destination_connector.models import FullResponse, HttpVerb
from destination_connector.settings import Settings


def load_options_file(path: str | Path) -> dict[str, Any]:
    resolved = Path(path)
    with resolved.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"Expected YAML object in '{resolved}'.")
    return payload


def _parse_form_fields(values: list[str] | None) -> dict[str, str] | None:
    if not values:
        return None
    form: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Form field must look like KEY=VALUE, got '{item}'.")
        form[key.strip()] = value
    return form


def build_call_options(args: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if args.options_file:
        options.update(load_options_file(args.options_file))

    overrides: dict[str, Any] = {
        "url": args.url,
        "destination_name": args.destination_name,
        "http_verb": args.verb,
        "connectivity_instance": args.connectivity_instance,
        "uaa_instance": args.uaa_instance,
        "destination_instance": args.destination_instance,
        "content_type": args.content_type,
        "scc_name": args.scc_name,
        "form_data": _parse_form_fields(args.form),
    }
    if args.payload is not None:
        overrides["payload"] = json.loads(args.payload)
    for flag in ("full_response", "tech_error_only", "binary"):
        if getattr(args, flag):
            overrides[flag] = True

    options.update({key: value for key, value in overrides.items() if value is not None})
    return options


def render_result(result: Any, *, output_path: str | None) -> None:
    body = result.body if isinstance(result, FullResponse) else result
    if isinstance(body, bytes):
        if not output_path:
            raise ValueError("Binary responses need --output.")
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)
        if isinstance(result, FullResponse):
            envelope = result.to_dict()
            envelope["body"] = f"<{len(body)} bytes written to {output_path}>"
            sys.stdout.write(yaml.safe_dump(envelope, sort_keys=False).rstrip() + "\n")
        return

    if isinstance(result, FullResponse):
        rendered = yaml.safe_dump(result.to_dict(), sort_keys=False).rstrip()
    elif isinstance(result, (dict, list)):
        rendered = json.dumps(result, indent=2, ensure_ascii=False)
    else:
        rendered = "" if result is None else str(result)

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rendered + "\n", encoding="utf-8")
    else:
        sys.stdout.write(rendered + "\n")


def cmd_call(args: argparse.Namespace) -> int:
    options = build_call_options(args)
    settings = Settings(connector_local_mode=True) if args.local else None
    try:
        result = asyncio.run(call_destination(options, settings=settings))
    except ConnectorError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    render_result(result, output_path=args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="destination-connector",
        description="Call on-premise resources through platform destinations.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    call_cmd = subparsers.add_parser(
        "call", help="Send one request to a resource behind a destination."
    )
    call_cmd.add_argument(
        "--options-file",
        help="YAML file with call options; command line flags take precedence.",
    )
    call_cmd.add_argument("--url", help="Path to call, including the leading slash.")
    call_cmd.add_argument("--destination-name")
    call_cmd.add_argument(
        "--verb",
        choices=[verb.value for verb in HttpVerb],
        help="HTTP verb; POST_FORM submits --form fields form-encoded.",
    )
    call_cmd.add_argument("--connectivity-instance")
    call_cmd.add_argument("--uaa-instance")
    call_cmd.add_argument("--destination-instance")
    call_cmd.add_argument("--payload", help="JSON request body.")
    call_cmd.add_argument(
        "--form", action="append", metavar="KEY=VALUE", help="Form field (repeatable)."
    )
    call_cmd.add_argument("--content-type")
    call_cmd.add_argument("--scc-name", help="Cloud connector location id.")
    call_cmd.add_argument("--full-response", action="store_true")
    call_cmd.add_argument("--tech-error-only", action="store_true")
    call_cmd.add_argument("--binary", action="store_true")
    call_cmd.add_argument("--output", help="Write the response body to this file.")
    call_cmd.add_argument(
        "--local",
        action="store_true",
        help="Force local mode (mock tokens, destination name used as URL).",
    )
    call_cmd.set_defaults(handler=cmd_call)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        return int(args.handler(args))
    except (OSError, ValueError) as exc:
        parser.exit(2, f"error: {exc}\n")


if __name__ == "__main__":
    raise SystemExit(main())
