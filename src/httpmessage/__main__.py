"""
=============================================================================
HTTPMESSAGE CLI ENTRY POINT
=============================================================================

Inspect URIs and preview the wire form of requests and responses.

=============================================================================
USAGE
=============================================================================

    # Break a URL into its components
    python -m httpmessage uri "https://user@example.com:8443/a?b=c#d"
    python -m httpmessage uri "https://example.com/a" --json

    # Render a request
    python -m httpmessage request POST https://api.example.com/users \\
        -H "Content-Type: application/json" --body '{"name": "Ada"}'

    # Render a response with a cookie
    python -m httpmessage response 404 -H "Content-Type: text/plain" \\
        --body "Not here" --cookie sid=abc

Invalid input (bad method, status code, URL, header) is reported on
stderr with exit status 2.

=============================================================================
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from . import __version__
from .config import get_config, set_config
from .core.stream import Stream
from .errors import HTTPMessageError
from .http.request import ALLOWED_METHODS, Request
from .http.response import Response
from .http.uri import Uri
from .logging import configure_logging


logger = logging.getLogger(__name__)


def _parse_header(raw: str) -> Tuple[str, str]:
    name, colon, value = raw.partition(":")
    if not colon or not name.strip():
        raise argparse.ArgumentTypeError(f"Invalid header {raw!r}, expected 'Name: value'")
    return name.strip(), value


def _parse_cookie(raw: str) -> Tuple[str, str]:
    name, _, value = raw.partition("=")
    return name, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpmessage",
        description="Inspect URIs and render HTTP requests and responses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpmessage uri https://example.com/a?b=c
  python -m httpmessage request GET http://localhost:8080/health
  python -m httpmessage response 201 --body created
        """,
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from HTTPMESSAGE_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpmessage {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # ─────────────────────────────────────────────────────────────────────
    # uri
    # ─────────────────────────────────────────────────────────────────────

    uri_cmd = commands.add_parser("uri", help="Show the components of a URL")
    uri_cmd.add_argument("url")
    uri_cmd.add_argument("--json", action="store_true", help="Print components as JSON")

    # ─────────────────────────────────────────────────────────────────────
    # request / response
    # ─────────────────────────────────────────────────────────────────────

    message_args = argparse.ArgumentParser(add_help=False)
    message_args.add_argument(
        "--header", "-H",
        dest="headers",
        action="append",
        type=_parse_header,
        default=[],
        help="Header as 'Name: value' (repeatable)",
    )
    message_args.add_argument("--body", "-d", default="", help="Message body")
    message_args.add_argument("--protocol", default=None, help="Protocol version (default: 1.1)")

    request_cmd = commands.add_parser(
        "request", parents=[message_args], help="Render an HTTP request"
    )
    request_cmd.add_argument("method", help=f"One of {', '.join(ALLOWED_METHODS)}")
    request_cmd.add_argument("url")

    response_cmd = commands.add_parser(
        "response", parents=[message_args], help="Render an HTTP response"
    )
    response_cmd.add_argument("status", type=int)
    response_cmd.add_argument("--reason", default="", help="Custom reason phrase")
    response_cmd.add_argument(
        "--cookie",
        dest="cookies",
        action="append",
        type=_parse_cookie,
        default=[],
        help="Cookie as NAME=VALUE (repeatable)",
    )

    return parser


def _run_uri(args: argparse.Namespace) -> str:
    uri = Uri(args.url)
    components = uri.components()
    if args.json:
        return json.dumps(components, indent=2)
    return "\n".join(f"{name:<10} {'' if value is None else value}" for name, value in components.items())


def _collect_headers(pairs: List[Tuple[str, str]]) -> Dict[str, List[str]]:
    headers: Dict[str, List[str]] = {}
    for name, value in pairs:
        headers.setdefault(name, []).append(value)
    return headers


def _run_request(args: argparse.Namespace) -> str:
    # An explicit Host header wins over the one derived from the URL
    request = Request(
        args.method,
        Uri(args.url),
        headers=_collect_headers(args.headers),
        protocol_version=args.protocol,
    )
    if args.body:
        request = request.with_body(Stream.create(args.body))
    return str(request)


def _run_response(args: argparse.Namespace) -> str:
    response = Response(
        args.status,
        args.reason,
        headers=_collect_headers(args.headers),
        protocol_version=args.protocol,
    )
    for name, value in args.cookies:
        response = response.with_cookie(name, value)
    if args.body:
        response = response.with_body(Stream.create(args.body))
    return str(response)


COMMANDS = {
    "uri": _run_uri,
    "request": _run_request,
    "response": _run_response,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Returns:
        Process exit status: 0 on success, 2 on invalid input.
    """
    args = build_parser().parse_args(argv)

    if args.log_level:
        set_config(replace(get_config(), log_level=args.log_level))
    configure_logging()

    try:
        output = COMMANDS[args.command](args)
    except HTTPMessageError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
