"""Inspector MCP CLI.

This module provides:
- Serving MCP over stdio (the default when launched by an MCP client)
- A one-shot tool call that prints the JSON result

Example:
    # Serve MCP over stdio
    inspector-mcp serve

    # Call a tool once
    GRIDINSOFT_API_KEY=... inspector-mcp call inspect_domain domain=example.com

    # Pass arguments as JSON
    inspector-mcp call scan_url --json '{"url": "https://example.com"}'
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, NoReturn

from inspector_mcp import __version__
from inspector_mcp.config import API_KEY_ENV, Settings, load_settings
from inspector_mcp.errors import ConfigurationError
from inspector_mcp.observability import configure_logging
from inspector_mcp.server.mcp_server import serve
from inspector_mcp.server.router import Router

logger = logging.getLogger(__name__)

PROG = "inspector-mcp"

INTERACTIVE_GUIDANCE = f"""\
{PROG} is an MCP server and expects an MCP client on stdin.

Add it to your MCP client configuration, for example:

  {{
    "mcpServers": {{
      "gridinsoft-inspector": {{
        "command": "{PROG}",
        "env": {{"{API_KEY_ENV}": "<your API key>"}}
      }}
    }}
  }}

Run '{PROG} --help' for other commands.
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_tool_arguments(pairs: list[str], raw_json: str | None = None) -> dict[str, Any]:
    """Build tool arguments from --json and key=value pairs.

    Values are decoded as JSON when possible (numbers, booleans, objects),
    otherwise kept as strings. Pairs override keys from --json.

    Raises:
        ValueError: If a pair has no '=' or --json is not a JSON object
    """
    arguments: dict[str, Any] = {}

    if raw_json:
        try:
            decoded = json.loads(raw_json)
        except json.JSONDecodeError as e:
            msg = f"--json is not valid JSON: {e}"
            raise ValueError(msg) from e
        if not isinstance(decoded, dict):
            msg = "--json must be a JSON object"
            raise ValueError(msg)
        arguments.update(decoded)

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Invalid argument '{pair}', expected key=value"
            raise ValueError(msg)
        try:
            arguments[key] = json.loads(value)
        except json.JSONDecodeError:
            arguments[key] = value

    return arguments


async def _call_tool(settings: Settings, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    router = Router(settings)
    async with router.client:
        result = await router.call_tool(name, arguments)
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


def cmd_call(args: argparse.Namespace) -> int:
    """Run a single tool call and print the result.

    Args:
        args: Parsed command-line arguments with 'tool', 'pairs' and 'json'

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        arguments = parse_tool_arguments(args.pairs, args.json)
        settings = load_settings()
    except (ValueError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level, settings.log_format)

    if not settings.has_credential:
        print(settings.missing_credential_message(), file=sys.stderr)
        return 1

    try:
        result = asyncio.run(_call_tool(settings, args.tool, arguments))
    except Exception as e:
        logger.exception("Tool call failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 1 if result.get("isError") else 0


def cmd_serve(args: argparse.Namespace) -> int:
    serve()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description="MCP server for the GridinSoft Inspector API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Serve MCP over stdio (what MCP clients run)
  {PROG} serve

  # One-shot tool call
  {API_KEY_ENV}=... {PROG} call inspect_domain domain=example.com

Environment:
  {API_KEY_ENV}   API key from https://inspector.gridinsoft.com/profile
        """,
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"gridinsoft-inspector {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", parser_class=_ArgumentParser)

    serve_parser = subparsers.add_parser("serve", help="Serve MCP over stdio")
    serve_parser.set_defaults(func=cmd_serve)

    call_parser = subparsers.add_parser("call", help="Call a tool once and print the result")
    call_parser.add_argument("tool", help="Tool name, e.g. inspect_domain")
    call_parser.add_argument(
        "pairs",
        nargs="*",
        metavar="key=value",
        help="Tool arguments; values are parsed as JSON when possible",
    )
    call_parser.add_argument(
        "--json",
        default=None,
        metavar="OBJECT",
        help="Tool arguments as a JSON object",
    )
    call_parser.set_defaults(func=cmd_call)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Without a command, serves MCP when stdin is a pipe and prints guidance
    when stdin is an interactive terminal.

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        if sys.stdin.isatty():
            print(INTERACTIVE_GUIDANCE, file=sys.stderr)
            return 1
        return cmd_serve(args)

    return args.func(args)


def run() -> None:  # pragma: no cover - console script
    sys.exit(main())


if __name__ == "__main__":
    run()
