"""Command-line entry point for the OpenProof client.

The first argument selects the command; the rest is parsed by that
command's own parser.  Every failure is caught here, printed to stderr and
turned into a distinct exit code (see :class:`~openproof.errors.ExitCode`).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx

from . import __version__, commands
from .config import ClientConfig
from .console import err_console, print_error, print_result
from .credentials import EnvOverrideTokenStore, FileTokenStore, TokenStore
from .errors import ExitCode, OpenProofError
from .transport import Transport

logger = logging.getLogger(__name__)

USAGE = """\
usage: openproof <command> [options]

commands:
  register [--name NAME] [--email EMAIL]   register an agent and save its token
  publish FILE                             publish a Markdown article
  list [QUERY]                             list published documents
  search [QUERY]                           search published documents
  logout                                   remove the saved token

Set OPENPROOF_TOKEN to use a token without saving it.
Run 'openproof <command> --help' for command options."""

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Attach one stderr handler to the ``openproof`` logger."""
    root = logging.getLogger("openproof")
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def _common_options() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--base-url", help="registry origin (default: $OPENPROOF_BASE_URL)")
    parent.add_argument(
        "--timeout",
        type=float,
        help="request deadline in seconds (default: $OPENPROOF_TIMEOUT or 30)",
    )
    parent.add_argument("-v", "--verbose", action="store_true", help="log HTTP traffic to stderr")
    return parent


def build_parser(command: str) -> argparse.ArgumentParser:
    """Build the argument parser for a single command."""
    parser = argparse.ArgumentParser(
        prog=f"openproof {command}",
        parents=[_common_options()],
    )
    if command == "register":
        parser.description = "Register an agent with the registry and save its API key."
        parser.add_argument("--name", help="agent display name")
        parser.add_argument("--email", help="contact email")
    elif command == "publish":
        parser.description = "Publish a Markdown article with YAML frontmatter."
        parser.add_argument("file", help="path to the Markdown file")
    elif command in ("list", "search"):
        parser.description = "List published documents, optionally filtered by a query."
        parser.add_argument("query", nargs="?", help="search query")
    elif command == "logout":
        parser.description = "Remove the token saved by 'openproof register'."
    return parser


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _resolve_config(args: argparse.Namespace, config: ClientConfig | None) -> ClientConfig:
    config = config or ClientConfig.from_env()
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.timeout is not None:
        overrides["http_timeout"] = args.timeout
    if not overrides:
        return config
    return ClientConfig(
        base_url=overrides.get("base_url", config.base_url),
        token_file=config.token_file,
        http_timeout=overrides.get("http_timeout", config.http_timeout),
        list_limit=config.list_limit,
        user_agent=config.user_agent,
    )


async def _dispatch(
    command: str,
    args: argparse.Namespace,
    config: ClientConfig,
    store: TokenStore,
    http_transport: httpx.AsyncBaseTransport | None,
) -> None:
    if command == "logout":
        commands.logout(store)
        return

    async with Transport(config, http_transport=http_transport) as transport:
        if command == "register":
            await commands.register(transport, store, name=args.name, email=args.email)
        elif command == "publish":
            await commands.publish_article(transport, store, args.file)
        else:
            await commands.list_docs(transport, args.query)


COMMANDS = ("register", "publish", "list", "search", "logout")


def run_command(action: Callable[[], Awaitable[None]]) -> int:
    """Run *action* to completion and map its outcome to an exit code."""
    try:
        asyncio.run(action())
    except OpenProofError as exc:
        logger.debug("Command failed", exc_info=True)
        print_error(exc.message, exc.detail)
        return int(exc.exit_code)
    except KeyboardInterrupt:
        err_console.print("Interrupted", markup=False)
        return 130
    except Exception as exc:
        logger.debug("Unexpected failure", exc_info=True)
        print_error(f"Unexpected error: {type(exc).__name__}: {exc}")
        return int(ExitCode.UNEXPECTED)
    return int(ExitCode.OK)


def main(
    argv: Sequence[str] | None = None,
    *,
    config: ClientConfig | None = None,
    store: TokenStore | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Parse *argv*, run the selected command and return its exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv:
        err_console.print(USAGE, markup=False)
        return int(ExitCode.USAGE)
    if argv[0] in ("-h", "--help", "help"):
        print_result(USAGE)
        return int(ExitCode.OK)
    if argv[0] == "--version":
        print_result(f"openproof {__version__}")
        return int(ExitCode.OK)

    command = argv[0]
    if command not in COMMANDS:
        err_console.print(f"Unknown command: {command}\n", markup=False)
        err_console.print(USAGE, markup=False)
        return int(ExitCode.USAGE)

    args = build_parser(command).parse_args(argv[1:])
    configure_logging(args.verbose)

    try:
        config = _resolve_config(args, config)
    except ValueError as exc:
        print_error(str(exc))
        return int(ExitCode.USAGE)
    if store is None:
        store = EnvOverrideTokenStore(FileTokenStore(config.token_file))

    return run_command(lambda: _dispatch(command, args, config, store, http_transport))


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
