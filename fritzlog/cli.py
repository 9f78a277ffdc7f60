"""Command line interface."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from . import __version__, async_run
from .const import DOMAIN, SECTION_BASE
from .dispatcher import BackendDispatcher, register_backends
from .exceptions import FritzLogError, format_error_chain
from .settings import ConfigStore

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=DOMAIN,
        description="Log temperature and energy readings of a home automation gateway",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser(
        "run", help="Run the daemon that collects data in foreground"
    )
    run.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        required=True,
        help="Path to the configuration file.",
    )

    subparsers.add_parser(
        "defconfig", help="Output a complete config containing all default values"
    )
    return parser


def print_errors(error: BaseException, stream: TextIO | None = None) -> None:
    print(format_error_chain(error), file=stream or sys.stderr)


def command_run(config_path: str) -> None:
    store = ConfigStore()
    register_backends(store)
    store.load(config_path)
    settings = store.get(SECTION_BASE)
    dispatcher = BackendDispatcher.from_config(store, settings.backends)
    try:
        asyncio.run(async_run(settings, dispatcher))
    finally:
        dispatcher.close()


def command_defconfig(stream: TextIO | None = None) -> None:
    store = ConfigStore()
    register_backends(store)
    (stream or sys.stdout).write(store.render_defaults())


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    try:
        if args.command == "run":
            command_run(args.config)
        else:
            command_defconfig()
    except FritzLogError as err:
        print_errors(err)
        return 1
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted, shutting down")
    return 0
