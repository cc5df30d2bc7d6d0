import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape

from config import load_config, require_valid_config
from logging_config import setup_logging
from redirects.errors import RedirectorError
from redirects.link_provider import LinkProvider
from redirects.s3_link_allocator import S3LinkAllocator
from storage.s3_client import S3Client

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3redirect",
        description="Allocate short S3 redirect links for lookup keys",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Print the short identifier for KEY, creating it if needed")
    get_parser.add_argument("key", help="Lookup key to redirect")
    return parser


def build_provider(config: dict) -> LinkProvider:
    client = S3Client(config)
    return S3LinkAllocator.from_config(client, config)


def get(key: str) -> str:
    config = require_valid_config(load_config())
    return build_provider(config).allocate(key)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    if not args.key:
        err_console.print("[red]Key cannot be empty.[/red]")
        return 1

    try:
        identifier = get(args.key)
    except RedirectorError as e:
        logger.debug("Allocation failed", exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        return 1

    console.print(identifier, markup=False, highlight=False, soft_wrap=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
