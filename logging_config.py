import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"


def resolve_level(level: str | None = None) -> str:
    """Return a known level name, falling back to WARNING for anything unrecognised."""
    name = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LEVEL).strip().upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return DEFAULT_LEVEL


def setup_logging(level: str | None = None) -> None:
    """Route all log records to stderr through rich; stdout stays reserved for results."""
    logging.basicConfig(
        level=resolve_level(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # botocore is chatty at DEBUG; keep it to warnings unless asked explicitly
    logging.getLogger("botocore").setLevel(logging.WARNING)
