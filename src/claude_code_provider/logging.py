"""Rich-based logging configuration for the Claude Code provider.

Provides colored console output for local development with:
- Color-coded log levels (ERROR=red, WARNING=yellow, INFO=green, DEBUG=blue)
- Log messages rendered verbatim (CLI output routinely contains square brackets)
- Auto-detection of TTY for production safety
"""

from __future__ import annotations

import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

PROVIDER_THEME = Theme({
    "logging.level.debug": "blue",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "red bold",
    "logging.level.critical": "red bold reverse",
})


def is_tty() -> bool:
    """Check if stdout is a TTY (interactive terminal)."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def should_use_rich() -> bool:
    """Determine if Rich logging should be used.

    Returns True if:
    - CLAUDE_CODE_RICH_LOGS=1 is set (force enable)
    - Running in a TTY and CLAUDE_CODE_RICH_LOGS is not explicitly disabled
    """
    env_value = os.environ.get("CLAUDE_CODE_RICH_LOGS", "").lower()

    if env_value in ("1", "true", "yes"):
        return True
    if env_value in ("0", "false", "no"):
        return False

    return is_tty()


def configure_logging(
    level: int = logging.INFO,
    force_rich: bool | None = None,
) -> logging.Handler:
    """Configure logging with a Rich console handler.

    Args:
        level: Logging level (default: INFO)
        force_rich: Override auto-detection. None = auto-detect.

    Returns:
        The handler installed on the root logger.
    """
    use_rich = force_rich if force_rich is not None else should_use_rich()

    root = logging.getLogger()
    root.handlers.clear()

    handler: logging.Handler
    if use_rich:
        console = Console(theme=PROVIDER_THEME, stderr=True)
        handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            # Messages carry raw CLI stdout/stderr; never parse them as markup
            markup=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.addHandler(handler)
    root.setLevel(level)

    # asyncio logs every subprocess transport at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return handler

