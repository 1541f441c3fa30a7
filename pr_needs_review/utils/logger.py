"""
Logger structuré — PR Needs Review.

Configure un logging coloré (via Rich) pour le namespace pr_needs_review.
Le mode verbose abaisse le niveau à DEBUG.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from pr_needs_review.config import get_settings


_configured = False


def setup_logging(level: str | None = None) -> None:
    """Configure le logging global une seule fois."""
    global _configured
    if _configured:
        return
    _configured = True

    level_name = level or get_settings().effective_log_level
    numeric_level = getattr(logging, level_name.upper(), logging.INFO)

    console = Console(stderr=True)
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(numeric_level)

    fmt = logging.Formatter("%(name)s — %(message)s")
    handler.setFormatter(fmt)

    root = logging.getLogger("pr_needs_review")
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Réduire le bruit des libs
    for lib in ("urllib3", "httpx", "httpcore", "github", "uvicorn.access"):
        logging.getLogger(lib).setLevel(logging.WARNING)
