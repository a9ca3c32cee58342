from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def read_source(path: Optional[str]) -> str:
    """Read text from ``path``, or from stdin when ``path`` is missing or ``-``."""
    if not path or path == "-":
        return sys.stdin.read()
    source = Path(path).expanduser()
    if not source.exists():
        raise FileNotFoundError(f"Input file not found: {source}")
    return source.read_text(encoding="utf-8")


def truncate(text: str, limit: int = 200) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
