"""Logging setup shared by the CLI and library callers."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("pymongo",)


def configure_logging(
    log_path: Path | None = None,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Attach a stream handler (and optionally a file handler) to the root logger.

    Calling it again replaces the handlers instead of stacking duplicates.

    Args:
        log_path: Optional file receiving the same records as the stream.
        level: Root logging level (defaults to INFO).
        stream: Stream for console output (defaults to stdout). The CLI passes
            stderr so its JSON reports stay machine readable.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
