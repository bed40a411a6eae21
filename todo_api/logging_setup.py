from __future__ import annotations

import logging
import sys


class _NoiseFilter(logging.Filter):
    """
    Keep all todo_api records; let third-party loggers (uvicorn access log,
    sqlalchemy, httpx) through only at WARNING and above.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "todo_api" or record.name.startswith("todo_api."):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Configure the root logger with a single stderr handler.

    Call this ONCE, before the application starts serving.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_NoiseFilter())
    root.addHandler(ch)

    logging.captureWarnings(True)
