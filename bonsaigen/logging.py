"""Logging utilities for bonsaigen passes."""

from __future__ import annotations

import logging
from typing import TextIO

_LOGGER_NAME = "bonsaigen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stage logger (``discovery``, ``host.csharp``, ...) under bonsaigen."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class StageFormatter(logging.Formatter):
    """Prefixes each record with the pipeline stage that emitted it.

    ``bonsaigen.discovery`` renders as ``[bonsaigen:discovery]``; records from
    the package logger itself render as ``[bonsaigen]``.
    """

    def __init__(self) -> None:
        super().__init__("%(stage)s %(levelname)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        stage = record.name[len(_LOGGER_NAME) + 1 :] if record.name.startswith(f"{_LOGGER_NAME}.") else ""
        record.stage = f"[{_LOGGER_NAME}:{stage}]" if stage else f"[{_LOGGER_NAME}]"
        return super().format(record)


def configure_logging(*, verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Route bonsaigen records to ``stream`` (stderr by default).

    Skipped candidates are only reported at DEBUG, so ``verbose`` is what
    surfaces them.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(StageFormatter())
    logger.addHandler(handler)
    return logger


__all__ = ["StageFormatter", "configure_logging", "get_logger"]
