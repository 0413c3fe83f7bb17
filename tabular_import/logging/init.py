from __future__ import annotations

import logging
import sys

"""Console logging for the CLI.

Lines go to stdout as "<LABEL> <message>" with LABEL one of
INFO|WARN|ERROR|SUMMARY (DEBUG with --debug). The handler is attached once
to the "tabular_import" logger; module loggers created with
logging.getLogger(__name__) propagate into it.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "LabeledFormatter",
    "SUMMARY_LEVEL",
    "log_summary",
    "reset_logging",
    "setup_logging",
]

APP_LOGGER_NAME = "tabular_import"
SUMMARY_LEVEL = 25  # INFO < SUMMARY < WARNING

_CONSOLE_HANDLER = "tabular_import.console"

LEVEL_LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
    SUMMARY_LEVEL: "SUMMARY",
}


class LabeledFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(label)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record.label = LEVEL_LABELS.get(record.levelno, record.levelname)
        return super().format(record)


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == _CONSOLE_HANDLER:
            return handler
    return None


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach the labeled stdout handler to the application logger.

    Safe to call repeatedly: later calls reuse the handler and only switch
    to DEBUG when ``debug`` is requested.
    """
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(APP_LOGGER_NAME)

    handler = _console_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_CONSOLE_HANDLER)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    elif not debug:
        return logger

    level = logging.DEBUG if debug else logging.INFO
    handler.setLevel(level)
    logger.setLevel(level)
    return logger


def log_summary(message: str) -> None:
    setup_logging().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the console handler. Mainly for testing purposes."""
    logger = logging.getLogger(APP_LOGGER_NAME)
    handler = _console_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
