"""Category-based logging for keysafe.

Thin layer over the standard library: each category is a child of the
``keysafe`` logger, so applications filter or silence categories with the
usual ``logging`` configuration.

Usage::

    from keysafe import log

    log.info("Loaded settings")
    log.error("Keychain unavailable", category="data")
    log.data("Value saved for key: session")
"""

from __future__ import annotations

import logging

ROOT_LOGGER = "keysafe"

DEFAULT = "default"
NETWORK = "network"
UI = "ui"
DATA = "data"
CATEGORIES = (DEFAULT, NETWORK, UI, DATA)

_loggers: dict[str, logging.Logger] = {
    name: logging.getLogger(f"{ROOT_LOGGER}.{name}") for name in CATEGORIES
}


def get_logger(category: str | None = None) -> logging.Logger:
    """Return the logger for *category*, falling back to ``default``."""
    return _loggers.get(category or DEFAULT, _loggers[DEFAULT])


def configure_logging(level: str | int = logging.INFO) -> None:
    """Set the level for the whole ``keysafe`` logger tree."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    logging.getLogger(ROOT_LOGGER).setLevel(level)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

def debug(message: str, category: str | None = None) -> None:
    get_logger(category).debug("%s", message)


def info(message: str, category: str | None = None) -> None:
    get_logger(category).info("%s", message)


def warning(message: str, category: str | None = None) -> None:
    get_logger(category).warning("%s", message)


def error(message: str, category: str | None = None) -> None:
    get_logger(category).error("%s", message)


def critical(message: str, category: str | None = None) -> None:
    get_logger(category).critical("%s", message)


# ---------------------------------------------------------------------------
# Category shortcuts (debug level)
# ---------------------------------------------------------------------------

def network(message: str) -> None:
    debug(message, NETWORK)


def ui(message: str) -> None:
    debug(message, UI)


def data(message: str) -> None:
    debug(message, DATA)


def log(message: str, category: str | None = None) -> None:
    """Collaborator entry point: debug-level line in *category*."""
    debug(message, category)
