"""Logging for multisession.

All loggers hang off the ``multisession`` logger, one child per component
(``multisession.storage``, ``multisession.claims`` ...). The library never
installs handlers by itself; an embedding application calls
:func:`setup_logging` once with its :class:`LoggingConfig`.

Verbosity levels: error(0), warning(1), info(2), verbose(3), trace(4).
Each component can be raised or lowered on its own through
``logging.components`` in config.yaml::

    logging:
      verbose: 2
      components:
        claims: trace
        storage: warning
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from multisession.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

ROOT_NAME = "multisession"

# Child loggers used across the package
COMPONENTS = ("storage", "claims", "allocator", "lifecycle")

logger = logging.getLogger(ROOT_NAME)

_handlers: list[logging.Handler] = []
_configured = False

_LEVEL_MAP = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# verbose=N -> level (0=errors only, 4=everything)
_VERBOSITY_MAP = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: VERBOSE,
    4: TRACE,
}


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def parse_level(name: str | None, default: int = logging.INFO) -> int:
    if not name:
        return default
    return _LEVEL_MAP.get(name.strip().upper(), default)


def resolve_level(config: LoggingConfig | None) -> int:
    """Effective level of the ``multisession`` logger; ``verbose`` wins over ``level``."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        return _VERBOSITY_MAP.get(config.verbose, TRACE)
    return parse_level(config.level)


def component_levels(config: LoggingConfig | None) -> dict[str, int]:
    """Per-component overrides from ``config.components``.

    Unknown component names are kept (any child of ``multisession`` may be
    tuned); unknown level names are dropped with a warning.
    """
    if config is None:
        return {}
    levels: dict[str, int] = {}
    for name, level_name in config.components.items():
        level = _LEVEL_MAP.get(str(level_name).strip().upper())
        if level is None:
            logger.warning("Ignoring unknown log level %r for component '%s'", level_name, name)
            continue
        levels[name] = level
    return levels


def setup_logging(config: LoggingConfig | None = None, *, force: bool = False) -> None:
    """Install handlers and levels from ``config``.

    Subsequent calls are no-ops unless ``force`` is set, in which case the
    handlers installed by the previous call are replaced.

    Args:
        config: LoggingConfig with level, verbose, file and components.
        force: Reconfigure even if logging was already set up.
    """
    global _configured
    if _configured and not force:
        return
    _configured = True
    _remove_handlers()

    root_level = resolve_level(config)
    overrides = component_levels(config)
    logger.setLevel(root_level)
    for name in set(COMPONENTS) | set(overrides):
        # NOTSET defers to the root multisession level
        logger.getChild(name).setLevel(overrides.get(name, logging.NOTSET))

    # Handlers pass whatever the loggers let through, so a component tuned
    # below the root level still reaches the output
    handler_level = min([root_level, *overrides.values()])
    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s [%(name)s]: %(message)s", datefmt="%H:%M:%S"
    )

    log_path = config.file if config and config.file else os.environ.get("MULTISESSION_LOG")
    handler = _open_handler(log_path)
    if handler is None:
        return
    handler.setLevel(handler_level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    _handlers.append(handler)


def _open_handler(log_path: str | None) -> logging.Handler | None:
    if log_path:
        try:
            return logging.FileHandler(os.path.expanduser(log_path), mode="a", encoding="utf-8")
        except OSError as e:
            if not sys.stderr.isatty():
                return None
            print(f"[multisession] Failed to open log file: {e}", file=sys.stderr)
    if sys.stderr.isatty():
        return logging.StreamHandler(sys.stderr)
    return None


def _remove_handlers() -> None:
    while _handlers:
        handler = _handlers.pop()
        logger.removeHandler(handler)
        handler.close()


def get_logger(name: str | None = None) -> logging.Logger:
    """Get the ``multisession`` logger or one of its component children.

    Args:
        name: Component name (e.g., "storage", "claims"), or None for the root.
    """
    if name:
        return logger.getChild(name)
    return logger
