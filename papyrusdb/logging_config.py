"""Logging helpers for PapyrusDB.

Every logger lives under the ``papyrusdb`` namespace so a single call to
``configure_logging`` controls the whole service.
"""

import logging

ROOT_LOGGER = "papyrusdb"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install a stream handler on the package logger (once)."""
    root = logging.getLogger(ROOT_LOGGER)
    if not any(getattr(h, "_papyrus", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._papyrus = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger scoped under the package namespace."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


_sync_logger = get_logger("papyrusdb.sync")


def log_sync_operation(
    operation: str,
    kind: str,
    key: str,
    success: bool,
    detail: str | None = None,
) -> None:
    """Record one reconciliation decision against the store."""
    status = "ok" if success else "rejected"
    message = f"{operation.upper()} | {kind}/{key} | {status}"
    if detail:
        message = f"{message} | {detail}"
    if success:
        _sync_logger.info(message)
    else:
        _sync_logger.warning(message)
