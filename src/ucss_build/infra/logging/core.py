from __future__ import annotations

"""
Logging Core Orchestrator.

Maintains the idempotent lifecycle of the logging subsystem. Records emitted
by the bundling threads and the compression workers go through a single
QueueHandler so handler I/O happens on one listener thread and lines from
concurrent workers never interleave.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from ucss_build.infra.logging.config import _LEVEL_MAP, LoggingConfig
from ucss_build.infra.logging.handlers import (
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_ucss_build_configured"
_QUEUE_LISTENER_ATTR: str = "_ucss_build_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once, routing all records through a queue.

    Repeated calls are no-ops unless force=True, in which case our previous
    handlers and listener are torn down and rebuilt.

    Args:
        cfg: Structural configuration for the logging system.
        force: If True, bypass idempotency checks and re-initialize handlers.

    Returns:
        logging.Logger: The initialized root logger instance.
    """
    root = logging.getLogger()

    already_configured = bool(getattr(root, _CONFIGURED_FLAG_ATTR, False))
    if already_configured and not force:
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    _remove_our_handlers(root)
    _stop_existing_listener(root)

    handlers_list: List[logging.Handler] = []

    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level_int)
        sh.setFormatter(logging.Formatter(cfg.console_fmt))
        _tag_handler(sh)
        handlers_list.append(sh)

    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count
        )
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    # Flush pending records on interpreter shutdown
    atexit.register(_safe_stop_listener, listener)

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Acquire a named logger instance compliant with the global configuration.

    Args:
        name: Hierarchical name for the logger (usually __name__).

    Returns:
        logging.Logger: The requested logger instance.
    """
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """
    Flush and detach everything configure_logging installed.

    Used by the CLI before returning so that queued records reach stderr
    ahead of the process exit code.
    """
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a string-based logging level to its numeric constant."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    """Detach and close every handler tagged as ours."""
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate and release the existing QueueListener to reset state."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating listeners that were already stopped.

    QueueListener.stop() fails when its thread has been joined already,
    which happens when both shutdown_logging and atexit run.
    """
    if not listener:
        return

    if getattr(listener, "_thread", None) is not None:
        listener.stop()
