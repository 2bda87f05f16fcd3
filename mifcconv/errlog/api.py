from __future__ import annotations

import logging

from .errlog import causes, log_chain

__all__ = ["causes", "error_chain", "warn_chain"]


def warn_chain(logger: logging.Logger, e: BaseException) -> None:
    """Log e and every exception in its cause chain at WARNING level."""
    log_chain(logger, logging.WARNING, e)


def error_chain(logger: logging.Logger, e: BaseException) -> None:
    """Log e and every exception in its cause chain at ERROR level."""
    log_chain(logger, logging.ERROR, e)
