from __future__ import annotations

import logging
from typing import List, Optional


def causes(e: BaseException) -> List[BaseException]:
    """The exception followed by its __cause__ / __context__ chain."""
    chain: List[BaseException] = []
    seen = set()
    cur: Optional[BaseException] = e
    while cur is not None and id(cur) not in seen:
        chain.append(cur)
        seen.add(id(cur))
        cur = cur.__cause__ or (None if cur.__suppress_context__ else cur.__context__)
    return chain


def log_chain(logger: logging.Logger, level: int, e: BaseException) -> None:
    chain = causes(e)
    logger.log(level, "%s", _describe(chain[0]))
    for cause in chain[1:]:
        logger.log(level, "caused by: %s", _describe(cause))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("traceback:", exc_info=(type(e), e, e.__traceback__))


def _describe(e: BaseException) -> str:
    text = str(e)
    return f"{type(e).__name__}: {text}" if text else type(e).__name__
