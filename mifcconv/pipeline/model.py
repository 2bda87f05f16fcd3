from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

DONE = "DONE"
FAILED = "FAILED"
SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class Skip:
    """Give up on this unit of work (row or sheet) and carry on."""
    reason: BaseException


@dataclass(frozen=True)
class Abort:
    """Give up on the whole file; its output is incomplete."""
    reason: BaseException


Outcome = Union[Skip, Abort]


@dataclass(frozen=True)
class FileResult:
    input_path: str
    output_path: Optional[str]
    status: str  # DONE|FAILED|SKIPPED
    details: Dict[str, object]
    sheet: Optional[str] = None
