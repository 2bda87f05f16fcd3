from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from mifcconv.converter.api import ParseError, RawRecord
from mifcconv.mifc.api import CanonicalRecord


@dataclass(frozen=True)
class RowResult:
    line: int
    record: Optional[RawRecord] = None
    error: Optional[ParseError] = None


@dataclass(frozen=True)
class MifcRowResult:
    line: int
    record: Optional[CanonicalRecord] = None
    error: Optional[ParseError] = None


@dataclass(frozen=True)
class SheetRows:
    name: str
    header: List[str]
    rows: Iterator[Sequence[Any]]
