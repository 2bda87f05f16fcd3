from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

from .model import MifcRowResult, RowResult, SheetRows
from .reader import COMPOUND_REQUIRED, MIFC_REQUIRED, HeaderError, Reader, ReaderError

__all__ = [
    "COMPOUND_REQUIRED",
    "MIFC_REQUIRED",
    "HeaderError",
    "MifcRowResult",
    "Reader",
    "ReaderError",
    "RowResult",
    "SheetRows",
    "iter_compound_rows",
    "iter_mifc_rows",
    "iter_sheets",
    "sheet_names",
]


def iter_compound_rows(path: str | Path) -> Iterator[RowResult]:
    """Public API (Reader)

    Contract:
    - Streams a compound CSV top to bottom exactly once.
    - Missing required columns -> HeaderError before the first row.
    - Each data row -> RowResult carrying a RawRecord or the row's ParseError.
    - Blank cells are absent values.
    """
    return Reader().iter_compound_rows(path)


def iter_sheets(path: str | Path) -> Iterator[SheetRows]:
    """Public API (Reader)

    Contract:
    - .xlsx/.xlsm: one SheetRows per worksheet (openpyxl, read-only, cached values).
    - .csv: a single SheetRows named after the file stem.
    """
    return Reader().iter_sheets(path)


def sheet_names(path: str | Path) -> List[str]:
    return Reader().sheet_names(path)


def iter_mifc_rows(sheet: SheetRows) -> Iterator[MifcRowResult]:
    """MIFC (+ normalization) rows of one sheet; HeaderError when MIFC columns are missing."""
    return Reader().iter_mifc_rows(sheet)
