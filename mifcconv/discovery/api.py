from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from .discovery import CSV_EXTENSIONS, WORKBOOK_EXTENSIONS, Discovery, DiscoveryError

__all__ = ["CSV_EXTENSIONS", "WORKBOOK_EXTENSIONS", "Discovery", "DiscoveryError", "iter_input_paths"]


def iter_input_paths(inputs: Iterable[str | Path], kind: str = "csv") -> Iterator[Path]:
    """Public API (Discovery)

    Contract:
    - Files are taken as given, directories are walked recursively in sorted order.
    - kind="csv": *.csv; kind="workbook": *.xlsx, *.xlsm and *.csv.
    - Names starting with "~" (Excel lock files) are skipped.
    - Missing inputs are logged and skipped.
    """
    if kind == "csv":
        exts = CSV_EXTENSIONS
    elif kind == "workbook":
        exts = WORKBOOK_EXTENSIONS
    else:
        raise DiscoveryError(f"unknown input kind: {kind}")
    return Discovery(exts).iter_paths(inputs)
