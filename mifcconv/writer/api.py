from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO

from .model import WriteResult
from .writer import MifcWriter, OutputPaths, WriterError

__all__ = [
    "MifcWriter",
    "OutputPaths",
    "WriteResult",
    "WriterError",
    "compound_output_path",
    "open_writer",
    "workbook_output_path",
]


def open_writer(stream: TextIO, output_path: Optional[str] = None) -> MifcWriter:
    """Public API (Writer)

    Contract:
    - Header row written immediately, MIFC column order fixed.
    - Floats via repr(), absent values as empty cells, units as display strings.
    """
    return MifcWriter(stream, output_path)


def compound_output_path(input_path: Path, out_dir: Optional[Path], append: str = "mifc") -> Path:
    """<out_dir>/<input parent>/<stem>-<append>.csv; creates missing directories."""
    return OutputPaths().compound_output(Path(input_path), out_dir, append)


def workbook_output_path(
    input_path: Path,
    out_dir: Optional[Path],
    sheet_name: str,
    sheet_count: int,
    append: str = "normalized",
) -> Path:
    """<stem>[-<sheet>]-<append>.csv; the sheet name is only used for multi-sheet workbooks."""
    return OutputPaths().workbook_output(Path(input_path), out_dir, sheet_name, sheet_count, append)
