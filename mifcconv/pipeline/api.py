from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from mifcconv.config.api import PipelineOptions
from .model import DONE, FAILED, SKIPPED, Abort, FileResult, Outcome, Skip
from .pipeline import ConversionError, StreamingPipeline

__all__ = [
    "DONE",
    "FAILED",
    "SKIPPED",
    "Abort",
    "ConversionError",
    "FileResult",
    "Outcome",
    "Skip",
    "StreamingPipeline",
    "convert_batch",
    "convert_file",
    "normalize_batch",
    "normalize_workbook",
]


def convert_file(
    input_path: str | Path,
    options: Optional[PipelineOptions] = None,
    stdout: Optional[TextIO] = None,
) -> FileResult:
    """Public API (StreamingPipeline)

    Contract:
    - Input read top to bottom once; standard rows written immediately.
    - Propagating rows (chip id "stock"/"reservoir"/extra terms) replayed onto every
      chip of their group after the last row, chips in ascending order.
    - Bad row -> skipped with a warning. Bad propagating row, unreadable input or
      missing columns -> FAILED, partial output removed.
    - options.normalize: emitted records pass through the Normalizer; those that
      cannot be normalized are left out.
    """
    return StreamingPipeline(options, stdout).convert_file(input_path)


def convert_batch(
    paths: Iterable[str | Path],
    options: Optional[PipelineOptions] = None,
    stdout: Optional[TextIO] = None,
) -> List[FileResult]:
    """Files one at a time in input order; a failed file never stops the batch."""
    return StreamingPipeline(options, stdout).convert_batch(paths)


def normalize_workbook(
    input_path: str | Path,
    options: Optional[PipelineOptions] = None,
    stdout: Optional[TextIO] = None,
) -> List[FileResult]:
    """Public API (StreamingPipeline)

    Contract:
    - One normalized MIFC CSV per worksheet (or per CSV table).
    - Rows that cannot be read or normalized are logged at info level and left out.
    - Sheets without the MIFC columns are SKIPPED and produce no file.
    """
    return StreamingPipeline(options, stdout).normalize_workbook(input_path)


def normalize_batch(
    paths: Iterable[str | Path],
    options: Optional[PipelineOptions] = None,
    stdout: Optional[TextIO] = None,
) -> List[FileResult]:
    return StreamingPipeline(options, stdout).normalize_batch(paths)
