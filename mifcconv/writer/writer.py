from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, List, Optional, TextIO

from mifcconv.mifc.api import MIFC_COLUMNS, CanonicalRecord
from .model import WriteResult


class WriterError(RuntimeError):
    pass


class MifcWriter:
    """CSV writer for MIFC records, header first, columns in fixed order."""

    def __init__(self, stream: TextIO, output_path: Optional[str] = None) -> None:
        self._csv = csv.writer(stream, lineterminator="\n")
        self._csv.writerow(MIFC_COLUMNS)
        self.output_path = output_path
        self.rows_written = 0

    def write(self, record: CanonicalRecord) -> None:
        self._csv.writerow(self._row(record))
        self.rows_written += 1

    def result(self) -> WriteResult:
        return WriteResult(output_path=self.output_path, rows_written=self.rows_written)

    def _row(self, r: CanonicalRecord) -> List[str]:
        return [
            r.chip_id,
            _cell(r.assay_plate_id),
            _cell(r.assay_well_id),
            r.method,
            r.target,
            _cell(r.subtarget),
            r.sample_location,
            _cell(r.day),
            _cell(r.hour),
            _cell(r.minute),
            _cell(r.value),
            _cell(r.value_unit),
            _cell(r.flag),
            _cell(r.exclude),
            _cell(r.notes),
            _cell(r.replicate),
            _cell(r.xref),
        ]


class OutputPaths:
    def compound_output(self, input_path: Path, out_dir: Optional[Path], append: str) -> Path:
        output = self._output_dir(input_path, out_dir)
        stem = f"{input_path.stem}-{append}" if append else input_path.stem
        return output / f"{stem}.csv"

    def workbook_output(
        self,
        input_path: Path,
        out_dir: Optional[Path],
        sheet_name: str,
        sheet_count: int,
        append: str,
    ) -> Path:
        if out_dir is not None:
            base = self._output_dir(input_path, out_dir) / input_path.name
        else:
            base = input_path
        sheet_part = f"-{self._sanitize_filename(sheet_name)}" if sheet_count > 1 else ""
        return base.with_name(f"{base.stem}{sheet_part}-{append}.csv")

    def _output_dir(self, input_path: Path, out_dir: Optional[Path]) -> Path:
        parent = input_path.parent
        if out_dir is None:
            output = parent
        elif parent.is_absolute():
            output = out_dir
        else:
            # relative inputs keep their directory structure below out_dir
            output = out_dir / parent
        if not output.exists():
            try:
                output.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise WriterError(f"creating directories for output <{output}>") from e
        elif not output.is_dir():
            raise WriterError(f'Path <{output}> passed to "--out-dir" is not a directory')
        return output

    def _sanitize_filename(self, s: str) -> str:
        cleaned = "".join(ch for ch in str(s) if ch.isalnum() or ch in (" ", "_", "-", ".")).strip().replace(" ", "_")
        return cleaned or "Sheet"


def _cell(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, float):
        return repr(v)
    return str(v)
