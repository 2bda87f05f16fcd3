from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence

from openpyxl import load_workbook

from mifcconv.converter.api import ParseError, RawNormalization, RawRecord, to_normalization_info
from mifcconv.mifc.api import CanonicalRecord
from mifcconv.units.api import UnitError, parse_unit
from .model import MifcRowResult, RowResult, SheetRows

logger = logging.getLogger(__name__)

GROUP = "Group Indicator"
CHIP_ID = "Chip ID"
TIME = "Time"
METHOD = "Method/Kit"
TARGET = "Target/Analyte"
RESULT = "Result"
RESULT_UNIT = "Result Unit"
DILUTION = "Dilution"
LOCATION = "Location"
NOTE = "Note (optional)"
FLAG = "Flag (optional)"
REPLICATE = "Replicate (optional)"
XREF = "TCTCxRef (optional)"

SAMPLE_DAYS = "Duration Sample Collection (days)"
SAMPLE_HOURS = "Duration Sample Collection (hours)"
SAMPLE_MINUTES = "Duration Sample Collection (minutes)"
SAMPLE_VOLUME = "Sample Volume"
SAMPLE_VOLUME_UNIT = "Sample Volume Unit"
CELL_COUNT = "Estimated Cell Number"

COMPOUND_REQUIRED = (GROUP, CHIP_ID, TIME, METHOD, TARGET, LOCATION)
MIFC_REQUIRED = ("Chip ID", "Method/Kit", "Target/Analyte", "Sample Location", "Day", "Hour", "Minute")


class HeaderError(ParseError):
    def __init__(self, missing: Sequence[str]) -> None:
        super().__init__(f"missing required column(s): {', '.join(missing)}")
        self.missing = list(missing)


class ReaderError(RuntimeError):
    pass


class Reader:
    # COMPOUND CSV
    def iter_compound_rows(self, path: str | Path) -> Iterator[RowResult]:
        with open(path, newline="", encoding="utf-8-sig") as fh:
            rdr = csv.DictReader(fh)
            self.check_header(rdr.fieldnames or [], COMPOUND_REQUIRED)
            for row in rdr:
                # header is line 1
                line = rdr.line_num
                try:
                    yield RowResult(line=line, record=self.parse_compound_row(row, line))
                except ParseError as e:
                    yield RowResult(line=line, error=e)

    def parse_compound_row(self, row: Mapping[str, Any], line: int = 0) -> RawRecord:
        return RawRecord(
            group=_require_text(row, GROUP),
            chip_id=_require_text(row, CHIP_ID),
            time=_text(row, TIME) or "",
            method=_text(row, METHOD) or "",
            target=_text(row, TARGET) or "",
            location=_text(row, LOCATION) or "",
            value=_number(row, RESULT),
            value_unit=_text(row, RESULT_UNIT),
            dilution=_number(row, DILUTION),
            note=_text(row, NOTE),
            flag=_text(row, FLAG),
            replicate=_number(row, REPLICATE),
            xref=_text(row, XREF),
            normalization=_raw_normalization(row),
            line=line,
        )

    def check_header(self, fieldnames: Iterable[str], required: Sequence[str]) -> None:
        present = {str(f).strip() for f in fieldnames if f is not None}
        missing = [c for c in required if c not in present]
        if missing:
            raise HeaderError(missing)

    # MIFC + NORMALIZATION TABLES
    def iter_sheets(self, path: str | Path) -> Iterator[SheetRows]:
        p = Path(path)
        if p.suffix.lower() == ".csv":
            yield from self._iter_csv_table(p)
        else:
            yield from self._iter_workbook(p)

    def sheet_names(self, path: str | Path) -> List[str]:
        p = Path(path)
        if p.suffix.lower() == ".csv":
            return [p.stem]
        try:
            wb = load_workbook(p, read_only=True, data_only=True)
        except Exception as e:
            raise ReaderError(f"opening excel workbook <{p}>: {e}") from e
        try:
            return list(wb.sheetnames)
        finally:
            wb.close()

    def iter_mifc_rows(self, sheet: SheetRows) -> Iterator[MifcRowResult]:
        self.check_header(sheet.header, MIFC_REQUIRED)
        # data starts below the header row
        for i, values in enumerate(sheet.rows, start=2):
            if _is_blank_row(values):
                continue
            row = dict(zip(sheet.header, values))
            try:
                yield MifcRowResult(line=i, record=self.parse_mifc_row(row, i))
            except ParseError as e:
                yield MifcRowResult(line=i, error=e)

    def parse_mifc_row(self, row: Mapping[str, Any], line: int = 0) -> CanonicalRecord:
        value_unit_text = _text(row, "Value Unit")
        try:
            value_unit = parse_unit(value_unit_text) if value_unit_text is not None else None
            info = to_normalization_info(_raw_normalization(row))
        except UnitError as e:
            raise ParseError(f"row {line}: {e}") from e

        return CanonicalRecord(
            chip_id=_require_text(row, "Chip ID"),
            assay_plate_id=_text(row, "Assay Plate ID"),
            assay_well_id=_text(row, "Assay Well ID"),
            method=_text(row, "Method/Kit") or "",
            target=_text(row, "Target/Analyte") or "",
            subtarget=_text(row, "Subtarget"),
            sample_location=_text(row, "Sample Location") or "",
            day=_require_number(row, "Day"),
            hour=_require_number(row, "Hour"),
            minute=_require_number(row, "Minute"),
            value=_number(row, "Value"),
            value_unit=value_unit,
            flag=_text(row, "Caution Flag"),
            exclude=_text(row, "Exclude"),
            notes=_text(row, "Notes"),
            replicate=_number(row, "Replicate"),
            xref=_text(row, "Cross Reference"),
            normalization=info,
        )

    def _iter_csv_table(self, path: Path) -> Iterator[SheetRows]:
        with open(path, newline="", encoding="utf-8-sig") as fh:
            rdr = csv.reader(fh)
            header = [h.strip() for h in next(rdr, [])]
            yield SheetRows(name=path.stem, header=header, rows=rdr)

    def _iter_workbook(self, path: Path) -> Iterator[SheetRows]:
        try:
            wb = load_workbook(path, read_only=True, data_only=True)
        except Exception as e:
            raise ReaderError(f"opening excel workbook <{path}>: {e}") from e
        try:
            for ws in wb.worksheets:
                rows = ws.iter_rows(values_only=True)
                first = next(rows, None) or ()
                header = ["" if v is None else str(v).strip() for v in first]
                yield SheetRows(name=ws.title, header=header, rows=rows)
        finally:
            wb.close()


def _text(row: Mapping[str, Any], col: str) -> Optional[str]:
    v = row.get(col)
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, float):
        return str(int(v)) if v.is_integer() else repr(v)
    s = str(v).strip()
    return s or None


def _require_text(row: Mapping[str, Any], col: str) -> str:
    s = _text(row, col)
    if s is None:
        raise ParseError(f"required field missing: {col}")
    return s


def _number(row: Mapping[str, Any], col: str) -> Optional[float]:
    v = row.get(col)
    if v is None:
        return None
    if isinstance(v, bool):
        raise ParseError(f"{col}: expected a number, got {v!r}")
    if isinstance(v, (int, float)):
        return float(v)
    s = str(v).strip()
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        raise ParseError(f"{col}: expected a number, got {s!r}") from None


def _require_number(row: Mapping[str, Any], col: str) -> float:
    n = _number(row, col)
    if n is None:
        raise ParseError(f"required field missing: {col}")
    return n


def _raw_normalization(row: Mapping[str, Any]) -> Optional[RawNormalization]:
    raw = RawNormalization(
        sample_days=_number(row, SAMPLE_DAYS),
        sample_hours=_number(row, SAMPLE_HOURS),
        sample_minutes=_number(row, SAMPLE_MINUTES),
        sample_volume=_number(row, SAMPLE_VOLUME),
        sample_volume_unit=_text(row, SAMPLE_VOLUME_UNIT),
        cell_count=_number(row, CELL_COUNT),
    )
    if raw == RawNormalization():
        return None
    return raw


def _is_blank_row(values: Sequence[Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in values)
