import csv
import io
import logging
from pathlib import Path
from typing import List

import pytest
from openpyxl import Workbook

from mifcconv.config.api import PipelineOptions
from mifcconv.pipeline.api import DONE, FAILED, SKIPPED, convert_batch, convert_file, normalize_workbook

HEADER = [
    "Group Indicator", "Chip ID", "Time", "Method/Kit", "Target/Analyte", "Result", "Result Unit",
    "Dilution", "Location", "Note (optional)", "Flag (optional)", "Replicate (optional)",
    "TCTCxRef (optional)", "Duration Sample Collection (days)", "Duration Sample Collection (hours)",
    "Duration Sample Collection (minutes)", "Sample Volume", "Sample Volume Unit", "Estimated Cell Number",
]


def _row(group, chip, time="1", result="5.0", unit="mg/dL", flag="", norm=("", "", "", "", "", "")):
    return [group, chip, time, "Kit", "Glucose", result, unit, "", "Media", "", flag, "", "", *norm]


def _write_csv(path: Path, rows: List[list]) -> Path:
    with open(path, "w", newline="", encoding="utf-8") as fh:
        w = csv.writer(fh)
        w.writerow(HEADER)
        w.writerows(rows)
    return path


def _read(path: Path) -> List[dict]:
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def test_stock_row_replicated_to_group(tmp_path: Path):
    src = _write_csv(tmp_path / "plate.csv", [
        _row("G", "stock", result="5.0"),
        _row("G", "C"),
        _row("G", "A"),
        _row("G", "B"),
    ])
    res = convert_file(src)
    assert res.status == DONE
    assert res.output_path == str(tmp_path / "plate-mifc.csv")
    assert res.details == {"rows_written": 3, "rows_skipped": 0, "replicas_written": 3}

    rows = _read(tmp_path / "plate-mifc.csv")
    # standard rows in input order, then the replicas with chips ascending
    assert [r["Chip ID"] for r in rows] == ["C", "A", "B", "A", "B", "C"]
    replicas = rows[3:]
    for r in replicas:
        assert r["Value"] == "5.0"
        assert r["Assay Plate ID"] == "G"
        assert {k: v for k, v in r.items() if k != "Chip ID"} == {
            k: v for k, v in replicas[0].items() if k != "Chip ID"
        }


def test_group_without_standard_chips(tmp_path: Path):
    src = _write_csv(tmp_path / "p.csv", [
        _row("lonely", "reservoir"),
        _row("G", "A"),
    ])
    assert convert_file(src).status == DONE
    assert [r["Chip ID"] for r in _read(tmp_path / "p-mifc.csv")] == ["A"]


def test_extra_terms(tmp_path: Path):
    src = _write_csv(tmp_path / "p.csv", [_row("G", "A"), _row("G", "media", result="7")])
    convert_file(src, PipelineOptions(terms=("media",)))
    rows = _read(tmp_path / "p-mifc.csv")
    assert [(r["Chip ID"], r["Value"]) for r in rows] == [("A", "5.0"), ("A", "7.0")]


def test_bad_standard_row_is_skipped(tmp_path: Path, caplog):
    src = _write_csv(tmp_path / "p.csv", [
        _row("G", "A", time="one"),
        _row("G", "B", result="n/a"),
        _row("G", "C", unit="furlongs"),
        _row("G", "D"),
        _row("G", "stock"),
    ])
    res = convert_file(src)
    assert res.status == DONE
    assert res.details["rows_skipped"] == 3
    rows = _read(tmp_path / "p-mifc.csv")
    # A and C registered their chips before failing; B never parsed
    assert [r["Chip ID"] for r in rows] == ["D", "A", "C", "D"]
    assert "skipping row 2" in caplog.text
    assert "caused by: TimeParseError" in caplog.text


def test_bad_propagating_row_aborts_file(tmp_path: Path, caplog):
    bad = _write_csv(tmp_path / "bad.csv", [_row("G", "A"), _row("G", "stock", time="x.y")])
    good = _write_csv(tmp_path / "good.csv", [_row("G", "A")])

    results = convert_batch([bad, good])
    assert [r.status for r in results] == [FAILED, DONE]
    assert not (tmp_path / "bad-mifc.csv").exists()
    assert (tmp_path / "good-mifc.csv").exists()
    assert "propagating group" in results[0].details["error"]
    assert "ERROR" in caplog.text


def test_missing_columns_and_missing_file(tmp_path: Path):
    src = tmp_path / "p.csv"
    src.write_text("Chip ID,Time\nA,1\n", encoding="utf-8")
    results = convert_batch([src, tmp_path / "gone.csv"])
    assert [r.status for r in results] == [FAILED, FAILED]
    assert not (tmp_path / "p-mifc.csv").exists()


def test_exclude_flag_in_output(tmp_path: Path):
    src = _write_csv(tmp_path / "p.csv", [_row("G", "A", flag="OW"), _row("G", "B", flag="X")])
    convert_file(src)
    rows = _read(tmp_path / "p-mifc.csv")
    assert [(r["Caution Flag"], r["Exclude"]) for r in rows] == [("OW", "X"), ("X", "")]


def test_normalize_while_converting(tmp_path: Path):
    norm = ("1", "0", "0", "200", "ul", "16768")
    src = _write_csv(tmp_path / "p.csv", [
        _row("G", "A", result="153.914", unit="ng/mL", norm=norm),
        _row("G", "B", result="153.914", unit="ng/mL"),
        _row("G", "C", result="153.914", unit="ng/mL", flag="F", norm=norm),
        _row("G", "D", result="", unit="ng/mL", norm=norm),
    ])
    res = convert_file(src, PipelineOptions(normalize=True))
    assert res.status == DONE
    assert res.details["rows_written"] == 1
    rows = _read(tmp_path / "p-mifc.csv")
    assert len(rows) == 1
    assert rows[0]["Chip ID"] == "A"
    assert rows[0]["Value Unit"] == "ng/day/10^6 cells"
    assert float(rows[0]["Value"]) == pytest.approx(1835.801527, rel=1e-5)
    assert rows[0]["Notes"].startswith("Normalized from 153.9140 ng/mL")


def test_output_is_deterministic(tmp_path: Path):
    rows = [
        _row("G2", "Z"), _row("G1", "stock"), _row("G2", "reservoir", result="1"),
        _row("G1", "B"), _row("G1", "A"), _row("G2", "Y"), _row("G1", "stock", time="2"),
    ]
    src = _write_csv(tmp_path / "p.csv", rows)
    first = Path(convert_file(src, PipelineOptions(out_dir=tmp_path / "one")).output_path).read_bytes()
    second = Path(convert_file(src, PipelineOptions(out_dir=tmp_path / "two")).output_path).read_bytes()
    assert first == second
    chips = [r["Chip ID"] for r in _read(tmp_path / "one" / "p-mifc.csv")]
    assert chips == ["Z", "B", "A", "Y", "A", "B", "A", "B", "Y", "Z"]


def test_stdout_mode(tmp_path: Path):
    src = _write_csv(tmp_path / "p.csv", [_row("G", "A")])
    out = io.StringIO()
    res = convert_file(src, PipelineOptions(stdout=True), stdout=out)
    assert res.status == DONE
    assert res.output_path is None
    assert out.getvalue().splitlines()[1].startswith("A,G,,Kit,Glucose,,Media,1.0,0.0,0.0,5.0,mg/dL")
    assert not (tmp_path / "p-mifc.csv").exists()


def _mifc_sheet(ws, rows):
    ws.append(["Chip ID", "Assay Plate ID", "Method/Kit", "Target/Analyte", "Sample Location", "Day", "Hour",
               "Minute", "Value", "Value Unit", "Exclude", "Notes",
               "Duration Sample Collection (days)", "Duration Sample Collection (hours)",
               "Duration Sample Collection (minutes)", "Sample Volume", "Sample Volume Unit",
               "Estimated Cell Number"])
    for r in rows:
        ws.append(r)


def test_normalize_workbook(tmp_path: Path):
    wb = Workbook()
    ws = wb.active
    ws.title = "Day 1"
    _mifc_sheet(ws, [
        ["A", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 153.914, "ng/mL", None, "raw", 1, 0, 0, 200, "µL", 16768],
        ["B", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 153.914, "ng/mL", "X", None, 1, 0, 0, 200, "µL", 16768],
        ["C", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 153.914, "ng/mL"],
    ])
    _mifc_sheet(wb.create_sheet("Day 2"), [
        ["D", "P1", "ELISA", "Albumin", "Efflux", 2, 0, 0, 1543.054, "mg/dL", None, None, 1, 0, 0, 200, "ul", 50000],
    ])
    wb.create_sheet("Readme").append(["just some notes"])
    book = tmp_path / "book.xlsx"
    wb.save(book)

    results = normalize_workbook(book, PipelineOptions(append="normalized"))
    assert [(r.sheet, r.status) for r in results] == [("Day 1", DONE), ("Day 2", DONE), ("Readme", SKIPPED)]
    assert results[0].details == {"rows_written": 1, "rows_skipped": 2}

    day1 = _read(tmp_path / "book-Day_1-normalized.csv")
    assert [r["Chip ID"] for r in day1] == ["A"]
    assert float(day1[0]["Value"]) == pytest.approx(1835.801527, rel=1e-5)
    assert day1[0]["Notes"].startswith("raw || Normalized from 153.9140 ng/mL by a 200 µL sample")

    day2 = _read(tmp_path / "book-Day_2-normalized.csv")
    assert float(day2[0]["Value"]) == pytest.approx(61722160.0, rel=1e-5)
    assert not (tmp_path / "book-Readme-normalized.csv").exists()


def test_normalize_single_sheet_name(tmp_path: Path):
    wb = Workbook()
    _mifc_sheet(wb.active, [["A", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 1.0, "g/L", None, None,
                             1, 0, 0, 1, "mL", 1000]])
    book = tmp_path / "single.xlsx"
    wb.save(book)
    out = tmp_path / "out"
    results = normalize_workbook(book, PipelineOptions(append="norm", out_dir=out))
    assert results[0].output_path == str(out / "single-norm.csv")
    assert len(_read(out / "single-norm.csv")) == 1


def test_normalize_unreadable_workbook(tmp_path: Path):
    book = tmp_path / "broken.xlsx"
    book.write_bytes(b"not a zip")
    results = normalize_workbook(book, PipelineOptions(append="normalized"))
    assert [r.status for r in results] == [FAILED]


def test_replicas_follow_propagating_row_arrival(tmp_path: Path):
    src = _write_csv(tmp_path / "p.csv", [
        _row("G1", "A"),
        _row("G2", "B"),
        _row("G2", "stock", result="2"),
        _row("G1", "stock", result="1"),
    ])
    convert_file(src)
    rows = _read(tmp_path / "p-mifc.csv")
    assert [(r["Chip ID"], r["Value"]) for r in rows[2:]] == [("B", "2.0"), ("A", "1.0")]


def test_zero_cells_or_duration_skipped_while_converting(tmp_path: Path, caplog):
    src = _write_csv(tmp_path / "p.csv", [
        _row("G", "A", result="153.914", unit="ng/mL", norm=("1", "0", "0", "200", "ul", "0")),
        _row("G", "B", result="153.914", unit="ng/mL", norm=("0", "0", "0", "200", "ul", "16768")),
        _row("G", "C", result="153.914", unit="ng/mL", norm=("1", "0", "0", "200", "ul", "16768")),
    ])
    other = _write_csv(tmp_path / "q.csv", [_row("G", "A")])

    with caplog.at_level(logging.INFO, logger="mifcconv"):
        results = convert_batch([src, other], PipelineOptions(normalize=True))
    assert [r.status for r in results] == [DONE, DONE]
    assert results[0].details["rows_skipped"] == 2
    assert [r["Chip ID"] for r in _read(tmp_path / "p-mifc.csv")] == ["C"]
    assert "estimated cell number is not positive" in caplog.text
    assert "sample collection duration is not positive" in caplog.text


def test_zero_duration_skipped_in_workbook(tmp_path: Path):
    wb = Workbook()
    _mifc_sheet(wb.active, [
        ["A", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 153.914, "ng/mL", None, None, 0, 0, 0, 200, "µL", 16768],
        ["B", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 153.914, "ng/mL", None, None, 1, 0, 0, 200, "µL", 0],
        ["C", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 153.914, "ng/mL", None, None, 1, 0, 0, 200, "µL", 16768],
    ])
    book = tmp_path / "zero.xlsx"
    wb.save(book)

    results = normalize_workbook(book, PipelineOptions(append="normalized"))
    assert [r.status for r in results] == [DONE]
    assert results[0].details == {"rows_written": 1, "rows_skipped": 2}
    assert [r["Chip ID"] for r in _read(tmp_path / "zero-normalized.csv")] == ["C"]


def test_stdout_skipped_sheet_prints_nothing(tmp_path: Path):
    wb = Workbook()
    _mifc_sheet(wb.active, [["A", "P1", "ELISA", "Albumin", "Efflux", 1, 0, 0, 1.0, "g/L", None, None,
                             1, 0, 0, 1, "mL", 1000]])
    wb.create_sheet("Readme").append(["just some notes"])
    book = tmp_path / "book.xlsx"
    wb.save(book)

    out = io.StringIO()
    results = normalize_workbook(book, PipelineOptions(stdout=True), stdout=out)
    assert [r.status for r in results] == [DONE, SKIPPED]
    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("Chip ID,")
