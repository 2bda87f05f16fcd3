from pathlib import Path

import pytest

from mifcconv.discovery.api import DiscoveryError, iter_input_paths


def _touch(p: Path) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("")
    return p


def test_walks_directories_sorted(tmp_path: Path):
    _touch(tmp_path / "b" / "2.csv")
    _touch(tmp_path / "a" / "1.csv")
    _touch(tmp_path / "a" / "notes.txt")
    _touch(tmp_path / "a" / "book.xlsx")
    found = list(iter_input_paths([tmp_path], kind="csv"))
    assert found == [tmp_path / "a" / "1.csv", tmp_path / "b" / "2.csv"]


def test_workbooks_skip_lock_files(tmp_path: Path):
    _touch(tmp_path / "book.xlsx")
    _touch(tmp_path / "~$book.xlsx")
    _touch(tmp_path / "macro.xlsm")
    _touch(tmp_path / "old.xls")
    found = list(iter_input_paths([tmp_path], kind="workbook"))
    assert found == [tmp_path / "book.xlsx", tmp_path / "macro.xlsm"]


def test_explicit_files_and_missing_inputs(tmp_path: Path, caplog):
    f = _touch(tmp_path / "one.csv")
    found = list(iter_input_paths([f, tmp_path / "missing.csv"], kind="csv"))
    assert found == [f]
    assert "does not exist" in caplog.text


def test_unknown_kind():
    with pytest.raises(DiscoveryError):
        iter_input_paths([], kind="pdf")
