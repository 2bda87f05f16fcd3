from __future__ import annotations

import contextlib
import csv
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, TextIO

from mifcconv.config.api import PipelineOptions
from mifcconv.converter.api import ParseError, Propagating, RecordConverter
from mifcconv.errlog.api import error_chain, warn_chain
from mifcconv.mifc.api import CanonicalRecord
from mifcconv.normalizer.api import NormalizationError, Normalizer
from mifcconv.propagation.api import GroupPropagationBuffer
from mifcconv.reader.api import MIFC_REQUIRED, HeaderError, Reader, ReaderError, RowResult, SheetRows
from mifcconv.units.api import UnitError
from mifcconv.writer.api import (
    MifcWriter,
    WriterError,
    compound_output_path,
    open_writer,
    workbook_output_path,
)
from .model import DONE, FAILED, SKIPPED, Abort, FileResult, Outcome, Skip

logger = logging.getLogger(__name__)

_FILE_ERRORS = (OSError, HeaderError, ReaderError, csv.Error, UnicodeDecodeError)


class ConversionError(RuntimeError):
    pass


def _wrap(message: str, cause: BaseException) -> ConversionError:
    e = ConversionError(message)
    e.__cause__ = cause
    return e


class StreamingPipeline:
    """Reads one input at a time and writes its MIFC output.

    Standard rows go straight to the writer. Propagating rows wait in a
    per-file GroupPropagationBuffer and are replayed after the last row.
    """

    def __init__(self, options: Optional[PipelineOptions] = None, stdout: Optional[TextIO] = None) -> None:
        self.options = options or PipelineOptions()
        self.converter = RecordConverter(self.options.terms)
        self.normalizer = Normalizer()
        self.reader = Reader()
        self._stdout = stdout

    # COMPOUND -> MIFC
    def convert_batch(self, paths: Iterable[str | Path]) -> List[FileResult]:
        results: List[FileResult] = []
        for path in paths:
            res = self.convert_file(path)
            if res.status == FAILED:
                logger.error("skipping file <%s>", res.input_path)
            results.append(res)
        return results

    def convert_file(self, input_path: str | Path) -> FileResult:
        path = Path(input_path)
        logger.info("reading %s", path)
        details: Dict[str, object] = {"rows_written": 0, "rows_skipped": 0, "replicas_written": 0}

        try:
            output_path = None if self.options.stdout else compound_output_path(
                path, self.options.out_dir, self.options.append
            )
        except WriterError as e:
            error_chain(logger, _wrap(f"couldn't open output; skipping file <{path}>", e))
            return self._result(FAILED, path, None, {"error": str(e)})
        logger.debug("generated output: %s", output_path)

        try:
            with self._open_output(output_path) as stream:
                writer = open_writer(stream, str(output_path) if output_path else None)
                outcome = self._convert_stream(path, writer, details)
        except OSError as e:
            outcome = Abort(_wrap(f"couldn't open output; skipping file <{path}>", e))

        if isinstance(outcome, Abort):
            error_chain(logger, outcome.reason)
            self._discard(output_path)
            details["error"] = str(outcome.reason)
            return self._result(FAILED, path, None, details)

        return self._result(DONE, path, output_path, details)

    def _convert_stream(self, path: Path, writer: MifcWriter, details: Dict[str, object]) -> Optional[Abort]:
        buffer = GroupPropagationBuffer()
        try:
            for row in self.reader.iter_compound_rows(path):
                outcome = self._process_row(row, writer, buffer, details)
                if isinstance(outcome, Abort):
                    return outcome
                if isinstance(outcome, Skip):
                    self._report_skip(outcome, f"skipping row {row.line} in <{path}>")
                    details["rows_skipped"] += 1
        except _FILE_ERRORS as e:
            return Abort(_wrap(f"couldn't read input <{path}>", e))

        logger.debug("%d propagating row(s) pending in <%s>", buffer.pending_count(), path)
        # propagate stock/reservoir data onto every chip of its group
        for record in buffer.drain():
            outcome = self._emit(record, writer)
            if outcome is None:
                details["replicas_written"] += 1
            else:
                self._report_skip(outcome, f"skipping propagated row for chip {record.chip_id!r} in <{path}>")
                details["rows_skipped"] += 1
        return None

    def _process_row(
        self,
        row: RowResult,
        writer: MifcWriter,
        buffer: GroupPropagationBuffer,
        details: Dict[str, object],
    ) -> Optional[Outcome]:
        if row.error is not None:
            return Skip(_wrap("couldn't deserialize row", row.error))
        raw = row.record

        classification = self.converter.classify(raw)
        if isinstance(classification, Propagating):
            try:
                record = self.converter.to_canonical(raw)
            except (ParseError, UnitError) as e:
                return Abort(_wrap(f"converting a propagating group (line {row.line}) into MIFC format", e))
            buffer.store(raw.group, classification.target, record)
            return None

        # the chip belongs to its group even if its own row fails below
        buffer.register_chip(raw.group, raw.chip_id)
        try:
            record = self.converter.to_canonical(raw)
        except (ParseError, UnitError) as e:
            return Skip(_wrap("converting a standard row into MIFC format", e))

        outcome = self._emit(record, writer)
        if outcome is None:
            details["rows_written"] += 1
        return outcome

    def _emit(self, record: CanonicalRecord, writer: MifcWriter) -> Optional[Skip]:
        if self.options.normalize:
            try:
                record = self.normalizer.normalize(record)
            except NormalizationError as e:
                return Skip(e)
        writer.write(record)
        return None

    # MIFC + NORMALIZATION WORKBOOKS
    def normalize_batch(self, paths: Iterable[str | Path]) -> List[FileResult]:
        results: List[FileResult] = []
        for path in paths:
            results.extend(self.normalize_workbook(path))
        return results

    def normalize_workbook(self, input_path: str | Path) -> List[FileResult]:
        path = Path(input_path)
        results: List[FileResult] = []
        try:
            sheet_count = len(self.reader.sheet_names(path))
            for i, sheet in enumerate(self.reader.iter_sheets(path)):
                logger.info("%s - %s (#%d)", path, sheet.name, i)
                results.append(self._normalize_sheet(path, sheet, sheet_count))
        except _FILE_ERRORS as e:
            warn_chain(logger, _wrap(f"Couldn't normalize workbook <{path}>", e))
            results.append(self._result(FAILED, path, None, {"error": str(e)}))
        return results

    def _normalize_sheet(self, path: Path, sheet: SheetRows, sheet_count: int) -> FileResult:
        try:
            self.reader.check_header(sheet.header, MIFC_REQUIRED)
        except HeaderError as e:
            logger.warning("issue parsing sheet <%s> into MIFC normalization format: %s", sheet.name, e)
            return self._result(SKIPPED, path, None, {"reason": str(e)}, sheet.name)

        try:
            output_path = None if self.options.stdout else workbook_output_path(
                path, self.options.out_dir, sheet.name, sheet_count, self.options.append
            )
        except WriterError as e:
            warn_chain(logger, _wrap(f"Couldn't generate an output for workbook <{path}>", e))
            return self._result(FAILED, path, None, {"error": str(e)}, sheet.name)
        logger.info("Output file: %s", output_path)

        skipped = 0
        with self._open_output(output_path) as stream:
            writer = open_writer(stream, str(output_path) if output_path else None)
            for row in self.reader.iter_mifc_rows(sheet):
                if row.error is not None:
                    logger.info("couldn't deserialize row %d in %s: %s", row.line, sheet.name, row.error)
                    skipped += 1
                    continue
                try:
                    normalized = self.normalizer.normalize(row.record)
                except NormalizationError as e:
                    logger.info("did not normalize row %d in %s: %s", row.line, sheet.name, e)
                    skipped += 1
                    continue
                writer.write(normalized)

        written = writer.result()
        details: Dict[str, object] = {"rows_written": written.rows_written, "rows_skipped": skipped}
        return self._result(DONE, path, output_path, details, sheet.name)

    @contextlib.contextmanager
    def _open_output(self, output_path: Optional[Path]) -> Iterator[TextIO]:
        if output_path is None:
            yield self._stdout or sys.stdout
            return
        with open(output_path, "w", newline="", encoding="utf-8") as fh:
            yield fh

    def _report_skip(self, outcome: Skip, message: str) -> None:
        if isinstance(outcome.reason, NormalizationError):
            logger.info("%s: %s", message, outcome.reason)
            return
        logger.warning("%s", message)
        warn_chain(logger, outcome.reason)

    def _discard(self, output_path: Optional[Path]) -> None:
        if output_path is None:
            return
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("could not remove incomplete output <%s>: %s", output_path, e)

    def _result(
        self,
        status: str,
        input_path: Path,
        output_path: Optional[Path],
        details: Dict[str, object],
        sheet: Optional[str] = None,
    ) -> FileResult:
        return FileResult(
            input_path=str(input_path),
            output_path=str(output_path) if output_path else None,
            status=status,
            details=details,
            sheet=sheet,
        )
