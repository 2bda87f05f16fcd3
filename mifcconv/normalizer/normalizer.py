from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Iterator

from mifcconv.mifc.api import CanonicalRecord, NormalizationInfo
from mifcconv.units.api import MeasurementUnit, convert

logger = logging.getLogger(__name__)

NOTE_SEPARATOR = " || "


class NormalizationError(RuntimeError):
    pass


class Excluded(NormalizationError):
    def __init__(self) -> None:
        super().__init__("row had a non-empty Exclude column")


class NoValue(NormalizationError):
    def __init__(self) -> None:
        super().__init__("row did not have an entered Value")


class NoValueUnit(NormalizationError):
    def __init__(self) -> None:
        super().__init__("row did not have an entered Value Unit")


class NoInfo(NormalizationError):
    def __init__(self) -> None:
        super().__init__("row did not have associated normalization info columns")


class InvalidInfo(NormalizationError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"row had unusable normalization info: {reason}")
        self.reason = reason


class Normalizer:
    def normalize(self, record: CanonicalRecord) -> CanonicalRecord:
        if record.exclude:
            raise Excluded()
        if record.value is None:
            raise NoValue()
        if record.value_unit is None:
            raise NoValueUnit()
        info = record.normalization
        if info is None:
            raise NoInfo()
        check_info(info)

        days = info.sample_time_days
        norm_val = to_ngday_millioncells(record.value, record.value_unit, info)

        note = (
            f"Normalized from {record.value:.4f} {record.value_unit} "
            f"by a {_num(info.sample_volume)} {info.sample_volume_unit} sample "
            f"over {_num(days)} {'days' if days > 1.0 else 'day'} "
            f"with an estimated {_num(info.cell_count)} cells"
        )
        notes = f"{record.notes}{NOTE_SEPARATOR}{note}" if record.notes else note

        return dataclasses.replace(
            record,
            value=norm_val,
            value_unit=MeasurementUnit.NG_DAY_MILLION_CELLS,
            notes=notes,
        )

    def normalize_records(self, records: Iterable[CanonicalRecord]) -> Iterator[CanonicalRecord]:
        for record in records:
            try:
                yield self.normalize(record)
            except NormalizationError as e:
                logger.info("did not normalize record for chip %r: %s", record.chip_id, e)


def check_info(info: NormalizationInfo) -> None:
    # both end up as divisors
    if info.sample_time_days <= 0.0:
        raise InvalidInfo("sample collection duration is not positive")
    if info.cell_count <= 0.0:
        raise InvalidInfo("estimated cell number is not positive")


def to_ngday_millioncells(value: float, value_unit: MeasurementUnit, info: NormalizationInfo) -> float:
    days = info.sample_time_days
    si_val = convert(value, value_unit, MeasurementUnit.G_L)
    si_vol = convert(info.sample_volume, info.sample_volume_unit, MeasurementUnit.L)
    logger.debug("conc: %.5f %s to SI %.5f g/L", value, value_unit, si_val)
    logger.debug("vol: %.5f %s to SI %.5f L", info.sample_volume, info.sample_volume_unit, si_vol)

    made_ng = convert(si_val * si_vol, MeasurementUnit.G, MeasurementUnit.NG)
    logger.debug("produced ng: %.5f over %.3f day(s)", made_ng, days)
    ngdaycell = made_ng / days / info.cell_count
    return ngdaycell * 1_000_000.0


def _num(x: float) -> str:
    # 200.0 -> "200", 0.5 -> "0.5"
    if float(x).is_integer():
        return str(int(x))
    return repr(float(x))
