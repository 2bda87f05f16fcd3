from __future__ import annotations

from typing import FrozenSet, Iterable, Optional, Tuple

from mifcconv.mifc.api import CanonicalRecord, NormalizationInfo
from mifcconv.units.api import (
    IncompatibleFamily,
    MeasurementUnit,
    UnitFamily,
    parse_unit,
    unit_family,
)
from .model import Classification, ConvertedRow, Propagating, RawNormalization, RawRecord, Standard


DEFAULT_PROPAGATION_TERMS: Tuple[str, ...] = ("stock", "reservoir")
EXCLUDE_MARKER = "X"
_EXCLUDING_FLAG_CHARS = ("O", "W", "F")


class ParseError(RuntimeError):
    pass


class TimeParseError(ParseError):
    def __init__(self, time: str) -> None:
        super().__init__(f"Couldn't convert <{time}> to day, hour, minute time")
        self.time = time


class RecordConverter:
    """Turns compound rows into MIFC records.

    Chip ids equal to one of the propagation terms mark rows whose data
    belongs to every chip of the same group.
    """

    def __init__(self, extra_terms: Iterable[str] = ()) -> None:
        self.terms: FrozenSet[str] = frozenset(DEFAULT_PROPAGATION_TERMS) | frozenset(extra_terms)

    def classify(self, raw: RawRecord) -> Classification:
        if raw.chip_id in self.terms:
            return Propagating(target=raw.chip_id)
        return Standard()

    def convert_row(self, raw: RawRecord) -> ConvertedRow:
        return ConvertedRow(record=self.to_canonical(raw), classification=self.classify(raw))

    def to_canonical(self, raw: RawRecord) -> CanonicalRecord:
        day, hour, minute = parse_time(raw.time)

        dilution = raw.dilution if raw.dilution is not None else 1.0
        value = raw.value * dilution if raw.value is not None else None
        value_unit = parse_unit(raw.value_unit) if raw.value_unit is not None else None

        return CanonicalRecord(
            chip_id=raw.chip_id,
            assay_plate_id=raw.group,
            method=raw.method,
            target=raw.target,
            sample_location=raw.location,
            day=day,
            hour=hour,
            minute=minute,
            value=value,
            value_unit=value_unit,
            flag=raw.flag,
            exclude=exclude_marker(raw.flag),
            notes=raw.note,
            replicate=raw.replicate,
            xref=raw.xref,
            normalization=to_normalization_info(raw.normalization),
        )


def parse_time(time: str) -> Tuple[float, float, float]:
    """Split "day.hour.minute" into floats; hour and minute default to 0."""
    parts = time.split(".")
    try:
        day = float(parts[0])
        hour = float(parts[1]) if len(parts) > 1 else 0.0
        minute = float(parts[2]) if len(parts) > 2 else 0.0
    except ValueError:
        raise TimeParseError(time) from None
    return day, hour, minute


def exclude_marker(flag: Optional[str]) -> Optional[str]:
    # plain substring test, so e.g. "Outlier" or "WARN" also excludes
    if flag is not None and any(ch in flag for ch in _EXCLUDING_FLAG_CHARS):
        return EXCLUDE_MARKER
    return None


def to_normalization_info(raw: Optional[RawNormalization]) -> Optional[NormalizationInfo]:
    if raw is None or not raw.is_complete():
        return None
    vol_unit = parse_unit(raw.sample_volume_unit)
    check_volume_unit(vol_unit)
    return NormalizationInfo(
        sample_days=raw.sample_days,
        sample_hours=raw.sample_hours,
        sample_minutes=raw.sample_minutes,
        sample_volume=raw.sample_volume,
        sample_volume_unit=vol_unit,
        cell_count=raw.cell_count,
    )


def check_volume_unit(unit: MeasurementUnit) -> None:
    family = unit_family(unit)
    if family is not UnitFamily.VOLUME:
        raise IncompatibleFamily(family, UnitFamily.VOLUME)
