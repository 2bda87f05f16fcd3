from __future__ import annotations

from typing import Iterable, Iterator

from mifcconv.mifc.api import CanonicalRecord
from .normalizer import (
    Excluded,
    InvalidInfo,
    NoInfo,
    NoValue,
    NoValueUnit,
    NormalizationError,
    Normalizer,
    check_info,
    to_ngday_millioncells,
)

__all__ = [
    "Excluded",
    "InvalidInfo",
    "NoInfo",
    "NoValue",
    "NoValueUnit",
    "NormalizationError",
    "Normalizer",
    "check_info",
    "normalize",
    "normalize_records",
    "to_ngday_millioncells",
]


def normalize(record: CanonicalRecord) -> CanonicalRecord:
    """Public API (Normalizer)

    Contract:
    - Checked in order: Excluded, NoValue, NoValueUnit, NoInfo, then InvalidInfo when
      the sample duration or the cell count is not positive.
    - value -> ng/day/10^6 cells from sample volume, duration and cell count.
    - Provenance note appended to existing notes with " || ".
    - Pure: the input record is left untouched.
    """
    return Normalizer().normalize(record)


def normalize_records(records: Iterable[CanonicalRecord]) -> Iterator[CanonicalRecord]:
    """Normalize each record, dropping (and logging) those that cannot be."""
    return Normalizer().normalize_records(records)
