from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from mifcconv.mifc.api import CanonicalRecord


@dataclass(frozen=True)
class RawNormalization:
    sample_days: Optional[float] = None
    sample_hours: Optional[float] = None
    sample_minutes: Optional[float] = None
    sample_volume: Optional[float] = None
    sample_volume_unit: Optional[str] = None
    cell_count: Optional[float] = None

    def is_complete(self) -> bool:
        return all(
            v is not None
            for v in (
                self.sample_days,
                self.sample_hours,
                self.sample_minutes,
                self.sample_volume,
                self.sample_volume_unit,
                self.cell_count,
            )
        )


@dataclass(frozen=True)
class RawRecord:
    group: str
    chip_id: str
    time: str
    method: str
    target: str
    location: str
    value: Optional[float] = None
    value_unit: Optional[str] = None
    dilution: Optional[float] = None
    note: Optional[str] = None
    flag: Optional[str] = None
    replicate: Optional[float] = None
    xref: Optional[str] = None
    normalization: Optional[RawNormalization] = None
    line: int = 0


@dataclass(frozen=True)
class Standard:
    pass


@dataclass(frozen=True)
class Propagating:
    target: str


Classification = Union[Standard, Propagating]


@dataclass(frozen=True)
class ConvertedRow:
    record: CanonicalRecord
    classification: Classification
