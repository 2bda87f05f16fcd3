from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from mifcconv.units.api import MeasurementUnit


MIFC_COLUMNS: Tuple[str, ...] = (
    "Chip ID",
    "Assay Plate ID",
    "Assay Well ID",
    "Method/Kit",
    "Target/Analyte",
    "Subtarget",
    "Sample Location",
    "Day",
    "Hour",
    "Minute",
    "Value",
    "Value Unit",
    "Caution Flag",
    "Exclude",
    "Notes",
    "Replicate",
    "Cross Reference",
)

NORMALIZATION_COLUMNS: Tuple[str, ...] = (
    "Duration Sample Collection (days)",
    "Duration Sample Collection (hours)",
    "Duration Sample Collection (minutes)",
    "Sample Volume",
    "Sample Volume Unit",
    "Estimated Cell Number",
)


@dataclass(frozen=True)
class NormalizationInfo:
    sample_days: float
    sample_hours: float
    sample_minutes: float
    sample_volume: float
    sample_volume_unit: MeasurementUnit
    cell_count: float

    @property
    def sample_time_days(self) -> float:
        return self.sample_days + self.sample_hours / 24.0 + self.sample_minutes / (24.0 * 60.0)


@dataclass(frozen=True)
class CanonicalRecord:
    """One MIFC row: chip, time point and measurement.

    `normalization` travels with the record but is never written out.
    """
    chip_id: str
    method: str
    target: str
    sample_location: str
    day: float
    hour: float
    minute: float
    assay_plate_id: Optional[str] = None
    assay_well_id: Optional[str] = None
    subtarget: Optional[str] = None
    value: Optional[float] = None
    value_unit: Optional[MeasurementUnit] = None
    flag: Optional[str] = None
    exclude: Optional[str] = None
    notes: Optional[str] = None
    replicate: Optional[float] = None
    xref: Optional[str] = None
    normalization: Optional[NormalizationInfo] = None
