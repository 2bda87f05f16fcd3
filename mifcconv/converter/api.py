from __future__ import annotations

from typing import Iterable

from .converter import (
    DEFAULT_PROPAGATION_TERMS,
    EXCLUDE_MARKER,
    ParseError,
    RecordConverter,
    TimeParseError,
    check_volume_unit,
    exclude_marker,
    parse_time,
    to_normalization_info,
)
from .model import Classification, ConvertedRow, Propagating, RawNormalization, RawRecord, Standard

__all__ = [
    "DEFAULT_PROPAGATION_TERMS",
    "EXCLUDE_MARKER",
    "Classification",
    "ConvertedRow",
    "ParseError",
    "Propagating",
    "RawNormalization",
    "RawRecord",
    "RecordConverter",
    "Standard",
    "TimeParseError",
    "check_volume_unit",
    "convert_row",
    "exclude_marker",
    "parse_time",
    "to_normalization_info",
]


def convert_row(raw: RawRecord, extra_terms: Iterable[str] = ()) -> ConvertedRow:
    """Public API (RecordConverter)

    Contract:
    - Time "d[.h[.m]]" -> day/hour/minute; bad component -> TimeParseError.
    - value = Result * Dilution (Dilution defaults to 1.0); no Result -> no value.
    - Flag containing 'O', 'W' or 'F' anywhere -> Exclude "X".
    - Chip id equal to "stock", "reservoir" or one of extra_terms -> Propagating.
    - Unknown Result Unit -> UnrecognizedUnit.
    """
    return RecordConverter(extra_terms).convert_row(raw)
