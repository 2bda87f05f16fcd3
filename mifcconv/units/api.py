from __future__ import annotations

from .model import MeasurementUnit, UnitFamily
from .units import IncompatibleFamily, UnitError, UnitSystem, UnrecognizedUnit

__all__ = [
    "MeasurementUnit",
    "UnitFamily",
    "UnitError",
    "IncompatibleFamily",
    "UnrecognizedUnit",
    "convert",
    "parse_unit",
    "format_unit",
    "unit_family",
]

_SYSTEM = UnitSystem()


def convert(value: float, from_unit: MeasurementUnit, to_unit: MeasurementUnit) -> float:
    """Public API (UnitSystem)

    Contract:
    - Only defined between units of the same family, else IncompatibleFamily.
    - value * from_factor / to_factor, full double precision.
    """
    return _SYSTEM.convert(value, from_unit, to_unit)


def parse_unit(text: str) -> MeasurementUnit:
    """Public API (UnitSystem)

    Contract:
    - Case-sensitive canonical spelling or one of its ASCII aliases ("ul" for µL).
    - Anything else raises UnrecognizedUnit(text).
    """
    return _SYSTEM.parse(text)


def format_unit(unit: MeasurementUnit) -> str:
    """Canonical display string, e.g. "ng/day/10^6 cells"."""
    return _SYSTEM.format(unit)


def unit_family(unit: MeasurementUnit) -> UnitFamily:
    return _SYSTEM.family(unit)
