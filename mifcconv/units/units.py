from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .model import MeasurementUnit, UnitFamily


class UnitError(RuntimeError):
    pass


class IncompatibleFamily(UnitError):
    def __init__(self, from_family: UnitFamily, to_family: UnitFamily) -> None:
        super().__init__(f"Cannot convert from {from_family.value} to {to_family.value}")
        self.from_family = from_family
        self.to_family = to_family


class UnrecognizedUnit(UnitError):
    def __init__(self, text: str) -> None:
        super().__init__(f"Unknown SI unit <{text}>")
        self.text = text


@dataclass(frozen=True)
class _UnitSpec:
    family: UnitFamily
    factor: float
    display: str
    aliases: Tuple[str, ...] = ()


_C = UnitFamily.CONCENTRATION
_V = UnitFamily.VOLUME
_M = UnitFamily.MASS
_R = UnitFamily.RATE
_N = UnitFamily.CELL_NORMALIZED

# factor = multiplier into the family base unit (g/L, L, g, g/day, g/day/cell)
_UNIT_TABLE: Dict[MeasurementUnit, _UnitSpec] = {
    MeasurementUnit.PG_ML: _UnitSpec(_C, 1e-9, "pg/mL", ("pg/ml",)),
    MeasurementUnit.NG_ML: _UnitSpec(_C, 1e-6, "ng/mL", ("ng/ml",)),
    MeasurementUnit.MG_ML: _UnitSpec(_C, 1.0, "mg/mL", ("mg/ml",)),
    MeasurementUnit.MG_DL: _UnitSpec(_C, 1e-2, "mg/dL", ("mg/dl",)),
    MeasurementUnit.G_L: _UnitSpec(_C, 1.0, "g/L", ("g/l",)),

    MeasurementUnit.UL: _UnitSpec(_V, 1e-6, "µL", ("µl", "ul", "uL")),
    MeasurementUnit.ML: _UnitSpec(_V, 1e-3, "mL", ("ml",)),
    MeasurementUnit.DL: _UnitSpec(_V, 1e-1, "dL", ("dl",)),
    MeasurementUnit.L: _UnitSpec(_V, 1.0, "L", ("l",)),

    MeasurementUnit.NG: _UnitSpec(_M, 1e-9, "ng"),
    MeasurementUnit.G: _UnitSpec(_M, 1.0, "g"),

    MeasurementUnit.G_DAY: _UnitSpec(_R, 1.0, "g/day"),
    MeasurementUnit.NG_DAY: _UnitSpec(_R, 1e-9, "ng/day"),

    # Literal factors from the legacy tables; the cell-normalized ones are
    # still unconfirmed.
    MeasurementUnit.G_DAY_CELL: _UnitSpec(_N, 1.0, "g/day/cell"),
    MeasurementUnit.NG_DAY_CELL: _UnitSpec(_N, 1e-9, "ng/day/cell"),
    MeasurementUnit.NG_DAY_MILLION_CELLS: _UnitSpec(
        _N, 1.0 / (1_000_000_000.0 * 1_000_000_000.0), "ng/day/10^6 cells", ("ng/day/10^6cells",)
    ),
}

_missing = [u for u in MeasurementUnit if u not in _UNIT_TABLE]
if _missing:
    raise RuntimeError(f"unit table incomplete: {[u.name for u in _missing]}")


def _build_lookup() -> Dict[str, MeasurementUnit]:
    lookup: Dict[str, MeasurementUnit] = {}
    for unit, spec in _UNIT_TABLE.items():
        for text in (spec.display,) + spec.aliases:
            if text in lookup:
                raise RuntimeError(f"duplicate unit spelling: {text}")
            lookup[text] = unit
    return lookup


_LOOKUP: Dict[str, MeasurementUnit] = _build_lookup()


def format_unit(unit: MeasurementUnit) -> str:
    return _UNIT_TABLE[unit].display


class UnitSystem:
    """Conversions between units of the same family.

    Every unit is scaled through its family base unit, so a conversion is
    value * from_factor / to_factor. No rounding is applied.
    """

    def family(self, unit: MeasurementUnit) -> UnitFamily:
        return _UNIT_TABLE[unit].family

    def factor(self, unit: MeasurementUnit) -> float:
        return _UNIT_TABLE[unit].factor

    def convert(self, value: float, from_unit: MeasurementUnit, to_unit: MeasurementUnit) -> float:
        from_spec = _UNIT_TABLE[from_unit]
        to_spec = _UNIT_TABLE[to_unit]
        if from_spec.family is not to_spec.family:
            raise IncompatibleFamily(from_spec.family, to_spec.family)
        return value * (from_spec.factor / to_spec.factor)

    def parse(self, text: str) -> MeasurementUnit:
        # case-sensitive: "mL" and "ml" are both listed, "ML" is not
        try:
            return _LOOKUP[text]
        except KeyError:
            raise UnrecognizedUnit(text) from None

    def format(self, unit: MeasurementUnit) -> str:
        return format_unit(unit)
