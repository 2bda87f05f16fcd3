from __future__ import annotations

from enum import Enum


class UnitFamily(Enum):
    CONCENTRATION = "Concentration"
    VOLUME = "Volume"
    MASS = "Mass"
    RATE = "Rate"
    CELL_NORMALIZED = "CellNormalized"


class MeasurementUnit(Enum):
    PG_ML = "pg_ml"
    NG_ML = "ng_ml"
    MG_ML = "mg_ml"
    MG_DL = "mg_dl"
    G_L = "g_l"

    UL = "ul"
    ML = "ml"
    DL = "dl"
    L = "l"

    NG = "ng"
    G = "g"

    G_DAY = "g_day"
    NG_DAY = "ng_day"

    G_DAY_CELL = "g_day_cell"
    NG_DAY_CELL = "ng_day_cell"
    NG_DAY_MILLION_CELLS = "ng_day_millioncells"

    def __str__(self) -> str:
        from .units import format_unit
        return format_unit(self)
