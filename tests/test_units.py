import itertools

import pytest

from mifcconv.units.api import (
    IncompatibleFamily,
    MeasurementUnit,
    UnitFamily,
    UnrecognizedUnit,
    convert,
    format_unit,
    parse_unit,
    unit_family,
)

TOL = 1e-9


def test_mass_conversion():
    assert convert(1e9, MeasurementUnit.NG, MeasurementUnit.G) == pytest.approx(1.0, rel=TOL)
    assert convert(1e-9, MeasurementUnit.G, MeasurementUnit.NG) == pytest.approx(1.0, rel=TOL)
    assert convert(100.0, MeasurementUnit.NG, MeasurementUnit.NG) == 100.0


def test_volume_conversion():
    assert convert(100.0, MeasurementUnit.UL, MeasurementUnit.ML) == pytest.approx(0.1, rel=TOL)
    assert convert(50.0, MeasurementUnit.DL, MeasurementUnit.UL) == pytest.approx(5.0e6, rel=TOL)
    assert convert(10.0, MeasurementUnit.DL, MeasurementUnit.L) == pytest.approx(1.0, rel=TOL)
    assert convert(385.0, MeasurementUnit.ML, MeasurementUnit.DL) == pytest.approx(3.85, rel=TOL)
    assert convert(2054.0, MeasurementUnit.ML, MeasurementUnit.L) == pytest.approx(2.054, rel=TOL)


def test_concentration_conversion():
    assert convert(100.0, MeasurementUnit.PG_ML, MeasurementUnit.G_L) == pytest.approx(100e-9, rel=TOL)
    assert convert(20.0, MeasurementUnit.NG_ML, MeasurementUnit.G_L) == pytest.approx(20e-6, rel=TOL)
    assert convert(32.0, MeasurementUnit.MG_ML, MeasurementUnit.G_L) == pytest.approx(32.0, rel=TOL)
    assert convert(1.0, MeasurementUnit.MG_DL, MeasurementUnit.G_L) == pytest.approx(1e-2, rel=TOL)


def test_same_family_round_trip():
    for family in UnitFamily:
        units = [u for u in MeasurementUnit if unit_family(u) is family]
        for a, b in itertools.permutations(units, 2):
            there = convert(123.456, a, b)
            assert convert(there, b, a) == pytest.approx(123.456, rel=TOL), (a, b)


def test_incompatible_family():
    with pytest.raises(IncompatibleFamily) as exc:
        convert(1.0, MeasurementUnit.G, MeasurementUnit.L)
    assert exc.value.from_family is UnitFamily.MASS
    assert exc.value.to_family is UnitFamily.VOLUME


def test_parse_aliases():
    assert parse_unit("ul") is MeasurementUnit.UL
    assert parse_unit("uL") is MeasurementUnit.UL
    assert parse_unit("µL") is MeasurementUnit.UL
    assert parse_unit("ng/ml") is MeasurementUnit.NG_ML
    assert parse_unit("ng/day/10^6cells") is MeasurementUnit.NG_DAY_MILLION_CELLS


def test_parse_is_case_sensitive():
    with pytest.raises(UnrecognizedUnit) as exc:
        parse_unit("NG/ML")
    assert exc.value.text == "NG/ML"
    with pytest.raises(UnrecognizedUnit):
        parse_unit("%")


def test_display_strings():
    assert format_unit(MeasurementUnit.UL) == "µL"
    assert str(MeasurementUnit.NG_DAY_MILLION_CELLS) == "ng/day/10^6 cells"
    for unit in MeasurementUnit:
        assert parse_unit(format_unit(unit)) is unit
