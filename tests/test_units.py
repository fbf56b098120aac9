# tests/test_units.py

import math
from decimal import Decimal
from fractions import Fraction

import numpy as np
import pytest

from core.catalog import LENGTH, VOLUME
from core.errors import ConversionError, InvalidInputError, UnsupportedUnitError
from core.units import (
    ConversionRequest,
    ConversionResult,
    ConversionTable,
    Unit,
    convert,
    from_common_unit,
    to_common_unit,
    try_convert,
)

TABLE = ConversionTable({"m": 1.0, "km": 1000.0, "cm": 0.01}, name="length", common_unit="m")


class RecordingTable(dict):
    """dict that remembers every key it was asked for."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lookups = []

    def __getitem__(self, key):
        self.lookups.append(key)
        return super().__getitem__(key)


def test_documented_examples():
    assert convert(1.0, "km", "m", TABLE) == 1000.0
    assert convert(100.0, "cm", "m", TABLE) == 1.0
    with pytest.raises(UnsupportedUnitError) as exc:
        convert(5.0, "mile", "m", TABLE)
    assert exc.value.unit == "mile"


def test_matches_two_step_formula_exactly():
    for v in (0.0, 1.0, -3.5, 12345.678, 1e-9):
        for u1 in TABLE:
            for u2 in TABLE:
                if u1 == u2:
                    continue
                assert convert(v, u1, u2, TABLE) == v * TABLE[u1] / TABLE[u2]


def test_multiply_in_divide_out_direction():
    """Swapping the direction would give 0.001 here."""
    assert convert(1.0, "km", "m", TABLE) == 1000.0
    assert convert(1000.0, "m", "km", TABLE) == 1.0


def test_identity_conversion_is_exact():
    for v in (0.1, 1.0 / 3.0, 7.3, -2.2e15):
        for u in TABLE:
            assert convert(v, u, u, TABLE) == v


def test_round_trip():
    for v in (0.3, 42.0, 987654.321):
        for u1 in TABLE:
            for u2 in TABLE:
                back = convert(convert(v, u1, u2, TABLE), u2, u1, TABLE)
                assert back == pytest.approx(v, rel=1e-12)


def test_plain_dict_table_is_accepted():
    assert convert(2.0, "km", "m", {"m": 1.0, "km": 1000.0}) == 2000.0


def test_unsupported_source_names_source():
    with pytest.raises(UnsupportedUnitError) as exc:
        convert(1.0, "furlong", "m", TABLE)
    assert exc.value.unit == "furlong"
    assert exc.value.category == "length"
    assert str(exc.value) == "Unsupported unit: furlong"


def test_unsupported_target_names_target():
    with pytest.raises(UnsupportedUnitError) as exc:
        convert(1.0, "m", "parsec", TABLE)
    assert exc.value.unit == "parsec"


def test_both_unsupported_reports_source_first():
    with pytest.raises(UnsupportedUnitError) as exc:
        convert(1.0, "furlong", "parsec", TABLE)
    assert exc.value.unit == "furlong"


def test_unit_lookup_is_exact():
    with pytest.raises(UnsupportedUnitError) as exc:
        convert(1.0, "KM", "m", TABLE)
    assert exc.value.unit == "KM"


@pytest.mark.parametrize("bad", ["1.0", None, True, Decimal("1.5"), 1 + 2j, [1.0]])
def test_non_numeric_input_rejected_before_lookup(bad):
    table = RecordingTable({"m": 1.0})
    with pytest.raises(InvalidInputError) as exc:
        convert(bad, "nope", "m", table)
    assert exc.value.value is bad
    assert table.lookups == []


def test_invalid_input_is_a_type_error():
    with pytest.raises(TypeError):
        convert("12", "m", "km", TABLE)


@pytest.mark.parametrize("good", [3, 3.0, Fraction(3, 1), np.float64(3.0), np.int32(3)])
def test_real_numbers_accepted(good):
    assert convert(good, "km", "m", TABLE) == 3000.0


def test_nan_and_inf_pass_through():
    assert math.isnan(convert(float("nan"), "km", "m", TABLE))
    assert convert(float("inf"), "km", "m", TABLE) == float("inf")


def test_to_and_from_common_unit():
    assert to_common_unit(2.5, "km", TABLE) == 2500.0
    assert from_common_unit(2500.0, "km", TABLE) == 2.5
    with pytest.raises(UnsupportedUnitError):
        to_common_unit(1.0, "mi", TABLE)
    with pytest.raises(InvalidInputError):
        from_common_unit("1", "km", TABLE)


def test_try_convert_success_and_failures():
    ok = try_convert(1.0, "km", "cm", TABLE)
    assert ok.ok
    assert ok.unwrap() == pytest.approx(100000.0)

    unsupported = try_convert(1.0, "km", "mile", TABLE)
    assert not unsupported.ok
    assert isinstance(unsupported.error, UnsupportedUnitError)
    assert unsupported.error.unit == "mile"
    with pytest.raises(UnsupportedUnitError):
        unsupported.unwrap()

    invalid = try_convert("x", "km", "m", TABLE)
    assert isinstance(invalid.error, InvalidInputError)
    assert invalid.value is None


def test_conversion_request():
    req = ConversionRequest(value=3.0, from_unit="km", to_unit="m")
    assert req.run(TABLE) == 3000.0
    assert req.attempt(TABLE) == ConversionResult(value=3000.0)
    assert not ConversionRequest(1.0, "m", "yd").attempt(TABLE).ok


def test_errors_share_a_base_class():
    assert issubclass(InvalidInputError, ConversionError)
    assert issubclass(UnsupportedUnitError, ConversionError)


# ---- table invariants ----

@pytest.mark.parametrize(
    "factors",
    [
        {"": 1.0},
        {"m": 0.0},
        {"m": -1.0},
        {"m": float("nan")},
        {"m": float("inf")},
        {"m": True},
        {"m": "1.0"},
        {1: 1.0},
    ],
)
def test_table_rejects_bad_entries(factors):
    with pytest.raises(ValueError):
        ConversionTable(factors)


def test_table_requires_common_unit_present():
    with pytest.raises(ValueError):
        ConversionTable({"km": 1000.0}, common_unit="m")


def test_table_is_read_only_mapping():
    assert len(TABLE) == 3
    assert TABLE["km"] == 1000.0
    assert dict(TABLE) == {"m": 1.0, "km": 1000.0, "cm": 0.01}
    with pytest.raises(TypeError):
        TABLE["mm"] = 0.001  # type: ignore[index]


def test_extended_returns_new_table():
    bigger = TABLE.extended({"mm": 0.001})
    assert "mm" in bigger
    assert "mm" not in TABLE
    assert bigger.name == "length"
    assert bigger.common_unit == "m"


def test_from_units_registers_aliases_and_rejects_duplicates():
    table = ConversionTable.from_units(
        (Unit("m", 1.0, aliases=("meter",)), Unit("ft", 0.3048, aliases=("feet",))),
        common_unit="m",
    )
    assert table["meter"] == table["m"]
    assert convert(1.0, "feet", "ft", table) == 1.0

    with pytest.raises(ValueError, match="Duplicate unit key"):
        ConversionTable.from_units((Unit("m", 1.0), Unit("M", 1.0, aliases=("m",))))


def test_units_sharing_a_multiplier_keep_the_value_exactly():
    v = 3.0 / 7.0
    assert convert(v, "ml", "cm3", VOLUME) == v
    assert convert(v, "m", "meter", LENGTH) == v
    assert convert(v, "feet", "ft", LENGTH) == v
