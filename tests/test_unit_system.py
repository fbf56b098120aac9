# tests/test_unit_system.py

import pytest

from core.errors import UnknownCategoryError, UnsupportedUnitError
from core.settings import ConverterSettings, default_units
from unit_manager import UnitSystem, get_unit_manager, set_units


def _recorder(units: UnitSystem) -> list:
    seen = []
    units.unitsChanged.connect(lambda category, unit: seen.append((category, unit)))
    return seen


def test_defaults_to_common_units():
    units = UnitSystem()
    assert units.unit("length") == "m"
    assert units.unit("Force") == "N"
    assert units.units == default_units()


def test_set_unit_emits_once_per_change():
    units = UnitSystem()
    seen = _recorder(units)

    units.set_unit("length", "ft")
    units.set_unit("length", "ft")  # no-op
    units.set_unit("mass", "lb")

    assert seen == [("length", "ft"), ("mass", "lb")]
    assert units.unit("length") == "ft"


def test_set_unsupported_unit_raises_without_emitting():
    units = UnitSystem()
    seen = _recorder(units)
    with pytest.raises(UnsupportedUnitError) as exc:
        units.set_unit("length", "kg")
    assert exc.value.unit == "kg"
    assert seen == []
    assert units.unit("length") == "m"

    with pytest.raises(UnknownCategoryError):
        units.set_unit("temperature", "C")


def test_base_and_active_conversions():
    units = UnitSystem(ConverterSettings(units={"length": "ft"}))
    assert units.to_base("length", 1.0) == pytest.approx(0.3048)
    assert units.from_base("length", 0.3048) == pytest.approx(1.0)
    assert units.to_active("length", 12.0, "in") == pytest.approx(1.0)
    assert units.convert_between("mass", 1000.0, "g", "kg") == pytest.approx(1.0)


def test_custom_units_are_available():
    settings = ConverterSettings(
        units={"length": "furlong"},
        custom_units={"length": {"furlong": 201.168}},
    )
    units = UnitSystem(settings)
    assert units.to_base("length", 1.0) == pytest.approx(201.168)
    assert units.settings().custom_units == {"length": {"furlong": 201.168}}


def test_settings_with_unknown_unit_rejected():
    with pytest.raises(UnsupportedUnitError):
        UnitSystem(ConverterSettings(units={"length": "furlong"}))


def test_apply_settings_emits_only_changes():
    units = UnitSystem()
    seen = _recorder(units)
    new = ConverterSettings()
    new.units["volume"] = "gal"
    units.apply_settings(new)
    assert seen == [("volume", "gal")]
    assert units.settings().units["volume"] == "gal"


def test_apply_invalid_settings_leaves_state_untouched():
    units = UnitSystem()
    bad = ConverterSettings(units={"length": "ft", "mass": "stone-age"})
    with pytest.raises(UnsupportedUnitError):
        units.apply_settings(bad)
    assert units.unit("length") == "m"


def test_global_manager_is_shared():
    manager = get_unit_manager()
    assert get_unit_manager() is manager
    previous = manager.unit("time")
    try:
        assert set_units(time="h") is manager
        assert manager.unit("time") == "h"
    finally:
        manager.set_unit("time", previous)
