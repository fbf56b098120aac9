# core/catalog.py
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

import pandas as pd

from core.errors import UnknownCategoryError
from core.units import ConversionTable, Unit, convert

log = logging.getLogger(__name__)


# Length (common: m)
LENGTH = ConversionTable.from_units(
    (
        Unit("nm", 1e-9,   aliases=("nanometer", "nanometers")),
        Unit("um", 1e-6,   aliases=("micrometer", "micrometers", "micron")),
        Unit("mm", 0.001,  aliases=("millimeter", "millimeters")),
        Unit("cm", 0.01,   aliases=("centimeter", "centimeters")),
        Unit("m",  1.0,    aliases=("meter", "meters", "metre", "metres")),
        Unit("km", 1000.0, aliases=("kilometer", "kilometers")),
        Unit("in", 0.0254, aliases=("inch", "inches")),
        Unit("ft", 0.3048, aliases=("foot", "feet")),
        Unit("yd", 0.9144, aliases=("yard", "yards")),
        Unit("mi", 1609.344, aliases=("mile", "miles")),
        Unit("nmi", 1852.0, aliases=("nautical_mile",)),
    ),
    name="length",
    common_unit="m",
)

# Mass (common: kg)
MASS = ConversionTable.from_units(
    (
        Unit("mg", 1e-6,  aliases=("milligram", "milligrams")),
        Unit("g",  0.001, aliases=("gram", "grams")),
        Unit("kg", 1.0,   aliases=("kilogram", "kilograms")),
        Unit("t",  1000.0, aliases=("tonne", "tonnes")),
        Unit("oz", 0.028349523125, aliases=("ounce", "ounces")),
        Unit("lb", 0.45359237, aliases=("lbs", "pound", "pounds")),
        Unit("st", 6.35029318, aliases=("stone",)),
        Unit("ton", 907.18474, aliases=("short_ton",)),
        Unit("long_ton", 1016.0469088),
    ),
    name="mass",
    common_unit="kg",
)

# Volume (common: l)
VOLUME = ConversionTable.from_units(
    (
        Unit("ml",  0.001, aliases=("milliliter", "milliliters")),
        Unit("cm3", 0.001),
        Unit("cl",  0.01),
        Unit("dl",  0.1),
        Unit("l",   1.0,   aliases=("liter", "liters", "litre", "litres")),
        Unit("m3",  1000.0),
        Unit("tsp", 0.00492892159375, aliases=("teaspoon",)),
        Unit("tbsp", 0.01478676478125, aliases=("tablespoon",)),
        Unit("floz", 0.0295735295625, aliases=("fl_oz",)),
        Unit("cup", 0.2365882365),
        Unit("pt",  0.473176473, aliases=("pint",)),
        Unit("qt",  0.946352946, aliases=("quart",)),
        Unit("gal", 3.785411784, aliases=("gallon", "gallons")),
        Unit("imp_gal", 4.54609),
    ),
    name="volume",
    common_unit="l",
)

# Time (common: s)
TIME = ConversionTable.from_units(
    (
        Unit("ms",  0.001,  aliases=("millisecond", "milliseconds")),
        Unit("s",   1.0,    aliases=("sec", "second", "seconds")),
        Unit("min", 60.0,   aliases=("minute", "minutes")),
        Unit("h",   3600.0, aliases=("hr", "hour", "hours")),
        Unit("d",   86400.0, aliases=("day", "days")),
        Unit("wk",  604800.0, aliases=("week", "weeks")),
    ),
    name="time",
    common_unit="s",
)

# Speed (common: m/s)
SPEED = ConversionTable.from_units(
    (
        Unit("m/s",  1.0),
        Unit("km/h", 1.0 / 3.6, aliases=("kph",)),
        Unit("mph",  0.44704),
        Unit("kn",   1852.0 / 3600.0, aliases=("knot", "knots")),
        Unit("ft/s", 0.3048, aliases=("fps",)),
    ),
    name="speed",
    common_unit="m/s",
)

# Force (common: N)
FORCE = ConversionTable.from_units(
    (
        Unit("N",    1.0),
        Unit("kN",   1000.0),
        Unit("lbf",  4.4482216152605),
        Unit("kip",  4448.2216152605, aliases=("kips",)),
        Unit("kgf",  9.80665),
        Unit("tonf", 9806.65),  # metric ton-force
    ),
    name="force",
    common_unit="N",
)

# Pressure (common: Pa)
PRESSURE = ConversionTable.from_units(
    (
        Unit("Pa",  1.0),
        Unit("kPa", 1e3),
        Unit("MPa", 1e6),
        Unit("bar", 1e5),
        Unit("atm", 101325.0),
        Unit("psi", 6894.757293168),
        Unit("psf", 47.88025898),
        Unit("ksf", 47880.25898),
        Unit("mmHg", 133.322387415),
    ),
    name="pressure",
    common_unit="Pa",
)

# Energy (common: J)
ENERGY = ConversionTable.from_units(
    (
        Unit("J",    1.0),
        Unit("kJ",   1e3),
        Unit("cal",  4.184),
        Unit("kcal", 4184.0),
        Unit("Wh",   3600.0),
        Unit("kWh",  3.6e6),
        Unit("BTU",  1055.05585262),
        Unit("eV",   1.602176634e-19),
    ),
    name="energy",
    common_unit="J",
)

# Power (common: W)
POWER = ConversionTable.from_units(
    (
        Unit("W",  1.0),
        Unit("kW", 1e3),
        Unit("MW", 1e6),
        Unit("hp", 745.69987158227022),  # mechanical horsepower
    ),
    name="power",
    common_unit="W",
)

# Digital storage (common: B)
DATA = ConversionTable.from_units(
    (
        Unit("b",   0.125, aliases=("bit", "bits")),
        Unit("B",   1.0,   aliases=("byte", "bytes")),
        Unit("KB",  1e3),
        Unit("MB",  1e6),
        Unit("GB",  1e9),
        Unit("TB",  1e12),
        Unit("KiB", 1024.0),
        Unit("MiB", 1024.0 ** 2),
        Unit("GiB", 1024.0 ** 3),
        Unit("TiB", 1024.0 ** 4),
    ),
    name="data",
    common_unit="B",
)

_TABLES: Dict[str, ConversionTable] = {
    t.name: t
    for t in (LENGTH, MASS, VOLUME, TIME, SPEED, FORCE, PRESSURE, ENERGY, POWER, DATA)
}


def categories() -> List[str]:
    return list(_TABLES)


def get_table(category: str, registry: Optional[Mapping[str, ConversionTable]] = None) -> ConversionTable:
    tables = _TABLES if registry is None else registry
    try:
        return tables[category.strip().lower()]
    except KeyError as e:
        raise UnknownCategoryError(category, sorted(tables)) from e


def find_category(unit: str, registry: Optional[Mapping[str, ConversionTable]] = None) -> Optional[str]:
    """Name of the first category whose table knows `unit`, or None."""
    tables = _TABLES if registry is None else registry
    for name, table in tables.items():
        if unit in table:
            return name
    return None


def convert_in(category: str, value: float, from_unit: str, to_unit: str) -> float:
    return convert(value, from_unit, to_unit, get_table(category))


def build_registry(
    custom_units: Optional[Mapping[str, Mapping[str, float]]] = None,
) -> Dict[str, ConversionTable]:
    """
    Built-in tables with user-defined units merged in.

    custom_units: {category: {unit: multiplier_to_common}}. The built-in
    tables are never modified; merged categories get fresh tables.
    """
    registry = dict(_TABLES)
    for category, extra in (custom_units or {}).items():
        base = get_table(category)
        if not extra:
            continue
        registry[base.name] = base.extended(extra)
        log.debug("catalog: merged %d custom unit(s) into '%s'", len(extra), base.name)
    return registry


def units_frame(category: str, registry: Optional[Mapping[str, ConversionTable]] = None) -> pd.DataFrame:
    """One row per unit key: unit, to_common, common_unit."""
    table = get_table(category, registry)
    return pd.DataFrame(
        {
            "unit": list(table.keys()),
            "to_common": list(table.values()),
            "common_unit": table.common_unit,
        }
    )
