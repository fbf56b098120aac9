# unit_manager/__init__.py

from .converter import (
    convert_length,
    convert_mass,
    convert_volume,
    convert_time,
    convert_speed,
    convert_force,
    convert_pressure,
    convert_energy,
    convert_power,
    convert_data,
)
from .system import UnitSystem
from .manager import get_unit_manager, set_units

__all__ = [
    "convert_length",
    "convert_mass",
    "convert_volume",
    "convert_time",
    "convert_speed",
    "convert_force",
    "convert_pressure",
    "convert_energy",
    "convert_power",
    "convert_data",
    "UnitSystem",
    "get_unit_manager",
    "set_units",
]
