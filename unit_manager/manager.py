# unit_manager/manager.py
from typing import Optional
from unit_manager.system import UnitSystem

# Singleton instance
__UNITS: Optional[UnitSystem] = None

def get_unit_manager() -> UnitSystem:
    """Return the global UnitSystem instance (creates on first use)."""
    global __UNITS
    if __UNITS is None:
        __UNITS = UnitSystem()
    return __UNITS

def set_units(**units: str) -> UnitSystem:
    """Programmatic update, e.g. set_units(length="ft", mass="lb"); emits unitsChanged per change."""
    u = get_unit_manager()
    for category, unit in units.items():
        if unit:
            u.set_unit(category, unit)
    return u
