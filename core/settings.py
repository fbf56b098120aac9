# core/settings.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import ClassVar, Dict

from core.catalog import build_registry, categories, get_table
from core.units import ConversionTable


def default_units() -> Dict[str, str]:
    """Common unit of every built-in category."""
    return {name: get_table(name).common_unit for name in categories()}


@dataclass
class ConverterSettings:
    """Active unit per category plus user-defined units ({category: {unit: multiplier}})."""
    VERSION: ClassVar[int] = 2

    units: Dict[str, str] = field(default_factory=default_units)
    custom_units: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def registry(self) -> Dict[str, ConversionTable]:
        return build_registry(self.custom_units)

    def to_dict(self) -> dict:
        return {
            "version": self.VERSION,
            "units": dict(self.units),
            "custom_units": {cat: dict(extra) for cat, extra in self.custom_units.items()},
        }

    @staticmethod
    def from_dict(data: dict) -> "ConverterSettings":
        # missing categories fall back to their common unit
        units = default_units()
        units_in = data.get("units", {}) or {}
        for cat, unit in units_in.items():
            if isinstance(cat, str) and isinstance(unit, str) and unit:
                units[cat.strip().lower()] = unit

        custom: Dict[str, Dict[str, float]] = {}
        custom_in = data.get("custom_units", {}) or {}
        for cat, extra in custom_in.items():
            if not isinstance(extra, dict):
                continue
            custom[cat.strip().lower()] = {str(u): float(f) for u, f in extra.items()}

        return ConverterSettings(units=units, custom_units=custom)
