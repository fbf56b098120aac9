# unit_manager/system.py
from __future__ import annotations

import copy
import logging
from typing import Dict, Optional

from PySide6.QtCore import QObject, Signal

from core.catalog import get_table
from core.errors import UnsupportedUnitError
from core.settings import ConverterSettings
from core.units import ConversionTable, convert, from_common_unit, to_common_unit

log = logging.getLogger(__name__)


class UnitSystem(QObject):
    """
    Global unit manager; emits unitsChanged(category, unit) when the active
    unit of a category changes.
    """
    unitsChanged = Signal(str, str)

    def __init__(self, settings: Optional[ConverterSettings] = None):
        super().__init__()
        settings = settings or ConverterSettings()
        self._registry: Dict[str, ConversionTable] = settings.registry()
        self._custom = copy.deepcopy(settings.custom_units)
        self._units: Dict[str, str] = self._validated_units(settings.units)

    # ---- lookups ----
    def table(self, category: str) -> ConversionTable:
        return get_table(category, self._registry)

    def unit(self, category: str) -> str:
        return self._units[self.table(category).name]

    @property
    def units(self) -> Dict[str, str]:
        return dict(self._units)

    # ---- setters emit ----
    def set_unit(self, category: str, unit: str) -> None:
        table = self.table(category)
        if unit not in table:
            raise UnsupportedUnitError(unit, table.name)
        if self._units.get(table.name) != unit:
            log.debug("[UnitSystem] %s -> %s", table.name, unit)
            self._units[table.name] = unit
            self.unitsChanged.emit(table.name, unit)

    def apply_settings(self, settings: ConverterSettings) -> None:
        """Swap in new custom units and active units; emits once per category that changed."""
        registry = settings.registry()
        units = self._validated_units(settings.units, registry)
        self._registry = registry
        self._custom = copy.deepcopy(settings.custom_units)
        for category, unit in units.items():
            if self._units.get(category) != unit:
                self._units[category] = unit
                self.unitsChanged.emit(category, unit)
        log.info("UnitSystem: applied settings (%d categories)", len(units))

    def settings(self) -> ConverterSettings:
        return ConverterSettings(units=dict(self._units), custom_units=copy.deepcopy(self._custom))

    # ---- base conversions (common unit of each category) ----
    def to_base(self, category: str, value: float) -> float:
        return to_common_unit(value, self.unit(category), self.table(category))

    def from_base(self, category: str, value: float) -> float:
        return from_common_unit(value, self.unit(category), self.table(category))

    # ---- any-to-any convenience ----
    def to_active(self, category: str, value: float, from_unit: str) -> float:
        return convert(value, from_unit, self.unit(category), self.table(category))

    def convert_between(self, category: str, value: float, from_unit: str, to_unit: str) -> float:
        return convert(value, from_unit, to_unit, self.table(category))

    def _validated_units(
        self, units: Dict[str, str], registry: Optional[Dict[str, ConversionTable]] = None
    ) -> Dict[str, str]:
        registry = self._registry if registry is None else registry
        # categories not mentioned stay on their common unit
        out: Dict[str, str] = {name: table.common_unit for name, table in registry.items()}
        for category, unit in units.items():
            table = get_table(category, registry)
            if unit not in table:
                raise UnsupportedUnitError(unit, table.name)
            out[table.name] = unit
        return out
