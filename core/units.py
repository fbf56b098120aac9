# core/units.py
from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from core.errors import ConversionError, InvalidInputError, UnsupportedUnitError


@dataclass(frozen=True)
class Unit:
    symbol: str
    to_common: float
    aliases: Tuple[str, ...] = ()


class ConversionTable(Mapping):
    """
    Read-only {unit: multiplier} map for one category.

    A multiplier is how many common units one unit of that measure is worth,
    e.g. {"m": 1.0, "km": 1000.0} for length with "m" as the common unit.
    """

    def __init__(
        self,
        factors: Union[Mapping[str, float], Iterable[Tuple[str, float]]],
        *,
        name: Optional[str] = None,
        common_unit: Optional[str] = None,
    ):
        items = factors.items() if isinstance(factors, Mapping) else factors
        self._factors: Dict[str, float] = {}
        for key, factor in items:
            self._factors[key] = _checked_factor(key, factor)
        self.name = name
        self.common_unit = common_unit
        if common_unit is not None and common_unit not in self._factors:
            raise ValueError(f"Common unit '{common_unit}' not present.")

    @classmethod
    def from_units(
        cls,
        units: Iterable[Unit],
        *,
        name: Optional[str] = None,
        common_unit: Optional[str] = None,
    ) -> "ConversionTable":
        factors: Dict[str, float] = {}
        for u in units:
            for key in (u.symbol, *u.aliases):
                if key in factors:
                    raise ValueError(f"Duplicate unit key: {key}")
                factors[key] = u.to_common
        return cls(factors, name=name, common_unit=common_unit)

    def extended(self, extra: Mapping[str, float]) -> "ConversionTable":
        """Return a new table with `extra` units added (or overriding existing ones)."""
        merged = dict(self._factors)
        merged.update(extra)
        return ConversionTable(merged, name=self.name, common_unit=self.common_unit)

    # ---- Mapping API ----
    def __getitem__(self, unit: str) -> float:
        return self._factors[unit]

    def __iter__(self) -> Iterator[str]:
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)

    def __repr__(self) -> str:
        label = self.name or "table"
        return f"ConversionTable({label}, common={self.common_unit!r}, units={list(self._factors)})"


def _checked_factor(key: Any, factor: Any) -> float:
    if not isinstance(key, str) or not key:
        raise ValueError(f"Unit key must be a non-empty string, got {key!r}")
    if isinstance(factor, bool) or not isinstance(factor, numbers.Real):
        raise ValueError(f"Multiplier for '{key}' must be a real number, got {factor!r}")
    f = float(factor)
    if not math.isfinite(f) or f <= 0.0:
        raise ValueError(f"Multiplier for '{key}' must be finite and positive, got {factor!r}")
    return f


# =============================================================================
# Conversion
# =============================================================================

def require_real(value: Any) -> float:
    """Return `value` as float, or raise InvalidInputError if it is not a real number."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(value)
    return float(value)


def lookup_factor(unit: str, table: Mapping[str, float]) -> float:
    try:
        return table[unit]
    except KeyError as e:
        raise UnsupportedUnitError(unit, getattr(table, "name", None)) from e


def into_common(value, factor: float):
    """Going into the common unit always multiplies."""
    return value * factor


def out_of_common(value, factor: float):
    """Coming out of the common unit always divides."""
    return value / factor


def to_common_unit(value: float, unit: str, table: Mapping[str, float]) -> float:
    """Express `value` (given in `unit`) in the table's common unit."""
    return into_common(require_real(value), lookup_factor(unit, table))


def from_common_unit(value: float, unit: str, table: Mapping[str, float]) -> float:
    """Express `value` (given in the common unit) in `unit`."""
    return out_of_common(require_real(value), lookup_factor(unit, table))


def convert(value: float, from_unit: str, to_unit: str, table: Mapping[str, float]) -> float:
    """
    Convert `value` from `from_unit` to `to_unit` through the common unit.

    Always multiply on the way in and divide on the way out:
        value * table[from_unit] / table[to_unit]

    Raises InvalidInputError before any lookup when `value` is not a real
    number, and UnsupportedUnitError naming the first unit (source, then
    target) missing from `table`. Units sharing a multiplier return `value`
    untouched, so same-unit conversions are exact.
    """
    v = require_real(value)
    f = lookup_factor(from_unit, table)
    common = into_common(v, f)
    t = lookup_factor(to_unit, table)
    if t == f:
        return v
    return out_of_common(common, t)


@dataclass(frozen=True)
class ConversionResult:
    value: Optional[float] = None
    error: Optional[ConversionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> float:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def try_convert(
    value: float, from_unit: str, to_unit: str, table: Mapping[str, float]
) -> ConversionResult:
    """Like convert(), but failures come back as ConversionResult.error instead of raising."""
    try:
        return ConversionResult(value=convert(value, from_unit, to_unit, table))
    except ConversionError as e:
        return ConversionResult(error=e)


@dataclass(frozen=True)
class ConversionRequest:
    value: float
    from_unit: str
    to_unit: str

    def run(self, table: Mapping[str, float]) -> float:
        return convert(self.value, self.from_unit, self.to_unit, table)

    def attempt(self, table: Mapping[str, float]) -> ConversionResult:
        return try_convert(self.value, self.from_unit, self.to_unit, table)
