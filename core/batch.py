# core/batch.py
from __future__ import annotations

import logging
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from core.errors import InvalidInputError, UnsupportedUnitError
from core.units import into_common, lookup_factor, out_of_common

log = logging.getLogger(__name__)


def _is_real_dtype(dtype) -> bool:
    return (
        pd.api.types.is_numeric_dtype(dtype)
        and not pd.api.types.is_bool_dtype(dtype)
        and not pd.api.types.is_complex_dtype(dtype)
    )


def convert_array(values, from_unit: str, to_unit: str, table: Mapping[str, float]) -> np.ndarray:
    """Element-wise convert(): values * table[from_unit] / table[to_unit]."""
    arr = np.asarray(values)
    if not _is_real_dtype(arr.dtype):
        raise InvalidInputError(values)
    f = lookup_factor(from_unit, table)
    common = into_common(arr.astype(float), f)
    t = lookup_factor(to_unit, table)
    if t == f:
        return arr.astype(float)
    return out_of_common(common, t)


def convert_series(series: pd.Series, from_unit: str, to_unit: str, table: Mapping[str, float]) -> pd.Series:
    if not _is_real_dtype(series.dtype):
        raise InvalidInputError(series)
    out = convert_array(series.to_numpy(), from_unit, to_unit, table)
    return pd.Series(out, index=series.index, name=series.name)


def convert_column(
    df: pd.DataFrame,
    column: str,
    to_unit: str,
    table: Mapping[str, float],
    *,
    from_unit: Optional[str] = None,
    unit_column: Optional[str] = None,
    target: Optional[str] = None,
) -> pd.DataFrame:
    """
    Return a copy of `df` with `column` converted to `to_unit`.

    The source unit is either fixed (`from_unit`) or read per row from
    `unit_column`; exactly one of them must be given. The result lands in
    `target` (defaults to overwriting `column`).
    """
    if (from_unit is None) == (unit_column is None):
        raise ValueError("Pass exactly one of from_unit or unit_column.")

    needed = {column} | ({unit_column} if unit_column else set())
    missing = needed - set(df.columns)
    if missing:
        raise ValueError(f"DataFrame is missing columns: {missing}")

    out = df.copy()
    dest = target or column

    if from_unit is not None:
        out[dest] = convert_series(df[column], from_unit, to_unit, table)
        return out

    if not _is_real_dtype(df[column].dtype):
        raise InvalidInputError(df[column])

    units = df[unit_column]
    for u in units:
        if u not in table:
            raise UnsupportedUnitError(u, getattr(table, "name", None))

    factors = units.map(lambda u: table[u]).astype(float)
    common = into_common(df[column].astype(float), factors)
    t = lookup_factor(to_unit, table)
    # rows already in a unit with the target's multiplier keep their value
    out[dest] = out_of_common(common, t).where(factors != t, df[column].astype(float))
    log.debug("convert_column: %d row(s) of '%s' -> %s", len(out), column, to_unit)
    return out
