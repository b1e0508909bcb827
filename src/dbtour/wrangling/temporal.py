# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Lag/lead and date arithmetic helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime

import numpy as np
import pandas as pd

__all__ = [
    "with_lag_lead",
    "with_change",
    "to_datetime_columns",
    "years_between",
    "days_between",
    "add_employee_ages",
    "with_month",
]

By = str | Sequence[str] | None


def _keys(by: By) -> list[str]:
    if by is None:
        return []
    return [by] if isinstance(by, str) else list(by)


def with_lag_lead(
    df: pd.DataFrame,
    column: str,
    order_by: str,
    by: By = None,
    n: int = 1,
) -> pd.DataFrame:
    """Return a copy ordered by ``order_by`` with ``<column>_lag`` and ``<column>_lead``.

    With ``by`` the shift happens within each group, so the first row of a
    group has no lag and the last has no lead.
    """

    if n < 1:
        raise ValueError("n must be >= 1")
    keys = _keys(by)
    out = df.sort_values([*keys, order_by], kind="stable", ignore_index=True)
    series = out.groupby(keys, sort=False)[column] if keys else out[column]
    out[f"{column}_lag"] = series.shift(n)
    out[f"{column}_lead"] = series.shift(-n)
    return out


def with_change(df: pd.DataFrame, column: str, order_by: str, by: By = None) -> pd.DataFrame:
    """Add ``<column>_change``: the difference from the previous row."""

    out = with_lag_lead(df, column, order_by, by=by)
    out[f"{column}_change"] = out[column] - out[f"{column}_lag"]
    return out


def to_datetime_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    out = df.copy()
    for col in columns:
        out[col] = pd.to_datetime(out[col], errors="coerce")
    return out


def years_between(start, end) -> pd.Series:
    """Whole years elapsed from ``start`` to ``end`` (birthday-style)."""

    start = pd.to_datetime(pd.Series(start))
    if isinstance(end, (str, date, datetime, pd.Timestamp)):
        end = pd.Series(pd.Timestamp(end), index=start.index)
    else:
        end = pd.to_datetime(pd.Series(end, index=start.index))
    years = end.dt.year - start.dt.year
    before_anniversary = (end.dt.month < start.dt.month) | (
        (end.dt.month == start.dt.month) & (end.dt.day < start.dt.day)
    )
    years = years - before_anniversary.astype(int)
    return years.where(start.notna() & end.notna())


def days_between(start, end) -> pd.Series:
    start = pd.to_datetime(pd.Series(start))
    end = pd.to_datetime(pd.Series(end, index=start.index))
    return (end.dt.normalize() - start.dt.normalize()).dt.days


def add_employee_ages(employees: pd.DataFrame, as_of=None) -> pd.DataFrame:
    """Add ``Age``, ``AgeAtHire`` and ``TenureYears`` to a Chinook employee frame.

    ``as_of`` defaults to today.
    """

    reference = pd.Timestamp(as_of) if as_of is not None else pd.Timestamp.today().normalize()
    out = to_datetime_columns(employees, ["BirthDate", "HireDate"])
    out["Age"] = years_between(out["BirthDate"], reference)
    out["AgeAtHire"] = years_between(out["BirthDate"], out["HireDate"])
    out["TenureYears"] = years_between(out["HireDate"], reference)
    for col in ("Age", "AgeAtHire", "TenureYears"):
        if not out[col].isna().any():
            out[col] = out[col].astype(np.int64)
    return out


def with_month(df: pd.DataFrame, column: str, name: str | None = None) -> pd.DataFrame:
    """Add a ``YYYY-MM`` period column derived from the date in ``column``."""

    out = df.copy()
    out[name or f"{column}Month"] = pd.to_datetime(out[column]).dt.to_period("M").astype(str)
    return out
