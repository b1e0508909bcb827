"""Grouping and summarising."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

__all__ = ["summarise_by", "count_by", "top_n_by"]

By = str | Sequence[str]


def _by(by: By) -> list[str]:
    return [by] if isinstance(by, str) else list(by)


def summarise_by(df: pd.DataFrame, by: By, **aggs: tuple[str, str]) -> pd.DataFrame:
    """Group ``df`` and apply named aggregations.

    Each keyword is an output column mapped to ``(input column, function)``,
    e.g. ``summarise_by(cars, "cyl", mean_mpg=("mpg", "mean"))``.
    """

    if not aggs:
        raise ValueError("At least one aggregation is required")
    keys = _by(by)
    return df.groupby(keys, as_index=False, sort=True).agg(**aggs)


def count_by(df: pd.DataFrame, by: By, name: str = "n") -> pd.DataFrame:
    keys = _by(by)
    return df.groupby(keys, sort=True).size().reset_index(name=name)


def top_n_by(df: pd.DataFrame, by: By, column: str, n: int = 1, *, largest: bool = True) -> pd.DataFrame:
    """The ``n`` rows with the largest (or smallest) ``column`` in each group."""

    if n < 1:
        raise ValueError("n must be >= 1")
    keys = _by(by)
    ordered = df.sort_values([*keys, column], ascending=[True] * len(keys) + [not largest], kind="stable")
    return ordered.groupby(keys, sort=True).head(n).reset_index(drop=True)
