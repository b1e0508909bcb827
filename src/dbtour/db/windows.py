"""Window-function queries issued through the front-end."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from .frontend import Connection
from .params import quote_identifier
from .sqlite_utils import sqlite_version_info

log = logging.getLogger(__name__)

__all__ = [
    "WINDOW_FUNCTIONS_MIN_VERSION",
    "sqlite_supports_window_functions",
    "rank_within_group",
    "running_total",
    "lag_lead_sql",
]

WINDOW_FUNCTIONS_MIN_VERSION = (3, 25, 0)


def sqlite_supports_window_functions() -> bool:
    return sqlite_version_info() >= WINDOW_FUNCTIONS_MIN_VERSION


def _columns(names: str | Sequence[str] | None) -> list[str]:
    if names is None:
        return []
    if isinstance(names, str):
        return [names]
    return list(names)


def _over(partition_by: str | Sequence[str] | None, order_by: str, descending: bool = False) -> str:
    parts = []
    partition = _columns(partition_by)
    if partition:
        parts.append("PARTITION BY " + ", ".join(quote_identifier(c) for c in partition))
    direction = " DESC" if descending else ""
    parts.append(f"ORDER BY {quote_identifier(order_by)}{direction}")
    return "OVER (" + " ".join(parts) + ")"


def _check_support() -> None:
    if not sqlite_supports_window_functions():
        raise RuntimeError(
            "SQLite %s does not support window functions" % ".".join(map(str, sqlite_version_info()))
        )


def rank_within_group(
    conn: Connection,
    table: str,
    partition_by: str | Sequence[str] | None,
    order_by: str,
    *,
    descending: bool = True,
) -> pd.DataFrame:
    """Add ``rank`` and ``row_number`` columns computed within each partition."""

    _check_support()
    over = _over(partition_by, order_by, descending)
    ordering = ", ".join([*(quote_identifier(c) for c in _columns(partition_by)), '"row_number"'])
    sql = f"""
        SELECT *,
               RANK() {over} AS "rank",
               ROW_NUMBER() {over} AS "row_number"
          FROM {quote_identifier(table)}
         ORDER BY {ordering}
    """
    return conn.get_query(sql)


def running_total(
    conn: Connection,
    table: str,
    value: str,
    order_by: str,
    partition_by: str | Sequence[str] | None = None,
) -> pd.DataFrame:
    """Add ``<value>_running_total`` accumulated in ``order_by`` order."""

    _check_support()
    partition = _columns(partition_by)
    over = _over(partition, order_by)
    # ROWS framing keeps ties on order_by from being summed together.
    over = over[:-1] + " ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW)"
    alias = quote_identifier(f"{value}_running_total")
    ordering = ", ".join(quote_identifier(c) for c in [*partition, order_by])
    sql = f"""
        SELECT *,
               SUM({quote_identifier(value)}) {over} AS {alias}
          FROM {quote_identifier(table)}
         ORDER BY {ordering}
    """
    return conn.get_query(sql)


def lag_lead_sql(
    conn: Connection,
    table: str,
    value: str,
    order_by: str,
    partition_by: str | Sequence[str] | None = None,
    offset: int = 1,
) -> pd.DataFrame:
    """Add ``<value>_lag`` and ``<value>_lead`` columns using LAG/LEAD."""

    _check_support()
    if offset < 1:
        raise ValueError("offset must be >= 1")
    partition = _columns(partition_by)
    over = _over(partition, order_by)
    col = quote_identifier(value)
    ordering = ", ".join(quote_identifier(c) for c in [*partition, order_by])
    sql = f"""
        SELECT *,
               LAG({col}, {int(offset)}) {over} AS {quote_identifier(value + "_lag")},
               LEAD({col}, {int(offset)}) {over} AS {quote_identifier(value + "_lead")}
          FROM {quote_identifier(table)}
         ORDER BY {ordering}
    """
    log.debug("lag/lead over %s.%s ordered by %s", table, value, order_by)
    return conn.get_query(sql)
