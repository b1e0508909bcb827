# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Parametric queries, literal quoting and safe SQL interpolation."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from numbers import Integral, Real
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from .frontend import Connection

log = logging.getLogger(__name__)

__all__ = [
    "Params",
    "normalize_params",
    "quote_identifier",
    "quote_literal",
    "interpolate_sql",
    "bind_query",
    "unsafe_interpolated_filter",
]

Params = Sequence[Any] | Mapping[str, Any] | None

# String literals, quoted identifiers and comments are copied through untouched;
# only bare ``?name`` tokens are substituted.
_TOKEN_RE = re.compile(
    r"""
    (?P<literal>'(?:[^']|'')*')
  | (?P<ident>"(?:[^"]|"")*")
  | (?P<comment>--[^\n]*)
  | \?(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)


def normalize_params(params: Any) -> Sequence[Any] | Mapping[str, Any]:
    """Coerce ``params`` into something ``sqlite3`` accepts."""

    if params is None:
        return ()
    if isinstance(params, Mapping):
        return {str(key): _to_driver_value(value) for key, value in params.items()}
    if isinstance(params, (str, bytes)) or not isinstance(params, Sequence | np.ndarray):
        return (_to_driver_value(params),)
    return tuple(_to_driver_value(value) for value in params)


def _to_driver_value(value: Any) -> Any:
    """Unwrap numpy scalars and timestamps into plain Python values."""

    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, pd.Timestamp):
        return value.isoformat(sep=" ")
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return value


def quote_identifier(name: str) -> str:
    """Return ``name`` as a double-quoted SQL identifier."""

    if not isinstance(name, str) or not name:
        raise ValueError("Identifier must be a non-empty string")
    if "\x00" in name:
        raise ValueError("Identifier must not contain NUL characters")
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: Any) -> str:
    """Render ``value`` as a SQL literal."""

    value = _to_driver_value(value)
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Integral):
        return str(int(value))
    if isinstance(value, Real):
        number = float(value)
        if math.isnan(number):
            return "NULL"
        if math.isinf(number):
            raise ValueError("Infinite values have no SQL literal")
        return repr(number)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "X'" + bytes(value).hex().upper() + "'"
    raise TypeError(f"Cannot quote value of type {type(value).__name__}")


def interpolate_sql(sql: str, /, **values: Any) -> str:
    """Replace ``?name`` placeholders in ``sql`` with quoted literals.

    Placeholders inside string literals, quoted identifiers and ``--``
    comments are left alone. A placeholder without a matching keyword
    argument raises ``KeyError``.
    """

    def _sub(match: re.Match[str]) -> str:
        name = match.group("name")
        if name is None:
            return match.group(0)
        if name not in values:
            raise KeyError(f"No value supplied for placeholder ?{name}")
        return quote_literal(values[name])

    return _TOKEN_RE.sub(_sub, sql)


def bind_query(conn: Connection, sql: str, params: Params) -> pd.DataFrame:
    """Run ``sql`` with driver-side binding of ``params``.

    Positional parameters use ``?`` markers, named parameters use ``:name``.
    """

    bound = normalize_params(params)
    log.debug("Binding %d parameter(s) into query", len(bound))
    return conn.get_query(sql, bound)


def unsafe_interpolated_filter(
    conn: Connection, table: str, column: str, value: Any
) -> pd.DataFrame:
    """Filter ``table`` by pasting ``value`` straight into the SQL text.

    The value is not escaped, so a crafted string can change the statement.
    Use :func:`bind_query` for anything that is not a demonstration.
    """

    literal = f"'{value}'" if isinstance(value, str) else str(value)
    sql = f"SELECT * FROM {table} WHERE {column} = {literal}"
    log.warning("Running string-interpolated query: %s", sql)
    return conn.get_query(sql)
