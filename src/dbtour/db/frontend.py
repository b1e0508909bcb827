# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Database front-end over the embedded SQLite driver.

The surface follows the usual database-interface shape: open a connection,
inspect tables and fields, write and read whole tables, and either pull a
query's rows in one call (:meth:`Connection.get_query`) or keep a live
result handle (:meth:`Connection.send_query`) and fetch from it in pieces.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass

import pandas as pd

from .errors import (
    ConnectionClosedError,
    ResultClearedError,
    TableExistsError,
    TableNotFoundError,
)
from .params import Params, normalize_params, quote_identifier
from .sqlite_utils import MEMORY, db_cursor, open_db

log = logging.getLogger(__name__)

__all__ = ["ColumnInfo", "Connection", "Result", "connect"]

_SQLITE_TYPE_NAMES = {
    int: "integer",
    float: "real",
    str: "text",
    bytes: "blob",
}


@dataclass(frozen=True)
class ColumnInfo:
    """Name and storage class of a result column.

    ``type`` is taken from the first non-NULL value seen so far and stays
    ``None`` until one has been fetched.
    """

    name: str
    type: str | None = None


def connect(
    database: str | os.PathLike[str] = MEMORY,
    *,
    read_only: bool = False,
    timeout: float = 30.0,
) -> Connection:
    """Open a connection handle to ``database``."""

    mode = "ro" if read_only else "rwc"
    raw = open_db(database, mode=mode, timeout=timeout)
    conn = Connection(raw, os.fspath(database))
    log.debug("Connected to %s (mode=%s)", conn.database, mode)
    return conn


class Result:
    """Live cursor over a query's rows, consumed by repeated :meth:`fetch` calls."""

    def __init__(self, connection: Connection, statement: str, params: Params = None):
        self._connection = connection
        self.statement = statement
        self._cursor: sqlite3.Cursor | None = None
        self._columns: list[str] = []
        self._types: dict[str, str] = {}
        self._pending: tuple | None = None
        self._completed = False
        self._rows_fetched = 0
        self._execute(params)

    # ------------------------------------------------------------------ state

    def _execute(self, params: Params) -> None:
        raw = self._connection._require_open()
        # A failed execute leaves the previous cursor and counters untouched.
        cursor = raw.execute(self.statement, normalize_params(params))
        if self._cursor is not None:
            self._cursor.close()
        self._cursor = cursor
        description = cursor.description or ()
        self._columns = [col[0] for col in description]
        self._types = {}
        self._pending = None
        self._rows_fetched = 0
        self._completed = not self._columns
        if self._completed:
            raw.commit()
        else:
            self._peek()

    def _peek(self) -> None:
        """Read one row ahead so completion is known before the next fetch."""

        assert self._cursor is not None
        row = self._cursor.fetchone()
        if row is None:
            self._completed = True
            self._pending = None
        else:
            self._pending = row

    def _require_valid(self) -> sqlite3.Cursor:
        if self._cursor is None:
            raise ResultClearedError(f"Result for {self.statement!r} has been cleared")
        self._connection._require_open()
        return self._cursor

    def _note_types(self, rows: list[tuple]) -> None:
        if len(self._types) == len(self._columns):
            return
        for row in rows:
            for name, value in zip(self._columns, row, strict=False):
                if name in self._types or value is None:
                    continue
                self._types[name] = _SQLITE_TYPE_NAMES.get(type(value), type(value).__name__)

    # ------------------------------------------------------------- public API

    def fetch(self, n: int = -1) -> pd.DataFrame:
        """Return the next ``n`` rows (all remaining rows when ``n`` is negative).

        An exhausted result returns an empty frame that still carries the
        query's column names.
        """

        cursor = self._require_valid()
        if n == 0 or self._completed:
            return pd.DataFrame(columns=self._columns)

        rows: list[tuple] = []
        if self._pending is not None:
            rows.append(self._pending)
            self._pending = None
        if n < 0:
            rows.extend(cursor.fetchall())
            self._completed = True
        else:
            if len(rows) < n:
                rows.extend(cursor.fetchmany(n - len(rows)))
            self._peek()

        self._rows_fetched += len(rows)
        self._note_types(rows)
        log.debug(
            "Fetched %d row(s) from %r (total=%d, completed=%s)",
            len(rows),
            self.statement,
            self._rows_fetched,
            self._completed,
        )
        return pd.DataFrame.from_records(rows, columns=self._columns)

    def has_completed(self) -> bool:
        """Return whether every row of the result has been fetched."""

        self._require_valid()
        return self._completed

    def row_count(self) -> int:
        """Return the number of rows fetched so far."""

        self._require_valid()
        return self._rows_fetched

    def column_info(self) -> list[ColumnInfo]:
        self._require_valid()
        return [ColumnInfo(name, self._types.get(name)) for name in self._columns]

    def bind(self, params: Params) -> Result:
        """Re-run the statement with new parameters and rewind the counters."""

        self._require_valid()
        log.debug("Rebinding %r", self.statement)
        self._execute(params)
        return self

    def is_valid(self) -> bool:
        return self._cursor is not None and self._connection.is_valid()

    def clear(self) -> None:
        """Release the cursor. Calling this more than once is harmless."""

        if self._cursor is None:
            return
        self._cursor.close()
        self._cursor = None
        self._pending = None
        self._connection._forget(self)
        log.debug("Cleared result for %r", self.statement)

    def __enter__(self) -> Result:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()

    def __repr__(self) -> str:
        state = "cleared" if self._cursor is None else f"rows={self._rows_fetched}"
        return f"<Result {self.statement!r} {state}>"


class Connection:
    """An open session to a SQLite database."""

    def __init__(self, raw: sqlite3.Connection, database: str):
        self._raw: sqlite3.Connection | None = raw
        self.database = database
        self._results: list[Result] = []

    def _require_open(self) -> sqlite3.Connection:
        if self._raw is None:
            raise ConnectionClosedError(f"Connection to {self.database} is closed")
        return self._raw

    def _forget(self, result: Result) -> None:
        if result in self._results:
            self._results.remove(result)

    @property
    def raw(self) -> sqlite3.Connection:
        """The underlying driver connection."""

        return self._require_open()

    # ---------------------------------------------------------------- catalog

    def list_tables(self) -> list[str]:
        raw = self._require_open()
        rows = raw.execute(
            """
            SELECT name
              FROM sqlite_master
             WHERE type IN ('table', 'view')
               AND name NOT LIKE 'sqlite_%'
             ORDER BY name
            """
        ).fetchall()
        return [row[0] for row in rows]

    def _stored_name(self, name: str) -> str | None:
        raw = self._require_open()
        row = raw.execute(
            "SELECT name FROM sqlite_master"
            " WHERE type IN ('table', 'view') AND name = ? COLLATE NOCASE",
            (name,),
        ).fetchone()
        return row[0] if row is not None else None

    def exists_table(self, name: str) -> bool:
        return self._stored_name(name) is not None

    def list_fields(self, name: str) -> list[str]:
        """Return the column names of ``name`` in declared order."""

        raw = self._require_open()
        with db_cursor(raw) as cur:
            rows = cur.execute(f"PRAGMA table_info({quote_identifier(name)})").fetchall()
        if not rows:
            raise TableNotFoundError(name)
        return [row[1] for row in rows]

    # ----------------------------------------------------------------- tables

    def write_table(
        self,
        name: str,
        df: pd.DataFrame,
        *,
        overwrite: bool = False,
        append: bool = False,
        index: bool = False,
    ) -> int:
        """Write ``df`` into table ``name`` and return the number of rows written."""

        raw = self._require_open()
        if overwrite and append:
            raise ValueError("overwrite and append are mutually exclusive")
        stored = self._stored_name(name)
        if stored is not None and not (overwrite or append):
            raise TableExistsError(name)
        # pandas matches table names case-sensitively.
        name = stored or name
        if_exists = "replace" if overwrite else "append" if append else "fail"
        df.to_sql(name, raw, if_exists=if_exists, index=index)
        raw.commit()
        log.debug("Wrote %d row(s) to %s (if_exists=%s)", len(df), name, if_exists)
        return len(df)

    def read_table(self, name: str) -> pd.DataFrame:
        raw = self._require_open()
        if not self.exists_table(name):
            raise TableNotFoundError(name)
        return pd.read_sql_query(f"SELECT * FROM {quote_identifier(name)}", raw)

    def remove_table(self, name: str) -> None:
        raw = self._require_open()
        if not self.exists_table(name):
            raise TableNotFoundError(name)
        raw.execute(f"DROP TABLE {quote_identifier(name)}")
        raw.commit()
        log.debug("Removed table %s", name)

    # ---------------------------------------------------------------- queries

    def get_query(self, sql: str, params: Params = None) -> pd.DataFrame:
        """Run ``sql`` and return every row in one frame."""

        raw = self._require_open()
        log.debug("get_query: %s", sql)
        return pd.read_sql_query(sql, raw, params=normalize_params(params))

    def send_query(self, sql: str, params: Params = None) -> Result:
        """Run ``sql`` and return a live :class:`Result` to fetch from."""

        self._require_open()
        log.debug("send_query: %s", sql)
        result = Result(self, sql, params)
        self._results.append(result)
        return result

    def execute(self, sql: str, params: Params = None) -> int:
        """Run a statement that returns no rows; return the affected row count."""

        raw = self._require_open()
        with db_cursor(raw) as cur:
            cur.execute(sql, normalize_params(params))
            count = cur.rowcount
        raw.commit()
        log.debug("execute: %s (rows=%d)", sql, count)
        return count

    # -------------------------------------------------------------- lifecycle

    def open_results(self) -> list[Result]:
        return list(self._results)

    def is_valid(self) -> bool:
        return self._raw is not None

    def disconnect(self) -> None:
        """Close the connection, clearing any results still open."""

        if self._raw is None:
            return
        for result in list(self._results):
            log.warning("Closing open result set for %r on disconnect", result.statement)
            result.clear()
        self._raw.close()
        self._raw = None
        log.debug("Disconnected from %s", self.database)

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        state = "open" if self._raw is not None else "closed"
        return f"<Connection {self.database} {state}>"
