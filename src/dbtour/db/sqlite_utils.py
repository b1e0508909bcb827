"""
Connection helpers for the embedded SQLite database.

URI open modes and a cursor context manager used by the front-end.
"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

__all__ = ["MEMORY", "open_db", "db_cursor", "sqlite_version_info"]

MEMORY = ":memory:"


# ---- Connections ------------------------------------------------------------


def open_db(
    path: str | os.PathLike[str],
    *,
    mode: str = "rwc",
    timeout: float = 30.0,
) -> sqlite3.Connection:
    """
    Open a SQLite database with predictable defaults.

    mode: "ro" (read-only), "rw", "rwc" (create if needed). Default: "rwc".
    ``":memory:"`` always opens a private in-memory database.
    """
    path = os.fspath(path)
    if path == MEMORY:
        conn = sqlite3.connect(MEMORY, timeout=timeout)
    else:
        uri = f"file:{path}?mode={mode}"
        conn = sqlite3.connect(uri, uri=True, timeout=timeout)
    return conn


# ---- Cursors ----------------------------------------------------------------


@contextmanager
def db_cursor(conn: sqlite3.Connection) -> Iterator[sqlite3.Cursor]:
    """Context manager that closes the cursor after use."""

    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()


def sqlite_version_info() -> tuple[int, ...]:
    """Return the linked SQLite library version as a tuple of ints."""

    return tuple(int(part) for part in sqlite3.sqlite_version.split("."))
