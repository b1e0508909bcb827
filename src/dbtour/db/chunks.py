# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Chunked fetching from a live result handle.

Two accumulation styles are provided: a ``while`` loop that runs until the
result reports completion, and a ``for`` loop bounded by a chunk count. Both
collect the chunks into a list and concatenate once at the end, so for the
same statement and chunk size they return the same frame.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pandas as pd

from .frontend import Connection, Result
from .params import Params, normalize_params

log = logging.getLogger(__name__)

__all__ = [
    "iter_chunks",
    "fetch_in_chunks",
    "fetch_chunks_for",
    "read_query_chunked",
]


def _check_chunk_size(chunk_size: int) -> int:
    size = int(chunk_size)
    if size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size!r}")
    return size


def _concat(chunks: list[pd.DataFrame], result: Result) -> pd.DataFrame:
    if not chunks:
        return result.fetch(0)
    return pd.concat(chunks, ignore_index=True)


def iter_chunks(result: Result, chunk_size: int) -> Iterator[pd.DataFrame]:
    """Yield successive non-empty frames of at most ``chunk_size`` rows."""

    size = _check_chunk_size(chunk_size)
    index = 0
    while not result.has_completed():
        chunk = result.fetch(size)
        if chunk.empty:
            break
        index += 1
        log.debug("Chunk %d: %d row(s)", index, len(chunk))
        yield chunk


def fetch_in_chunks(result: Result, chunk_size: int) -> pd.DataFrame:
    """Drain ``result`` with a ``while`` loop and return all rows in one frame."""

    size = _check_chunk_size(chunk_size)
    chunks: list[pd.DataFrame] = []
    while not result.has_completed():
        chunks.append(result.fetch(size))
    log.debug("Collected %d chunk(s) from %r", len(chunks), result.statement)
    return _concat(chunks, result)


def fetch_chunks_for(result: Result, chunk_size: int, max_chunks: int) -> pd.DataFrame:
    """Fetch at most ``max_chunks`` chunks with a ``for`` loop.

    Stops early once the result is exhausted, so asking for more chunks than
    exist returns the same frame as :func:`fetch_in_chunks`.
    """

    size = _check_chunk_size(chunk_size)
    if max_chunks < 0:
        raise ValueError("max_chunks must be >= 0")
    chunks: list[pd.DataFrame] = []
    for _ in range(max_chunks):
        if result.has_completed():
            break
        chunks.append(result.fetch(size))
    log.debug("Collected %d chunk(s) from %r", len(chunks), result.statement)
    return _concat(chunks, result)


def read_query_chunked(
    conn: Connection, sql: str, chunk_size: int, params: Params = None
) -> Iterator[pd.DataFrame]:
    """Yield frames from pandas' own ``chunksize`` reader."""

    size = _check_chunk_size(chunk_size)
    yield from pd.read_sql_query(
        sql, conn.raw, params=normalize_params(params), chunksize=size
    )
