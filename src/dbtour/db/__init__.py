"""Database front-end: connections, result handles, chunked fetch and helpers."""

from .chunks import fetch_chunks_for, fetch_in_chunks, iter_chunks, read_query_chunked
from .errors import (
    ConnectionClosedError,
    FrontendError,
    ResultClearedError,
    TableExistsError,
    TableNotFoundError,
)
from .frontend import ColumnInfo, Connection, Result, connect
from .params import (
    bind_query,
    interpolate_sql,
    quote_identifier,
    quote_literal,
    unsafe_interpolated_filter,
)
from .windows import (
    lag_lead_sql,
    rank_within_group,
    running_total,
    sqlite_supports_window_functions,
)

__all__ = [
    "connect",
    "Connection",
    "Result",
    "ColumnInfo",
    "FrontendError",
    "ConnectionClosedError",
    "ResultClearedError",
    "TableExistsError",
    "TableNotFoundError",
    "iter_chunks",
    "fetch_in_chunks",
    "fetch_chunks_for",
    "read_query_chunked",
    "bind_query",
    "interpolate_sql",
    "quote_identifier",
    "quote_literal",
    "unsafe_interpolated_filter",
    "rank_within_group",
    "running_total",
    "lag_lead_sql",
    "sqlite_supports_window_functions",
]
