# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""A guided tour of a database front-end and data-wrangling idioms over SQLite."""

from dbtour.db import (
    ColumnInfo,
    Connection,
    ConnectionClosedError,
    FrontendError,
    Result,
    ResultClearedError,
    TableExistsError,
    TableNotFoundError,
    connect,
)
from dbtour.tour import run_tour

__version__ = "0.1.0"

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
    "run_tour",
]
