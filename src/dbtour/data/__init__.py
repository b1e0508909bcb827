"""Toy datasets used throughout the tour."""

from .chinook import (
    CHINOOK_TABLES,
    ChinookTables,
    build_sample_chinook,
    load_chinook,
    open_chinook,
)
from .mtcars import MTCARS_COLUMNS, load_mtcars, write_mtcars

__all__ = [
    "CHINOOK_TABLES",
    "ChinookTables",
    "build_sample_chinook",
    "load_chinook",
    "open_chinook",
    "MTCARS_COLUMNS",
    "load_mtcars",
    "write_mtcars",
]
