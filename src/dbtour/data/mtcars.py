"""The ``mtcars`` car-specifications table."""

from __future__ import annotations

import logging
from importlib import resources

import pandas as pd

from dbtour.db.frontend import Connection

log = logging.getLogger(__name__)

__all__ = ["MTCARS_COLUMNS", "load_mtcars", "write_mtcars"]

MTCARS_COLUMNS = [
    "model",
    "mpg",
    "cyl",
    "disp",
    "hp",
    "drat",
    "wt",
    "qsec",
    "vs",
    "am",
    "gear",
    "carb",
]


def load_mtcars() -> pd.DataFrame:
    """Return the 32-row ``mtcars`` table with the car name in ``model``."""

    source = resources.files("dbtour.data").joinpath("mtcars.csv")
    with source.open("r", encoding="utf-8") as fh:
        df = pd.read_csv(fh)
    missing = set(MTCARS_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"mtcars.csv is missing columns: {sorted(missing)}")
    return df[MTCARS_COLUMNS]


def write_mtcars(conn: Connection, name: str = "mtcars", *, overwrite: bool = True) -> int:
    df = load_mtcars()
    rows = conn.write_table(name, df, overwrite=overwrite)
    log.info("Wrote mtcars to table %s (%d rows)", name, rows)
    return rows
