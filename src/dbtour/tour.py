# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
The tour: an ordered sequence of notebook-style cells.

Each cell receives the shared :class:`TourSession` and returns something
printable. Cells pull their prerequisites through the session (an open
connection with ``mtcars`` written, the Chinook tables loaded), so any
subset of cells can run on its own.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import pandas as pd

from dbtour.config import TourSettings, load_settings
from dbtour.data import ChinookTables, load_chinook, open_chinook, write_mtcars
from dbtour.db import (
    Connection,
    bind_query,
    connect,
    fetch_chunks_for,
    fetch_in_chunks,
    interpolate_sql,
    iter_chunks,
    lag_lead_sql,
    rank_within_group,
    read_query_chunked,
    running_total,
    unsafe_interpolated_filter,
)
from dbtour.wrangling import (
    add_employee_ages,
    albums_with_artists,
    anti_join,
    bucket_invoice_total,
    bucket_mpg,
    count_by,
    employees_with_managers,
    summarise_by,
    with_change,
    with_month,
)

log = logging.getLogger(__name__)

__all__ = [
    "Cell",
    "CellOutput",
    "TourSession",
    "CELLS",
    "cell_names",
    "format_output",
    "run_tour",
]


@dataclass
class TourSession:
    """State shared between cells: connections plus frames handed along."""

    settings: TourSettings
    conn: Connection | None = None
    chinook_conn: Connection | None = None
    chinook: ChinookTables | None = None
    frames: dict[str, pd.DataFrame] = field(default_factory=dict)

    def cars(self) -> Connection:
        """The main connection, opened on first use with ``mtcars`` written."""

        if self.conn is None or not self.conn.is_valid():
            self.conn = connect(self.settings.database)
        if not self.conn.exists_table("mtcars"):
            write_mtcars(self.conn)
        return self.conn

    def chinook_tables(self) -> ChinookTables:
        if self.chinook is None:
            if self.chinook_conn is None or not self.chinook_conn.is_valid():
                self.chinook_conn = open_chinook(self.settings.chinook_path)
            self.chinook = load_chinook(self.chinook_conn)
        return self.chinook

    def close(self) -> None:
        for conn in (self.conn, self.chinook_conn):
            if conn is not None:
                conn.disconnect()


@dataclass(frozen=True)
class Cell:
    name: str
    title: str
    func: Callable[[TourSession], object]


@dataclass
class CellOutput:
    name: str
    title: str
    value: object


CELLS: list[Cell] = []


def _cell(name: str, title: str):
    def register(func: Callable[[TourSession], object]):
        CELLS.append(Cell(name, title, func))
        return func

    return register


def cell_names() -> list[str]:
    return [c.name for c in CELLS]


# ---------------------------------------------------------------------------
# Front-end basics
# ---------------------------------------------------------------------------


@_cell("connect", "Connect and write a table")
def connect_and_write(session: TourSession) -> object:
    conn = session.cars()
    return {"connection": repr(conn), "tables": conn.list_tables()}


@_cell("list_fields", "List the fields of a table")
def list_fields(session: TourSession) -> object:
    return session.cars().list_fields("mtcars")


@_cell("read_table", "Read a whole table back")
def read_table(session: TourSession) -> object:
    cars = session.cars().read_table("mtcars")
    session.frames["mtcars"] = cars
    return cars.head()


@_cell("send_query", "Send a query and fetch from the result")
def send_query(session: TourSession) -> object:
    res = session.cars().send_query("SELECT model, mpg, cyl FROM mtcars WHERE cyl = 4")
    first = res.fetch(5)
    log.info(
        "Fetched %d of the four-cylinder cars; completed=%s", res.row_count(), res.has_completed()
    )
    rest = res.fetch()
    info = {
        "first_fetch": len(first),
        "second_fetch": len(rest),
        "completed": res.has_completed(),
        "columns": [c.name for c in res.column_info()],
    }
    res.clear()
    return info


@_cell("chunked_fetch", "Fetch a result in chunks")
def chunked_fetch(session: TourSession) -> object:
    conn = session.cars()
    size = session.settings.chunk_size
    sql = "SELECT * FROM mtcars ORDER BY mpg"

    with conn.send_query(sql) as res:
        chunk_sizes = [len(chunk) for chunk in iter_chunks(res, size)]
    with conn.send_query(sql) as res:
        via_while = fetch_in_chunks(res, size)
    total = len(via_while)
    with conn.send_query(sql) as res:
        via_for = fetch_chunks_for(res, size, max_chunks=math.ceil(total / size) + 1)
    via_pandas = pd.concat(list(read_query_chunked(conn, sql, size)), ignore_index=True)

    return pd.DataFrame(
        {
            "variant": ["iter_chunks", "while loop", "for loop", "pandas chunksize"],
            "rows": [sum(chunk_sizes), len(via_while), len(via_for), len(via_pandas)],
            "matches_while": [
                sum(chunk_sizes) == total,
                True,
                via_for.equals(via_while),
                len(via_pandas) == total,
            ],
        }
    )


# ---------------------------------------------------------------------------
# Parameters and SQL windows
# ---------------------------------------------------------------------------


@_cell("parametric_query", "Bind parameters instead of pasting values")
def parametric_query(session: TourSession) -> object:
    conn = session.cars()
    picked = bind_query(
        conn,
        "SELECT model, mpg, cyl FROM mtcars WHERE cyl = :cyl AND mpg > :mpg ORDER BY mpg DESC",
        {"cyl": 6, "mpg": 19},
    )
    counts = []
    with conn.send_query("SELECT COUNT(*) AS n FROM mtcars WHERE cyl = ?", (4,)) as res:
        for cyl in (4, 6, 8):
            res.bind((cyl,))
            counts.append({"cyl": cyl, "n": int(res.fetch()["n"].iloc[0])})
    session.frames["cyl_counts"] = pd.DataFrame(counts)
    return picked


@_cell("interpolated_filter", "Interpolate a filter value into the SQL text")
def interpolated_filter(session: TourSession) -> object:
    conn = session.cars()
    pasted = unsafe_interpolated_filter(conn, "mtcars", "cyl", 8)
    safe_sql = interpolate_sql("SELECT * FROM mtcars WHERE cyl = ?cyl", cyl=8)
    safe = conn.get_query(safe_sql)
    return {"interpolated_rows": len(pasted), "quoted_sql": safe_sql, "quoted_rows": len(safe)}


@_cell("window_functions", "Window functions in SQL")
def window_functions(session: TourSession) -> object:
    conn = session.cars()
    ranked = rank_within_group(conn, "mtcars", "cyl", "mpg")
    best = ranked[ranked["rank"] <= 2][["cyl", "model", "mpg", "rank"]]
    totals = running_total(conn, "mtcars", "hp", order_by="model", partition_by="cyl")
    session.frames["hp_running_total"] = totals
    return best.reset_index(drop=True)


# ---------------------------------------------------------------------------
# Wrangling the music store
# ---------------------------------------------------------------------------


@_cell("load_chinook", "Load the music-store tables")
def load_music_store(session: TourSession) -> object:
    return session.chinook_tables().sizes()


@_cell("joins", "Joins")
def joins(session: TourSession) -> object:
    tables = session.chinook_tables()
    albums = albums_with_artists(tables.album, tables.artist)
    session.frames["albums"] = albums
    without_albums = anti_join(tables.artist, tables.album, on="ArtistId")
    managers = employees_with_managers(tables.employee)
    return {
        "albums": albums.head(),
        "artists_without_albums": without_albums["Name"].tolist(),
        "reporting_lines": managers[["FirstName", "LastName", "Manager"]],
    }


@_cell("grouping", "Group and summarise")
def grouping(session: TourSession) -> object:
    cars = session.frames.get("mtcars")
    if cars is None:
        cars = session.cars().read_table("mtcars")
    by_cyl = summarise_by(
        cars, "cyl", n=("model", "count"), mean_mpg=("mpg", "mean"), max_hp=("hp", "max")
    )
    albums = session.frames.get("albums")
    if albums is None:
        tables = session.chinook_tables()
        albums = albums_with_artists(tables.album, tables.artist)
    per_artist = count_by(albums, "ArtistName", name="albums").sort_values(
        ["albums", "ArtistName"], ascending=[False, True], ignore_index=True
    )
    return {"mtcars_by_cyl": by_cyl.round(2), "albums_per_artist": per_artist}


@_cell("lag_lead", "Lag and lead")
def lag_lead(session: TourSession) -> object:
    invoices = session.chinook_tables().invoice
    changes = with_change(invoices, "Total", order_by="InvoiceDate", by="CustomerId")
    session.frames["invoice_changes"] = changes
    in_sql = lag_lead_sql(
        session.chinook_conn, "Invoice", "Total", order_by="InvoiceDate", partition_by="CustomerId"
    )
    agree = (
        changes["Total_lag"].fillna(-1).to_numpy() == in_sql["Total_lag"].fillna(-1).to_numpy()
    ).all()
    log.info("pandas and SQL lag agree: %s", bool(agree))
    return {
        "changes": changes[["CustomerId", "InvoiceDate", "Total", "Total_lag", "Total_change"]],
        "sql_agrees": bool(agree),
    }


@_cell("dates", "Date arithmetic")
def dates(session: TourSession) -> object:
    tables = session.chinook_tables()
    employees = add_employee_ages(tables.employee)
    monthly = with_month(tables.invoice, "InvoiceDate")
    per_month = summarise_by(monthly, "InvoiceDateMonth", total=("Total", "sum")).round(2)
    return {
        "employees": employees[["FirstName", "LastName", "Age", "AgeAtHire", "TenureYears"]],
        "sales_per_month": per_month,
    }


@_cell("case_when", "Case-when bucketing")
def case_when_buckets(session: TourSession) -> object:
    cars = session.frames.get("mtcars")
    if cars is None:
        cars = session.cars().read_table("mtcars")
    cars = cars.assign(economy=bucket_mpg(cars))
    invoices = session.chinook_tables().invoice
    invoices = invoices.assign(size=bucket_invoice_total(invoices))
    return {
        "mpg_buckets": count_by(cars, "economy"),
        "invoice_buckets": count_by(invoices, "size"),
    }


@_cell("disconnect", "Disconnect")
def disconnect(session: TourSession) -> object:
    session.close()
    return {
        "mtcars_connection_valid": session.conn.is_valid() if session.conn else False,
        "chinook_connection_valid": (
            session.chinook_conn.is_valid() if session.chinook_conn else False
        ),
    }


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def format_output(value: object) -> str:
    """Render a cell's return value as text."""

    if isinstance(value, pd.DataFrame):
        return value.to_string(index=False) if not value.empty else "(no rows)"
    if isinstance(value, pd.Series):
        return value.to_string()
    if isinstance(value, dict):
        parts = []
        for key, item in value.items():
            text = format_output(item)
            if "\n" in text:
                parts.append(f"{key}:\n{text}")
            else:
                parts.append(f"{key}: {text}")
        return "\n".join(parts)
    return str(value)


def run_tour(
    names: Iterable[str] | None = None,
    settings: TourSettings | None = None,
) -> list[CellOutput]:
    """Run the selected cells (all by default) in tour order.

    Cells switched off through the ``features`` setting are skipped.
    Unknown cell names raise ``KeyError``.
    """

    settings = settings or load_settings()
    known = {c.name: c for c in CELLS}
    if names is None:
        selected = list(CELLS)
    else:
        wanted = list(names)
        unknown = [n for n in wanted if n not in known]
        if unknown:
            raise KeyError(f"Unknown cell(s): {', '.join(unknown)}")
        selected = [c for c in CELLS if c.name in wanted]

    session = TourSession(settings=settings)
    outputs: list[CellOutput] = []
    try:
        for c in selected:
            if not settings.feature(c.name):
                log.info("Skipping cell %s (disabled)", c.name)
                continue
            log.debug("Running cell %s", c.name)
            outputs.append(CellOutput(c.name, c.title, c.func(session)))
    finally:
        session.close()
    return outputs
