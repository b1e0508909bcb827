# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Chinook music-store sample database.

The full Chinook SQLite file can be used when it is available locally;
otherwise a trimmed copy of the five tables the tour works with is built
in memory. Column names follow the upstream Chinook schema.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields

import pandas as pd

from dbtour.db.errors import TableNotFoundError
from dbtour.db.frontend import Connection, connect

log = logging.getLogger(__name__)

__all__ = [
    "CHINOOK_TABLES",
    "ChinookTables",
    "build_sample_chinook",
    "load_chinook",
    "open_chinook",
]

CHINOOK_TABLES = ("Artist", "Album", "Employee", "Customer", "Invoice")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS Artist (
    ArtistId INTEGER PRIMARY KEY,
    Name TEXT
);
CREATE TABLE IF NOT EXISTS Album (
    AlbumId INTEGER PRIMARY KEY,
    Title TEXT NOT NULL,
    ArtistId INTEGER NOT NULL REFERENCES Artist(ArtistId)
);
CREATE TABLE IF NOT EXISTS Employee (
    EmployeeId INTEGER PRIMARY KEY,
    LastName TEXT NOT NULL,
    FirstName TEXT NOT NULL,
    Title TEXT,
    ReportsTo INTEGER REFERENCES Employee(EmployeeId),
    BirthDate TEXT,
    HireDate TEXT,
    City TEXT,
    Country TEXT,
    Email TEXT
);
CREATE TABLE IF NOT EXISTS Customer (
    CustomerId INTEGER PRIMARY KEY,
    FirstName TEXT NOT NULL,
    LastName TEXT NOT NULL,
    Company TEXT,
    City TEXT,
    Country TEXT,
    Email TEXT NOT NULL,
    SupportRepId INTEGER REFERENCES Employee(EmployeeId)
);
CREATE TABLE IF NOT EXISTS Invoice (
    InvoiceId INTEGER PRIMARY KEY,
    CustomerId INTEGER NOT NULL REFERENCES Customer(CustomerId),
    InvoiceDate TEXT NOT NULL,
    BillingCity TEXT,
    BillingCountry TEXT,
    Total NUMERIC NOT NULL
);
"""

_ARTISTS = [
    (1, "AC/DC"),
    (2, "Accept"),
    (3, "Aerosmith"),
    (4, "Alanis Morissette"),
    (5, "Alice In Chains"),
    (6, "Antônio Carlos Jobim"),
    (7, "Apocalyptica"),
    (8, "Audioslave"),
    (9, "BackBeat"),
    (10, "Billy Cobham"),
]

_ALBUMS = [
    (1, "For Those About To Rock We Salute You", 1),
    (2, "Balls to the Wall", 2),
    (3, "Restless and Wild", 2),
    (4, "Let There Be Rock", 1),
    (5, "Big Ones", 3),
    (6, "Jagged Little Pill", 4),
    (7, "Facelift", 5),
    (8, "Warner 25 Anos", 6),
    (9, "Plays Metallica By Four Cellos", 7),
    (10, "Audioslave", 8),
    (11, "Out Of Exile", 8),
]

_EMPLOYEES = [
    (1, "Adams", "Andrew", "General Manager", None, "1962-02-18 00:00:00", "2002-08-14 00:00:00", "Edmonton", "Canada", "andrew@chinookcorp.com"),
    (2, "Edwards", "Nancy", "Sales Manager", 1, "1958-12-08 00:00:00", "2002-05-01 00:00:00", "Calgary", "Canada", "nancy@chinookcorp.com"),
    (3, "Peacock", "Jane", "Sales Support Agent", 2, "1973-08-29 00:00:00", "2002-04-01 00:00:00", "Calgary", "Canada", "jane@chinookcorp.com"),
    (4, "Park", "Margaret", "Sales Support Agent", 2, "1947-09-19 00:00:00", "2003-05-03 00:00:00", "Calgary", "Canada", "margaret@chinookcorp.com"),
    (5, "Johnson", "Steve", "Sales Support Agent", 2, "1965-03-03 00:00:00", "2003-10-17 00:00:00", "Calgary", "Canada", "steve@chinookcorp.com"),
    (6, "Mitchell", "Michael", "IT Manager", 1, "1973-07-01 00:00:00", "2003-10-17 00:00:00", "Calgary", "Canada", "michael@chinookcorp.com"),
    (7, "King", "Robert", "IT Staff", 6, "1970-05-29 00:00:00", "2004-01-02 00:00:00", "Lethbridge", "Canada", "robert@chinookcorp.com"),
    (8, "Callahan", "Laura", "IT Staff", 6, "1968-01-09 00:00:00", "2004-03-04 00:00:00", "Lethbridge", "Canada", "laura@chinookcorp.com"),
]

_CUSTOMERS = [
    (1, "Luís", "Gonçalves", "Embraer - Empresa Brasileira de Aeronáutica S.A.", "São José dos Campos", "Brazil", "luisg@embraer.com.br", 3),
    (2, "Leonie", "Köhler", None, "Stuttgart", "Germany", "leonekohler@surfeu.de", 5),
    (3, "François", "Tremblay", None, "Montréal", "Canada", "ftremblay@gmail.com", 3),
    (4, "Bjørn", "Hansen", None, "Oslo", "Norway", "bjorn.hansen@yahoo.no", 4),
    (5, "František", "Wichterlová", "JetBrains s.r.o.", "Prague", "Czech Republic", "frantisekw@jetbrains.com", 4),
    (6, "Helena", "Holý", None, "Prague", "Czech Republic", "hholy@gmail.com", 5),
    (7, "Astrid", "Gruber", None, "Vienne", "Austria", "astrid.gruber@apple.at", 5),
    (8, "Daan", "Peeters", None, "Brussels", "Belgium", "daan_peeters@apple.be", 4),
]

_INVOICES = [
    (1, 2, "2009-01-01 00:00:00", "Stuttgart", "Germany", 1.98),
    (2, 4, "2009-01-02 00:00:00", "Oslo", "Norway", 3.96),
    (3, 8, "2009-01-03 00:00:00", "Brussels", "Belgium", 5.94),
    (4, 1, "2009-01-11 00:00:00", "São José dos Campos", "Brazil", 8.91),
    (5, 3, "2009-02-01 00:00:00", "Montréal", "Canada", 1.98),
    (6, 5, "2009-02-11 00:00:00", "Prague", "Czech Republic", 13.86),
    (7, 6, "2009-03-04 00:00:00", "Prague", "Czech Republic", 0.99),
    (8, 7, "2009-03-14 00:00:00", "Vienne", "Austria", 1.98),
    (9, 2, "2009-04-05 00:00:00", "Stuttgart", "Germany", 13.86),
    (10, 1, "2009-04-24 00:00:00", "São José dos Campos", "Brazil", 3.96),
    (11, 4, "2009-05-06 00:00:00", "Oslo", "Norway", 5.94),
    (12, 8, "2009-06-19 00:00:00", "Brussels", "Belgium", 0.99),
    (13, 3, "2009-07-01 00:00:00", "Montréal", "Canada", 8.91),
    (14, 5, "2009-08-02 00:00:00", "Prague", "Czech Republic", 1.98),
]


@dataclass
class ChinookTables:
    """The Chinook tables the tour works with, loaded wholesale."""

    artist: pd.DataFrame
    album: pd.DataFrame
    employee: pd.DataFrame
    customer: pd.DataFrame
    invoice: pd.DataFrame

    def sizes(self) -> dict[str, int]:
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}


def build_sample_chinook(conn: Connection) -> None:
    """Create and populate the trimmed Chinook tables in ``conn``."""

    raw = conn.raw
    with raw:
        raw.executescript(_SCHEMA)
    with raw:
        raw.executemany("INSERT OR REPLACE INTO Artist VALUES (?, ?)", _ARTISTS)
        raw.executemany("INSERT OR REPLACE INTO Album VALUES (?, ?, ?)", _ALBUMS)
        raw.executemany(
            "INSERT OR REPLACE INTO Employee VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", _EMPLOYEES
        )
        raw.executemany(
            "INSERT OR REPLACE INTO Customer VALUES (?, ?, ?, ?, ?, ?, ?, ?)", _CUSTOMERS
        )
        raw.executemany("INSERT OR REPLACE INTO Invoice VALUES (?, ?, ?, ?, ?, ?)", _INVOICES)
    log.info("Built sample Chinook database in %s", conn.database)


def load_chinook(conn: Connection) -> ChinookTables:
    """Read the Chinook tables from ``conn`` into data frames."""

    missing = [name for name in CHINOOK_TABLES if not conn.exists_table(name)]
    if missing:
        raise TableNotFoundError(missing[0])
    frames = {name.lower(): conn.read_table(name) for name in CHINOOK_TABLES}
    tables = ChinookTables(**frames)
    log.debug("Loaded Chinook tables: %s", tables.sizes())
    return tables


def open_chinook(path: str | os.PathLike[str] | None = None) -> Connection:
    """Open the Chinook database at ``path`` or build the in-memory sample."""

    if path is not None:
        if not os.path.exists(path):
            raise FileNotFoundError(f"Chinook database not found: {path}")
        conn = connect(path, read_only=True)
        log.info("Opened Chinook database %s", path)
        return conn
    conn = connect()
    build_sample_chinook(conn)
    return conn
