# dbtour
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Exceptions raised by the database front-end."""

from __future__ import annotations

__all__ = [
    "FrontendError",
    "ConnectionClosedError",
    "ResultClearedError",
    "TableExistsError",
    "TableNotFoundError",
]


class FrontendError(RuntimeError):
    """Base class for front-end errors."""


class ConnectionClosedError(FrontendError):
    """Raised when a disconnected connection handle is used."""


class ResultClearedError(FrontendError):
    """Raised when a cleared result handle is used."""


class TableExistsError(FrontendError):
    """Raised when writing onto an existing table without overwrite/append."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Table {name!r} already exists; pass overwrite=True or append=True."
        )


class TableNotFoundError(FrontendError):
    """Raised when a named table does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Table {name!r} does not exist.")
