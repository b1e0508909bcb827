"""Join idioms for the tour's data frames."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

__all__ = [
    "inner_join",
    "left_join",
    "anti_join",
    "albums_with_artists",
    "employees_with_managers",
]

On = str | Sequence[str]


def _keys(on: On | None, left_on: On | None, right_on: On | None) -> dict[str, object]:
    if on is not None:
        if left_on is not None or right_on is not None:
            raise ValueError("Pass either on= or left_on=/right_on=, not both")
        return {"on": on}
    if left_on is None or right_on is None:
        raise ValueError("Both left_on and right_on are required without on=")
    return {"left_on": left_on, "right_on": right_on}


def inner_join(
    left: pd.DataFrame,
    right: pd.DataFrame,
    on: On | None = None,
    *,
    left_on: On | None = None,
    right_on: On | None = None,
    suffixes: tuple[str, str] = ("_x", "_y"),
) -> pd.DataFrame:
    keys = _keys(on, left_on, right_on)
    return left.merge(right, how="inner", suffixes=suffixes, **keys)


def left_join(
    left: pd.DataFrame,
    right: pd.DataFrame,
    on: On | None = None,
    *,
    left_on: On | None = None,
    right_on: On | None = None,
    suffixes: tuple[str, str] = ("_x", "_y"),
) -> pd.DataFrame:
    keys = _keys(on, left_on, right_on)
    return left.merge(right, how="left", suffixes=suffixes, **keys)


def anti_join(
    left: pd.DataFrame,
    right: pd.DataFrame,
    on: On | None = None,
    *,
    left_on: On | None = None,
    right_on: On | None = None,
) -> pd.DataFrame:
    """Rows of ``left`` with no match in ``right``."""

    keys = _keys(on, left_on, right_on)
    right_keys = keys.get("right_on", keys.get("on"))
    right_cols = [right_keys] if isinstance(right_keys, str) else list(right_keys)
    marked = left.merge(
        right[right_cols].drop_duplicates(), how="left", indicator=True, **keys
    )
    keep = (marked["_merge"] == "left_only").to_numpy()
    return left.loc[keep].reset_index(drop=True)


def albums_with_artists(album: pd.DataFrame, artist: pd.DataFrame) -> pd.DataFrame:
    """Album titles alongside the artist name, ordered by album id."""

    joined = inner_join(
        album, artist.rename(columns={"Name": "ArtistName"}), on="ArtistId"
    )
    return joined[["AlbumId", "Title", "ArtistId", "ArtistName"]].sort_values(
        "AlbumId", ignore_index=True
    )


def employees_with_managers(employee: pd.DataFrame) -> pd.DataFrame:
    """Self join on ``ReportsTo``; the top of the hierarchy keeps a null manager."""

    managers = employee[["EmployeeId", "FirstName", "LastName"]].rename(
        columns={
            "EmployeeId": "ManagerId",
            "FirstName": "ManagerFirstName",
            "LastName": "ManagerLastName",
        }
    )
    staff = employee[["EmployeeId", "FirstName", "LastName", "Title", "ReportsTo"]].copy()
    staff["ReportsTo"] = staff["ReportsTo"].astype("Int64")
    joined = left_join(staff, managers, left_on="ReportsTo", right_on="ManagerId")
    joined["Manager"] = (
        joined["ManagerFirstName"].str.cat(joined["ManagerLastName"], sep=" ")
    )
    return joined.drop(columns=["ManagerId", "ManagerFirstName", "ManagerLastName"]).sort_values(
        "EmployeeId", ignore_index=True
    )
