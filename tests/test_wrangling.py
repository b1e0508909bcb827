import numpy as np
import pandas as pd
import pytest

from dbtour.data import ChinookTables, build_sample_chinook, load_chinook, load_mtcars
from dbtour.db import connect
from dbtour.wrangling import (
    add_employee_ages,
    albums_with_artists,
    anti_join,
    bucket_invoice_total,
    bucket_mpg,
    case_when,
    count_by,
    days_between,
    employees_with_managers,
    inner_join,
    summarise_by,
    top_n_by,
    with_change,
    with_lag_lead,
    with_month,
    years_between,
)


@pytest.fixture(scope="module")
def chinook() -> ChinookTables:
    with connect() as conn:
        build_sample_chinook(conn)
        return load_chinook(conn)


# ---- joins ---------------------------------------------------------------


def test_albums_with_artists(chinook):
    albums = albums_with_artists(chinook.album, chinook.artist)
    assert len(albums) == 11
    assert albums.loc[0, "ArtistName"] == "AC/DC"
    assert albums.loc[albums["Title"] == "Out Of Exile", "ArtistName"].iloc[0] == "Audioslave"


def test_anti_join_finds_artists_without_albums(chinook):
    lonely = anti_join(chinook.artist, chinook.album, on="ArtistId")
    assert lonely["Name"].tolist() == ["BackBeat", "Billy Cobham"]


def test_employees_with_managers(chinook):
    staff = employees_with_managers(chinook.employee).set_index("FirstName")
    assert pd.isna(staff.loc["Andrew", "Manager"])
    assert staff.loc["Jane", "Manager"] == "Nancy Edwards"
    assert staff.loc["Robert", "Manager"] == "Michael Mitchell"


def test_join_key_arguments_are_exclusive(chinook):
    with pytest.raises(ValueError):
        inner_join(chinook.album, chinook.artist, on="ArtistId", left_on="ArtistId", right_on="ArtistId")
    with pytest.raises(ValueError):
        inner_join(chinook.album, chinook.artist, left_on="ArtistId")


# ---- grouping ------------------------------------------------------------


def test_summarise_mtcars_by_cylinders():
    summary = summarise_by(
        load_mtcars(), "cyl", n=("model", "count"), mean_mpg=("mpg", "mean"), max_hp=("hp", "max")
    )
    assert summary["cyl"].tolist() == [4, 6, 8]
    assert summary["n"].tolist() == [11, 7, 14]
    assert summary["mean_mpg"].tolist() == pytest.approx([26.6636, 19.7429, 15.1], abs=1e-3)
    assert summary["max_hp"].tolist() == [113, 175, 335]


def test_summarise_requires_aggregations():
    with pytest.raises(ValueError):
        summarise_by(load_mtcars(), "cyl")


def test_count_and_top_n(chinook):
    per_artist = count_by(chinook.album, "ArtistId", name="albums")
    assert dict(zip(per_artist["ArtistId"], per_artist["albums"])) == {
        1: 2,
        2: 2,
        3: 1,
        4: 1,
        5: 1,
        6: 1,
        7: 1,
        8: 2,
    }
    best = top_n_by(load_mtcars(), "cyl", "mpg", n=1)
    assert best["model"].tolist() == ["Toyota Corolla", "Hornet 4 Drive", "Pontiac Firebird"]
    worst = top_n_by(load_mtcars(), "cyl", "hp", n=1, largest=False)
    assert worst["model"].tolist()[:2] == ["Honda Civic", "Valiant"]


# ---- lag / lead ----------------------------------------------------------


def test_with_lag_lead_within_groups(chinook):
    shifted = with_lag_lead(chinook.invoice, "Total", order_by="InvoiceDate", by="CustomerId")
    leonie = shifted[shifted["CustomerId"] == 2]
    assert leonie["InvoiceId"].tolist() == [1, 9]
    assert np.isnan(leonie["Total_lag"].iloc[0])
    assert leonie["Total_lead"].iloc[0] == pytest.approx(13.86)
    assert leonie["Total_lag"].iloc[1] == pytest.approx(1.98)
    assert np.isnan(leonie["Total_lead"].iloc[1])


def test_with_lag_lead_ungrouped():
    df = pd.DataFrame({"t": [3, 1, 2], "v": [30, 10, 20]})
    out = with_lag_lead(df, "v", order_by="t", n=2)
    assert out["v"].tolist() == [10, 20, 30]
    assert out["v_lag"].fillna(0).tolist() == [0, 0, 10]
    assert out["v_lead"].fillna(0).tolist() == [30, 0, 0]
    with pytest.raises(ValueError):
        with_lag_lead(df, "v", order_by="t", n=0)


def test_with_change(chinook):
    changes = with_change(chinook.invoice, "Total", order_by="InvoiceDate", by="CustomerId")
    second = changes[(changes["CustomerId"] == 2) & (changes["InvoiceId"] == 9)]
    assert second["Total_change"].iloc[0] == pytest.approx(11.88)


# ---- dates ---------------------------------------------------------------


def test_years_between_counts_whole_years():
    start = pd.Series(["1962-02-18", "1973-08-29", "2000-03-01"])
    end = pd.Series(["2002-08-14", "2002-04-01", "2010-03-01"])
    assert years_between(start, end).tolist() == [40, 28, 10]


def test_add_employee_ages(chinook):
    aged = add_employee_ages(chinook.employee, as_of="2024-01-01").set_index("FirstName")
    assert aged.loc["Andrew", "Age"] == 61
    assert aged.loc["Andrew", "AgeAtHire"] == 40
    assert aged.loc["Andrew", "TenureYears"] == 21
    assert aged.loc["Jane", "AgeAtHire"] == 28
    assert aged["Age"].dtype == np.int64


def test_days_between_and_month():
    assert days_between(["2009-01-01 00:00:00"], ["2009-02-01 12:00:00"]).tolist() == [31]
    df = pd.DataFrame({"InvoiceDate": ["2009-01-11 00:00:00", "2009-12-31 00:00:00"]})
    assert with_month(df, "InvoiceDate")["InvoiceDateMonth"].tolist() == ["2009-01", "2009-12"]


# ---- case when -----------------------------------------------------------


def test_case_when_takes_first_match():
    df = pd.DataFrame({"x": [1, 5, 10]})
    labels = case_when(df, [(lambda d: d["x"] < 3, "a"), (lambda d: d["x"] < 8, "b")], default="c")
    assert labels.tolist() == ["a", "b", "c"]

    overlapping = case_when(df, [(df["x"] < 8, "first"), (df["x"] < 3, "second")])
    assert overlapping.tolist() == ["first", "first", None]


def test_case_when_validates_cases():
    df = pd.DataFrame({"x": [1, 2]})
    with pytest.raises(ValueError):
        case_when(df, [])
    with pytest.raises(ValueError):
        case_when(df, [(np.array([True]), "a")])


def test_buckets(chinook):
    mpg = bucket_mpg(load_mtcars()).value_counts().to_dict()
    assert mpg == {"medium": 21, "high": 6, "low": 5}
    totals = bucket_invoice_total(chinook.invoice).value_counts().to_dict()
    assert totals == {"small": 6, "medium": 4, "large": 4}
