import logging
import sqlite3

import pandas as pd
import pytest

from dbtour.data import MTCARS_COLUMNS, load_mtcars
from dbtour.db import (
    ConnectionClosedError,
    ResultClearedError,
    TableExistsError,
    TableNotFoundError,
    connect,
)


def _cars_conn():
    conn = connect()
    conn.write_table("mtcars", load_mtcars())
    return conn


def test_write_list_and_read_table():
    conn = connect()
    assert conn.list_tables() == []
    assert conn.write_table("mtcars", load_mtcars()) == 32
    assert conn.list_tables() == ["mtcars"]
    assert conn.exists_table("mtcars")
    assert conn.list_fields("mtcars") == MTCARS_COLUMNS

    cars = conn.read_table("mtcars")
    assert cars.shape == (32, 12)
    assert cars.loc[cars["model"] == "Valiant", "mpg"].iloc[0] == pytest.approx(18.1)
    conn.disconnect()


def test_write_table_existing_requires_overwrite_or_append():
    conn = _cars_conn()
    with pytest.raises(TableExistsError):
        conn.write_table("mtcars", load_mtcars())
    with pytest.raises(ValueError):
        conn.write_table("mtcars", load_mtcars(), overwrite=True, append=True)

    conn.write_table("mtcars", load_mtcars(), append=True)
    assert len(conn.read_table("mtcars")) == 64

    conn.write_table("mtcars", load_mtcars().head(3), overwrite=True)
    assert len(conn.read_table("mtcars")) == 3
    conn.disconnect()


def test_missing_tables_raise():
    conn = connect()
    with pytest.raises(TableNotFoundError):
        conn.read_table("nope")
    with pytest.raises(TableNotFoundError):
        conn.list_fields("nope")
    with pytest.raises(TableNotFoundError):
        conn.remove_table("nope")
    conn.disconnect()


def test_remove_table():
    conn = _cars_conn()
    conn.remove_table("mtcars")
    assert not conn.exists_table("mtcars")
    assert conn.list_tables() == []
    conn.disconnect()


def test_table_names_are_case_insensitive():
    conn = _cars_conn()
    assert conn.exists_table("MTCARS")
    assert conn.list_fields("MTCARS") == MTCARS_COLUMNS
    assert len(conn.read_table("MTCARS")) == 32
    with pytest.raises(TableExistsError):
        conn.write_table("MTCARS", load_mtcars())
    assert conn.write_table("MTCARS", load_mtcars().head(3), overwrite=True) == 3
    assert conn.list_tables() == ["mtcars"]
    assert len(conn.read_table("mtcars")) == 3
    conn.remove_table("MtCars")
    assert conn.list_tables() == []
    conn.disconnect()


def test_send_query_fetches_incrementally():
    conn = _cars_conn()
    res = conn.send_query("SELECT model, mpg, cyl FROM mtcars WHERE cyl = 4")

    first = res.fetch(5)
    assert len(first) == 5
    assert list(first.columns) == ["model", "mpg", "cyl"]
    assert res.row_count() == 5
    assert not res.has_completed()

    rest = res.fetch()
    assert len(rest) == 6
    assert res.row_count() == 11
    assert res.has_completed()

    empty = res.fetch(5)
    assert empty.empty
    assert list(empty.columns) == ["model", "mpg", "cyl"]
    res.clear()
    conn.disconnect()


def test_has_completed_on_exact_boundary():
    conn = _cars_conn()
    with conn.send_query("SELECT model FROM mtcars LIMIT 3") as res:
        assert len(res.fetch(3)) == 3
        assert res.has_completed()
    conn.disconnect()


def test_empty_result_is_complete_immediately():
    conn = _cars_conn()
    with conn.send_query("SELECT * FROM mtcars WHERE cyl = 5") as res:
        assert res.has_completed()
        frame = res.fetch()
        assert frame.empty
        assert list(frame.columns) == MTCARS_COLUMNS
    conn.disconnect()


def test_column_info_reports_storage_classes():
    conn = _cars_conn()
    with conn.send_query("SELECT model, mpg, cyl FROM mtcars") as res:
        assert [c.type for c in res.column_info()] == [None, None, None]
        res.fetch(1)
        info = {c.name: c.type for c in res.column_info()}
    assert info == {"model": "text", "mpg": "real", "cyl": "integer"}
    conn.disconnect()


def test_bind_reruns_with_new_parameters():
    conn = _cars_conn()
    res = conn.send_query("SELECT model FROM mtcars WHERE cyl = ?", (4,))
    assert len(res.fetch()) == 11
    res.bind((8,))
    assert res.row_count() == 0
    assert not res.has_completed()
    assert len(res.fetch()) == 14
    res.clear()
    conn.disconnect()


def test_failed_bind_keeps_previous_result():
    conn = _cars_conn()
    res = conn.send_query("SELECT model FROM mtcars WHERE cyl = ?", (4,))
    assert len(res.fetch(2)) == 2
    with pytest.raises(sqlite3.ProgrammingError):
        res.bind((1, 2))
    assert res.is_valid()
    assert res.row_count() == 2
    assert not res.has_completed()
    assert len(res.fetch()) == 9
    assert res.has_completed()
    res.clear()
    conn.disconnect()


def test_cleared_result_cannot_be_used():
    conn = _cars_conn()
    res = conn.send_query("SELECT * FROM mtcars")
    res.clear()
    res.clear()
    assert not res.is_valid()
    with pytest.raises(ResultClearedError):
        res.fetch()
    with pytest.raises(ResultClearedError):
        res.has_completed()
    conn.disconnect()


def test_disconnect_clears_open_results(caplog):
    conn = _cars_conn()
    res = conn.send_query("SELECT * FROM mtcars")
    res.fetch(2)
    assert conn.open_results() == [res]

    with caplog.at_level(logging.WARNING, logger="dbtour.db.frontend"):
        conn.disconnect()

    assert "Closing open result set" in caplog.text
    assert not res.is_valid()
    assert not conn.is_valid()
    conn.disconnect()
    with pytest.raises(ConnectionClosedError):
        conn.list_tables()
    with pytest.raises(ConnectionClosedError):
        conn.get_query("SELECT 1")


def test_get_query_and_execute():
    conn = _cars_conn()
    counts = conn.get_query("SELECT cyl, COUNT(*) AS n FROM mtcars GROUP BY cyl ORDER BY cyl")
    assert counts["n"].tolist() == [11, 7, 14]

    assert conn.execute("UPDATE mtcars SET carb = carb WHERE cyl = ?", (8,)) == 14
    assert conn.execute("DELETE FROM mtcars WHERE am = 1") == 13
    assert len(conn.read_table("mtcars")) == 19
    conn.disconnect()


def test_context_manager_and_file_database(tmp_path):
    path = tmp_path / "cars.sqlite"
    with connect(path) as conn:
        conn.write_table("mtcars", load_mtcars())
    assert not conn.is_valid()

    with connect(path, read_only=True) as conn:
        assert conn.list_tables() == ["mtcars"]
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("DELETE FROM mtcars")
        assert isinstance(conn.read_table("mtcars"), pd.DataFrame)


def test_read_only_missing_file_raises(tmp_path):
    with pytest.raises(sqlite3.OperationalError):
        connect(tmp_path / "missing.sqlite", read_only=True)
