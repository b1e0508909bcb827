import logging
from datetime import date

import numpy as np
import pytest

from dbtour.data import load_mtcars
from dbtour.db import (
    bind_query,
    connect,
    interpolate_sql,
    quote_identifier,
    quote_literal,
    unsafe_interpolated_filter,
)
from dbtour.db.params import normalize_params


@pytest.fixture
def conn():
    conn = connect()
    conn.write_table("mtcars", load_mtcars())
    yield conn
    conn.disconnect()


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "NULL"),
        (True, "1"),
        (False, "0"),
        (3, "3"),
        (np.int64(5), "5"),
        (2.5, "2.5"),
        (float("nan"), "NULL"),
        ("O'Brien", "'O''Brien'"),
        (b"\x01\xff", "X'01FF'"),
        (date(2009, 1, 1), "'2009-01-01'"),
    ],
)
def test_quote_literal(value, expected):
    assert quote_literal(value) == expected


def test_quote_literal_rejects_unknown_types():
    with pytest.raises(TypeError):
        quote_literal(object())
    with pytest.raises(ValueError):
        quote_literal(float("inf"))


def test_quote_identifier():
    assert quote_identifier("mtcars") == '"mtcars"'
    assert quote_identifier('we"ird') == '"we""ird"'
    with pytest.raises(ValueError):
        quote_identifier("")


def test_interpolate_skips_literals_and_comments():
    sql = "SELECT * FROM t WHERE a = ?a AND b = '?a' -- ?b"
    assert interpolate_sql(sql, a="x") == "SELECT * FROM t WHERE a = 'x' AND b = '?a' -- ?b"
    assert interpolate_sql('SELECT "?a" FROM t WHERE n = ?n', n=4) == 'SELECT "?a" FROM t WHERE n = 4'


def test_interpolate_missing_value():
    with pytest.raises(KeyError):
        interpolate_sql("SELECT * FROM t WHERE a = ?a AND b = ?b", a=1)


def test_interpolated_sql_runs(conn):
    sql = interpolate_sql("SELECT * FROM mtcars WHERE model = ?m", m="Valiant")
    assert len(conn.get_query(sql)) == 1


def test_bind_query_positional_named_and_scalar(conn):
    six = bind_query(conn, "SELECT * FROM mtcars WHERE cyl = ? AND mpg > ?", (6, 19))
    assert sorted(six["model"]) == [
        "Ferrari Dino",
        "Hornet 4 Drive",
        "Mazda RX4",
        "Mazda RX4 Wag",
        "Merc 280",
    ]
    named = bind_query(conn, "SELECT * FROM mtcars WHERE cyl = :cyl", {"cyl": np.int64(8)})
    assert len(named) == 14
    assert len(bind_query(conn, "SELECT * FROM mtcars WHERE cyl = ?", 6)) == 7


def test_normalize_params_unwraps_numpy():
    params = normalize_params(np.int64(4))
    assert params == (4,)
    assert type(params[0]) is int
    assert normalize_params(None) == ()
    assert normalize_params(["a", np.float64(1.5)]) == ("a", 1.5)


def test_unsafe_interpolation_can_be_subverted(conn, caplog):
    with caplog.at_level(logging.WARNING, logger="dbtour.db.params"):
        eights = unsafe_interpolated_filter(conn, "mtcars", "cyl", 8)
    assert len(eights) == 14
    assert "string-interpolated" in caplog.text

    crafted = "x' OR '1'='1"
    assert len(unsafe_interpolated_filter(conn, "mtcars", "model", crafted)) == 32
    assert bind_query(conn, "SELECT * FROM mtcars WHERE model = ?", (crafted,)).empty
