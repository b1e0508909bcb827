from __future__ import annotations

import argparse
import logging
import sqlite3
import sys

from pydantic import ValidationError

from .config import load_settings
from .core.logging_config import setup_logging
from .data import build_sample_chinook, write_mtcars
from .db import FrontendError, connect, fetch_in_chunks
from .tour import CELLS, format_output, run_tour

log = logging.getLogger(__name__)


def cmd_run(args: argparse.Namespace) -> None:
    if args.list:
        for c in CELLS:
            print(f"{c.name:<20} {c.title}")
        return
    settings = load_settings(chunk_size=args.chunk_size, chinook_path=args.chinook)
    for output in run_tour(args.cell or None, settings=settings):
        print(f"## {output.title}")
        print(format_output(output.value))
        print()


def cmd_tables(args: argparse.Namespace) -> None:
    with connect(args.path, read_only=True) as conn:
        for name in conn.list_tables():
            print(name)


def cmd_fields(args: argparse.Namespace) -> None:
    with connect(args.path, read_only=True) as conn:
        for name in conn.list_fields(args.table):
            print(name)


def cmd_query(args: argparse.Namespace) -> None:
    with connect(args.path, read_only=not args.write) as conn:
        with conn.send_query(args.sql, args.param or None) as res:
            df = fetch_in_chunks(res, args.chunk_size)
    print(format_output(df))


def cmd_load_mtcars(args: argparse.Namespace) -> None:
    with connect(args.path) as conn:
        rows = write_mtcars(conn, args.table)
    print(f"Wrote {rows} rows to {args.table}")


def cmd_seed_chinook(args: argparse.Namespace) -> None:
    with connect(args.path) as conn:
        build_sample_chinook(conn)
        tables = conn.list_tables()
    print(f"Seeded {', '.join(tables)}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("dbtour")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on the console")
    parser.add_argument("--log-dir", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("run")
    sp.add_argument("--cell", action="append", help="run only this cell (repeatable)")
    sp.add_argument("--list", action="store_true", help="list the cells and exit")
    sp.add_argument("--chunk-size", type=int, default=None)
    sp.add_argument("--chinook", default=None, help="path to a full Chinook SQLite file")
    sp.set_defaults(func=cmd_run)

    sp = sub.add_parser("tables")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_tables)

    sp = sub.add_parser("fields")
    sp.add_argument("path")
    sp.add_argument("table")
    sp.set_defaults(func=cmd_fields)

    sp = sub.add_parser("query")
    sp.add_argument("path")
    sp.add_argument("sql")
    sp.add_argument("--chunk-size", type=int, default=10)
    sp.add_argument("--param", action="append", help="positional parameter (repeatable)")
    sp.add_argument("--write", action="store_true", help="open the database read/write")
    sp.set_defaults(func=cmd_query)

    sp = sub.add_parser("load-mtcars")
    sp.add_argument("path")
    sp.add_argument("--table", default="mtcars")
    sp.set_defaults(func=cmd_load_mtcars)

    sp = sub.add_parser("seed-chinook")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_seed_chinook)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()
    level = logging.DEBUG if args.verbose else settings.log_level_value
    setup_logging(console_level=level, log_dir=args.log_dir, quiet_db=not args.verbose)
    try:
        args.func(args)
    except (FrontendError, sqlite3.Error, OSError, ValidationError, ValueError, KeyError) as exc:
        log.error("%s failed: %s", args.cmd, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
