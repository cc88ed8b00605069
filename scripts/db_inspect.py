#!/usr/bin/env python3
"""
Inspect the Supabase database from the command line.

Usage:
  python3 scripts/db_inspect.py tables [schema]
  python3 scripts/db_inspect.py columns <table> [schema]
  python3 scripts/db_inspect.py sample <table> [limit]
  python3 scripts/db_inspect.py rows <table> [limit] [--select <cols>]

`tables` and `columns` call the eachr_list_tables / eachr_table_columns SQL
helpers. `sample` and `rows` go through PostgREST, so RLS may hide rows unless
SUPABASE_SERVICE_ROLE_KEY is set. `rows` always strips a `password` field.
"""

import argparse
import json
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import ConfigError, load_app_settings
from repositories.supabase_rest_client import SupabaseHttpError, SupabaseRestClient


USAGE = __doc__.strip().split("\n\n")[1]

DEFAULT_SCHEMA = "public"
DEFAULT_SAMPLE_LIMIT = 1
DEFAULT_ROWS_LIMIT = 2
EMPLOYEE_DEFAULT_SELECT = "id,email,fname,lname,position,department,depot,role,status,created_at"
SQL_HELPER_HINT = (
    "If this is `tables`/`columns`, install the SQL helpers from supabase/introspection.sql."
)


def positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def list_tables(rest_client, schema=DEFAULT_SCHEMA):
    rows = rest_client.rpc("eachr_list_tables", {"p_schema": schema}) or []
    return [f"{row.get('table_schema')}.{row.get('table_name')}" for row in rows]


def list_columns(rest_client, table, schema=DEFAULT_SCHEMA):
    rows = rest_client.rpc("eachr_table_columns", {"p_schema": schema, "p_table": table}) or []
    return [
        f"{row.get('ordinal_position')}\t{row.get('column_name')}\t{row.get('data_type')}"
        f"\tnullable={row.get('is_nullable')}"
        for row in rows
    ]


def describe_sample(table, rows):
    lines = [f"{table}: {len(rows)} row(s) returned"]
    if rows:
        lines.append("columns (inferred from first row):")
        lines.append(", ".join(rows[0].keys()))
    else:
        lines.append("No rows visible (table empty or RLS filtered).")
    return lines


def strip_passwords(rows):
    return [
        {key: value for key, value in row.items() if key != "password"} if isinstance(row, dict) else row
        for row in rows
    ]


def default_select(table):
    return EMPLOYEE_DEFAULT_SELECT if table == "employees" else "*"


def _build_parser():
    parser = argparse.ArgumentParser(prog="db_inspect.py", add_help=True)
    parser.add_argument("command", nargs="?", default="")
    parser.add_argument("table", nargs="?", default="")
    parser.add_argument("extra", nargs="?", default="")
    parser.add_argument("--select", default="")
    return parser


def run(rest_client, args):
    """Print the output for one command; returns the exit code."""
    command = args.command
    if command == "tables":
        # For `tables` the first positional is the schema.
        for line in list_tables(rest_client, args.table or DEFAULT_SCHEMA):
            print(line)
        return 0

    if command not in ("columns", "sample", "rows"):
        print(USAGE)
        return 1
    if not args.table:
        print("Missing table name.", file=sys.stderr)
        print(USAGE)
        return 1

    if command == "columns":
        for line in list_columns(rest_client, args.table, args.extra or DEFAULT_SCHEMA):
            print(line)
    elif command == "sample":
        limit = positive_int(args.extra, DEFAULT_SAMPLE_LIMIT)
        rows = rest_client.fetch_all(args.table, {"select": "*", "limit": str(limit)})
        for line in describe_sample(args.table, rows):
            print(line)
    else:
        limit = positive_int(args.extra, DEFAULT_ROWS_LIMIT)
        select = args.select or default_select(args.table)
        rows = rest_client.fetch_all(args.table, {"select": select, "limit": str(limit)})
        print(json.dumps(strip_passwords(rows), indent=2, default=str))
    return 0


def main(argv=None):
    args = _build_parser().parse_args(argv)
    if not args.command:
        print(USAGE)
        return 1

    settings = load_app_settings()
    try:
        supabase_url, key = settings.require_url_and_key("any")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        print(USAGE)
        return 1

    try:
        return run(SupabaseRestClient(supabase_url, key), args)
    except SupabaseHttpError as exc:
        print(str(exc), file=sys.stderr)
        print("")
        print(SQL_HELPER_HINT)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
