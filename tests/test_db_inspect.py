import io
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from app_settings import AppSettings
from scripts import db_inspect
from tests.fakes import FakeRestClient


def run_command(rest, argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = db_inspect.run(rest, db_inspect._build_parser().parse_args(argv))
    return code, out.getvalue(), err.getvalue()


class HelperTests(unittest.TestCase):
    def test_positive_int_falls_back(self):
        self.assertEqual(db_inspect.positive_int("5", 1), 5)
        self.assertEqual(db_inspect.positive_int("abc", 2), 2)
        self.assertEqual(db_inspect.positive_int("0", 2), 2)
        self.assertEqual(db_inspect.positive_int(None, 1), 1)

    def test_default_select(self):
        self.assertIn("department", db_inspect.default_select("employees"))
        self.assertEqual(db_inspect.default_select("applications"), "*")


class CommandTests(unittest.TestCase):
    def test_tables_defaults_to_public_schema(self):
        rest = FakeRestClient(rpc_results={"eachr_list_tables": [
            {"table_schema": "public", "table_name": "employees"},
            {"table_schema": "public", "table_name": "applications"},
        ]})
        code, out, _ = run_command(rest, ["tables"])

        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), ["public.employees", "public.applications"])
        self.assertEqual(rest.rpc_calls, [("eachr_list_tables", {"p_schema": "public"})])

    def test_columns_lists_tab_separated(self):
        rest = FakeRestClient(rpc_results={"eachr_table_columns": [
            {"ordinal_position": 1, "column_name": "id", "data_type": "uuid", "is_nullable": "NO"},
        ]})
        code, out, _ = run_command(rest, ["columns", "employees", "hr"])

        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "1\tid\tuuid\tnullable=NO")
        self.assertEqual(rest.rpc_calls, [("eachr_table_columns", {"p_schema": "hr", "p_table": "employees"})])

    def test_sample_infers_columns(self):
        rest = FakeRestClient(tables={"jobs": [{"id": 1, "title": "Driver"}]})
        code, out, _ = run_command(rest, ["sample", "jobs"])

        self.assertEqual(code, 0)
        self.assertIn("jobs: 1 row(s) returned", out)
        self.assertIn("id, title", out)
        self.assertEqual(rest.reads[0][1], {"select": "*", "limit": "1"})

    def test_sample_empty_table(self):
        code, out, _ = run_command(FakeRestClient(), ["sample", "jobs", "abc"])
        self.assertEqual(code, 0)
        self.assertIn("No rows visible", out)

    def test_rows_strips_password(self):
        rest = FakeRestClient(tables={"employees": [{"id": "e1", "email": "a@each-r.com", "password": "x"}]})
        code, out, _ = run_command(rest, ["rows", "employees"])

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), [{"id": "e1", "email": "a@each-r.com"}])
        params = rest.reads[0][1]
        self.assertEqual(params["limit"], "2")
        self.assertEqual(params["select"], db_inspect.EMPLOYEE_DEFAULT_SELECT)

    def test_rows_custom_select(self):
        rest = FakeRestClient(tables={"applications": []})
        run_command(rest, ["rows", "applications", "5", "--select", "id,status"])
        self.assertEqual(rest.reads[0][1], {"select": "id,status", "limit": "5"})

    def test_missing_table_name(self):
        code, out, err = run_command(FakeRestClient(), ["rows"])
        self.assertEqual(code, 1)
        self.assertIn("Missing table name.", err)
        self.assertIn("Usage:", out)

    def test_unknown_command_prints_usage(self):
        code, out, _ = run_command(FakeRestClient(), ["drop", "employees"])
        self.assertEqual(code, 1)
        self.assertIn("Usage:", out)


class MainTests(unittest.TestCase):
    def test_missing_sql_helper_reports_hint(self):
        settings = AppSettings(supabase_url="http://sb.test", anon_key="anon")
        out, err = io.StringIO(), io.StringIO()
        with patch.object(db_inspect, "load_app_settings", return_value=settings), \
                patch.object(db_inspect, "SupabaseRestClient", return_value=FakeRestClient()), \
                redirect_stdout(out), redirect_stderr(err):
            code = db_inspect.main(["tables"])

        self.assertEqual(code, 1)
        self.assertIn("HTTP 404", err.getvalue())
        self.assertIn("supabase/introspection.sql", out.getvalue())

    def test_missing_config(self):
        err = io.StringIO()
        with patch.object(db_inspect, "load_app_settings", return_value=AppSettings(supabase_url="")), \
                redirect_stdout(io.StringIO()), redirect_stderr(err):
            code = db_inspect.main(["tables"])
        self.assertEqual(code, 1)
        self.assertIn("[CONFIG]", err.getvalue())


if __name__ == "__main__":
    unittest.main()
