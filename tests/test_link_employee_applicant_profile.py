import io
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from app_settings import AppSettings
from scripts import link_employee_applicant_profile as link_script
from scripts.link_employee_applicant_profile import (
    LinkError,
    build_applicant_row,
    flatten_payload,
    link_employee_applicant_profile,
    parse_payload,
)
from tests.fakes import FakeAuthAdmin, FakeRestClient


AUTH_ID = "8f14e45f-ceea-467f-a8f4-2b1c6c5a9e11"

EMPLOYEE = {
    "id": "emp-1",
    "email": "ana.cruz@each-r.com",
    "personal_email": "Ana@Mail.com",
    "auth_user_id": AUTH_ID,
    "contact_number": "",
    "fname": "Ana",
    "lname": None,
    "mname": None,
    "birthday": None,
}

APPLICATION = {
    "id": "app-7",
    "created_at": "2025-02-01T00:00:00Z",
    "status": "hired",
    "payload": json.dumps({
        "email": "ana@mail.com",
        "form": {"lastName": "Cruz", "phone": "0917", "city": "Pasig", "postalCode": "1600"},
        "applicant": {"gender": "F", "birthdate": "1995-04-02"},
    }),
}


class PayloadTests(unittest.TestCase):
    def test_parse_payload_tolerates_bad_json(self):
        self.assertEqual(parse_payload("{not json"), {})
        self.assertEqual(parse_payload("[1, 2]"), {})
        self.assertEqual(parse_payload(None), {})
        self.assertEqual(parse_payload({"a": 1}), {"a": 1})

    def test_top_level_keys_win_over_nested(self):
        merged = flatten_payload({"city": "Manila", "form": {"city": "Pasig", "zip": "1600"}})
        self.assertEqual(merged["city"], "Manila")
        self.assertEqual(merged["zip"], "1600")

    def test_employee_columns_take_precedence(self):
        source = {"firstName": "Anna", "lname": "Cruz", "phone": "0917", "maritalStatus": "Single"}
        row = build_applicant_row(AUTH_ID, "ana@mail.com", EMPLOYEE, source, now="2025-03-01T00:00:00+00:00")

        self.assertEqual(row["fname"], "Ana")
        self.assertEqual(row["lname"], "Cruz")
        self.assertEqual(row["contact_number"], "0917")
        self.assertEqual(row["marital_status"], "Single")
        self.assertIsNone(row["province"])
        self.assertEqual(row["employee_id"], "emp-1")
        self.assertTrue(row["is_hired"])
        self.assertEqual(row["hired_at"], "2025-03-01T00:00:00+00:00")


class LinkTests(unittest.TestCase):
    def test_links_existing_auth_user(self):
        rest = FakeRestClient(tables={"employees": [EMPLOYEE], "applications": [APPLICATION]})
        result = link_employee_applicant_profile(rest, FakeAuthAdmin(), " Ana.Cruz@each-r.com ")

        self.assertEqual(result, {
            "ok": True,
            "workEmail": "ana.cruz@each-r.com",
            "personalEmail": "ana@mail.com",
            "employeeId": "emp-1",
            "authUserId": AUTH_ID,
            "applicationId": "app-7",
            "applicantsUpserted": True,
        })
        self.assertEqual(rest.updated, {})
        row = rest.upserted["applicants"][0]
        self.assertEqual(row["id"], AUTH_ID)
        self.assertEqual(row["lname"], "Cruz")
        self.assertEqual(row["sex"], "F")
        self.assertEqual(row["birthday"], "1995-04-02")
        self.assertEqual(row["postal_code"], "1600")

        app_params = rest.reads[1][1]
        self.assertEqual(app_params["order"], "created_at.desc")
        self.assertIn('payload->form->>email.eq."ana@mail.com"', app_params["or"])

    def test_backfills_missing_auth_user_id(self):
        employee = dict(EMPLOYEE, auth_user_id=None)
        rest = FakeRestClient(tables={"employees": [employee], "applications": [APPLICATION]})
        admin = FakeAuthAdmin(users=[{"id": AUTH_ID, "email": "ana.cruz@each-r.com"}])

        result = link_employee_applicant_profile(rest, admin, "ana.cruz@each-r.com")

        self.assertEqual(result["authUserId"], AUTH_ID)
        self.assertEqual(rest.updated["employees"],
                         [({"email": "eq.ana.cruz@each-r.com"}, {"auth_user_id": AUTH_ID})])

    def test_personal_email_argument_overrides_column(self):
        rest = FakeRestClient(tables={"employees": [EMPLOYEE], "applications": [APPLICATION]})
        result = link_employee_applicant_profile(rest, FakeAuthAdmin(), "ana.cruz@each-r.com", "Other@Mail.com")
        self.assertEqual(result["personalEmail"], "other@mail.com")

    def test_unknown_employee(self):
        with self.assertRaisesRegex(LinkError, "No employees row found"):
            link_employee_applicant_profile(FakeRestClient(), FakeAuthAdmin(), "ghost@each-r.com")

    def test_unknown_auth_user(self):
        rest = FakeRestClient(tables={"employees": [dict(EMPLOYEE, auth_user_id=None)]})
        with self.assertRaisesRegex(LinkError, "Could not find auth user"):
            link_employee_applicant_profile(rest, FakeAuthAdmin(), "ana.cruz@each-r.com")

    def test_missing_personal_email(self):
        rest = FakeRestClient(tables={"employees": [dict(EMPLOYEE, personal_email=None)]})
        with self.assertRaisesRegex(LinkError, "Missing personal email"):
            link_employee_applicant_profile(rest, FakeAuthAdmin(), "ana.cruz@each-r.com")

    def test_no_matching_application(self):
        rest = FakeRestClient(tables={"employees": [EMPLOYEE], "applications": []})
        with self.assertRaisesRegex(LinkError, "No applications found"):
            link_employee_applicant_profile(rest, FakeAuthAdmin(), "ana.cruz@each-r.com")
        self.assertEqual(rest.upserted, {})


class MainTests(unittest.TestCase):
    def test_usage_without_arguments(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = link_script.main([])
        self.assertEqual(code, 1)
        self.assertIn("Usage:", buf.getvalue())

    def test_requires_service_key(self):
        settings = AppSettings(supabase_url="http://sb.test", anon_key="anon")
        err = io.StringIO()
        with patch.object(link_script, "load_app_settings", return_value=settings), redirect_stderr(err):
            code = link_script.main(["ana.cruz@each-r.com"])
        self.assertEqual(code, 1)
        self.assertIn("[CONFIG]", err.getvalue())

    def test_upsert_failure_exits_nonzero(self):
        settings = AppSettings(supabase_url="http://sb.test", service_role_key="svc")
        rest = FakeRestClient(tables={"employees": [EMPLOYEE], "applications": [APPLICATION]},
                              fail_writes={"applicants"})
        err = io.StringIO()
        with patch.object(link_script, "load_app_settings", return_value=settings), \
                patch.object(link_script, "SupabaseRestClient", return_value=rest), \
                patch.object(link_script, "SupabaseAuthAdmin", return_value=FakeAuthAdmin()), \
                redirect_stdout(io.StringIO()), redirect_stderr(err):
            code = link_script.main(["ana.cruz@each-r.com"])

        self.assertEqual(code, 1)
        self.assertIn("HTTP 500", err.getvalue())


if __name__ == "__main__":
    unittest.main()
