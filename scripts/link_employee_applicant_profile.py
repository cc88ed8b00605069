#!/usr/bin/env python3
"""
Link a hired employee to their applicant profile.

Finds the employee by work email, makes sure employees.auth_user_id is set,
then copies the personal details from the newest application submitted with
the personal email into the applicants table (keyed by the auth user id).

Usage:
  python3 scripts/link_employee_applicant_profile.py <workEmail> [personalEmail]
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import ConfigError, load_app_settings
from repositories.supabase_auth_client import SupabaseAuthAdmin, normalize_email
from repositories.supabase_rest_client import SupabaseHttpError, SupabaseRestClient


USAGE = "Usage: python3 scripts/link_employee_applicant_profile.py <workEmail> [personalEmail]"

EMPLOYEE_SELECT = "id,email,personal_email,auth_user_id,contact_number,fname,lname,mname,birthday"

# applicants column -> payload keys, first non-empty wins.
PROFILE_FIELDS = (
    ("fname", ("firstName", "fname", "first_name")),
    ("lname", ("lastName", "lname", "last_name")),
    ("mname", ("middleName", "mname", "middle_name")),
    ("contact_number", ("contact_number", "phone")),
    ("address", ("address",)),
    ("sex", ("sex", "gender")),
    ("birthday", ("birthday", "birthdate", "birth_date")),
    ("marital_status", ("marital_status", "maritalStatus", "marital")),
    ("barangay", ("barangay",)),
    ("city", ("city",)),
    ("street", ("street",)),
    ("province", ("province",)),
    ("zip", ("zip",)),
    ("unit_house_number", ("unit_house_number", "unitHouseNumber")),
    ("postal_code", ("postal_code", "postalCode")),
)


class LinkError(RuntimeError):
    pass


def parse_payload(payload):
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, str):
        try:
            parsed = json.loads(payload)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def flatten_payload(payload):
    """Merge form and applicant sub-objects under the top-level keys."""
    form = payload.get("form") if isinstance(payload.get("form"), dict) else {}
    applicant = payload.get("applicant") if isinstance(payload.get("applicant"), dict) else {}
    return {**form, **applicant, **payload}


def _pick(*values):
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def build_applicant_row(auth_user_id, personal_email, employee, source, now=None):
    row = {
        "id": auth_user_id,
        "email": personal_email,
        "employee_id": employee.get("id"),
        "is_hired": True,
        "hired_at": now or datetime.now(timezone.utc).isoformat(),
    }
    for column, aliases in PROFILE_FIELDS:
        row[column] = _pick(employee.get(column), *(source.get(key) for key in aliases))
    return row


def applications_email_filter(personal_email):
    quoted = f'"{personal_email}"'
    return (
        f"(payload->>email.eq.{quoted},"
        f"payload->form->>email.eq.{quoted},"
        f"payload->applicant->>email.eq.{quoted})"
    )


def link_employee_applicant_profile(rest_client, auth_admin, work_email, personal_email=None):
    work_email = normalize_email(work_email)

    employees = rest_client.fetch_all("employees", {
        "select": EMPLOYEE_SELECT,
        "email": f"eq.{work_email}",
        "limit": "1",
    })
    if not employees:
        raise LinkError(f"No employees row found for work email {work_email}")
    employee = employees[0]

    auth_user_id = employee.get("auth_user_id")
    if not auth_user_id:
        user = auth_admin.find_user_by_email(work_email)
        if not user or not user.get("id"):
            raise LinkError(f"Could not find auth user for work email {work_email}")
        auth_user_id = user["id"]
        rest_client.update("employees", {"email": f"eq.{work_email}"}, {"auth_user_id": auth_user_id})

    personal_email = normalize_email(personal_email or employee.get("personal_email"))
    if not personal_email:
        raise LinkError("Missing personal email. Provide it as second arg or set employees.personal_email.")

    applications = rest_client.fetch_all("applications", {
        "select": "id,payload,created_at,status",
        "or": applications_email_filter(personal_email),
        "order": "created_at.desc",
        "limit": "1",
    })
    if not applications:
        raise LinkError(f"No applications found matching personal email {personal_email}")
    application = applications[0]

    source = flatten_payload(parse_payload(application.get("payload")))
    row = build_applicant_row(auth_user_id, personal_email, employee, source)
    rest_client.upsert("applicants", [row], on_conflict="id")

    return {
        "ok": True,
        "workEmail": work_email,
        "personalEmail": personal_email,
        "employeeId": employee.get("id"),
        "authUserId": auth_user_id,
        "applicationId": application.get("id"),
        "applicantsUpserted": True,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Link an employee to their applicant profile.")
    parser.add_argument("work_email", nargs="?", default="")
    parser.add_argument("personal_email", nargs="?", default="")
    args = parser.parse_args(argv)

    if not args.work_email:
        print(USAGE)
        return 1

    settings = load_app_settings()
    try:
        supabase_url, service_key = settings.require_url_and_key("service")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    rest_client = SupabaseRestClient(supabase_url, service_key)
    auth_admin = SupabaseAuthAdmin(supabase_url, service_key)
    try:
        result = link_employee_applicant_profile(rest_client, auth_admin, args.work_email, args.personal_email)
    except (SupabaseHttpError, LinkError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
