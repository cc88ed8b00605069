#!/usr/bin/env python3
"""
Create an employee auth user, or reset the password of the existing one.

Usage:
  python3 scripts/ensure_auth_user.py <email> <password> [firstName] [lastName]
"""

import argparse
import json
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import ConfigError, load_app_settings
from repositories.supabase_auth_client import SupabaseAuthAdmin, normalize_email
from repositories.supabase_rest_client import SupabaseHttpError


EMPLOYEE_ROLE = "Employee"


def ensure_auth_user(admin, email, password, first_name="", last_name=""):
    email = normalize_email(email)
    existing = admin.find_user_by_email(email)
    if existing:
        metadata = dict(existing.get("user_metadata") or {})
        metadata.update({"first_name": first_name, "last_name": last_name, "role": EMPLOYEE_ROLE})
        admin.update_user_by_id(existing["id"], {
            "password": password,
            "email_confirm": True,
            "user_metadata": metadata,
        })
        return {"ok": True, "action": "updated", "id": existing["id"], "email": existing.get("email")}

    created = admin.create_user({
        "email": email,
        "password": password,
        "email_confirm": True,
        "user_metadata": {"first_name": first_name, "last_name": last_name, "role": EMPLOYEE_ROLE},
    })
    return {"ok": True, "action": "created", "id": created.get("id"), "email": email}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or update an employee auth user.")
    parser.add_argument("email", nargs="?", default="")
    parser.add_argument("password", nargs="?", default="")
    parser.add_argument("first_name", nargs="?", default="")
    parser.add_argument("last_name", nargs="?", default="")
    args = parser.parse_args(argv)

    if not args.email or not args.password:
        print("Usage: python3 scripts/ensure_auth_user.py <email> <password> [firstName] [lastName]")
        return 1

    settings = load_app_settings()
    try:
        supabase_url, service_key = settings.require_url_and_key("service")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    admin = SupabaseAuthAdmin(supabase_url, service_key)
    try:
        result = ensure_auth_user(admin, args.email, args.password, args.first_name, args.last_name)
    except SupabaseHttpError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
