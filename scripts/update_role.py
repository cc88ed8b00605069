#!/usr/bin/env python3
"""
Set the role stored in an auth user's app_metadata and user_metadata.

Usage:
  python3 scripts/update_role.py applicant@example.com
  python3 scripts/update_role.py hr@example.com --role HR
"""

import argparse
import json
import re
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import ConfigError, load_app_settings
from repositories.supabase_auth_client import SupabaseAuthAdmin, normalize_email
from repositories.supabase_rest_client import SupabaseHttpError


UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value):
    return bool(UUID_RE.match(str(value or "").strip()))


def update_role(admin, email, role):
    user = admin.find_user_by_email(email)
    if not user:
        raise LookupError("No user found with that email.")
    user_id = user.get("id")
    if not is_uuid(user_id):
        raise ValueError(f"Retrieved id is not a valid UUID: {user_id}")
    return admin.update_user_by_id(user_id, {
        "app_metadata": {"role": role},
        "user_metadata": {"role": role},
    })


def main(argv=None):
    parser = argparse.ArgumentParser(description="Patch the role on a Supabase auth user.")
    parser.add_argument("email", nargs="?", default="")
    parser.add_argument("--role", default="Applicant", help="Role to store (default: Applicant).")
    args = parser.parse_args(argv)

    email = normalize_email(args.email)
    if not email:
        print("Usage: python3 scripts/update_role.py applicant@example.com [--role Applicant]")
        return 1

    settings = load_app_settings()
    try:
        supabase_url, service_key = settings.require_url_and_key("service")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    print(f"Connecting to: {supabase_url}")
    print(f"Looking up user by email: {email}")
    admin = SupabaseAuthAdmin(supabase_url, service_key)
    try:
        updated = update_role(admin, email, args.role)
    except (LookupError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except SupabaseHttpError as exc:
        print(f"[ERROR] Update failed: {exc}", file=sys.stderr)
        return 1

    print(f"[OK] Role updated to '{args.role}'.")
    print("app_metadata: " + json.dumps(updated.get("app_metadata") or {}))
    print("user_metadata: " + json.dumps(updated.get("user_metadata") or {}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
