#!/usr/bin/env python3
"""
Look up an auth user by email (service role key).

Usage:
  python3 scripts/find_auth_user_by_email.py <email>
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


SAFE_USER_FIELDS = (
    "email_confirmed_at",
    "confirmed_at",
    "created_at",
    "last_sign_in_at",
    "user_metadata",
)


def build_lookup_report(email, user):
    if not user:
        return {"ok": True, "found": False, "email": email}
    report = {"ok": True, "found": True, "id": user.get("id"), "email": user.get("email")}
    for field in SAFE_USER_FIELDS:
        report[field] = user.get(field) or None
    return report


def main(argv=None):
    parser = argparse.ArgumentParser(description="Find a Supabase auth user by email.")
    parser.add_argument("email", nargs="?", default="")
    args = parser.parse_args(argv)

    email = normalize_email(args.email)
    if not email:
        print("Usage: python3 scripts/find_auth_user_by_email.py <email>")
        return 1

    settings = load_app_settings()
    try:
        supabase_url, service_key = settings.require_url_and_key("service")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    admin = SupabaseAuthAdmin(supabase_url, service_key)
    try:
        user = admin.find_user_by_email(email)
    except SupabaseHttpError as exc:
        print(json.dumps({
            "ok": False,
            "status": exc.status_code,
            "statusText": exc.status_text,
            "error": exc.body,
        }, indent=2))
        return 0

    print(json.dumps(build_lookup_report(email, user), indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
