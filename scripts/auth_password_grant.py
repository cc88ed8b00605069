#!/usr/bin/env python3
"""
Check whether an email/password pair can sign in (password grant, anon key).

Usage:
  python3 scripts/auth_password_grant.py <email> <password>
"""

import argparse
import json
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import ConfigError, load_app_settings
from repositories.supabase_auth_client import password_grant


def main(argv=None):
    parser = argparse.ArgumentParser(description="Test a Supabase password grant.")
    parser.add_argument("email", nargs="?", default="")
    parser.add_argument("password", nargs="?", default="")
    args = parser.parse_args(argv)

    if not args.email or not args.password:
        print("Usage: python3 scripts/auth_password_grant.py <email> <password>")
        return 1

    settings = load_app_settings()
    try:
        supabase_url, anon_key = settings.require_url_and_key("anon")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    result = password_grant(supabase_url, anon_key, args.email, args.password)
    # A rejected login is a normal outcome here.
    print(json.dumps(result.to_report(), indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
