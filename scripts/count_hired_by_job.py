#!/usr/bin/env python3
"""
Count hired applications for one job, including legacy rows whose job id only
lives inside the payload.

Usage:
  python3 scripts/count_hired_by_job.py <jobId>
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


ROW_LIMIT = "10000"


def _dig(payload, *keys):
    node = payload
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


# Priority order matters: the first non-empty hit wins.
PAYLOAD_JOB_ID_EXTRACTORS = (
    ("meta.job_id", lambda payload: _dig(payload, "meta", "job_id")),
    ("meta.jobId", lambda payload: _dig(payload, "meta", "jobId")),
    ("job_id", lambda payload: _dig(payload, "job_id")),
    ("jobId", lambda payload: _dig(payload, "jobId")),
)


def extract_payload_job_id(payload):
    if not isinstance(payload, dict):
        return None
    for _label, extractor in PAYLOAD_JOB_ID_EXTRACTORS:
        value = extractor(payload)
        if value is not None and value != "":
            return value
    return None


def _is_hired(row):
    return str(row.get("status") or "").strip().lower() == "hired"


def build_hire_report(job_id, direct_rows, legacy_rows):
    target = str(job_id)
    counted_ids = set()

    def _first_time(row):
        row_id = row.get("id")
        if row_id is None:
            return True
        if row_id in counted_ids:
            return False
        counted_ids.add(row_id)
        return True

    hired_direct = 0
    for row in direct_rows:
        if row.get("job_id") is None or str(row.get("job_id")) != target:
            continue
        if _is_hired(row) and _first_time(row):
            hired_direct += 1

    hired_legacy = 0
    for row in legacy_rows:
        if row.get("job_id") is not None:
            continue
        if not _is_hired(row):
            continue
        payload_job_id = extract_payload_job_id(row.get("payload"))
        if payload_job_id is None or str(payload_job_id) != target:
            continue
        if _first_time(row):
            hired_legacy += 1

    return {
        "jobId": job_id,
        "hired": hired_direct + hired_legacy,
        "hired_breakdown": {"direct_job_id": hired_direct, "payload_fallback": hired_legacy},
        "totalApplicationsWithJobId": len(direct_rows),
        "checkedLegacyRowsWithNullJobId": len(legacy_rows),
    }


def count_hired_by_job(rest_client, job_id):
    direct_rows = rest_client.fetch_all(
        "applications",
        {"select": "id,status,job_id", "job_id": f"eq.{job_id}", "limit": ROW_LIMIT},
    )
    legacy_rows = rest_client.fetch_all(
        "applications",
        {"select": "id,status,job_id,payload", "job_id": "is.null", "limit": ROW_LIMIT},
    )
    return build_hire_report(job_id, direct_rows, legacy_rows)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="count_hired_by_job.py",
        description="Count hired applications for a job (direct job_id + legacy payload fallback).",
    )
    parser.add_argument("job_id", nargs="?", default="", help="Target job id.")
    args = parser.parse_args(argv)

    job_id = (args.job_id or "").strip()
    if not job_id:
        print("Usage: python3 scripts/count_hired_by_job.py <jobId>")
        return 1

    settings = load_app_settings()
    try:
        supabase_url, key = settings.require_url_and_key("any")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    client = SupabaseRestClient(supabase_url, key)
    try:
        report = count_hired_by_job(client, job_id)
    except SupabaseHttpError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
