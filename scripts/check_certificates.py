#!/usr/bin/env python3
"""
Audit generated training certificates.

Prints every certificate, the rows for one training, exact-match counts for a
fixed list of employee-name spellings and the distinct names stored in the
table, then tries to read the table's RLS policies.

The training id and name spellings below are a one-off snapshot taken while
chasing a certificate lookup that compared employee names with exact equality.
They are not a matching rule.

Usage:
  python3 scripts/check_certificates.py
  python3 scripts/check_certificates.py --pdf exports/certificates.pdf
"""

import argparse
import json
import sys
from pathlib import Path

import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import ConfigError, load_app_settings
from pdf_theme import render_table_pdf
from repositories.supabase_rest_client import SupabaseHttpError, SupabaseRestClient


CERTIFICATES_TABLE = "generated_certificates"

SNAPSHOT_TRAINING_ID = "b1def59f-73f1-4678-8875-128e2b8d661b"
SNAPSHOT_NAME_VARIANTS = [
    "Roque, Charles Tamondong",
    "Roque, Charles",
    "Charles Tamondong Roque",
    "Charles Roque",
]

POLICY_SQL = """
    SELECT schemaname, tablename, policyname, permissive, roles, cmd, qual, with_check
    FROM pg_policies
    WHERE tablename = 'generated_certificates'
    ORDER BY policyname;
"""

CERTIFICATE_COLUMNS = ["id", "training_id", "employee_name", "employee_id", "certificate_url", "created_at"]


def _certificates_frame(certs):
    df = pd.DataFrame(list(certs or []))
    for column in CERTIFICATE_COLUMNS:
        if column not in df.columns:
            df[column] = None
    return df


def build_certificate_audit(certs, training_id=SNAPSHOT_TRAINING_ID, name_variants=SNAPSHOT_NAME_VARIANTS):
    df = _certificates_frame(certs)
    names = df["employee_name"]

    for_training = df[df["training_id"] == training_id]
    variant_counts = [
        {"name": name, "matches": int((names == name).sum())}
        for name in name_variants
    ]
    # Exact strings only: variants of one person stay separate on purpose.
    unique_names = names.drop_duplicates().tolist()

    return {
        "total": int(len(df)),
        "certificates": df[CERTIFICATE_COLUMNS].to_dict(orient="records"),
        "training_id": training_id,
        "training_employee_names": for_training["employee_name"].tolist(),
        "name_variant_matches": variant_counts,
        "unique_employee_names": unique_names,
    }


def fetch_policies(rest_client):
    """Best effort: exec_sql usually needs the service role key."""
    try:
        data = rest_client.rpc("exec_sql", {"sql": POLICY_SQL})
    except Exception:
        return None
    if not data:
        return None
    return data


def _display(value):
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return "NULL"
    return str(value)


def render_certificate_audit(audit, policies):
    lines = ["=== Checking Generated Certificates ===", ""]
    lines.append(f"Total certificates in database: {audit['total']}")
    lines.append("")

    if audit["total"]:
        lines.append("Certificates found:")
        for idx, cert in enumerate(audit["certificates"], start=1):
            lines.append("")
            lines.append(f"{idx}. Certificate ID: {_display(cert.get('id'))}")
            lines.append(f"   Training ID: {_display(cert.get('training_id'))}")
            lines.append(f"   Employee Name: \"{_display(cert.get('employee_name'))}\"")
            lines.append(f"   Employee ID: {_display(cert.get('employee_id'))}")
            lines.append(f"   Certificate URL: {_display(cert.get('certificate_url'))}")
            lines.append(f"   Created At: {_display(cert.get('created_at'))}")

        lines.extend(["", "", f"=== Certificates for training {audit['training_id']} ==="])
        lines.append(f"Found: {len(audit['training_employee_names'])}")
        for name in audit["training_employee_names"]:
            lines.append(f"  - Employee Name: \"{_display(name)}\"")

        lines.extend(["", "", "=== Checking Name Matches ==="])
        for row in audit["name_variant_matches"]:
            lines.append(f"\"{row['name']}\": {row['matches']} matches")

        lines.extend(["", "", "=== Unique Employee Names in Database ==="])
        for idx, name in enumerate(audit["unique_employee_names"], start=1):
            lines.append(f"{idx}. \"{_display(name)}\"")
    else:
        lines.append("No certificates found in the database.")

    lines.extend(["", "", "=== Checking RLS Policies ==="])
    if policies:
        lines.append("Policies: " + json.dumps(policies, indent=2, default=str))
    else:
        lines.append("Could not fetch policies (may need service role key)")
    return "\n".join(lines)


def export_certificates_pdf(audit, output_path):
    headers = ["Employee Name", "Employee ID", "Training ID", "Created At", "Certificate URL"]
    rows = [
        [
            _display(cert.get("employee_name")),
            _display(cert.get("employee_id")),
            _display(cert.get("training_id")),
            _display(cert.get("created_at")),
            _display(cert.get("certificate_url")),
        ]
        for cert in audit["certificates"]
    ]
    pdf_bytes = render_table_pdf(
        headers,
        rows,
        title="Generated Certificates",
        subtitle="Certificate audit",
        left_meta_lines=[f"Total certificates: {audit['total']}"],
        right_meta_lines=[f"Distinct employee names: {len(audit['unique_employee_names'])}"],
    )
    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(pdf_bytes)
    return out_path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Audit generated training certificates.")
    parser.add_argument("--pdf", default="", help="Optional path to also write the listing as a PDF.")
    args = parser.parse_args(argv)

    settings = load_app_settings()
    try:
        supabase_url, key = settings.require_url_and_key("any")
    except ConfigError as exc:
        print(f"[CONFIG] {exc}", file=sys.stderr)
        return 1

    client = SupabaseRestClient(supabase_url, key)
    try:
        certs = client.fetch_all(CERTIFICATES_TABLE, {"select": "*"})
    except SupabaseHttpError as exc:
        print(f"Error fetching all certificates: {exc}", file=sys.stderr)
        return 1

    audit = build_certificate_audit(certs)
    print(render_certificate_audit(audit, fetch_policies(client)))

    if args.pdf:
        out_path = export_certificates_pdf(audit, args.pdf)
        print(f"Saved PDF to: {out_path}")

    print("\n=== Done ===")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
