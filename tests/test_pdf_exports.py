import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

import fitz  # PyMuPDF

from pdf_theme import build_page_hooks, build_table_defaults, render_table_pdf
from scripts.check_certificates import (
    SNAPSHOT_NAME_VARIANTS,
    SNAPSHOT_TRAINING_ID,
    build_certificate_audit,
    export_certificates_pdf,
    fetch_policies,
    render_certificate_audit,
)
from scripts.generate_license_photocopy_sample_pdf import SAMPLE_TEXT, main as sample_main


def _page_texts(pdf_bytes):
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


class PdfThemeTests(unittest.TestCase):
    def test_single_page_table(self):
        pdf = render_table_pdf(["Name", "Role"], [["Ana Cruz", "HR"]], title="Employees", subtitle="Active")
        self.assertTrue(pdf.startswith(b"%PDF"))

        texts = _page_texts(pdf)
        self.assertEqual(len(texts), 1)
        self.assertIn("Employees", texts[0])
        self.assertIn("Ana Cruz", texts[0])
        self.assertIn("Page 1 of 1", texts[0])
        self.assertIn("Each-R", texts[0])

    def test_page_numbers_use_final_total(self):
        rows = [[f"Employee {i}", "Applicant"] for i in range(200)]
        texts = _page_texts(render_table_pdf(["Name", "Role"], rows, title="Applicants"))

        total = len(texts)
        self.assertGreater(total, 1)
        self.assertIn(f"Page 1 of {total}", texts[0])
        self.assertIn(f"Page {total} of {total}", texts[-1])
        # Header row repeats on every page.
        self.assertIn("Name", texts[-1])

    def test_meta_lines_capped_at_three(self):
        texts = _page_texts(render_table_pdf(
            ["A"], [["x"]], title="T",
            left_meta_lines=["one", "two", "three", "four"],
        ))
        self.assertIn("three", texts[0])
        self.assertNotIn("four", texts[0])

    def test_short_rows_are_padded_and_markup_escaped(self):
        texts = _page_texts(render_table_pdf(["A", "B"], [["<b>x</b>"]], title="T"))
        self.assertIn("<b>x</b>", texts[0])

    def test_empty_headers_rejected(self):
        with self.assertRaises(ValueError):
            render_table_pdf([], [], title="T")

    def test_table_defaults(self):
        defaults = build_table_defaults("T")
        self.assertEqual(defaults["margins"], {"top": 110, "left": 28, "right": 28, "bottom": 48})
        self.assertTrue(callable(defaults["hooks"].on_page))
        self.assertTrue(callable(build_page_hooks("T").canvasmaker))


CERTS = [
    {"id": "c1", "training_id": SNAPSHOT_TRAINING_ID, "employee_name": "Roque, Charles",
     "employee_id": "e1", "certificate_url": "https://files/c1.pdf", "created_at": "2025-01-02"},
    {"id": "c2", "training_id": SNAPSHOT_TRAINING_ID, "employee_name": "Charles Roque",
     "employee_id": None, "certificate_url": None, "created_at": "2025-01-03"},
    {"id": "c3", "training_id": "other", "employee_name": "Roque, Charles",
     "employee_id": "e1", "certificate_url": "https://files/c3.pdf", "created_at": "2025-01-04"},
]


class _NoPolicyClient:
    def rpc(self, function_name, body=None):
        raise RuntimeError("function exec_sql does not exist")


class CertificateAuditTests(unittest.TestCase):
    def test_audit_counts_exact_name_matches(self):
        audit = build_certificate_audit(CERTS)

        self.assertEqual(audit["total"], 3)
        self.assertEqual(audit["training_employee_names"], ["Roque, Charles", "Charles Roque"])
        matches = {row["name"]: row["matches"] for row in audit["name_variant_matches"]}
        self.assertEqual(list(matches), SNAPSHOT_NAME_VARIANTS)
        self.assertEqual(matches["Roque, Charles"], 2)
        self.assertEqual(matches["Charles Roque"], 1)
        self.assertEqual(matches["Roque, Charles Tamondong"], 0)
        self.assertEqual(audit["unique_employee_names"], ["Roque, Charles", "Charles Roque"])

    def test_empty_table(self):
        audit = build_certificate_audit([])
        self.assertEqual(audit["total"], 0)
        text = render_certificate_audit(audit, None)
        self.assertIn("No certificates found in the database.", text)
        self.assertIn("Could not fetch policies (may need service role key)", text)

    def test_policy_lookup_is_best_effort(self):
        self.assertIsNone(fetch_policies(_NoPolicyClient()))

    def test_render_shows_null_for_missing_values(self):
        text = render_certificate_audit(build_certificate_audit(CERTS), [{"policyname": "read own"}])
        self.assertIn("Total certificates in database: 3", text)
        self.assertIn("Employee ID: NULL", text)
        self.assertIn("\"Roque, Charles\": 2 matches", text)
        self.assertIn("read own", text)

    def test_export_pdf(self):
        with tempfile.TemporaryDirectory() as tmp:
            out_path = export_certificates_pdf(build_certificate_audit(CERTS), Path(tmp) / "out" / "certs.pdf")
            texts = _page_texts(out_path.read_bytes())
        self.assertIn("Generated Certificates", texts[0])
        self.assertIn("Charles Roque", texts[0])


class LicenseSamplePdfTests(unittest.TestCase):
    def test_writes_single_letter_page(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "public" / "samples" / "license.pdf"
            buf = io.StringIO()
            with redirect_stdout(buf):
                code = sample_main(["--output", str(target)])

            self.assertEqual(code, 0)
            self.assertIn("Wrote sample PDF:", buf.getvalue())
            doc = fitz.open(str(target))
            try:
                self.assertEqual(doc.page_count, 1)
                page = doc[0]
                self.assertEqual((round(page.rect.width), round(page.rect.height)), (612, 792))
                self.assertIn(SAMPLE_TEXT, page.get_text())
            finally:
                doc.close()


if __name__ == "__main__":
    unittest.main()
