#!/usr/bin/env python3
"""
Write the one-page sample shown where a driver's license photocopy is expected.

Usage:
  python3 scripts/generate_license_photocopy_sample_pdf.py
  python3 scripts/generate_license_photocopy_sample_pdf.py --output /tmp/sample.pdf
"""

import argparse
import os
from pathlib import Path

import fitz  # PyMuPDF


DEFAULT_OUTPUT = os.path.join("public", "samples", "license-photocopy-sample.pdf")
SAMPLE_TEXT = "Sample License Photocopy"
PAGE_WIDTH = 612
PAGE_HEIGHT = 792


def write_sample_pdf(output_path):
    out_path = Path(output_path).resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    doc = fitz.open()
    try:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        # PyMuPDF measures from the top-left corner; the baseline sits 72pt down.
        page.insert_text((72, 72), SAMPLE_TEXT, fontname="helv", fontsize=24)
        doc.save(str(out_path))
    finally:
        doc.close()
    return out_path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate the license photocopy sample PDF.")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="Where to write the PDF.")
    args = parser.parse_args(argv)

    out_path = write_sample_pdf(args.output)
    print(f"Wrote sample PDF: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
