"""
Shared test fixtures for depot-import tests.

Statement payloads are synthetic and built in memory: CSV text is
encoded directly, PDFs are assembled by ``build_text_pdf`` (one text
line per statement line, Helvetica, no compression) so pdfplumber can
extract them without any binary fixtures in the repo.
"""

from __future__ import annotations

from datetime import date

import pytest

FIXED_TODAY = date(2026, 10, 19)

DEKA_SAMPLE_CSV = (
    "Wertpapier;St_Nom;Wert;ISIN\n"
    "Alpha Fonds;1.000,00;2.000,00;DE0000000001\n"
    ";3.000,00;4.000,00;DE0000000001\n"
)


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_text_pdf(lines: list[str]) -> bytes:
    """Assemble a single-page PDF whose text layer is *lines*, top to bottom."""
    ops = ["BT", "/F1 11 Tf", "50 800 Td"]
    for line in lines:
        ops.append(f"({_escape_pdf_text(line)}) Tj")
        ops.append("0 -20 Td")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_at}\n%%EOF\n"
    ).encode()
    return bytes(out)


@pytest.fixture
def deka_sample_csv() -> bytes:
    """The two-row Alpha Fonds export used across CSV tests."""
    return DEKA_SAMPLE_CSV.encode("utf-8")


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest.fixture
def make_pdf():
    """Factory fixture: ``make_pdf(lines) -> bytes``."""
    return build_text_pdf


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs real PDF extraction)",
    )
