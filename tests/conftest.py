"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from cra.config import default_analysis_config

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_PDF_PATH = FIXTURES_DIR / "sample_policy.pdf"


@pytest.fixture
def analysis_config():
    return default_analysis_config()


@pytest.fixture
def small_chunk_config():
    """Tiny windows so short texts span several chunks."""
    return default_analysis_config(chunk_size=120, chunk_overlap=40, max_concurrency=3)


def _create_sample_pdf():
    """Create a small two-page policy PDF for text-extraction tests."""
    try:
        from reportlab.lib.pagesizes import letter
        from reportlab.pdfgen import canvas
    except ImportError:
        pytest.skip("reportlab not installed")
    SAMPLE_PDF_PATH.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(SAMPLE_PDF_PATH), pagesize=letter)
    c.setFont("Helvetica", 12)
    c.drawString(100, 750, "Acme Privacy Policy")
    c.drawString(100, 720, "We collect your name and email for account creation.")
    c.drawString(100, 690, "Contact privacy@example.com for access requests.")
    c.showPage()
    c.setFont("Helvetica", 12)
    c.drawString(100, 750, "Records are retained for seven years.")
    c.save()


@pytest.fixture(scope="session")
def sample_pdf_path():
    """Path to sample PDF; creates it once per session if missing."""
    if not SAMPLE_PDF_PATH.exists():
        _create_sample_pdf()
    return str(SAMPLE_PDF_PATH)
