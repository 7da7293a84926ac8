"""Document-to-text extraction: PDF via pdfplumber, plain text passthrough."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pdfplumber

from cra.errors import DocumentParseError, InsufficientTextError

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md", ".text"}
DEFAULT_MIN_TEXT_CHARS = 20


def parse_pdf_bytes(content: bytes) -> str:
    """
    Extract text from every page of an in-memory PDF.

    Pages are joined with newlines and the result is stripped.
    Raises DocumentParseError on invalid/corrupt PDFs.
    """
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            pages: list[str] = []
            for i, page in enumerate(pdf.pages, start=1):
                try:
                    text = page.extract_text()
                except Exception as e:
                    logger.warning("Text extraction failed on page %d: %s", i, e)
                    text = ""
                pages.append(text or "")
            return "\n".join(pages).strip()
    except Exception as e:
        raise DocumentParseError(f"Could not parse PDF: {e}") from e


def decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig").strip()
    except UnicodeDecodeError as e:
        raise DocumentParseError(f"Text file is not valid UTF-8: {e}") from e


def extract_text(
    filename: str | None,
    content: bytes,
    min_chars: int = DEFAULT_MIN_TEXT_CHARS,
) -> str:
    """
    Turn an uploaded document into plain text.

    ``.txt``/``.md`` files are decoded as UTF-8; everything else is treated as PDF.
    Raises InsufficientTextError when fewer than ``min_chars`` non-space characters
    come out, so scanned or empty documents are rejected before analysis.
    """
    if not content:
        raise DocumentParseError("Empty file")
    suffix = Path(filename or "").suffix.lower()
    text = decode_text(content) if suffix in TEXT_SUFFIXES else parse_pdf_bytes(content)
    if len("".join(text.split())) < min_chars:
        raise InsufficientTextError("Could not extract meaningful text from file")
    logger.info("Extracted %d characters from %s", len(text), filename or "upload")
    return text


def extract_text_from_path(path: str | Path, min_chars: int = DEFAULT_MIN_TEXT_CHARS) -> str:
    """Read a document from disk. Raises FileNotFoundError if path does not exist."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")
    return extract_text(path.name, path.read_bytes(), min_chars=min_chars)
