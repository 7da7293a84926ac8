"""Stage 1 — document ingestion: text extraction, line indexing, chunking."""

from cra.ingest.chunker import chunk_text, find_line_citation, index_lines
from cra.ingest.text_extract import extract_text, extract_text_from_path, parse_pdf_bytes

__all__ = [
    "chunk_text",
    "extract_text",
    "extract_text_from_path",
    "find_line_citation",
    "index_lines",
    "parse_pdf_bytes",
]
