"""Stage 3 — report assembly and Markdown rendering."""

from cra.report.builder import build_report, detect_last_updated, infer_title
from cra.report.markdown import render_markdown_report, write_markdown_report

__all__ = [
    "build_report",
    "detect_last_updated",
    "infer_title",
    "render_markdown_report",
    "write_markdown_report",
]
