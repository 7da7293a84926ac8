"""Markdown rendering of a Report: scores, findings by theme, remediation plan."""

from pathlib import Path

from cra.schemas.models import Report, Theme

THEME_LABELS = {
    Theme.PRIVACY: "Privacy",
    Theme.SECURITY_CONTROLS: "Security controls",
    Theme.CONTRACT_FAIRNESS: "Contract fairness",
    Theme.VENDOR_SHARING: "Vendor sharing",
    Theme.DOMAIN_EXEMPTION: "Domain exemption",
}


def _cell(text: str, limit: int = 80) -> str:
    text = (text or "").replace("|", "\\|").replace("\n", " ")
    return text[:limit] + ("..." if len(text) > limit else "")


def render_markdown_report(report: Report, source: str = "") -> str:
    """Assemble a single Markdown report."""
    sections: list[str] = []

    sections.append(f"# Compliance Risk Report — {report.doc.title}\n")
    if source:
        sections.append(f"**Source:** `{source}`  \n")
    if report.doc.jurisdiction_mentions:
        sections.append(f"**Jurisdiction:** {', '.join(report.doc.jurisdiction_mentions)}  \n")
    if report.doc.last_updated_detected:
        sections.append(f"**Last updated:** {report.doc.last_updated_detected}  \n")
    sections.append("---\n")

    sections.append("## 1. Scores\n")
    sections.append(f"- **Overall score:** {report.scores.overall}/100\n\n")
    sections.append("| Theme | Score | Weight |\n|-------|-------|--------|\n")
    for theme in Theme:
        weight = report.scores.weights.get(theme, 0.0)
        sections.append(f"| {THEME_LABELS[theme]} | {report.scores.category(theme)}/100 | {weight:.2f} |\n")
    sections.append("\n---\n")

    sections.append("## 2. Findings\n")
    if not report.findings:
        sections.append("No findings.\n")
    for theme in Theme:
        theme_findings = [f for f in report.findings if f.theme == theme]
        if not theme_findings:
            continue
        sections.append(f"### {THEME_LABELS[theme]}\n")
        for f in theme_findings:
            severity = f.severity.value if f.severity else "unknown"
            status = f.status.value if f.status else "unknown"
            sections.append(f"- **{f.title or f.id}** [{severity}, {status}]\n")
            if f.evidence:
                sections.append(f"  - *Evidence:* {f.evidence}\n")
            if f.impact:
                sections.append(f"  - *Impact:* {f.impact}\n")
            if f.references:
                sections.append(f"  - *References:* {', '.join(f.references)}\n")
    sections.append("\n---\n")

    sections.append("## 3. Remediation Plan\n")
    sections.append("| # | Severity | Item | Recommendation |\n|---|----------|------|----------------|\n")
    for i, item in enumerate(report.remediation_plan, start=1):
        severity = item.severity.value if item.severity else "unknown"
        sections.append(f"| {i} | {severity} | {_cell(item.title, 60)} | {_cell(item.recommendation, 160)} |\n")

    stats = report.stats
    sections.append(
        f"\n_Findings source: {stats.findings_source}; chunks: {stats.chunks}"
        f" (failed: {stats.failed_chunks}); gap-fill added: {stats.gap_fill_added}._\n"
    )
    return "\n".join(sections)


def write_markdown_report(output_path: str | Path, content: str) -> None:
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    Path(output_path).write_text(content, encoding="utf-8")
