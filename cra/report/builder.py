"""Report assembly: document metadata inference plus aggregation outputs."""

import re

from cra.analysis.aggregate import aggregate_scores, build_remediation_plan
from cra.analysis.signals import SignalIndex
from cra.config import AnalysisConfig
from cra.schemas.models import AnalysisStats, DocumentMeta, Finding, Report

_TITLE_RE = re.compile(
    r"privacy policy|terms of service|terms and conditions|data processing addendum",
    re.IGNORECASE,
)
_DATE_RE = re.compile(
    r"(?:last updated|effective date)[:\s]*([A-Za-z]{3,9}\s+\d{1,2},\s*\d{4}|\d{4}-\d{2}-\d{2})",
    re.IGNORECASE,
)


def infer_title(text: str | None) -> str:
    """First document-type phrase found (as written), else ``Document``."""
    m = _TITLE_RE.search(text or "")
    return m.group(0) if m else "Document"


def detect_last_updated(text: str | None) -> str | None:
    """Date following "last updated" / "effective date", if any."""
    m = _DATE_RE.search(text or "")
    return m.group(1) if m else None


def build_document_meta(text: str | None, jurisdictions: tuple[str, ...] | list[str]) -> DocumentMeta:
    return DocumentMeta(
        title=infer_title(text),
        source_type="document",
        jurisdiction_mentions=list(jurisdictions),
        last_updated_detected=detect_last_updated(text),
    )


def build_report(
    text: str | None,
    findings: list[Finding],
    config: AnalysisConfig,
    stats: AnalysisStats | None = None,
    signals: SignalIndex | None = None,
) -> Report:
    """Assemble the final Report; pure function of its inputs."""
    signals = signals or SignalIndex(text)
    return Report(
        doc=build_document_meta(text, config.jurisdictions),
        scores=aggregate_scores(findings, config.weights, signals),
        findings=list(findings),
        remediation_plan=build_remediation_plan(findings, limit=config.remediation_limit),
        stats=stats or AnalysisStats(),
    )
