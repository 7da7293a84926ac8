"""Pydantic models — single source of truth for Finding, RemediationItem, Scores and Report."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

NOT_FOUND = "not found"


class Theme(str, Enum):
    PRIVACY = "privacy"
    SECURITY_CONTROLS = "security_controls"
    CONTRACT_FAIRNESS = "contract_fairness"
    VENDOR_SHARING = "vendor_sharing"
    DOMAIN_EXEMPTION = "domain_exemption"


class FindingStatus(str, Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    UNDISCLOSED = "undisclosed"
    PARTIAL = "partial"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecoveryTier(str, Enum):
    """Which parsing strategy recovered a chunk's findings from model output."""

    DIRECT = "direct"
    FENCED = "fenced"
    BRACKETED = "bracketed"
    NONE = "none"


class Finding(BaseModel):
    """A single detected compliance issue or gap (model- or heuristic-generated)."""

    id: str
    theme: Theme
    title: str = ""
    status: FindingStatus | None = None
    severity: Severity | None = None  # None = unknown; scored as low
    evidence: str = NOT_FOUND  # "[LINE n] snippet" or "not found"
    impact: str = ""
    recommendation: str = ""
    references: list[str] = []
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    source: Literal["model", "heuristic"] = "model"


class RemediationItem(BaseModel):
    """One deduplicated remediation step derived from a finding."""

    id: str
    title: str
    severity: Severity | None = None
    recommendation: str = ""


class Scores(BaseModel):
    """Category scores (0-100), weighted overall score and the weights used."""

    overall: int = 0
    privacy: int = 0
    security_controls: int = 0
    contract_fairness: int = 0
    vendor_sharing: int = 0
    domain_exemption: int = 0
    weights: dict[Theme, float] = {}

    def category(self, theme: Theme) -> int:
        return getattr(self, theme.value)


class DocumentMeta(BaseModel):
    title: str = "Document"
    source_type: str = "document"
    jurisdiction_mentions: list[str] = []
    last_updated_detected: str | None = None


class AnalysisStats(BaseModel):
    """Diagnostics for one analysis run; not part of the scoring."""

    chunks: int = 0
    failed_chunks: int = 0
    recovery_tiers: list[RecoveryTier] = []
    findings_source: Literal["model", "heuristic"] = "heuristic"
    gap_fill_added: int = 0


class Report(BaseModel):
    """Final risk report for one document."""

    doc: DocumentMeta = DocumentMeta()
    scores: Scores = Scores()
    findings: list[Finding] = []
    remediation_plan: list[RemediationItem] = []
    stats: AnalysisStats = AnalysisStats()
