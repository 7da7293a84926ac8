"""Scoring and aggregation: remediation plan, category scores with soft floors, overall score."""

from __future__ import annotations

from cra.analysis.signals import SignalIndex, theme_signals_present
from cra.schemas.models import Finding, RemediationItem, Scores, Severity, Theme

DEDUP_KEY_CHARS = 200
REMEDIATION_LIMIT = 6
SOFT_FLOOR = 20

SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}
UNKNOWN_RANK = 3

SEVERITY_PENALTY = {Severity.HIGH: 20, Severity.MEDIUM: 10, Severity.LOW: 4}
UNKNOWN_PENALTY = 4


def severity_rank(severity: Severity | None) -> int:
    return SEVERITY_RANK.get(severity, UNKNOWN_RANK)


def severity_penalty(severity: Severity | None) -> int:
    return SEVERITY_PENALTY.get(severity, UNKNOWN_PENALTY)


# ── Remediation plan ─────────────────────────────────────────────────────

def dedupe_recommendations(findings: list[Finding]) -> list[RemediationItem]:
    """One item per distinct recommendation (first 200 chars); first finding wins."""
    seen: dict[str, RemediationItem] = {}
    for f in findings:
        key = (f.recommendation or "")[:DEDUP_KEY_CHARS]
        if not key or key in seen:
            continue
        seen[key] = RemediationItem(
            id=f.id,
            title=f.title or key,
            severity=f.severity,
            recommendation=f.recommendation,
        )
    return list(seen.values())


def build_remediation_plan(
    findings: list[Finding],
    limit: int = REMEDIATION_LIMIT,
) -> list[RemediationItem]:
    """Deduplicate, order by severity (stable for ties) and cap at ``limit`` (never more than 6) items."""
    items = dedupe_recommendations(findings)
    items.sort(key=lambda item: severity_rank(item.severity))
    return items[: max(0, min(limit, REMEDIATION_LIMIT))]


# ── Category and overall scores ──────────────────────────────────────────

def detect_soft_floors(signals: SignalIndex) -> dict[Theme, int]:
    """SOFT_FLOOR for every theme the document engages with, else 0."""
    return {
        theme: SOFT_FLOOR if present else 0
        for theme, present in theme_signals_present(signals).items()
    }


def score_categories(
    findings: list[Finding],
    floors: dict[Theme, int] | None = None,
) -> dict[Theme, int]:
    """
    Per theme: ``max(0, 100 - sum of severity penalties)``, lifted to the theme's floor.

    Unknown severities cost the same as ``low``.
    """
    floors = floors or {}
    penalties = {theme: 0 for theme in Theme}
    for f in findings:
        penalties[f.theme] += severity_penalty(f.severity)
    return {
        theme: max(max(0, 100 - penalty), floors.get(theme, 0))
        for theme, penalty in penalties.items()
    }


def overall_score(categories: dict[Theme, int], weights: dict[Theme, float]) -> int:
    """Weighted sum of category scores. Weights are validated by AnalysisConfig."""
    total = sum(categories.get(theme, 0) * weights.get(theme, 0.0) for theme in Theme)
    return max(0, min(100, round(total)))


def aggregate_scores(
    findings: list[Finding],
    weights: dict[Theme, float],
    signals: SignalIndex,
) -> Scores:
    categories = score_categories(findings, detect_soft_floors(signals))
    return Scores(
        overall=overall_score(categories, weights),
        weights=dict(weights),
        **{theme.value: score for theme, score in categories.items()},
    )
