"""Pydantic models — single source of truth for all data shapes."""

from cra.schemas.models import (
    NOT_FOUND,
    AnalysisStats,
    DocumentMeta,
    Finding,
    FindingStatus,
    RecoveryTier,
    RemediationItem,
    Report,
    Scores,
    Severity,
    Theme,
)

__all__ = [
    "NOT_FOUND",
    "AnalysisStats",
    "DocumentMeta",
    "Finding",
    "FindingStatus",
    "RecoveryTier",
    "RemediationItem",
    "Report",
    "Scores",
    "Severity",
    "Theme",
]
