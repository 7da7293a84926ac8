"""Recover a findings array from free-text model output and normalize it into Findings.

Model responses come back with code fences, prose wrappers or plain garbage.
Recovery tries progressively looser strategies and never raises; the tier that
succeeded is reported so a run can be debugged without weakening that contract.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from cra.analysis.ids import IdSequence
from cra.schemas.models import NOT_FOUND, Finding, FindingStatus, RecoveryTier, Severity, Theme

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

THEME_ALIASES = {
    "privacy_app": Theme.PRIVACY,
    "privacy_apps": Theme.PRIVACY,
    "security_e8": Theme.SECURITY_CONTROLS,
    "security": Theme.SECURITY_CONTROLS,
    "essential_eight": Theme.SECURITY_CONTROLS,
    "cdss_exemption": Theme.DOMAIN_EXEMPTION,
    "cdss": Theme.DOMAIN_EXEMPTION,
    "contract": Theme.CONTRACT_FAIRNESS,
    "vendor": Theme.VENDOR_SHARING,
    "vendors": Theme.VENDOR_SHARING,
}


@dataclass
class RecoveryResult:
    records: list[Any] = field(default_factory=list)
    tier: RecoveryTier = RecoveryTier.NONE


_UNPARSED = object()


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, ValueError, RecursionError):
        return _UNPARSED


def recover_findings(text: Any) -> RecoveryResult:
    """
    Extract a JSON array of finding records from raw model text.

    Order: whole text, first fenced block, outermost ``[...]`` span. The first
    candidate that parses decides the outcome; a parsed value that is not a list
    yields an empty result.
    """
    if not text or not isinstance(text, str):
        return RecoveryResult()

    for tier, candidate in _candidates(text):
        parsed = _loads(candidate)
        if parsed is _UNPARSED:
            logger.debug("Recovery tier %s: no parse", tier.value)
            continue
        if isinstance(parsed, list):
            logger.debug("Recovery tier %s: %d record(s)", tier.value, len(parsed))
            return RecoveryResult(records=parsed, tier=tier)
        logger.debug("Recovery tier %s: parsed %s, not an array", tier.value, type(parsed).__name__)
        return RecoveryResult()
    return RecoveryResult()


def _candidates(text: str):
    yield RecoveryTier.DIRECT, text
    fence = _FENCE_RE.search(text)
    if fence:
        yield RecoveryTier.FENCED, fence.group(1)
    array = _ARRAY_RE.search(text)
    if array:
        yield RecoveryTier.BRACKETED, array.group(0)


# ── Normalization ────────────────────────────────────────────────────────


def _key(value: Any) -> str:
    return re.sub(r"[\s\-]+", "_", str(value or "").strip().lower())


def coerce_theme(value: Any) -> Theme | None:
    key = _key(value)
    try:
        return Theme(key)
    except ValueError:
        return THEME_ALIASES.get(key)


def coerce_severity(value: Any) -> Severity | None:
    try:
        return Severity(_key(value))
    except ValueError:
        return None


def coerce_status(value: Any) -> FindingStatus | None:
    key = _key(value)
    if key == "noncompliant":
        key = "non_compliant"
    try:
        return FindingStatus(key)
    except ValueError:
        return None


def _coerce_confidence(value: Any) -> float:
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return 0.5
    if conf != conf:  # NaN
        return 0.5
    return min(1.0, max(0.0, conf))


def _coerce_references(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)] if str(value).strip() else []


def normalize_records(records: list[Any], ids: IdSequence) -> list[Finding]:
    """Turn recovered records into Findings; records without a known theme are dropped."""
    findings: list[Finding] = []
    for rec in records:
        if not isinstance(rec, dict):
            continue
        theme = coerce_theme(rec.get("theme"))
        if theme is None:
            logger.warning("Dropping model finding with unknown theme %r", rec.get("theme"))
            continue
        evidence = str(rec.get("evidence") or "").strip()
        findings.append(
            Finding(
                id=ids.next("M"),
                theme=theme,
                title=str(rec.get("title") or "").strip(),
                status=coerce_status(rec.get("status")),
                severity=coerce_severity(rec.get("severity")),
                evidence=evidence or NOT_FOUND,
                impact=str(rec.get("impact") or ""),
                recommendation=str(rec.get("recommendation") or ""),
                references=_coerce_references(rec.get("references")),
                confidence=_coerce_confidence(rec.get("confidence")),
                source="model",
            )
        )
    return findings
