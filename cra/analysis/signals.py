"""Document-wide signal detection shared by the rule engine and the soft-floor scorer.

A ``SignalIndex`` wraps one document and memoizes every case-insensitive regex
search made against it, so rules and floors that test the same signal share a
single pass over the text.
"""

from __future__ import annotations

import re
from functools import lru_cache

from cra.schemas.models import Theme

SignalGroup = tuple[str, ...]


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


class SignalIndex:
    """Memoized regex presence tests over a single document."""

    def __init__(self, text: str | None):
        self.text = text or ""
        self._hits: dict[str, bool] = {}

    def has(self, pattern: str) -> bool:
        hit = self._hits.get(pattern)
        if hit is None:
            hit = _compile(pattern).search(self.text) is not None
            self._hits[pattern] = hit
        return hit

    def any_of(self, group: SignalGroup) -> bool:
        return any(self.has(p) for p in group)

    def all_groups(self, groups: tuple[SignalGroup, ...]) -> bool:
        return all(self.any_of(g) for g in groups)


# Topical engagement per theme; any hit earns the theme its soft floor.
THEME_SIGNALS: dict[Theme, SignalGroup] = {
    Theme.PRIVACY: (
        r"\bprivacy policy\b",
        r"privacy act",
        r"personal information",
        r"\bapp\s*\d+",
        r"we collect",
        r"why we collect",
        r"how to contact",
        r"access your information",
        r"correction",
        r"retention",
        r"delete",
        r"destroy",
    ),
    Theme.SECURITY_CONTROLS: (
        r"encryption", r"mfa", r"2fa", r"access control", r"least privilege",
        r"backup", r"patch", r"incident", r"macro", r"hardening", r"rbac",
    ),
    Theme.DOMAIN_EXEMPTION: (
        r"not intended to diagnose", r"does not diagnose", r"clinician",
        r"health professional", r"doctor review", r"educational", r"read-only",
        r"non-directive", r"guideline", r"threshold", r"transparent",
    ),
    Theme.CONTRACT_FAIRNESS: (
        r"limitation of liability", r"liability is limited", r"indemnity",
        r"indemnify", r"arbitration", r"governing law", r"termination",
        r"unilateral", r"class action",
    ),
    Theme.VENDOR_SHARING: (
        r"third part(?:y|ies)", r"vendors", r"processors", r"sub-processor",
        r"share", r"disclose", r"stripe", r"aws", r"google", r"overseas",
        r"outside australia", r"cross-border",
    ),
}


def theme_signals_present(signals: SignalIndex) -> dict[Theme, bool]:
    """Which themes the document visibly engages with."""
    return {theme: signals.any_of(group) for theme, group in THEME_SIGNALS.items()}
