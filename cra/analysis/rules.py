"""Heuristic rule engine: declarative regex rules that synthesize findings from document text.

Each ``Rule`` names the signal groups a compliant document is expected to
contain. A group is a tuple of case-insensitive regexes (any one matching is
enough); the rule is satisfied when every group matches somewhere in the text.
Unsatisfied rules emit one ``undisclosed`` finding with fixed severity, impact,
recommendation and references.

The engine runs in two modes:

* ``run_heuristics`` — the full table, used when the model produced nothing.
* ``fill_coverage_gaps`` — only the mandatory subset, appended to model
  findings that do not already cover those topics.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cra.analysis.ids import IdSequence
from cra.analysis.signals import SignalGroup, SignalIndex
from cra.ingest.chunker import find_line_citation
from cra.schemas.models import NOT_FOUND, Finding, FindingStatus, Severity, Theme


@dataclass(frozen=True)
class Rule:
    rule_id: str
    theme: Theme
    title: str
    severity: Severity
    impact: str
    recommendation: str
    references: tuple[str, ...]
    confidence: float
    requires: tuple[SignalGroup, ...]
    when: SignalGroup | None = None  # rule only applies when this trigger matches
    cite: SignalGroup | None = None  # cite the first matching line as evidence
    mandatory: bool = False  # part of the gap-fill subset
    covers: str | None = None  # regex over existing "theme:title" that counts as coverage

    def applies(self, signals: SignalIndex) -> bool:
        return self.when is None or signals.any_of(self.when)

    def fires(self, signals: SignalIndex) -> bool:
        return self.applies(signals) and not signals.all_groups(self.requires)

    def is_covered_by(self, finding: Finding) -> bool:
        if finding.title.strip().casefold() == self.title.casefold():
            return True
        if self.covers:
            return re.search(self.covers, f"{finding.theme.value}:{finding.title}", re.IGNORECASE) is not None
        return False

    def to_finding(self, signals: SignalIndex, ids: IdSequence) -> Finding:
        evidence = find_line_citation(signals.text, self.cite) if self.cite else NOT_FOUND
        return Finding(
            id=ids.next("H"),
            theme=self.theme,
            title=self.title,
            status=FindingStatus.UNDISCLOSED,
            severity=self.severity,
            evidence=evidence,
            impact=self.impact,
            recommendation=self.recommendation,
            references=list(self.references),
            confidence=self.confidence,
            source="heuristic",
        )


# ── Privacy (Australian Privacy Principles) ──────────────────────────────

PRIVACY_RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="privacy.policy_statement",
        theme=Theme.PRIVACY,
        title="APP 1 transparency",
        severity=Severity.MEDIUM,
        impact="Lack of clear statement on how personal information is managed (APP 1).",
        recommendation=(
            "Publish an APP 1-compliant privacy policy covering purpose, types collected, "
            "use/disclosure, access/correction, complaints and contact."
        ),
        references=("APP 1",),
        confidence=0.6,
        requires=((r"\bprivacy policy\b", r"how we manage.*personal information"),),
    ),
    Rule(
        rule_id="privacy.collection_notice",
        theme=Theme.PRIVACY,
        title="APP 5 collection notice",
        severity=Severity.HIGH,
        impact="APP 5 notice may be incomplete or absent.",
        recommendation="Add an APP 5 notice with purposes, fields, disclosures, cross-border, contact.",
        references=("APP 5",),
        confidence=0.7,
        requires=(
            # what is collected
            (r"\bwe (?:collect|gather|obtain)\b", r"\bcollect(?:s|ed)?\b"),
            # which fields
            (
                r"\bnames?\b", r"e-?mail", r"\baddress(?:es)?\b", r"\bphone", r"date of birth",
                r"personal information", r"personal data",
            ),
            # why
            (
                r"why we collect", r"\bpurposes?\b", r"\bin order to\b", r"\bso (?:that )?we can\b",
                r"\bfor (?:account|service|order|billing|marketing|payment|registration|the provision)",
            ),
            # who to contact
            (r"how to contact", r"\bcontact\b", r"[\w.+-]+@[\w-]+\.[\w.]+"),
        ),
        mandatory=True,
        covers=r"collection notice|\bapp\s*5\b",
    ),
    Rule(
        rule_id="privacy.cross_border",
        theme=Theme.PRIVACY,
        title="APP 8 cross-border disclosures",
        severity=Severity.MEDIUM,
        impact="If using offshore vendors/cloud, APP 8 accountability may apply.",
        recommendation="Disclose countries/types of overseas recipients or state none occur.",
        references=("APP 8",),
        confidence=0.6,
        requires=((r"overseas", r"outside australia", r"cross-border"),),
    ),
    Rule(
        rule_id="privacy.security_of_information",
        theme=Theme.PRIVACY,
        title="APP 11 security of personal information",
        severity=Severity.HIGH,
        impact="Absence of described measures increases risk.",
        recommendation="Document encryption/MFA/least privilege/backups/patch SLAs.",
        references=("APP 11", "ACSC Essential Eight"),
        confidence=0.7,
        requires=(
            (r"security",),
            (r"encryption", r"\bmfa\b", r"access control", r"backup", r"patch"),
        ),
        mandatory=True,
        covers=r"security of (?:personal )?information|\bapp\s*11\b",
    ),
    Rule(
        rule_id="privacy.access",
        theme=Theme.PRIVACY,
        title="APP 12 access to personal information",
        severity=Severity.MEDIUM,
        impact="Individuals may not know how to obtain info.",
        recommendation="Add a process for access requests, ID, timeframes, charges.",
        references=("APP 12",),
        confidence=0.6,
        requires=((r"access your (?:personal )?information", r"request access", r"access requests?"),),
        mandatory=True,
        covers=r"access to (?:personal )?information|\bapp\s*12\b",
    ),
    Rule(
        rule_id="privacy.correction",
        theme=Theme.PRIVACY,
        title="APP 13 correction of personal information",
        severity=Severity.MEDIUM,
        impact="Individuals may not know how to correct inaccuracies.",
        recommendation="Describe correction process, acknowledgement, timeframes.",
        references=("APP 13",),
        confidence=0.6,
        requires=((r"correction", r"correct your (?:personal )?information"),),
        mandatory=True,
        covers=r"correction|\bapp\s*13\b",
    ),
    Rule(
        rule_id="privacy.retention",
        theme=Theme.PRIVACY,
        title="Retention & deletion",
        severity=Severity.MEDIUM,
        impact="Data kept without defined periods increases exposure.",
        recommendation="State retention periods, secure destruction or de-identification, and triggers.",
        references=("APP 11",),
        confidence=0.6,
        requires=((r"retention", r"retain", r"delet(?:e|ion)", r"destroy", r"de-?identif"),),
        mandatory=True,
        covers=r"retention|deletion",
    ),
)


# ── Security controls (ACSC Essential Eight signals) ─────────────────────

CONTROL_FAMILIES: tuple[tuple[str, str], ...] = (
    ("Patch applications", r"\b(?:patch|update)\w*\b.*\b(?:applications?|apps?)\b"),
    ("Patch operating systems", r"\b(?:patch|update)\w*\b.*\b(?:operating systems?|os)\b"),
    ("Configure Microsoft Office macro settings", r"macro"),
    ("User application hardening", r"hardening|blocklist|\bdisabl"),
    ("Restrict administrative privileges", r"admin(?:istrative)?\s+privilege|least privilege|\brbac\b"),
    ("Multi-factor authentication", r"multi-?factor|\bmfa\b|\b2fa\b"),
    ("Regular backups", r"backup"),
    ("Incident response", r"incident|breach notification|\brespond"),
)


def _control_family_rule(name: str, pattern: str) -> Rule:
    return Rule(
        rule_id=f"security.{re.sub(r'[^a-z0-9]+', '_', name.lower()).strip('_')}",
        theme=Theme.SECURITY_CONTROLS,
        title=f"Essential Eight: {name}",
        severity=Severity.LOW,
        impact=f'No mention of "{name}" which is recommended ACSC control.',
        recommendation=f'Publish statement of posture for "{name}".',
        references=("ACSC Essential Eight",),
        confidence=0.55,
        requires=((pattern,),),
    )


SECURITY_RULES: tuple[Rule, ...] = tuple(
    _control_family_rule(name, pattern) for name, pattern in CONTROL_FAMILIES
) + (
    Rule(
        rule_id="security.posture",
        theme=Theme.SECURITY_CONTROLS,
        title="Essential Eight posture",
        severity=Severity.MEDIUM,
        impact="Security posture unclear.",
        recommendation="Publish high-level summary mapping to Essential Eight maturity.",
        references=("ACSC Essential Eight",),
        confidence=0.55,
        # satisfied by any single control family
        requires=(tuple(pattern for _, pattern in CONTROL_FAMILIES),),
    ),
)


# ── Domain exemption (TGA clinical decision support software) ────────────

DOMAIN_RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="domain.non_diagnostic",
        theme=Theme.DOMAIN_EXEMPTION,
        title="Non-diagnostic disclaimer",
        severity=Severity.HIGH,
        impact="Without this, TGA may view as regulated medical device.",
        recommendation=(
            "Add disclaimer: 'This software does not provide a medical diagnosis and must not "
            "replace professional judgement.'"
        ),
        references=("TGA CDSS Exemption Guidance",),
        confidence=0.75,
        requires=((r"not.*diagnos", r"does not diagnos", r"not intended to diagnose"),),
    ),
    Rule(
        rule_id="domain.clinician_oversight",
        theme=Theme.DOMAIN_EXEMPTION,
        title="Clinician oversight",
        severity=Severity.HIGH,
        impact="CDSS exemption requires clinician retains decision-making.",
        recommendation=(
            "State: 'Outputs are intended for use by qualified healthcare professionals, who retain "
            "responsibility for all decisions.'"
        ),
        references=("TGA CDSS Exemption",),
        confidence=0.75,
        requires=((r"clinician", r"health professional", r"doctor review"),),
    ),
    Rule(
        rule_id="domain.logic_transparency",
        theme=Theme.DOMAIN_EXEMPTION,
        title="Transparency of logic",
        severity=Severity.MEDIUM,
        impact="Opaque logic risks classification as regulated device.",
        recommendation="Add language that clinicians can see rules, thresholds, references.",
        references=("TGA CDSS Exemption",),
        confidence=0.65,
        requires=((r"transparent", r"rules", r"guideline", r"threshold"),),
    ),
    Rule(
        rule_id="domain.patient_facing",
        theme=Theme.DOMAIN_EXEMPTION,
        title="Patient-facing mode disclaimer",
        severity=Severity.MEDIUM,
        impact="Patient features may trigger regulation unless limited.",
        recommendation="Clarify patient mode only shows clinician-approved educational summaries.",
        references=("TGA CDSS Exemption",),
        confidence=0.6,
        requires=((r"educational", r"read-only", r"non-directive"),),
        when=(r"patient",),
        cite=(r"patient",),
    ),
    Rule(
        rule_id="domain.scope_limitation",
        theme=Theme.DOMAIN_EXEMPTION,
        title="Scope limitations",
        severity=Severity.MEDIUM,
        impact="Absence of scope limitation could classify as device.",
        recommendation="Add: 'Not intended for triage, emergency use, disease prediction, or therapeutic purposes.'",
        references=("TGA CDSS Exemption",),
        confidence=0.6,
        requires=((r"not intended", r"not for triage", r"not for emergency"),),
    ),
)


RULES: tuple[Rule, ...] = PRIVACY_RULES + SECURITY_RULES + DOMAIN_RULES
MANDATORY_RULES: tuple[Rule, ...] = tuple(r for r in RULES if r.mandatory)


def run_heuristics(
    text: str | None,
    ids: IdSequence | None = None,
    rules: tuple[Rule, ...] = RULES,
    signals: SignalIndex | None = None,
) -> list[Finding]:
    """Evaluate every rule against the whole document, in table order."""
    ids = ids or IdSequence()
    signals = signals or SignalIndex(text)
    return [rule.to_finding(signals, ids) for rule in rules if rule.fires(signals)]


def fill_coverage_gaps(
    findings: list[Finding],
    text: str | None,
    ids: IdSequence | None = None,
    signals: SignalIndex | None = None,
) -> list[Finding]:
    """
    Append mandatory-coverage findings the existing list does not already cover.

    Only rules that fire against the document are considered; a rule counts as
    covered when an existing finding has the same title or matches its ``covers``
    pattern. Returns a new list and leaves ``findings`` untouched.
    """
    ids = ids or IdSequence()
    signals = signals or SignalIndex(text)
    result = list(findings)
    for rule in MANDATORY_RULES:
        if not rule.fires(signals):
            continue
        if any(rule.is_covered_by(f) for f in result):
            continue
        result.append(rule.to_finding(signals, ids))
    return result
