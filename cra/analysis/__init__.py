"""Stage 2 — finding generation and scoring: recovery, heuristic rules, aggregation.

The orchestrating pipeline lives in ``cra.analysis.pipeline``.
"""

from cra.analysis.aggregate import aggregate_scores, build_remediation_plan, score_categories
from cra.analysis.recovery import normalize_records, recover_findings
from cra.analysis.rules import RULES, fill_coverage_gaps, run_heuristics
from cra.analysis.signals import SignalIndex

__all__ = [
    "RULES",
    "SignalIndex",
    "aggregate_scores",
    "build_remediation_plan",
    "fill_coverage_gaps",
    "normalize_records",
    "recover_findings",
    "run_heuristics",
    "score_categories",
]
