"""Analysis pipeline: chunk fan-out to the model, ordered merge, heuristic fallback/gap-fill, report."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from cra.analysis.ids import IdSequence
from cra.analysis.recovery import normalize_records, recover_findings
from cra.analysis.rules import fill_coverage_gaps, run_heuristics
from cra.analysis.signals import SignalIndex
from cra.config import AnalysisConfig, default_analysis_config
from cra.errors import ModelGatewayError
from cra.ingest.chunker import chunk_text
from cra.llm.base import LLMProvider
from cra.report.builder import build_report
from cra.schemas.models import AnalysisStats, Finding, FindingStatus, RecoveryTier, Report, Severity, Theme

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
PROMPT_TEMPLATE = "analysis.j2"
SCOPE = "AU only (APPs + Essential Eight + CDSS exemption signals)"
_env = Environment(loader=FileSystemLoader(str(PROMPTS_DIR)))


def build_prompt(chunk: str, jurisdictions: tuple[str, ...] = ("AU",)) -> str:
    """Render the per-chunk instruction prompt."""
    return _env.get_template(PROMPT_TEMPLATE).render(
        jurisdiction_label="/".join(jurisdictions) + "-ONLY" if jurisdictions else "general",
        themes=[t.value for t in Theme],
        statuses=[s.value for s in FindingStatus],
        severities=[s.value for s in Severity],
        scope=SCOPE,
        chunk=chunk,
    )


@dataclass
class ModelPass:
    """Findings recovered from every chunk, merged in document order."""

    findings: list[Finding] = field(default_factory=list)
    tiers: list[RecoveryTier] = field(default_factory=list)
    failed_chunks: int = 0


def collect_model_findings(
    chunks: list[str],
    llm: LLMProvider,
    config: AnalysisConfig,
    ids: IdSequence,
) -> ModelPass:
    """
    Send every chunk to the model with at most ``config.max_concurrency`` calls in flight.

    Results are consumed in chunk order, so finding order (and id assignment) is
    the same as a sequential run. A failed chunk either aborts the run or, with
    ``isolate_chunk_failures``, contributes nothing; if every chunk fails the run
    raises ModelGatewayError.
    """
    prompts = [build_prompt(chunk, config.jurisdictions) for chunk in chunks]
    result = ModelPass()
    workers = max(1, min(config.max_concurrency, len(prompts)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cra-chunk") as pool:
        futures = [pool.submit(llm.complete, prompt) for prompt in prompts]
        for index, future in enumerate(futures):
            try:
                raw = future.result()
            except Exception as e:
                if not config.isolate_chunk_failures:
                    for pending in futures[index + 1 :]:
                        pending.cancel()
                    raise ModelGatewayError(f"Model call failed on chunk {index + 1}/{len(chunks)}: {e}") from e
                logger.warning("Model call failed on chunk %d/%d: %s", index + 1, len(chunks), e)
                result.failed_chunks += 1
                result.tiers.append(RecoveryTier.NONE)
                continue
            recovered = recover_findings(raw)
            logger.debug(
                "Chunk %d/%d: %d record(s) via %s", index + 1, len(chunks),
                len(recovered.records), recovered.tier.value,
            )
            result.tiers.append(recovered.tier)
            result.findings.extend(normalize_records(recovered.records, ids))

    if chunks and result.failed_chunks == len(chunks):
        raise ModelGatewayError(f"Model call failed for all {len(chunks)} chunk(s)")
    return result


def analyze_text(
    raw_text: str,
    llm: LLMProvider | None = None,
    config: AnalysisConfig | None = None,
) -> Report:
    """
    Analyze document text into a Report.

    With ``llm=None`` only the heuristic rule engine runs. Otherwise model
    findings are used when there are any, topped up with the mandatory-coverage
    heuristics; an empty model result falls back to the full rule table.
    """
    config = config or default_analysis_config()
    raw_text = raw_text or ""
    chunks = chunk_text(raw_text, config.chunk_size, config.chunk_overlap)
    ids = IdSequence()
    signals = SignalIndex(raw_text)
    stats = AnalysisStats(chunks=len(chunks))

    findings: list[Finding] = []
    if llm is not None:
        logger.info("Analyzing %d chars in %d chunk(s)", len(raw_text), len(chunks))
        model_pass = collect_model_findings(chunks, llm, config, ids)
        findings = model_pass.findings
        stats.recovery_tiers = model_pass.tiers
        stats.failed_chunks = model_pass.failed_chunks

    if not findings:
        logger.info("No model findings; running heuristic fallback")
        findings = run_heuristics(raw_text, ids, signals=signals)
        stats.findings_source = "heuristic"
    else:
        before = len(findings)
        findings = fill_coverage_gaps(findings, raw_text, ids, signals=signals)
        stats.findings_source = "model"
        stats.gap_fill_added = len(findings) - before
        logger.info("%d model finding(s), %d added by gap-fill", before, stats.gap_fill_added)

    return build_report(raw_text, findings, config, stats=stats, signals=signals)
