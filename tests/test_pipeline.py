"""Tests for the analysis pipeline: fan-out, ordered merge, fallback and gap-fill."""

import pytest

from cra.analysis.pipeline import analyze_text, build_prompt, collect_model_findings
from cra.analysis.ids import IdSequence
from cra.config import default_analysis_config
from cra.errors import ModelGatewayError
from cra.ingest.chunker import chunk_text
from cra.schemas.models import RecoveryTier, Theme

from tests.fakes import FULL_POLICY_TEXT, SCENARIO_TEXT, ChunkEchoLLM, FakeLLM, as_json, model_finding


def test_build_prompt_layout():
    prompt = build_prompt("[LINE 1] We collect email.", ("AU",))
    assert prompt.startswith("<<INSTRUCTIONS>>")
    assert "AU-ONLY" in prompt
    assert '"security_controls"' in prompt
    assert "<<SCOPE>> AU only" in prompt
    assert prompt.endswith("<<DOCUMENT_CHUNK>>\n[LINE 1] We collect email.")


def test_offline_runs_heuristics_only(analysis_config):
    report = analyze_text(SCENARIO_TEXT, config=analysis_config)
    assert report.stats.findings_source == "heuristic"
    assert report.stats.chunks == 1
    assert report.stats.recovery_tiers == []
    assert all(f.source == "heuristic" for f in report.findings)
    assert report.findings[0].id == "H-001"


def test_end_to_end_scenario(analysis_config):
    report = analyze_text(SCENARIO_TEXT, config=analysis_config)
    titles = [f.title for f in report.findings]
    assert "APP 11 security of personal information" in titles
    assert "APP 5 collection notice" not in titles
    assert "APP 12 access to personal information" not in titles
    assert report.scores.privacy == 40
    assert 0 <= report.scores.overall <= 100
    assert len(report.remediation_plan) == 6
    assert report.doc.title == "Document"
    assert report.doc.jurisdiction_mentions == ["AU"]


def test_model_findings_from_fenced_response_are_gap_filled(analysis_config):
    llm = FakeLLM(["Findings:\n```json\n" + as_json(model_finding()) + "\n```"])
    report = analyze_text(SCENARIO_TEXT, llm=llm, config=analysis_config)
    assert len(llm.prompts) == 1
    assert "[LINE 1] We collect your name" in llm.prompts[0]
    assert report.stats.findings_source == "model"
    assert report.stats.recovery_tiers == [RecoveryTier.FENCED]
    assert report.findings[0].id == "M-001"
    assert report.findings[0].source == "model"
    assert [f.title for f in report.findings[1:]] == [
        "APP 11 security of personal information",
        "APP 13 correction of personal information",
        "Retention & deletion",
    ]
    assert report.stats.gap_fill_added == 3


def test_unparseable_response_falls_back_to_heuristics(analysis_config):
    llm = FakeLLM(["I reviewed the document and it looks fine."])
    report = analyze_text(SCENARIO_TEXT, llm=llm, config=analysis_config)
    assert report.stats.recovery_tiers == [RecoveryTier.NONE]
    assert report.stats.findings_source == "heuristic"
    assert report.findings == analyze_text(SCENARIO_TEXT, config=analysis_config).findings


def test_unknown_themes_only_falls_back(analysis_config):
    llm = FakeLLM([as_json(model_finding(theme="astrology"))])
    report = analyze_text(SCENARIO_TEXT, llm=llm, config=analysis_config)
    assert report.stats.findings_source == "heuristic"


def test_merge_follows_chunk_order_under_concurrency(small_chunk_config):
    chunks = chunk_text(FULL_POLICY_TEXT, small_chunk_config.chunk_size, small_chunk_config.chunk_overlap)
    assert len(chunks) > small_chunk_config.max_concurrency
    report = analyze_text(FULL_POLICY_TEXT, llm=ChunkEchoLLM(), config=small_chunk_config)
    assert report.stats.chunks == len(chunks)
    assert [f.title for f in report.findings] == [c.strip() for c in chunks]
    assert [f.id for f in report.findings] == [f"M-{i:03d}" for i in range(1, len(chunks) + 1)]
    assert report.stats.gap_fill_added == 0


def test_concurrent_and_sequential_runs_agree(small_chunk_config):
    sequential = default_analysis_config(chunk_size=120, chunk_overlap=40, max_concurrency=1)
    a = analyze_text(FULL_POLICY_TEXT, llm=ChunkEchoLLM(first_delay=0), config=sequential)
    b = analyze_text(FULL_POLICY_TEXT, llm=ChunkEchoLLM(), config=small_chunk_config)
    assert a.model_dump() == b.model_dump()


def test_failed_chunk_is_isolated():
    config = default_analysis_config(chunk_size=120, chunk_overlap=40, max_concurrency=1)
    chunks = chunk_text(FULL_POLICY_TEXT, 120, 40)
    llm = FakeLLM(default=as_json(model_finding()), fail_on={1})
    report = analyze_text(FULL_POLICY_TEXT, llm=llm, config=config)
    assert report.stats.failed_chunks == 1
    assert report.stats.recovery_tiers[1] == RecoveryTier.NONE
    assert len(report.findings) == len(chunks) - 1
    assert report.stats.findings_source == "model"


def test_all_chunks_failing_raises(small_chunk_config):
    llm = FakeLLM(fail_on=range(1000))
    with pytest.raises(ModelGatewayError, match="all"):
        analyze_text(FULL_POLICY_TEXT, llm=llm, config=small_chunk_config)


def test_failure_without_isolation_aborts():
    config = default_analysis_config(isolate_chunk_failures=False, max_concurrency=1)
    llm = FakeLLM(fail_on={0})
    with pytest.raises(ModelGatewayError, match="chunk 1/1"):
        analyze_text(SCENARIO_TEXT, llm=llm, config=config)


def test_collect_model_findings_counts_tiers(analysis_config):
    llm = FakeLLM([as_json(model_finding(), model_finding(theme="security_e8"))])
    result = collect_model_findings(["[LINE 1] text"], llm, analysis_config, IdSequence())
    assert result.tiers == [RecoveryTier.DIRECT]
    assert [f.theme for f in result.findings] == [Theme.PRIVACY, Theme.SECURITY_CONTROLS]
    assert result.failed_chunks == 0


def test_empty_text_offline(analysis_config):
    report = analyze_text("", config=analysis_config)
    assert report.stats.chunks == 1
    assert report.scores.contract_fairness == 100
    assert report.scores.vendor_sharing == 100
    assert len(report.remediation_plan) <= 6


def test_deeply_nested_response_falls_back_to_heuristics(analysis_config):
    llm = FakeLLM(["noise " + "[" * 200000 + "]" * 200000])
    report = analyze_text(SCENARIO_TEXT, llm=llm, config=analysis_config)
    assert report.stats.recovery_tiers == [RecoveryTier.NONE]
    assert report.stats.findings_source == "heuristic"
