"""Analyze API route: upload one document, get the JSON risk report back."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from cra.analysis.pipeline import analyze_text
from cra.config import AnalysisConfig, get_settings
from cra.errors import ConfigError, DocumentParseError, InsufficientTextError
from cra.ingest.text_extract import extract_text
from cra.llm import LLMProvider, provider_from_settings

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()

# Max upload size from settings (default 15 MB)
MAX_UPLOAD_BYTES = settings.max_upload_bytes


def get_llm() -> LLMProvider | None:
    """Configured model gateway, or None (heuristics only) when no API key is set."""
    provider_name = settings.cra_llm_provider.lower()
    if not settings.api_key_for(provider_name):
        logger.warning("No API key configured for provider '%s'; heuristics only", provider_name)
        return None
    return provider_from_settings(settings, provider_name)


def get_analysis_config() -> AnalysisConfig:
    return settings.analysis_config()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/analyze-file")
async def analyze_file(
    file: UploadFile | None = File(None, description="Document to analyze (PDF, .txt or .md)"),
    llm: LLMProvider | None = Depends(get_llm),
):
    """Extract text from the uploaded file and return the risk report."""
    if file is None:
        return _error(400, "No file uploaded")

    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        return _error(400, f"File too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB.")

    try:
        text = extract_text(file.filename, content, min_chars=settings.cra_min_text_chars)
    except (DocumentParseError, InsufficientTextError) as e:
        return _error(400, str(e))

    logger.info("Analyzing upload %s (%d bytes)", file.filename, len(content))
    try:
        config = get_analysis_config()
        report = await run_in_threadpool(analyze_text, text, llm, config)
    except ConfigError as e:
        logger.exception("Invalid analysis configuration")
        return _error(500, str(e))
    except Exception as e:
        logger.exception("Analysis failed")
        return _error(500, str(e) or "Analysis failed")

    return report.model_dump(mode="json")
