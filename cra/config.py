"""Configuration loaded from environment (.env), the scoring rubric YAML and defaults."""

import math
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from cra.errors import ConfigError
from cra.schemas.models import Theme

# Project root .env, found regardless of CWD
_THIS_DIR = Path(__file__).resolve().parent          # cra/
_PROJECT_ROOT = _THIS_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

RUBRICS_DIR = _THIS_DIR / "rubrics"
DEFAULT_RUBRIC = RUBRICS_DIR / "default.yaml"

DEFAULT_CHUNK_SIZE = 6000
DEFAULT_CHUNK_OVERLAP = 800
WEIGHT_TOLERANCE = 1e-6
MAX_REMEDIATION_ITEMS = 6


@dataclass(frozen=True)
class AnalysisConfig:
    """Explicit parameters for one analysis run; validated on construction."""

    weights: dict[Theme, float]
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    max_concurrency: int = 4
    isolate_chunk_failures: bool = True
    jurisdictions: tuple[str, ...] = ("AU",)
    remediation_limit: int = MAX_REMEDIATION_ITEMS

    def __post_init__(self) -> None:
        try:
            weights = {Theme(k): float(v) for k, v in self.weights.items()}
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid weight map: {e}") from e
        missing = [t.value for t in Theme if t not in weights]
        if missing:
            raise ConfigError(f"Weights missing for theme(s): {', '.join(missing)}")
        negative = [t.value for t, w in weights.items() if w < 0 or not math.isfinite(w)]
        if negative:
            raise ConfigError(f"Weights must be finite and non-negative: {', '.join(negative)}")
        total = sum(weights.values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ConfigError(f"Weights must sum to 1.0 (got {total:.6f})")
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be positive (got {self.chunk_size})")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigError(
                f"chunk_overlap must satisfy 0 <= overlap < chunk_size "
                f"(got overlap={self.chunk_overlap}, chunk_size={self.chunk_size})"
            )
        if self.max_concurrency < 1:
            raise ConfigError(f"max_concurrency must be >= 1 (got {self.max_concurrency})")
        if not 0 <= self.remediation_limit <= MAX_REMEDIATION_ITEMS:
            raise ConfigError(
                f"remediation_limit must be between 0 and {MAX_REMEDIATION_ITEMS} (got {self.remediation_limit})"
            )
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "jurisdictions", tuple(self.jurisdictions))


def load_rubric(path: Path | None = None) -> dict:
    """Load the scoring rubric (theme weights) from YAML."""
    path = Path(path) if path else DEFAULT_RUBRIC
    if not path.exists():
        raise ConfigError(f"Rubric not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse rubric {path}: {e}") from e
    if not isinstance(data.get("weights"), dict):
        raise ConfigError(f"Rubric {path} has no 'weights' mapping")
    return data


def default_analysis_config(**overrides) -> AnalysisConfig:
    """AnalysisConfig with the bundled rubric weights; keyword overrides win."""
    rubric = load_rubric()
    params = {
        "weights": rubric["weights"],
        "remediation_limit": int(rubric.get("remediation_limit", MAX_REMEDIATION_ITEMS)),
    }
    params.update(overrides)
    return AnalysisConfig(**params)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM provider: openai | anthropic
    cra_llm_provider: str = "openai"

    # OpenAI
    openai_api_key: str | None = None
    cra_openai_model: str = "gpt-4o-mini"

    # Anthropic
    anthropic_api_key: str | None = None
    cra_anthropic_model: str = "claude-3-5-sonnet-20241022"

    # Model call policy (passed to the SDK clients)
    cra_model_timeout_s: float = 60.0
    cra_model_max_retries: int = 2

    # Chunking and fan-out
    cra_chunk_size: int = DEFAULT_CHUNK_SIZE
    cra_chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    cra_max_concurrency: int = 4
    cra_isolate_chunk_failures: bool = True

    # Scoring rubric YAML (theme weights); bundled default when unset
    cra_rubric_path: str | None = None

    # Jurisdiction tags reported in document metadata (comma-separated)
    cra_jurisdictions: str = "AU"

    # Reject documents that extract to fewer non-space characters than this
    cra_min_text_chars: int = 20

    # CORS origins (comma-separated). Defaults to localhost dev.
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Server port
    port: int = 3000

    # Max upload size in bytes (default 15 MB)
    max_upload_bytes: int = 15 * 1024 * 1024

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def jurisdiction_list(self) -> list[str]:
        return [j.strip() for j in self.cra_jurisdictions.split(",") if j.strip()]

    def api_key_for(self, provider_name: str) -> str | None:
        if provider_name.lower() == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key

    def model_for(self, provider_name: str) -> str:
        if provider_name.lower() == "anthropic":
            return self.cra_anthropic_model
        return self.cra_openai_model

    def analysis_config(self) -> AnalysisConfig:
        """Build the validated AnalysisConfig; raises ConfigError on bad values."""
        rubric = load_rubric(Path(self.cra_rubric_path) if self.cra_rubric_path else None)
        return AnalysisConfig(
            weights=rubric["weights"],
            chunk_size=self.cra_chunk_size,
            chunk_overlap=self.cra_chunk_overlap,
            max_concurrency=self.cra_max_concurrency,
            isolate_chunk_failures=self.cra_isolate_chunk_failures,
            jurisdictions=tuple(self.jurisdiction_list),
            remediation_limit=int(rubric.get("remediation_limit", MAX_REMEDIATION_ITEMS)),
        )


def get_settings() -> Settings:
    return Settings()
