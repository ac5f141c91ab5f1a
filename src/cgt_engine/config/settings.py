"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    openai_api_key: str = ""
    google_api_key: str = ""
    search_api_key: str = ""
    search_engine_id: str = ""

    # Embedding
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # LLM / Gemini
    gemini_model: str = "gemini-2.0-flash"
    generation_temperature: float = 0.1
    draft_max_tokens: int = 1200
    nli_max_tokens: int = 800

    # Search
    search_endpoint: str = "https://customsearch.googleapis.com/customsearch/v1"

    # Timeouts (seconds)
    search_timeout_s: float = 10.0
    extraction_timeout_s: float = 10.0
    fast_extraction_timeout_s: float = 5.0
    generation_timeout_s: float = 60.0
    embedding_timeout_s: float = 20.0

    # Retry
    retry_max_attempts: int = 3
    retry_base_delay_s: float = 1.0
    retry_max_delay_s: float = 10.0

    # Domain policy (JSON file; built-in defaults when empty)
    policy_path: str = ""

    # Storage paths
    cache_db_path: str = "data/cache.db"
    metrics_db_path: str = "data/metrics.db"

    # Cost tracking
    cost_per_1k_tokens: float = 0.004

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "env_prefix": "CGT_"}
