"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    llm_model_name: str = Field(default="gpt-4o-mini", alias="LLM_MODEL_NAME")
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=1000, gt=0, alias="LLM_MAX_TOKENS")
    embedding_model_name: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL_NAME")
    embedding_dimension: int = Field(default=1536, gt=0, alias="EMBEDDING_DIMENSION")

    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_anon_key: SecretStr | None = Field(default=None, alias="SUPABASE_ANON_KEY")
    documents_table: str = Field(default="documents", alias="DOCUMENTS_TABLE")
    match_function: str = Field(default="match_documents", alias="MATCH_FUNCTION")

    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0, alias="SIMILARITY_THRESHOLD")
    max_results: int = Field(default=5, gt=0, alias="MAX_RESULTS")
    hybrid_threshold: float = Field(default=0.6, ge=0.0, le=1.0, alias="HYBRID_THRESHOLD")
    hybrid_max_results: int = Field(default=10, gt=0, alias="HYBRID_MAX_RESULTS")
    rag_threshold: float = Field(default=0.7, ge=0.0, le=1.0, alias="RAG_THRESHOLD")
    rag_max_results: int = Field(default=3, gt=0, alias="RAG_MAX_RESULTS")

    request_timeout_sec: float = Field(default=30.0, gt=0, alias="REQUEST_TIMEOUT_SEC")
    embed_concurrency: int = Field(default=8, gt=0, alias="EMBED_CONCURRENCY")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()


def setup_logging() -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    # httpx logs every request at INFO; keep it for debugging only
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("agent_dashboard")


def public_settings() -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    return settings.model_dump(
        exclude={"openai_api_key", "supabase_anon_key"},
        exclude_none=True,
    )


__all__ = ["Settings", "settings", "setup_logging", "public_settings"]
