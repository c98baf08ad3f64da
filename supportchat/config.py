from __future__ import annotations
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


DEFAULT_SYSTEM_PROMPT = (
    "You are Lily, the Learn It Live virtual support assistant. Answer concisely and "
    "accurately about Learn It Live classes, schedules, recordings, membership, pricing, "
    "and account help. Use the provided Learn It Live resources and URLs when relevant. "
    "If unsure or the information is not in the resources, say you are not certain and "
    "suggest visiting the Help page."
)


class Settings(BaseSettings):
    """
    Global app settings.

    Required values come from .env (or the environment).
    LLM_BASE_URL points at a Workers-AI-compatible REST base; the model is
    called as POST {LLM_BASE_URL}/run/{LLM_MODEL}.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # LLM
    LLM_BASE_URL: str
    LLM_API_KEY: str = ""
    LLM_MODEL: str = "@cf/meta/llama-3.3-70b-instruct-fp8-fast"
    MAX_TOKENS: int = 1024

    # Baseline persona
    SYSTEM_PROMPT: str = DEFAULT_SYSTEM_PROMPT

    # Static assets / knowledge documents
    ASSETS_DIR: str = "public"
    ASSETS_BASE_URL: Optional[str] = None
    RESOURCES_PATH: str = "resources.json"
    DIRECTIVES_PATH: str = "directives.json"

    # FAQ selection
    FAQ_MAX_COUNT: int = 5
    FAQ_MAX_ANSWER_CHARS: int = 400

    # Retrieval augmentation (disabled without RETRIEVAL_URL)
    RETRIEVAL_URL: Optional[str] = None
    RETRIEVAL_TENANT: Optional[str] = None
    RETRIEVAL_API_KEY: Optional[str] = None

    # Load documents + retrieval concurrently
    CONCURRENT_LOADS: bool = True

    @field_validator("LLM_BASE_URL", mode="after")
    def _strip_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"LLM_BASE_URL must be an http(s) URL: {v!r}")
        return v

    @field_validator("FAQ_MAX_COUNT", "FAQ_MAX_ANSWER_CHARS", "MAX_TOKENS", mode="after")
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("ASSETS_BASE_URL", "RETRIEVAL_URL", "RETRIEVAL_TENANT", "RETRIEVAL_API_KEY", mode="after")
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


settings = Settings()
