from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    listennotes_api_key: str = ""
    groq_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    assemblyai_api_key: str = ""  # only used when stt_provider=assemblyai

    # Supabase (audit log)
    supabase_url: str = ""
    supabase_key: str = ""

    # Notion
    notion_api_key: str = ""
    notion_database_id: str = ""

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    listennotes_base_url: str = "https://listen-api.listennotes.com/api/v2"

    # Speech-to-text: "openai" talks to any Whisper-compatible endpoint (Groq by default)
    stt_provider: str = "openai"
    stt_model: str = "whisper-large-v3"
    stt_base_url: str = "https://api.groq.com/openai/v1"

    # Summarization: "openai" (Groq-compatible chat completions) or "anthropic"
    llm_provider: str = "openai"
    llm_model: str = "llama-3.1-8b-instant"
    llm_base_url: str = "https://api.groq.com/openai/v1"

    # Audio extraction
    audio_fetch_strategy: str = "download_then_trim"
    temp_dir: str = "temp"
    curl_binary: str = "curl"
    ffmpeg_binary: str = "ffmpeg"
    user_agent: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

    # Stage timeouts (seconds)
    search_timeout: float = 15.0
    download_timeout: float = 180.0
    trim_timeout: float = 60.0
    transcription_timeout: float = 60.0
    summarization_timeout: float = 30.0

    # Outputs smaller than this are treated as failed downloads or transcodes
    min_download_bytes: int = 10_000
    min_snippet_bytes: int = 1_000

    window_seconds: int = 30
    recent_insights_capacity: int = 10

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
