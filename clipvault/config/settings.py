"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) environment variables, then a
``.env`` file in the working directory, then the defaults below.  Field
``openai_api_key`` maps to env var ``OPENAI_API_KEY`` and so on.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ClipVault application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Storage ===
    database_path: str = "data/clips.db"
    upload_dir: str = "data/uploads"
    public_upload_prefix: str = "/uploads"

    # === Request limits ===
    # max_file_size is the per-file submission check; max_request_size
    # caps whole request bodies (base64 JSON payloads included).
    max_file_size: int = 10 * 1024 * 1024
    max_request_size: int = 50 * 1024 * 1024

    # === LLM Providers ===
    # Empty string = "not configured".  Without any key the server-side
    # upload route is disabled; the JSON ingest route still works.
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_text_model: str = ""
    openai_vision_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""

    # === Analysis ===
    analysis_max_chars: int = 10_000
    # Per-request LLM timeout (seconds), applied to both provider clients.
    llm_timeout_seconds: float = 60.0

    # === App Config ===
    cors_origins: str = "*"
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return the LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def get_cors_origins(self) -> list[str]:
        """Split the comma-separated ``CORS_ORIGINS`` value."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
