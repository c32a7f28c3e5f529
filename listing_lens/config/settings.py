from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    app_env: str = "dev"
    log_level: str = "INFO"

    redis_url: str = "redis://localhost:6379/0"

    session_ttl_seconds: int = 900
    job_ttl_seconds: int = 3600
    max_assets: int = 6
    max_asset_bytes: int = 10 * 1024 * 1024
    max_upload_parts: int = 20
    allowed_mime_types: tuple[str, ...] = (
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
    )

    rate_limit_window_seconds: int = 3600
    rate_limit_max_requests: int = 100

    job_queue_name: str = "listing-lens:jobs"
    job_poll_interval_seconds: int = 1

    payment_bypass: bool = False
    stripe_secret_key: str = ""
    payment_claim_ttl_seconds: int = 86400
    accepted_amounts: tuple[int, ...] = (200, 500, 1000)
    accepted_currency: str = "aud"

    generation_provider: str = "anthropic"
    generation_max_tokens: int = 8000
    generation_openai_api_key: str = ""
    generation_openai_model_name: str = "gpt-4o"
    generation_openai_timeout_seconds: int = 300
    generation_openai_compatible_base_url: str = ""
    generation_openai_compatible_api_key: str = ""
    generation_openai_compatible_model_name: str = ""
    generation_openrouter_api_key: str = ""
    generation_openrouter_model_name: str = ""
    generation_anthropic_api_key: str = ""
    generation_anthropic_model_name: str = "claude-sonnet-4-5"
    generation_anthropic_timeout_seconds: int = 300

    prompts_dir: str = ""

    cors_origins: str = "http://localhost:3000"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def cors_origins_list(self) -> list[str]:
        """Split comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
