"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "astrolog"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///./astrolog.db"
    # Build identifier reported by /api/version for client-side update checks
    build_tag: str = "dev"
    build_tag_state_path: str = "~/.astrolog/seen_build_tag.json"
    # Heartbeat authorization: bearer secret or a known scheduler user agent
    cron_secret: str = ""
    cron_user_agents: tuple[str, ...] = ("vercel-cron/1.0",)
    # External auth provider (magic link / code exchange)
    auth_url: str = "http://localhost:9999"
    auth_anon_key: str = ""
    auth_timeout: float = 10.0
    auth_required: bool = True
    public_base_url: str = "http://localhost:8000"
    session_cookie_name: str = "astrolog_session"
    landing_path: str = "/targets"
    login_path: str = "/login"
    catalog_search_min_chars: int = 2
    catalog_search_limit: int = 25
    lookup_list_limit: int = 500
    # Lifetime of a signed-in session when the provider does not state one
    auth_session_ttl: int = 3600
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
