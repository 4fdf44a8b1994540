from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Arkom API"
    app_env: str = "dev"
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    database_url: str = "sqlite+aiosqlite:///./arkom.db"
    cors_allow_origins: str = "http://localhost:5173"
    admin_emails: str = ""
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:8000"
    # None disables the client timeout; admin reorders wait on the store.
    http_timeout_seconds: float | None = None

    @property
    def cors_origins(self) -> list[str]:
        return [x.strip() for x in self.cors_allow_origins.split(",") if x.strip()]

    @property
    def admin_email_list(self) -> list[str]:
        return [x.strip().lower() for x in self.admin_emails.split(",") if x.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
