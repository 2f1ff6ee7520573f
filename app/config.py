from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    app_name: str = Field("Notebook", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")
    secret_key: str = Field("dev-secret-change-me", alias="SECRET_KEY")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")

    session_cookie_name: str = Field("nb_session", alias="SESSION_COOKIE_NAME")
    session_ttl_hours: int = Field(24, alias="SESSION_TTL_HOURS")
    session_cookie_secure: bool = Field(False, alias="SESSION_COOKIE_SECURE")
    password_hash_rounds: int = Field(12, alias="PASSWORD_HASH_ROUNDS")

    max_upload_mb: int = Field(10, alias="MAX_UPLOAD_MB")

    rate_limit_window_seconds: int = Field(60, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_calls: int = Field(30, alias="RATE_LIMIT_MAX_CALLS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
