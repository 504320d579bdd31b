"""Application settings and configuration.

This module defines all configuration options for the Cask Notes application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    Secrets (``SECRET_KEY`` and ``OPERATION_SIGNING_SECRET``) are process-wide,
    read-only values loaded once at start-up.
    """

    # Application metadata
    app_name: str = Field(default="Cask Notes", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Session credentials (JWT bearer tokens)
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 14,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    anonymous_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ANONYMOUS_TOKEN_EXPIRE_MINUTES",
    )
    session_cookie_name: str = Field(default="access_token", alias="SESSION_COOKIE_NAME")

    # Server-only key for signed bypass operations; validated by the signer.
    operation_signing_secret: str | None = Field(
        default=None,
        alias="OPERATION_SIGNING_SECRET",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./cask_notes.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Posting policy
    default_author_name: str = Field(
        default="Anonymous whisky lover",
        alias="DEFAULT_AUTHOR_NAME",
    )
    max_tags: int = Field(default=10, alias="MAX_TAGS")
    comments_enabled: bool = Field(default=True, alias="COMMENTS_ENABLED")

    # Local media storage for post images
    media_root: str = Field(default="./media", alias="MEDIA_ROOT")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL, preferring the test database when enabled."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
