"""Application settings loaded from environment variables.

Environment Configuration:
    VIDSHARE_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string (required)

Token Configuration:
    ACCESS_TOKEN_SECRET / ACCESS_TOKEN_EXPIRE_S: HS256 access tokens
    REFRESH_TOKEN_SECRET / REFRESH_TOKEN_EXPIRE_S: HS256 refresh tokens
    Secrets are required in staging/prod. Local/test fall back to fixed dev secrets.

Media Host Configuration:
    CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET
    When all three are set the Cloudinary relay is used, otherwise the
    in-memory fake relay.

Redis / Celery Configuration:
    REDIS_URL: Redis connection string
    CELERY_BROKER_URL: Celery broker URL (defaults to REDIS_URL)
    CELERY_RESULT_BACKEND: Celery result backend URL (defaults to REDIS_URL)
    MEDIA_CLEANUP_MODE: inline | deferred (deferred requires a broker)
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEV_ACCESS_TOKEN_SECRET = "vidshare-dev-access-secret"
DEV_REFRESH_TOKEN_SECRET = "vidshare-dev-refresh-secret"


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class MediaCleanupMode(str, Enum):
    """How released media references are deleted from the media host."""

    INLINE = "inline"
    DEFERRED = "deferred"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET are required in staging and prod
    - MEDIA_CLEANUP_MODE=deferred requires a Celery broker
    """

    vidshare_env: Environment = Field(default=Environment.LOCAL, alias="VIDSHARE_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Token settings
    access_token_secret: str | None = Field(default=None, alias="ACCESS_TOKEN_SECRET")
    access_token_expire_s: int = Field(default=900, alias="ACCESS_TOKEN_EXPIRE_S", ge=1)
    refresh_token_secret: str | None = Field(default=None, alias="REFRESH_TOKEN_SECRET")
    refresh_token_expire_s: int = Field(
        default=10 * 24 * 3600, alias="REFRESH_TOKEN_EXPIRE_S", ge=1
    )  # 10 days
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS", ge=4, le=16)
    cookie_secure: bool = Field(default=True, alias="COOKIE_SECURE")

    # Media host settings
    cloudinary_cloud_name: str | None = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(default=None, alias="CLOUDINARY_API_SECRET")
    media_folder: str = Field(default="vidshare", alias="MEDIA_FOLDER")
    media_cleanup_mode: MediaCleanupMode = Field(
        default=MediaCleanupMode.INLINE, alias="MEDIA_CLEANUP_MODE"
    )

    # Upload limits
    upload_tmp_dir: str = Field(default="./tmp/uploads", alias="UPLOAD_TMP_DIR")
    max_upload_bytes: int = Field(
        default=512 * 1024 * 1024, alias="MAX_UPLOAD_BYTES", ge=1
    )  # 512 MB

    # Redis / Celery settings
    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    celery_broker_url: str | None = Field(default=None, alias="CELERY_BROKER_URL")
    celery_result_backend: str | None = Field(default=None, alias="CELERY_RESULT_BACKEND")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure environment-specific settings are present."""
        if self.vidshare_env in (Environment.STAGING, Environment.PROD):
            missing = []
            if not self.access_token_secret:
                missing.append("ACCESS_TOKEN_SECRET")
            if not self.refresh_token_secret:
                missing.append("REFRESH_TOKEN_SECRET")
            if missing:
                raise ValueError(
                    f"Missing required token secrets for VIDSHARE_ENV={self.vidshare_env.value}: "
                    f"{', '.join(missing)}"
                )

        if (
            self.media_cleanup_mode == MediaCleanupMode.DEFERRED
            and not self.effective_celery_broker_url
        ):
            raise ValueError(
                "MEDIA_CLEANUP_MODE=deferred requires CELERY_BROKER_URL or REDIS_URL"
            )

        return self

    @property
    def effective_access_secret(self) -> str:
        """Return the access-token secret, falling back to the dev secret locally."""
        return self.access_token_secret or DEV_ACCESS_TOKEN_SECRET

    @property
    def effective_refresh_secret(self) -> str:
        """Return the refresh-token secret, falling back to the dev secret locally."""
        return self.refresh_token_secret or DEV_REFRESH_TOKEN_SECRET

    @property
    def cloudinary_configured(self) -> bool:
        """Whether all Cloudinary credentials are present."""
        return bool(
            self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret
        )

    @property
    def effective_celery_broker_url(self) -> str | None:
        """Return Celery broker URL, falling back to REDIS_URL if not set."""
        return self.celery_broker_url or self.redis_url

    @property
    def effective_celery_result_backend(self) -> str | None:
        """Return Celery result backend URL, falling back to REDIS_URL if not set."""
        return self.celery_result_backend or self.redis_url


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
