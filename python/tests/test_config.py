"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from vidshare.config import (
    DEV_ACCESS_TOKEN_SECRET,
    Environment,
    MediaCleanupMode,
    Settings,
)


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "DATABASE_URL": "sqlite://",
        "VIDSHARE_ENV": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestSettingsDefaults:
    def test_defaults(self):
        s = _make_settings()
        assert s.vidshare_env == Environment.TEST
        assert s.access_token_expire_s == 900
        assert s.media_cleanup_mode == MediaCleanupMode.INLINE
        assert s.cloudinary_configured is False

    def test_dev_secret_fallback_outside_prod(self):
        s = _make_settings()
        assert s.effective_access_secret == DEV_ACCESS_TOKEN_SECRET

    def test_cloudinary_configured_requires_all_three(self):
        s = _make_settings(CLOUDINARY_CLOUD_NAME="demo", CLOUDINARY_API_KEY="key")
        assert s.cloudinary_configured is False

        s = _make_settings(
            CLOUDINARY_CLOUD_NAME="demo", CLOUDINARY_API_KEY="key", CLOUDINARY_API_SECRET="secret"
        )
        assert s.cloudinary_configured is True

    def test_celery_urls_fall_back_to_redis(self):
        s = _make_settings(REDIS_URL="redis://localhost:6379/0")
        assert s.effective_celery_broker_url == "redis://localhost:6379/0"
        assert s.effective_celery_result_backend == "redis://localhost:6379/0"


class TestSettingsValidation:
    def test_prod_requires_token_secrets(self):
        with pytest.raises(ValidationError, match="ACCESS_TOKEN_SECRET"):
            _make_settings(VIDSHARE_ENV="prod")

    def test_prod_with_secrets_accepted(self):
        s = _make_settings(
            VIDSHARE_ENV="prod", ACCESS_TOKEN_SECRET="a" * 32, REFRESH_TOKEN_SECRET="r" * 32
        )
        assert s.effective_access_secret == "a" * 32

    def test_deferred_cleanup_requires_broker(self):
        with pytest.raises(ValidationError, match="MEDIA_CLEANUP_MODE=deferred"):
            _make_settings(MEDIA_CLEANUP_MODE="deferred")

    def test_zero_expiry_rejected(self):
        with pytest.raises(ValidationError):
            _make_settings(ACCESS_TOKEN_EXPIRE_S=0)
