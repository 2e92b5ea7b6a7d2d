"""Unit tests for config.py: environment-driven settings."""

import pytest
from pydantic import ValidationError

from qrpass.config import Settings

_STRONG_SECRET = "s" * 32


class TestSecretStrength:
    def test_placeholder_rejected_in_production(self):
        with pytest.raises(ValidationError):
            Settings(environment="production", token_secret_key="CHANGE-ME-IN-PRODUCTION")

    def test_short_secret_rejected_in_staging(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging", token_secret_key="short")

    def test_strong_secret_accepted_in_production(self):
        settings = Settings(environment="production", token_secret_key=_STRONG_SECRET)
        assert settings.is_production

    def test_short_secret_warns_in_development(self):
        with pytest.warns(UserWarning):
            Settings(environment="development", token_secret_key="short")

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(token_secret_key="")


class TestTokenSettings:
    def test_defaults(self):
        settings = Settings(token_secret_key=_STRONG_SECRET)
        assert settings.token_algorithm == "HS256"
        assert settings.token_lifetime_minutes == 60
        assert settings.token_require_jti is False
        assert settings.qr_image_size == 256

    def test_only_hs256_allowed(self):
        with pytest.raises(ValidationError):
            Settings(token_secret_key=_STRONG_SECRET, token_algorithm="none")

    def test_lifetime_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(token_secret_key=_STRONG_SECRET, token_lifetime_minutes=0)

    def test_error_correction_is_case_insensitive(self):
        assert Settings(token_secret_key=_STRONG_SECRET, qr_error_correction="q").qr_error_correction == "Q"

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("TOKEN_REQUIRE_JTI", "true")
        monkeypatch.setenv("TOKEN_LIFETIME_MINUTES", "15")
        settings = Settings(token_secret_key=_STRONG_SECRET)
        assert settings.token_require_jti is True
        assert settings.token_lifetime_minutes == 15
