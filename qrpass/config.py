"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_SECRET = "CHANGE-ME-IN-PRODUCTION"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Token signing / verification
    token_secret_key: str = Field(
        default=_PLACEHOLDER_SECRET,
        description="Shared HMAC secret for signing and verifying tokens. MUST be overridden in production.",
    )
    token_algorithm: Literal["HS256"] = "HS256"
    token_lifetime_minutes: int = Field(default=60, gt=0)
    token_require_jti: bool = False

    # QR rendering
    qr_error_correction: Literal["L", "M", "Q", "H"] = "M"
    qr_image_size: int = Field(default=256, ge=64, le=4096)

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("qr_error_correction", mode="before")
    @classmethod
    def normalize_error_correction(cls, v: str) -> str:
        """Accept lower-case error correction levels from the environment."""
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def enforce_secret_strength(self) -> "Settings":
        """Enforce token secret requirements based on environment.

        - Non-dev: reject the placeholder secret AND require >= 32 characters.
        - Dev: emit a warning for short secrets so local runs aren't blocked.
        """
        if not self.token_secret_key:
            raise ValueError("token_secret_key must not be empty")
        if self.environment != "development":
            if self.token_secret_key == _PLACEHOLDER_SECRET:
                raise ValueError(
                    "token_secret_key must be changed from its default value "
                    "in staging/production environments"
                )
            if len(self.token_secret_key) < 32:
                raise ValueError(
                    "token_secret_key must be at least 32 characters "
                    "in staging/production environments"
                )
        else:
            if len(self.token_secret_key) < 32:
                import warnings

                warnings.warn(
                    "token_secret_key is shorter than 32 characters; "
                    "use a strong, randomly-generated secret in production",
                    UserWarning,
                    stacklevel=2,
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
