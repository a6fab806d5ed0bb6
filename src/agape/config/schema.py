"""Pydantic models for agape.yaml configuration."""

from pydantic import BaseModel, Field


class BackendConfig(BaseModel):
    """Hosted backend (data + auth API) configuration."""

    url: str | None = Field(
        default=None,
        description="Project URL, e.g. https://<ref>.supabase.co",
    )
    anon_key: str | None = Field(
        default=None,
        description="Public anon key (prefer anon_key_env over storing it here)",
    )
    url_env: str = Field(
        default="AGAPE_SUPABASE_URL",
        description="Environment variable holding the project URL",
    )
    anon_key_env: str = Field(
        default="AGAPE_SUPABASE_ANON_KEY",
        description="Environment variable holding the anon key",
    )
    timeout: int = Field(default=30, description="Request timeout in seconds", ge=1)
    password_reset_redirect: str = Field(
        default="crisisapp://update-password",
        description="Deep link the password reset email points back to",
    )


class FeedConfig(BaseModel):
    """Home feed configuration."""

    page_size: int = Field(
        default=10,
        description="Posts per feed page, split evenly between family and text posts",
        ge=2,
        le=100,
    )


class PointsConfig(BaseModel):
    """Points awarded per engagement."""

    like: int = Field(default=1, description="Points for liking content", ge=0)
    share: int = Field(default=2, description="Points for sharing content", ge=0)


class RateLimitConfig(BaseModel):
    """Sign-in rate limiting configuration."""

    max_attempts: int = Field(
        default=5,
        description="Failed sign-in attempts before lockout",
        ge=1,
    )
    lockout_seconds: int = Field(
        default=15 * 60,
        description="Lockout duration in seconds",
        ge=1,
    )


class SessionConfig(BaseModel):
    """Auth session persistence configuration."""

    persist: bool = Field(default=True, description="Persist the auth session between runs")


class StorageConfig(BaseModel):
    """Local client-side storage configuration."""

    path: str = Field(
        default="~/.agape/storage.db",
        description="SQLite file holding the auth session and sign-in attempt counters",
    )


class AgapeConfig(BaseModel):
    """Root configuration schema for Agape."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    points: PointsConfig = Field(default_factory=PointsConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
