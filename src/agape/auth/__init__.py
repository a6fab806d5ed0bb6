"""Authentication: session state, sign-in rate limiting and password strength."""

from agape.auth.flow import AuthFlow, AuthOutcome
from agape.auth.password import (
    PasswordRequirements,
    PasswordStrength,
    check_password_requirements,
    get_password_strength_percentage,
    validate_password,
)
from agape.auth.rate_limiter import (
    RateLimitData,
    RateLimiter,
    RateLimitStatus,
    format_time_remaining,
)
from agape.auth.store import AuthStore

__all__ = [
    "AuthFlow",
    "AuthOutcome",
    "AuthStore",
    "PasswordRequirements",
    "PasswordStrength",
    "RateLimitData",
    "RateLimitStatus",
    "RateLimiter",
    "check_password_requirements",
    "format_time_remaining",
    "get_password_strength_percentage",
    "validate_password",
]
