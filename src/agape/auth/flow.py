"""Sign-in, sign-up and password recovery with input checks and rate limiting."""

import logging
import re
from dataclasses import dataclass

from agape.auth.password import validate_password
from agape.auth.rate_limiter import RateLimiter, format_time_remaining
from agape.auth.store import AuthStore
from agape.backend.errors import BackendError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SIGN_IN_MIN_PASSWORD_LENGTH = 6
WEAK_PASSWORD_MESSAGE = "Please choose a stronger password that meets all requirements"


@dataclass
class AuthOutcome:
    """Result of an auth action, ready to show to the user."""

    ok: bool
    error: str | None = None
    locked: bool = False
    remaining_attempts: int | None = None
    lockout_seconds: int = 0


class AuthFlow:
    """The checks the login and password screens run before calling the API."""

    def __init__(
        self,
        store: AuthStore,
        rate_limiter: RateLimiter,
        reset_redirect: str = "crisisapp://update-password",
    ):
        self.store = store
        self.rate_limiter = rate_limiter
        self.reset_redirect = reset_redirect

    def _locked_outcome(self) -> AuthOutcome | None:
        status = self.rate_limiter.check()
        if not status.is_locked:
            return None
        return AuthOutcome(
            ok=False,
            error=f"Too many attempts. Try again in {format_time_remaining(status.time_remaining)}",
            locked=True,
            remaining_attempts=0,
            lockout_seconds=status.time_remaining,
        )

    async def sign_in(self, email: str, password: str) -> AuthOutcome:
        """Sign in, counting failures towards the lockout."""
        locked = self._locked_outcome()
        if locked:
            return locked

        email = email.strip()
        if not email or not password.strip():
            return AuthOutcome(ok=False, error="Please fill in all fields")
        if len(password) < SIGN_IN_MIN_PASSWORD_LENGTH:
            return AuthOutcome(
                ok=False,
                error=f"Password must be at least {SIGN_IN_MIN_PASSWORD_LENGTH} characters",
            )

        try:
            await self.store.sign_in(email, password)
        except BackendError as e:
            status = self.rate_limiter.record_failed_attempt()
            if status.is_locked:
                minutes = self.rate_limiter.config.lockout_seconds // 60
                return AuthOutcome(
                    ok=False,
                    error=f"Too many failed attempts. Account locked for {minutes} minutes.",
                    locked=True,
                    remaining_attempts=0,
                    lockout_seconds=status.time_remaining,
                )
            return AuthOutcome(
                ok=False,
                error=f"{e.message}. {status.remaining_attempts} attempts remaining.",
                remaining_attempts=status.remaining_attempts,
            )

        self.rate_limiter.reset()
        return AuthOutcome(ok=True)

    async def sign_up(self, email: str, password: str, display_name: str) -> AuthOutcome:
        """Create an account; the password must meet every requirement."""
        locked = self._locked_outcome()
        if locked:
            return locked

        email = email.strip()
        display_name = display_name.strip()
        if not email or not password.strip():
            return AuthOutcome(ok=False, error="Please fill in all fields")
        if not display_name:
            return AuthOutcome(ok=False, error="Please enter your name")
        if not validate_password(password).is_valid:
            return AuthOutcome(ok=False, error=WEAK_PASSWORD_MESSAGE)

        try:
            await self.store.sign_up(email, password, display_name)
        except BackendError as e:
            return AuthOutcome(ok=False, error=e.message)

        self.rate_limiter.reset()
        return AuthOutcome(ok=True)

    async def request_password_reset(self, email: str) -> AuthOutcome:
        """Email a password reset link."""
        email = email.strip()
        if not email:
            return AuthOutcome(ok=False, error="Please enter your email address")
        if not EMAIL_PATTERN.match(email):
            return AuthOutcome(ok=False, error="Please enter a valid email address")

        try:
            await self.store.client.auth.reset_password_for_email(email, redirect_to=self.reset_redirect)
        except BackendError as e:
            logger.error(f"Password reset request failed: {e}")
            return AuthOutcome(ok=False, error=e.message or "Failed to send reset email")
        return AuthOutcome(ok=True)

    async def update_password(self, password: str, confirmation: str) -> AuthOutcome:
        """Set a new password for the signed-in (or recovering) user."""
        if not password.strip():
            return AuthOutcome(ok=False, error="Please enter a new password")
        if not validate_password(password).is_valid:
            return AuthOutcome(ok=False, error=WEAK_PASSWORD_MESSAGE)
        if password != confirmation:
            return AuthOutcome(ok=False, error="Passwords do not match")

        try:
            await self.store.client.auth.update_user(password=password)
        except BackendError as e:
            logger.error(f"Password update failed: {e}")
            return AuthOutcome(ok=False, error=e.message or "Failed to update password")
        return AuthOutcome(ok=True)

    async def resend_verification_email(self) -> AuthOutcome:
        """Resend the confirmation email to the signed-up user."""
        user = self.store.user
        if user is None or not user.email:
            return AuthOutcome(ok=False, error="No email address to send to")
        try:
            await self.store.resend_verification_email(user.email)
        except BackendError as e:
            return AuthOutcome(ok=False, error=e.message or "Failed to resend email")
        return AuthOutcome(ok=True)
