"""Authentication state: signed-in user, session and profile."""

import logging
from collections.abc import Callable

from agape.backend.auth import SIGNED_IN, Session, User
from agape.backend.client import BackendClient
from agape.backend.errors import BackendError
from agape.models import AuthUser, Profile

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

StoreListener = Callable[["AuthStore"], None]


class AuthStore:
    """Holds who is signed in and keeps their profile current.

    Listeners registered with :meth:`subscribe` are called after every state
    change.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self.user: AuthUser | None = None
        self.session: Session | None = None
        self.loading = True
        self.initialized = False
        self._listeners: list[StoreListener] = []
        self._unsubscribe_auth: Callable[[], None] | None = None

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes) -> None:
        for name, value in changes.items():
            setattr(self, name, value)
        for listener in list(self._listeners):
            listener(self)

    async def _fetch_profile(self, user_id: str) -> Profile | None:
        try:
            result = await (
                self.client.table(PROFILES_TABLE).select("*").eq("id", user_id).maybe_single().execute()
            )
        except BackendError as e:
            logger.error(f"Error loading profile for {user_id}: {e}")
            return None
        if not result.data:
            return None
        try:
            return Profile.from_row(result.data)
        except (KeyError, ValueError) as e:
            logger.error(f"Malformed profile row for {user_id}: {e}")
            return None

    async def _auth_user(self, user: User, fallback_email: str = "") -> AuthUser:
        profile = await self._fetch_profile(user.id)
        return AuthUser(id=user.id, email=user.email or fallback_email, profile=profile)

    async def initialize(self) -> None:
        """Restore any existing session and start following auth events."""
        try:
            session = await self.client.auth.get_session()
            if session is not None:
                self._set(
                    user=await self._auth_user(session.user),
                    session=session,
                    loading=False,
                    initialized=True,
                )
            else:
                self._set(user=None, session=None, loading=False, initialized=True)

            if self._unsubscribe_auth is None:
                self._unsubscribe_auth = self.client.auth.on_auth_state_change(self._on_auth_event)
        except BackendError as e:
            logger.error(f"Error initializing auth: {e}")
            self._set(loading=False, initialized=True)

    async def _on_auth_event(self, event: str, session: Session | None) -> None:
        # sign_in/sign_up load the profile themselves
        if event == SIGNED_IN:
            return
        if session is not None:
            self._set(user=await self._auth_user(session.user), session=session, loading=False)
        else:
            self._set(user=None, session=None, loading=False)

    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in and load the user's profile.

        Raises:
            BackendError: If the credentials are rejected or the request fails
        """
        self._set(loading=True)
        try:
            response = await self.client.auth.sign_in_with_password(email, password)
        except BackendError:
            self._set(loading=False)
            raise

        user = await self._auth_user(response.user, fallback_email=email)
        self._set(user=user, session=response.session, loading=False)
        return user

    async def sign_up(self, email: str, password: str, display_name: str) -> AuthUser | None:
        """Create an account and its supporter profile.

        Returns:
            The new user, or None if the API returned no user

        Raises:
            BackendError: If the sign-up is rejected or the request fails
        """
        self._set(loading=True)
        try:
            response = await self.client.auth.sign_up(
                email, password, data={"display_name": display_name}
            )
        except BackendError:
            self._set(loading=False)
            raise

        if response.user is None:
            self._set(loading=False)
            return None

        try:
            await (
                self.client.table(PROFILES_TABLE)
                .insert(
                    {
                        "id": response.user.id,
                        "display_name": display_name,
                        "role": "supporter",
                        "points_earned": 0,
                        "current_streak": 0,
                        "level": 1,
                        "total_donations": 0,
                    },
                    returning=False,
                )
                .execute()
            )
        except BackendError as e:
            # A database trigger usually creates the row already
            logger.info(f"Profile creation skipped (may already exist): {e}")

        user = await self._auth_user(response.user, fallback_email=email)
        self._set(user=user, session=response.session, loading=False)
        return user

    async def sign_out(self) -> None:
        """Sign out and clear state."""
        self._set(loading=True)
        try:
            await self.client.auth.sign_out()
        except BackendError as e:
            logger.error(f"Error signing out: {e}")
            self._set(loading=False)
            return
        self._set(user=None, session=None, loading=False)

    async def refresh_profile(self) -> None:
        """Reload the signed-in user's profile (e.g. after points change)."""
        if self.user is None:
            return
        profile = await self._fetch_profile(self.user.id)
        if profile is not None:
            self._set(user=self.user.model_copy(update={"profile": profile}))

    async def resend_verification_email(self, email: str) -> None:
        """Send the signup confirmation email again."""
        await self.client.auth.resend_signup(email)
