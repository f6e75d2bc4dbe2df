from __future__ import annotations

import logging

from contourz.errors import AuthError, CRMError, NotFoundError
from contourz.models import Profile, Session, User
from contourz.services.profile import create_profile, get_profile
from contourz.supabase import SupabaseClient
from contourz.validation import require, validate_login, validate_signup

logger = logging.getLogger(__name__)


class AuthService:
    """Signed-in user, session and profile, shared by the CLI and the web app."""

    def __init__(self, client: SupabaseClient):
        self.client = client
        self.session: Session | None = None
        self.user: User | None = None
        self.profile: Profile | None = None
        self.loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def load(self) -> None:
        """Restore the persisted session, if any, and its profile."""
        self.session = self.client.get_session()
        self.user = self.session.user if self.session else None
        if self.user:
            self._load_profile()
        else:
            self.profile = None
        self.loading = False

    def _load_profile(self) -> None:
        assert self.user is not None
        try:
            self.profile = get_profile(self.client, self.user.id)
        except NotFoundError:
            logger.info("User %s has no profile yet", self.user.id)
            self.profile = None

    def refresh_profile(self) -> None:
        if self.user:
            self._load_profile()

    def require_user(self) -> User:
        if self.user is None:
            raise AuthError("You are not signed in")
        return self.user

    def sign_in(self, email: str, password: str) -> User:
        require(validate_login(email, password))
        self.session = self.client.sign_in_with_password(email.strip(), password)
        self.user = self.session.user
        if self.user is None:
            raise AuthError("Sign in returned no user")
        logger.info("Signed in as %s", self.user.email)
        try:
            self._load_profile()
            if self.profile is None:
                # signed up while email confirmation was pending
                self.profile = create_profile(self.client, self.user.id, email=self.user.email)
        except CRMError:
            logger.warning("Profile setup failed for %s, signing out", self.user.id)
            self.sign_out()
            raise
        return self.user

    def sign_up(self, email: str, password: str, confirm_password: str) -> User | None:
        """Register and create the initial profile.

        Returns the new user. ``session`` stays None until the email address is
        confirmed when the backend requires confirmation.
        """
        require(validate_signup(email, password, confirm_password))
        user, session = self.client.sign_up(email.strip(), password)
        self.session = session
        self.user = session.user if session else None
        if user and session:
            self.profile = create_profile(self.client, user.id, email=user.email or email)
        return user

    def sign_out(self) -> None:
        self.client.sign_out()
        self.session = None
        self.user = None
        self.profile = None
