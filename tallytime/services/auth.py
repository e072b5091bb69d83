"""
Authentication service for TallyTime.

This module provides:
- The session lifecycle (loading, signed in, signed out)
- Login, registration and logout against the identity service
- Password reset: request email, adopt the recovery session, set new password

Authentication Flow:
1. On launch: check_session() restores a stored session -> AUTHENTICATED,
   otherwise UNAUTHENTICATED
2. Login/registration with an immediate session -> AUTHENTICATED
3. Logout -> UNAUTHENTICATED (the local session is forgotten even if the
   remote call fails)

Credentials are never checked locally; the identity service is the only
authority. Listeners receive the service itself after every state change.
"""
import logging
from enum import Enum
from typing import Callable, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from config import PASSWORD_MIN_LENGTH
from models.entities import User
from services.identity import AuthResult, IdentityClient, IdentityError

logger = logging.getLogger(__name__)


class AuthState(Enum):
    """Current authentication state of the app."""
    LOADING = "loading"                    # Session check in progress
    AUTHENTICATED = "authenticated"        # Signed in, user available
    UNAUTHENTICATED = "unauthenticated"    # Signed out, show the auth view


def validate_new_password(password: str, confirm: str) -> Optional[str]:
    """Validate a password chosen on the register or reset form.

    Returns an error message if invalid, None if valid.
    """
    if password != confirm:
        return "Passwords do not match"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    return None


def parse_recovery_link(link: str) -> Optional[Tuple[str, str]]:
    """Extract (access_token, refresh_token) from a password reset link.

    The identity service puts the tokens in the URL fragment; a query string
    is accepted as well. Returns None when either token is missing.
    """
    parts = urlsplit((link or "").strip())
    params = parse_qs(parts.fragment)
    for key, values in parse_qs(parts.query).items():
        params.setdefault(key, values)
    access = params.get("access_token", [""])[0]
    refresh = params.get("refresh_token", [""])[0]
    if not access or not refresh:
        return None
    return access, refresh


class AuthService:
    """
    Session state holder for the signed-in user.

    Usage:
        auth = AuthService(identity, on_change=controller.on_auth_changed)
        await auth.check_session()
        if auth.state == AuthState.UNAUTHENTICATED:
            result = await auth.login(email, password)
            if not result.success:
                show_error(result.error)
    """

    def __init__(
        self,
        identity: IdentityClient,
        on_change: Optional[Callable[["AuthService"], None]] = None,
    ) -> None:
        self._identity = identity
        self._on_change = on_change
        self._state: AuthState = AuthState.LOADING
        self._user: Optional[User] = None

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.AUTHENTICATED and self._user is not None

    def set_listener(self, on_change: Optional[Callable[["AuthService"], None]]) -> None:
        self._on_change = on_change

    def _transition(self, state: AuthState, user: Optional[User]) -> None:
        changed = state != self._state or user != self._user
        self._state = state
        self._user = user
        if changed:
            logger.info(f"Auth state -> {state.value}")
            if self._on_change:
                self._on_change(self)

    async def check_session(self) -> AuthResult:
        """Restore the stored session, if any.

        Any failure, including an unreachable identity service, leaves the
        app signed out.
        """
        self._transition(AuthState.LOADING, self._user)
        try:
            session = await self._identity.get_session()
        except IdentityError as e:
            logger.warning(f"Session check failed: {e}")
            self._transition(AuthState.UNAUTHENTICATED, None)
            return AuthResult(False, str(e))

        if session is None:
            self._transition(AuthState.UNAUTHENTICATED, None)
            return AuthResult(True)
        self._transition(AuthState.AUTHENTICATED, session.user)
        return AuthResult(True, user=session.user)

    async def login(self, email: str, password: str) -> AuthResult:
        email = email.strip()
        if not email or not password:
            return AuthResult(False, "Email and password are required")
        result = await self._identity.login(email, password)
        if result.success:
            self._transition(AuthState.AUTHENTICATED, result.user)
        else:
            logger.info(f"Login failed: {result.error}")
        return result

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account.

        When the identity service requires email confirmation no session is
        returned and the state stays UNAUTHENTICATED.
        """
        name = name.strip()
        email = email.strip()
        if not name or not email:
            return AuthResult(False, "Name and email are required")
        if len(password) < PASSWORD_MIN_LENGTH:
            return AuthResult(False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        result = await self._identity.register(name, email, password)
        if result.success and self._identity.session is not None:
            self._transition(AuthState.AUTHENTICATED, self._identity.session.user)
        return result

    async def logout(self) -> AuthResult:
        result = await self._identity.logout()
        if not result.success:
            logger.warning(f"Remote logout failed: {result.error}")
        self._transition(AuthState.UNAUTHENTICATED, None)
        return result

    async def recover_session(self, access_token: str, refresh_token: str) -> AuthResult:
        """Adopt the session carried by a password reset link."""
        if not access_token or not refresh_token:
            return AuthResult(False, "Invalid or expired reset link. Please request a new one.")
        result = await self._identity.set_session(access_token, refresh_token)
        if result.success:
            self._transition(AuthState.AUTHENTICATED, result.user)
        return result

    async def update_password(self, password: str) -> AuthResult:
        if len(password) < PASSWORD_MIN_LENGTH:
            return AuthResult(False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        result = await self._identity.update_user(password)
        if result.success and result.user is not None:
            self._transition(AuthState.AUTHENTICATED, result.user)
        return result

    async def request_password_reset(self, email: str, redirect_to: str) -> AuthResult:
        email = email.strip()
        if not email:
            return AuthResult(False, "Email is required")
        return await self._identity.reset_password_for_email(email, redirect_to)
