"""
Identity service client for TallyTime.

Thin async wrapper over the hosted backend's auth API (GoTrue):
- Password login, registration, logout
- Session restore and token refresh
- Password reset email and password update

The client never interprets credentials itself; every call is a remote
request whose outcome is reported as an AuthResult. The current session
(access + refresh token) is persisted in the OS keychain via keyring so the
user stays signed in across restarts.
"""
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx
import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from config import BackendConfig, KEYRING_SERVICE, KEYRING_SESSION_KEY
from models.entities import User

logger = logging.getLogger(__name__)

# Refresh a little before the access token actually expires
EXPIRY_MARGIN_SECONDS = 30


class IdentityError(Exception):
    """Raised when the identity service cannot be reached."""
    pass


@dataclass
class Session:
    access_token: str
    refresh_token: str
    user: User
    expires_at: Optional[float] = None

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - EXPIRY_MARGIN_SECONDS

    @classmethod
    def from_response(cls, body: Dict[str, Any]) -> "Session":
        expires_at = body.get("expires_at")
        if expires_at is None and body.get("expires_in"):
            expires_at = time.time() + float(body["expires_in"])
        return cls(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token") or "",
            user=User.from_dict(body["user"]),
            expires_at=expires_at,
        )


@dataclass
class AuthResult:
    """Outcome of an identity call: success flag plus error message or user."""
    success: bool
    error: Optional[str] = None
    user: Optional[User] = None


class SessionStore:
    """Persists session tokens in the OS keychain.

    Keychain failures are logged and ignored: the session then lives only in
    memory for the current run.
    """

    def load(self) -> Optional[Tuple[str, str]]:
        try:
            raw = keyring.get_password(KEYRING_SERVICE, KEYRING_SESSION_KEY)
        except KeyringError as e:
            logger.warning(f"Could not read session from keychain: {e}")
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return data["access_token"], data["refresh_token"]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring malformed stored session: {e}")
            return None

    def save(self, access_token: str, refresh_token: str) -> None:
        payload = json.dumps({"access_token": access_token, "refresh_token": refresh_token})
        try:
            keyring.set_password(KEYRING_SERVICE, KEYRING_SESSION_KEY, payload)
        except KeyringError as e:
            logger.warning(f"Could not store session in keychain: {e}")

    def clear(self) -> None:
        try:
            keyring.delete_password(KEYRING_SERVICE, KEYRING_SESSION_KEY)
        except PasswordDeleteError:
            pass
        except KeyringError as e:
            logger.warning(f"Could not clear session from keychain: {e}")


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


class IdentityClient:
    """Async client for the hosted identity service."""

    def __init__(
        self,
        config: BackendConfig,
        session_store: Optional[SessionStore] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._store = session_store or SessionStore()
        self._client = client
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> Tuple[int, Any]:
        headers = {"apikey": self._config.anon_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._get_client().request(
                method,
                f"{self._config.auth_url}/{path}",
                json=json_body,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Identity request {path} failed: {e}")
            raise IdentityError(f"Network error: {e}") from e
        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None
        return response.status_code, body

    def _set_session(self, session: Optional[Session]) -> None:
        self._session = session
        if session is None:
            self._store.clear()
        else:
            self._store.save(session.access_token, session.refresh_token)

    async def _fetch_user(self, access_token: str) -> Optional[User]:
        status, body = await self._request("GET", "user", token=access_token)
        if status >= 400 or not isinstance(body, dict):
            return None
        return User.from_dict(body)

    async def _refresh(self, refresh_token: str) -> Optional[Session]:
        status, body = await self._request(
            "POST", "token",
            params={"grant_type": "refresh_token"},
            json_body={"refresh_token": refresh_token},
        )
        if status >= 400 or not isinstance(body, dict) or "access_token" not in body:
            logger.info("Stored session could not be refreshed")
            return None
        return Session.from_response(body)

    async def get_session(self) -> Optional[Session]:
        """Return the current session, restoring or refreshing it if needed.

        Raises:
            IdentityError: If the identity service is unreachable.
        """
        if self._session is not None and not self._session.is_expired:
            return self._session

        if self._session is not None:
            tokens = (self._session.access_token, self._session.refresh_token)
        else:
            tokens = self._store.load()
        if tokens is None:
            return None

        access_token, refresh_token = tokens
        user = await self._fetch_user(access_token)
        if user is not None:
            self._session = Session(access_token, refresh_token, user)
            return self._session

        session = await self._refresh(refresh_token) if refresh_token else None
        self._set_session(session)
        return session

    async def login(self, email: str, password: str) -> AuthResult:
        try:
            status, body = await self._request(
                "POST", "token",
                params={"grant_type": "password"},
                json_body={"email": email, "password": password},
            )
        except IdentityError as e:
            return AuthResult(False, str(e))
        if status >= 400 or not isinstance(body, dict) or "access_token" not in body:
            return AuthResult(False, _error_message(body, "Invalid email or password"))
        session = Session.from_response(body)
        self._set_session(session)
        return AuthResult(True, user=session.user)

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account; signs in immediately when no email confirmation is required."""
        try:
            status, body = await self._request(
                "POST", "signup",
                json_body={"email": email, "password": password, "data": {"full_name": name}},
            )
        except IdentityError as e:
            return AuthResult(False, str(e))
        if status >= 400 or not isinstance(body, dict):
            return AuthResult(False, _error_message(body, "Registration failed"))
        if "access_token" in body:
            session = Session.from_response(body)
            self._set_session(session)
            return AuthResult(True, user=session.user)
        user_data = body.get("user") or body
        user = User.from_dict(user_data) if "id" in user_data else None
        return AuthResult(True, user=user)

    async def set_session(self, access_token: str, refresh_token: str) -> AuthResult:
        """Adopt tokens handed over out of band, e.g. from a password reset link."""
        try:
            user = await self._fetch_user(access_token)
        except IdentityError as e:
            return AuthResult(False, str(e))
        if user is None:
            return AuthResult(False, "Invalid or expired session")
        self._set_session(Session(access_token, refresh_token, user))
        return AuthResult(True, user=user)

    async def update_user(self, password: str) -> AuthResult:
        if self._session is None:
            return AuthResult(False, "Not signed in")
        try:
            status, body = await self._request(
                "PUT", "user", json_body={"password": password}, token=self._session.access_token
            )
        except IdentityError as e:
            return AuthResult(False, str(e))
        if status >= 400 or not isinstance(body, dict):
            return AuthResult(False, _error_message(body, "Could not update password"))
        user = User.from_dict(body)
        self._session.user = user
        return AuthResult(True, user=user)

    async def reset_password_for_email(self, email: str, redirect_to: str) -> AuthResult:
        try:
            status, body = await self._request(
                "POST", "recover",
                json_body={"email": email},
                params={"redirect_to": redirect_to},
            )
        except IdentityError as e:
            return AuthResult(False, str(e))
        if status >= 400:
            return AuthResult(False, _error_message(body, "Could not send reset email"))
        return AuthResult(True)

    async def logout(self) -> AuthResult:
        """Sign out remotely and forget the local session either way."""
        session = self._session
        self._set_session(None)
        if session is None:
            return AuthResult(True)
        try:
            status, body = await self._request("POST", "logout", token=session.access_token)
        except IdentityError as e:
            return AuthResult(False, str(e))
        if status >= 400 and status != 401:
            return AuthResult(False, _error_message(body, "Logout failed"))
        return AuthResult(True)

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except (httpx.HTTPError, RuntimeError) as e:
                logger.warning(f"Error closing identity client: {e}")
            finally:
                self._client = None
