"""Shared fixtures for TallyTime tests."""
import json
import uuid
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from config import BackendConfig
from core import ServiceContainer, bootstrap, shutdown
from database import db
from database.sqlite_store import SqliteTableStore
from events import event_bus
from services.identity import IdentityClient, SessionStore

TEST_CONFIG = BackendConfig(url="https://tally.test", anon_key="anon-key", timeout=5.0)

TEST_EMAIL = "ana@example.com"
TEST_PASSWORD = "secret123"


class MemorySessionStore(SessionStore):
    """Keeps the session tokens in memory instead of the OS keychain."""

    def __init__(self, tokens: Optional[Tuple[str, str]] = None) -> None:
        self.tokens = tokens

    def load(self) -> Optional[Tuple[str, str]]:
        return self.tokens

    def save(self, access_token: str, refresh_token: str) -> None:
        self.tokens = (access_token, refresh_token)

    def clear(self) -> None:
        self.tokens = None


class FakeIdentityBackend:
    """Minimal in-memory stand-in for the hosted auth API, served through MockTransport."""

    def __init__(self, confirm_email: bool = False) -> None:
        self.confirm_email = confirm_email
        self.users: Dict[str, Dict[str, Any]] = {}
        self.access_tokens: Dict[str, str] = {}
        self.refresh_tokens: Dict[str, str] = {}
        self.recover_requests: List[Tuple[str, Optional[str]]] = []
        self.requests: List[httpx.Request] = []
        self.offline = False

    def add_user(self, email: str, password: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        user = {
            "id": f"user-{uuid.uuid4().hex[:12]}",
            "email": email,
            "password": password,
            "user_metadata": {"full_name": full_name} if full_name else {},
        }
        self.users[email] = user
        return user

    def issue_session(self, user: Dict[str, Any]) -> Dict[str, Any]:
        access = f"access-{uuid.uuid4().hex}"
        refresh = f"refresh-{uuid.uuid4().hex}"
        self.access_tokens[access] = user["email"]
        self.refresh_tokens[refresh] = user["email"]
        return {
            "access_token": access,
            "refresh_token": refresh,
            "expires_in": 3600,
            "token_type": "bearer",
            "user": self._public(user),
        }

    @staticmethod
    def _public(user: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in user.items() if k != "password"}

    def _bearer_user(self, request: httpx.Request) -> Optional[Dict[str, Any]]:
        auth = request.headers.get("Authorization", "")
        token = auth[len("Bearer "):] if auth.startswith("Bearer ") else ""
        email = self.access_tokens.get(token)
        return self.users.get(email) if email else None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("offline", request=request)

        path = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content) if request.content else {}

        if path == "token":
            grant = request.url.params.get("grant_type")
            if grant == "password":
                user = self.users.get(body.get("email"))
                if user is None or user["password"] != body.get("password"):
                    return httpx.Response(400, json={
                        "error": "invalid_grant",
                        "error_description": "Invalid login credentials",
                    })
                return httpx.Response(200, json=self.issue_session(user))
            email = self.refresh_tokens.pop(body.get("refresh_token"), None)
            if email is None:
                return httpx.Response(400, json={"error_description": "Invalid Refresh Token"})
            return httpx.Response(200, json=self.issue_session(self.users[email]))

        if path == "signup":
            if body["email"] in self.users:
                return httpx.Response(422, json={"msg": "User already registered"})
            user = self.add_user(body["email"], body["password"], body.get("data", {}).get("full_name"))
            if self.confirm_email:
                return httpx.Response(200, json=self._public(user))
            return httpx.Response(200, json=self.issue_session(user))

        if path == "user":
            user = self._bearer_user(request)
            if user is None:
                return httpx.Response(401, json={"msg": "Invalid JWT"})
            if request.method == "PUT":
                user["password"] = body["password"]
            return httpx.Response(200, json=self._public(user))

        if path == "recover":
            self.recover_requests.append((body["email"], request.url.params.get("redirect_to")))
            return httpx.Response(200, json={})

        if path == "logout":
            auth = request.headers.get("Authorization", "")
            self.access_tokens.pop(auth[len("Bearer "):], None)
            return httpx.Response(204)

        return httpx.Response(404, json={"msg": "Not found"})


def make_identity(
    backend: FakeIdentityBackend,
    store: Optional[MemorySessionStore] = None,
) -> IdentityClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    return IdentityClient(TEST_CONFIG, session_store=store or MemorySessionStore(), client=client)


@pytest.fixture
def identity_backend() -> FakeIdentityBackend:
    backend = FakeIdentityBackend()
    backend.add_user(TEST_EMAIL, TEST_PASSWORD, full_name="Ana Pop")
    return backend


@pytest_asyncio.fixture
async def services(identity_backend: FakeIdentityBackend) -> ServiceContainer:
    """Provide a signed-in ServiceContainer backed by an in-memory database.

    Reuses the module-level singletons (db, event_bus) but resets their
    state between tests for isolation.
    """
    await db.close()
    event_bus.clear()

    svc = await bootstrap(
        config=TEST_CONFIG,
        store=SqliteTableStore(":memory:"),
        identity=make_identity(identity_backend),
    )
    result = await svc.auth.login(TEST_EMAIL, TEST_PASSWORD)
    assert result.success, result.error

    yield svc

    await shutdown(svc)
