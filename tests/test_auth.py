"""Tests for the authentication service and password-reset helpers."""
import pytest

from conftest import TEST_EMAIL, TEST_PASSWORD, MemorySessionStore, make_identity
from services.auth import (
    AuthService,
    AuthState,
    parse_recovery_link,
    validate_new_password,
)


@pytest.fixture
def transitions():
    return []


@pytest.fixture
def auth(identity_backend, transitions):
    identity = make_identity(identity_backend)
    return AuthService(identity, on_change=lambda svc: transitions.append((svc.state, svc.user)))


class TestValidateNewPassword:
    def test_valid(self):
        assert validate_new_password("secret1", "secret1") is None

    def test_mismatch_checked_first(self):
        assert validate_new_password("abc", "abd") == "Passwords do not match"

    def test_too_short(self):
        assert validate_new_password("abc", "abc") == "Password must be at least 6 characters"


class TestParseRecoveryLink:
    def test_fragment_tokens(self):
        link = "https://tally.test/reset#access_token=aaa&refresh_token=rrr&type=recovery"
        assert parse_recovery_link(link) == ("aaa", "rrr")

    def test_query_tokens(self):
        link = "tallytime://reset?access_token=aaa&refresh_token=rrr"
        assert parse_recovery_link(link) == ("aaa", "rrr")

    def test_fragment_wins_over_query(self):
        link = "https://x/?access_token=old&refresh_token=old#access_token=new&refresh_token=new2"
        assert parse_recovery_link(link) == ("new", "new2")

    @pytest.mark.parametrize("link", [
        "",
        None,
        "https://tally.test/reset",
        "https://tally.test/reset#access_token=aaa",
    ])
    def test_missing_tokens(self, link):
        assert parse_recovery_link(link) is None


class TestCheckSession:
    async def test_starts_loading(self, auth):
        assert auth.state == AuthState.LOADING
        assert not auth.is_authenticated

    async def test_no_session(self, auth, transitions):
        result = await auth.check_session()
        assert result.success
        assert auth.state == AuthState.UNAUTHENTICATED
        assert transitions == [(AuthState.UNAUTHENTICATED, None)]

    async def test_restores_session(self, identity_backend, transitions):
        issued = identity_backend.issue_session(identity_backend.users[TEST_EMAIL])
        identity = make_identity(
            identity_backend, MemorySessionStore((issued["access_token"], issued["refresh_token"]))
        )
        auth = AuthService(identity, on_change=lambda svc: transitions.append(svc.state))
        await auth.check_session()
        assert auth.is_authenticated
        assert auth.user.email == TEST_EMAIL
        assert transitions == [AuthState.AUTHENTICATED]

    async def test_offline_leaves_signed_out(self, identity_backend):
        identity_backend.offline = True
        identity = make_identity(identity_backend, MemorySessionStore(("a", "r")))
        auth = AuthService(identity)
        result = await auth.check_session()
        assert not result.success
        assert auth.state == AuthState.UNAUTHENTICATED


class TestLoginLogout:
    async def test_login_notifies_once(self, auth, transitions):
        await auth.check_session()
        transitions.clear()
        result = await auth.login(f"  {TEST_EMAIL} ", TEST_PASSWORD)
        assert result.success
        assert auth.is_authenticated
        assert len(transitions) == 1
        assert transitions[0][0] == AuthState.AUTHENTICATED

    async def test_failed_login_keeps_state(self, auth, transitions):
        await auth.check_session()
        transitions.clear()
        result = await auth.login(TEST_EMAIL, "nope")
        assert not result.success
        assert auth.state == AuthState.UNAUTHENTICATED
        assert transitions == []

    async def test_login_requires_fields(self, auth, identity_backend):
        result = await auth.login("  ", "")
        assert not result.success
        assert identity_backend.requests == []

    async def test_logout(self, auth, transitions):
        await auth.login(TEST_EMAIL, TEST_PASSWORD)
        transitions.clear()
        await auth.logout()
        assert auth.state == AuthState.UNAUTHENTICATED
        assert auth.user is None
        assert transitions == [(AuthState.UNAUTHENTICATED, None)]

    async def test_logout_offline_still_signs_out(self, auth, identity_backend):
        await auth.login(TEST_EMAIL, TEST_PASSWORD)
        identity_backend.offline = True
        result = await auth.logout()
        assert not result.success
        assert auth.state == AuthState.UNAUTHENTICATED


class TestRegister:
    async def test_register_signs_in(self, auth):
        result = await auth.register("Ion", "ion@example.com", "pass1234")
        assert result.success
        assert auth.is_authenticated
        assert auth.user.display_name == "Ion"

    async def test_short_password_rejected_locally(self, auth, identity_backend):
        result = await auth.register("Ion", "ion@example.com", "123")
        assert not result.success
        assert identity_backend.requests == []

    async def test_missing_name(self, auth):
        result = await auth.register(" ", "ion@example.com", "pass1234")
        assert result.error == "Name and email are required"


class TestPasswordResetFlow:
    async def test_request_reset(self, auth, identity_backend):
        result = await auth.request_password_reset(TEST_EMAIL, "tallytime://reset")
        assert result.success
        assert identity_backend.recover_requests == [(TEST_EMAIL, "tallytime://reset")]

    async def test_request_reset_requires_email(self, auth):
        result = await auth.request_password_reset("  ", "tallytime://reset")
        assert not result.success

    async def test_recover_and_update(self, auth, identity_backend):
        issued = identity_backend.issue_session(identity_backend.users[TEST_EMAIL])
        recovered = await auth.recover_session(issued["access_token"], issued["refresh_token"])
        assert recovered.success
        assert auth.is_authenticated

        updated = await auth.update_password("brandnew")
        assert updated.success
        await auth.logout()

        assert (await auth.login(TEST_EMAIL, "brandnew")).success

    async def test_recover_with_bad_link(self, auth):
        result = await auth.recover_session("", "")
        assert not result.success
        assert "reset link" in result.error

    async def test_update_password_too_short(self, auth):
        result = await auth.update_password("123")
        assert not result.success
