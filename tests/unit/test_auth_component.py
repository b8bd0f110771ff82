"""
Auth component unit tests.

Tests for registration, login, sessions, profile edits and password changes.
"""

from __future__ import annotations

import hashlib
from datetime import timedelta

import pytest

from src.adapters.auth.session_store import InMemorySessionStore
from src.components.auth import (
    INVALID_CREDENTIALS,
    NOT_AUTHENTICATED,
    USERNAME_TAKEN,
    VALIDATION,
    ChangePasswordInput,
    CreateSessionInput,
    LoginInput,
    LogoutInput,
    RegisterInput,
    UpdateProfileInput,
    VerifySessionInput,
    run_change_password,
    run_create_session,
    run_login,
    run_logout,
    run_register,
    run_update_profile,
    run_verify_session,
)
from src.rules.models import AuthRules

# --- Mock Implementations ---


class MockAuthAdapter:
    """Mock auth adapter for testing."""

    def __init__(self) -> None:
        self._issued = 0

    def verify_password(self, plain: str, hashed: str) -> bool:
        # Simple mock: hash is "hashed_" + plain
        return hashed == f"hashed_{plain}"

    def hash_password(self, plain: str) -> str:
        return f"hashed_{plain}"

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def create_token(self, user_id: object, ttl_minutes: int) -> str:
        self._issued += 1
        return f"token.{user_id}.{self._issued}"

    def validate_token(self, token: str) -> object | None:
        parts = token.split(".")
        if len(parts) != 3 or parts[0] != "token":
            return None
        return parts[1]


# --- Fixtures ---


@pytest.fixture
def auth_adapter() -> MockAuthAdapter:
    return MockAuthAdapter()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def auth_rules() -> AuthRules:
    return AuthRules()


@pytest.fixture
def user_repo(memory_storage):
    return memory_storage.users


@pytest.fixture
def alice(user_repo, auth_adapter, auth_rules):
    result = run_register(
        RegisterInput(username="alice", password="secret123", company_name="Alice Corp"),
        user_repo,
        auth_adapter,
        auth_rules,
    )
    assert result.success
    return result.user


def _session_for(user, auth_adapter, sessions, clock, auth_rules):
    return run_create_session(CreateSessionInput(user=user), auth_adapter, sessions, clock, auth_rules)


# --- Register ---


def test_register_hashes_password(alice):
    assert alice.password == "hashed_secret123"
    assert alice.web_link == "bizmanager.com/alice-corp"


def test_register_duplicate_username(alice, user_repo, auth_adapter, auth_rules):
    result = run_register(
        RegisterInput(username="alice", password="another1", company_name="Other"),
        user_repo,
        auth_adapter,
        auth_rules,
    )
    assert not result.success
    assert result.error == USERNAME_TAKEN


def test_register_minimum_lengths(user_repo, auth_adapter, auth_rules):
    result = run_register(
        RegisterInput(username="al", password="123", company_name=" "),
        user_repo,
        auth_adapter,
        auth_rules,
    )
    assert result.error == VALIDATION
    assert [e.path for e in result.errors] == [("username",), ("password",), ("companyName",)]
    assert user_repo.get_by_username("al") is None


def test_register_respects_rules(user_repo, auth_adapter):
    strict = AuthRules(password_min_length=12)
    result = run_register(
        RegisterInput(username="carol", password="secret123", company_name="Carol"),
        user_repo,
        auth_adapter,
        strict,
    )
    assert result.error == VALIDATION


# --- Login ---


def test_login(alice, user_repo, auth_adapter):
    ok = run_login(LoginInput(username="alice", password="secret123"), user_repo, auth_adapter)
    assert ok.success
    assert ok.user == alice


@pytest.mark.parametrize("username,password", [("alice", "wrong"), ("nobody", "secret123")])
def test_login_invalid(alice, user_repo, auth_adapter, username, password):
    result = run_login(LoginInput(username=username, password=password), user_repo, auth_adapter)
    assert result.error == INVALID_CREDENTIALS


# --- Sessions ---


def test_create_and_verify_session(alice, user_repo, auth_adapter, sessions, clock, auth_rules):
    created = _session_for(alice, auth_adapter, sessions, clock, auth_rules)
    assert created.success
    assert created.token_raw
    # Stored by hash, never by raw token
    assert sessions.get(created.token_raw) is None
    assert created.session.token_hash == auth_adapter.hash_token(created.token_raw)
    assert created.session.expires_at == clock.now_utc() + timedelta(minutes=24 * 60)

    verified = run_verify_session(
        VerifySessionInput(token=created.token_raw), user_repo, auth_adapter, sessions, clock
    )
    assert verified.success
    assert verified.user == alice


def test_session_ttl_from_rules(alice, auth_adapter, sessions, clock):
    rules = AuthRules(sessions={"ttl_minutes": 30})
    created = _session_for(alice, auth_adapter, sessions, clock, rules)
    assert (created.session.expires_at - clock.now_utc()).total_seconds() == 30 * 60


def test_verify_rejects_bad_token(alice, user_repo, auth_adapter, sessions, clock):
    result = run_verify_session(
        VerifySessionInput(token="garbage"), user_repo, auth_adapter, sessions, clock
    )
    assert result.error == NOT_AUTHENTICATED


def test_verify_rejects_unknown_session(alice, user_repo, auth_adapter, sessions, clock):
    token = auth_adapter.create_token(alice.id, 60)
    result = run_verify_session(VerifySessionInput(token=token), user_repo, auth_adapter, sessions, clock)
    assert result.error == NOT_AUTHENTICATED


def test_verify_expired_session_is_deleted(
    alice, user_repo, auth_adapter, sessions, clock, auth_rules
):
    created = _session_for(alice, auth_adapter, sessions, clock, auth_rules)
    clock.advance(minutes=auth_rules.sessions.ttl_minutes + 1)

    result = run_verify_session(
        VerifySessionInput(token=created.token_raw), user_repo, auth_adapter, sessions, clock
    )
    assert result.error == NOT_AUTHENTICATED
    assert sessions.get(created.session.token_hash) is None


def test_verify_rejects_deleted_user(alice, user_repo, auth_adapter, sessions, clock, auth_rules):
    created = _session_for(alice, auth_adapter, sessions, clock, auth_rules)
    user_repo.delete(alice.id)
    result = run_verify_session(
        VerifySessionInput(token=created.token_raw), user_repo, auth_adapter, sessions, clock
    )
    assert result.error == NOT_AUTHENTICATED


def test_logout(alice, user_repo, auth_adapter, sessions, clock, auth_rules):
    created = _session_for(alice, auth_adapter, sessions, clock, auth_rules)
    assert run_logout(LogoutInput(token=created.token_raw), auth_adapter, sessions).success
    result = run_verify_session(
        VerifySessionInput(token=created.token_raw), user_repo, auth_adapter, sessions, clock
    )
    assert result.error == NOT_AUTHENTICATED


# --- Profile ---


def test_update_profile_only_profile_fields(alice, user_repo):
    result = run_update_profile(
        UpdateProfileInput(
            user=alice,
            changes={"companyName": "Alice Holdings", "logo": "a.png", "username": "mallory"},
        ),
        user_repo,
    )
    assert result.success
    assert result.user.company_name == "Alice Holdings"
    assert result.user.logo == "a.png"
    assert result.user.username == "alice"
    assert result.user.password == alice.password


def test_update_profile_rejects_blank_company(alice, user_repo):
    result = run_update_profile(
        UpdateProfileInput(user=alice, changes={"company_name": ""}), user_repo
    )
    assert result.error == VALIDATION
    assert user_repo.get(alice.id).company_name == "Alice Corp"


def test_update_profile_noop(alice, user_repo):
    result = run_update_profile(UpdateProfileInput(user=alice, changes={}), user_repo)
    assert result.success
    assert result.user == alice


# --- Change password ---


def test_change_password(alice, user_repo, auth_adapter, sessions, clock, auth_rules):
    mine = _session_for(alice, auth_adapter, sessions, clock, auth_rules)
    elsewhere = _session_for(alice, auth_adapter, sessions, clock, auth_rules)

    result = run_change_password(
        ChangePasswordInput(
            user=alice,
            current_password="secret123",
            new_password="newsecret",
            keep_token=mine.token_raw,
        ),
        user_repo,
        auth_adapter,
        sessions,
        auth_rules,
    )
    assert result.success
    assert user_repo.get(alice.id).password == "hashed_newsecret"
    assert sessions.get(mine.session.token_hash) is not None
    assert sessions.get(elsewhere.session.token_hash) is None


def test_change_password_wrong_current(alice, user_repo, auth_adapter, sessions, auth_rules):
    result = run_change_password(
        ChangePasswordInput(user=alice, current_password="nope", new_password="newsecret"),
        user_repo,
        auth_adapter,
        sessions,
        auth_rules,
    )
    assert result.error == INVALID_CREDENTIALS
    assert user_repo.get(alice.id).password == "hashed_secret123"


def test_change_password_too_short(alice, user_repo, auth_adapter, sessions, auth_rules):
    result = run_change_password(
        ChangePasswordInput(user=alice, current_password="secret123", new_password="abc"),
        user_repo,
        auth_adapter,
        sessions,
        auth_rules,
    )
    assert result.error == VALIDATION
    assert result.errors[0].path == ("newPassword",)
