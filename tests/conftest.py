"""
Pytest fixtures for the signup / confirmation service
"""

import os

# Settings are read at import time; provide provider credentials before importing the app.
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "test-publishable-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SIGNUP_RATE_LIMIT"] = "10/minute"

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from supabase import PostgrestAPIError

from athletyq_auth.core.dependencies import get_auth_gateway, get_profile_repository
from athletyq_auth.core.errors import AuthenticationError, ProviderError
from athletyq_auth.modules.auth.schemas import Account, AuthResult, Session, SignUpResult
from athletyq_auth.modules.profiles.repository import ProfileRepository


class FakeTable:
    """In-memory profiles table with a unique user_id, mimicking the postgrest query chain."""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.insert_attempts = 0
        # Simulates a concurrent writer: lookups miss, the insert still conflicts
        self.hide_rows_from_lookup = False
        self.insert_error: Optional[PostgrestAPIError] = None


class FakeQuery:
    def __init__(self, table: FakeTable):
        self.table = table
        self._op = "select"
        self._filters: List[tuple] = []
        self._single = False
        self._row: Optional[Dict[str, Any]] = None

    def select(self, columns: str):
        self._op = "select"
        return self

    def eq(self, column: str, value: Any):
        self._filters.append((column, value))
        return self

    def maybe_single(self):
        self._single = True
        return self

    def insert(self, row: Dict[str, Any]):
        self._op = "insert"
        self._row = row
        return self

    def execute(self):
        if self._op == "insert":
            self.table.insert_attempts += 1
            if self.table.insert_error is not None:
                raise self.table.insert_error
            if any(r["user_id"] == self._row["user_id"] for r in self.table.rows):
                raise PostgrestAPIError({
                    "code": "23505",
                    "message": 'duplicate key value violates unique constraint "profiles_pkey"',
                    "details": f"Key (user_id)=({self._row['user_id']}) already exists.",
                    "hint": None,
                })
            self.table.rows.append(dict(self._row))
            return SimpleNamespace(data=[dict(self._row)])

        rows = [] if self.table.hide_rows_from_lookup else self.table.rows
        matches = [r for r in rows if all(r.get(c) == v for c, v in self._filters)]
        if self._single:
            return SimpleNamespace(data=matches[0]) if matches else None
        return SimpleNamespace(data=matches)


class FakeSupabase:
    def __init__(self):
        self.profiles = FakeTable()

    def table(self, name: str):
        assert name == "profiles"
        return FakeQuery(self.profiles)


class FakeGateway:
    """Stands in for AuthGateway; records every provider call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.accounts_by_token: Dict[str, Account] = {}
        self.sign_up_session: Optional[Session] = None
        self.sign_up_error: Optional[ProviderError] = None
        self.verify_result: Optional[AuthResult] = None
        self.verify_error: Optional[ProviderError] = None

    def sign_up(self, email, password, metadata, redirect_to=None) -> SignUpResult:
        self.calls.append(("sign_up", email, metadata, redirect_to))
        if self.sign_up_error is not None:
            raise self.sign_up_error
        return SignUpResult(
            user=Account(id="user-123", email=email, user_metadata=metadata),
            session=self.sign_up_session,
            confirmation_required=self.sign_up_session is None,
        )

    def verify_token(self, token_hash, kind) -> AuthResult:
        self.calls.append(("verify_token", token_hash, kind))
        if self.verify_error is not None:
            raise self.verify_error
        return self.verify_result

    def get_user(self, access_token) -> Account:
        self.calls.append(("get_user", access_token))
        account = self.accounts_by_token.get(access_token)
        if account is None:
            raise AuthenticationError("Invalid authentication token")
        return account


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def confirmed_account() -> Account:
    return Account(
        id="user-123",
        email="jordan@example.com",
        user_metadata={"full_name": "Jordan Lee", "role": "athlete", "email": "jordan@example.com"},
    )


@pytest.fixture
def app(gateway, fake_supabase):
    from athletyq_auth.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_auth_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_profile_repository] = lambda: ProfileRepository(fake_supabase)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
