"""Shared fixtures: a fresh seeded store, an in-memory AuthStub and an API client per test."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from salon.db import RecordStore
from salon.main import create_app
from salon.services.auth_service import AuthStub, SessionStorage

ADMIN = ("admin@salon.com", "admin123")
STAFF = ("staff@salon.com", "staff123")


@pytest.fixture
def store() -> RecordStore:
    return RecordStore.seeded()


@pytest.fixture
def auth() -> AuthStub:
    return AuthStub(SessionStorage())


@pytest.fixture
def api(store, auth):
    with TestClient(create_app(store, auth)) as client:
        yield client


def _login(api: TestClient, email: str, password: str) -> dict:
    resp = api.post("/auth/login", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


# 세션은 하나뿐이라 한 테스트에서 둘 다 쓰면 먼저 로그인한 쪽 토큰이 무효가 된다
@pytest.fixture
def admin_headers(api) -> dict:
    return _login(api, *ADMIN)


@pytest.fixture
def staff_headers(api) -> dict:
    return _login(api, *STAFF)
