import os
from typing import Callable, Generator, Tuple

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "./test-logs")

from gymcore.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from gymapi import caches  # noqa: E402
from gymapi.app import app  # noqa: E402
from gymcore.auth import get_password_hash  # noqa: E402
from gymcore.database import Base, SessionLocal, engine  # noqa: E402
from gymcore.models import Account, RoleEnum  # noqa: E402

OPERATOR_EMAIL = "operator@example.com"
OPERATOR_PASSWORD = "Operat0r!"


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    caches.clear_all()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


def auth_header(client: TestClient, path: str, email: str, password: str) -> dict[str, str]:
    response = client.post(path, json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def operator(db_session) -> Account:
    account = Account(
        email=OPERATOR_EMAIL,
        hashed_password=get_password_hash(OPERATOR_PASSWORD),
        name="Platform Operator",
        role=RoleEnum.PLATFORM_OPERATOR,
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture()
def operator_headers(client, operator) -> dict[str, str]:
    return auth_header(client, "/api/auth/login", OPERATOR_EMAIL, OPERATOR_PASSWORD)


GymFactory = Callable[..., Tuple[dict, dict[str, str]]]


@pytest.fixture()
def make_gym(client, operator_headers) -> GymFactory:
    """Create a gym through the API and return it with its admin's auth headers."""

    def _make(
        name: str = "FitZone",
        email: str = "contact@fitzone.com",
        admin_email: str = "admin@fitzone.com",
        admin_password: str = "gym123",
        **extra,
    ) -> Tuple[dict, dict[str, str]]:
        payload = {
            "name": name,
            "email": email,
            "adminEmail": admin_email,
            "adminPassword": admin_password,
            **extra,
        }
        response = client.post("/api/gyms", json=payload, headers=operator_headers)
        assert response.status_code == 201, response.text
        headers = auth_header(client, "/api/gym-auth/login", admin_email, admin_password)
        return response.json(), headers

    return _make


@pytest.fixture()
def fitzone(make_gym) -> Tuple[dict, dict[str, str]]:
    return make_gym()


@pytest.fixture()
def ironhouse(make_gym) -> Tuple[dict, dict[str, str]]:
    return make_gym(
        name="Iron House",
        email="hello@ironhouse.example.com",
        admin_email="admin@ironhouse.example.com",
        admin_password="iron456",
    )


@pytest.fixture()
def add_member(client) -> Callable[..., dict]:
    def _add(gym_id: int, headers: dict[str, str], email: str = "jane@example.com", approve: bool = True, **extra) -> dict:
        response = client.post(
            f"/api/gym/{gym_id}/members",
            json={"name": extra.pop("name", "Jane Runner"), "email": email, **extra},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        member = response.json()
        if approve:
            approved = client.post(f"/api/gym/{gym_id}/members/{member['id']}/approve", headers=headers)
            assert approved.status_code == 200, approved.text
            member = approved.json()
        return member

    return _add
