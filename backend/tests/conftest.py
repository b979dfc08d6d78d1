import os

# Settings are read at import time by inventory_api.main; point them at SQLite.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from inventory_api.core.config import Settings, get_settings  # noqa: E402
from inventory_api.core.security import TokenService  # noqa: E402
from inventory_api.db.base import Base  # noqa: E402
from inventory_api.db.session import build_engine, build_session_factory, init_db  # noqa: E402
from inventory_api.main import create_app  # noqa: E402
from inventory_api.repositories.products import ProductRepository  # noqa: E402
from inventory_api.repositories.users import UserRepository  # noqa: E402
from inventory_api.services.auth import AuthService  # noqa: E402
from inventory_api.services.products import ProductService  # noqa: E402

get_settings.cache_clear()

TEST_PASSWORD = "secret123"


def pytest_collection_modifyitems(config, items):
    """Mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture()
def settings():
    return Settings(
        database_url="sqlite://",
        environment="test",
        jwt_secret="test-secret",
        jwt_expires_in="1h",
        rate_limit_enabled=False,
    )


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture()
def token_service(settings):
    return TokenService(settings.jwt_secret, settings.jwt_expires_in)


@pytest.fixture()
def user_repo(db_session):
    return UserRepository(db_session)


@pytest.fixture()
def product_repo(db_session):
    return ProductRepository(db_session)


@pytest.fixture()
def auth_service(user_repo, token_service):
    return AuthService(user_repo, token_service)


@pytest.fixture()
def product_service(product_repo):
    return ProductService(product_repo)


@pytest.fixture()
def make_user(auth_service):
    """Register a user and return the persisted model."""
    counter = {"n": 0}

    def _make(email=None, role=None, password=TEST_PASSWORD):
        counter["n"] += 1
        email = email or f"user{counter['n']}@shop.io"
        return auth_service.register(email, password, "Test", f"User{counter['n']}", role).user

    return _make


@pytest.fixture()
def product_data():
    def _data(**overrides):
        data = {
            "name": "Widget",
            "description": "A useful widget",
            "sku": "WID-001",
            "category": "Hardware",
            "price": 9.5,
            "quantity": 10,
            "min_stock_level": 5,
        }
        data.update(overrides)
        return data

    return _data


@pytest.fixture()
def app(settings, engine):
    return create_app(settings=settings, engine=engine)


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def register(client):
    """Register through the API and return ``(user_json, auth_headers)``."""

    def _register(email, role=None, password=TEST_PASSWORD):
        body = {
            "email": email,
            "password": password,
            "firstName": "Api",
            "lastName": "User",
        }
        if role:
            body["role"] = role
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register
