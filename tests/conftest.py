import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.rate_limit import limiter
from app.db.base import DeletionRequest  # noqa: F401
from app.db.schema import probe_deletion_table
from app.db.session import get_deletion_table_schema, get_session
from app.main import app
from app.services.app_registry import AppRegistry, get_app_registry
from app.services.signed_request import sign_payload

APP_SECRETS = {
    "123": "secret-for-app-123",
    "456": "secret-for-app-456",
}

LEGACY_TABLE_DDL = """
CREATE TABLE deletion_requests (
    id INTEGER PRIMARY KEY,
    confirmation_code VARCHAR(64) NOT NULL UNIQUE,
    user_id VARCHAR(255) NOT NULL,
    status VARCHAR(32) NOT NULL
)
"""


def _memory_engine():
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def signed_request_for(app_id="123", user_id="u1", secret=None, **fields):
    """Signed request as the platform would post it."""
    payload = {"app_id": app_id, "user_id": user_id, **fields}
    return sign_payload(payload, secret if secret is not None else APP_SECRETS[app_id])


@pytest.fixture(name="registry")
def registry_fixture():
    """Three apps: one with a custom slug, one without, one lacking a secret."""
    return AppRegistry.from_mapping({
        "123": {"secret": APP_SECRETS["123"], "name": "My App", "slug": "My App!!"},
        "456": {"secret": APP_SECRETS["456"], "name": "Other App"},
        "789": {"name": "Secretless", "slug": "secretless"},
    })


@pytest.fixture(name="engine")
def engine_fixture():
    """Engine with the current deletion_requests schema."""
    engine = _memory_engine()
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="legacy_engine")
def legacy_engine_fixture():
    """Engine with the first table layout: no app columns, no timestamps."""
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(text(LEGACY_TABLE_DDL))
    return engine


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a test database session."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="legacy_session")
def legacy_session_fixture(legacy_engine):
    with Session(legacy_engine) as session:
        yield session


def _client_for(engine, session, registry):
    table_schema = probe_deletion_table(engine)
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_deletion_table_schema] = lambda: table_schema
    app.dependency_overrides[get_app_registry] = lambda: registry
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture(autouse=True)
def disable_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture(name="client")
def client_fixture(engine, session, registry):
    """Create a test client with database session dependency override."""
    yield _client_for(engine, session, registry)
    app.dependency_overrides.clear()


@pytest.fixture(name="legacy_client")
def legacy_client_fixture(legacy_engine, legacy_session, registry):
    """Test client backed by the legacy table layout."""
    yield _client_for(legacy_engine, legacy_session, registry)
    app.dependency_overrides.clear()


@pytest.fixture(name="sign")
def sign_fixture():
    """signed_request_for(app_id, user_id, secret=None, **fields)"""
    return signed_request_for


@pytest.fixture(name="app_secrets")
def app_secrets_fixture():
    return dict(APP_SECRETS)
