"""Pytest configuration and shared fixtures."""

import os

# Must be set before anything imports gatepass.core.config
os.environ.setdefault("GATEPASS_DATABASE_URL", "sqlite://")
os.environ.setdefault("GATEPASS_LOG_TO_FILE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gatepass.core.rbac.roles import RoleName
from gatepass.core.security import create_access_token
from gatepass.db import models  # noqa: F401  registers every table on Base.metadata
from gatepass.db.base import Base
from gatepass.db.repository import SqlAlchemyRemovalRepository
from gatepass.db.seed import seed_reference_data
from gatepass.db.models import Department, RemovalReason

from tests.factories import create_user


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Database session with reference data seeded."""
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    seed_reference_data(session)
    session.commit()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db_session):
    return SqlAlchemyRemovalRepository(db_session)


@pytest.fixture
def departments(db_session):
    """Seeded departments keyed by name."""
    return {d.name: d for d in db_session.query(Department).all()}


@pytest.fixture
def reasons(db_session):
    """Seeded removal reasons keyed by name."""
    return {r.name: r for r in db_session.query(RemovalReason).all()}


# ---------------------------------------------------------------------------
# One user per role, mirroring the demo accounts
# ---------------------------------------------------------------------------


@pytest.fixture
def employee(db_session, departments):
    return create_user(db_session, roles=[RoleName.LEVEL_1], departments=[departments["IT"]],
                       email="employee@example.com")


@pytest.fixture
def manager(db_session, departments):
    return create_user(db_session, roles=[RoleName.LEVEL_1, RoleName.LEVEL_2],
                       departments=[departments["IT"]], email="manager@example.com")


@pytest.fixture
def other_manager(db_session, departments):
    """Department approver outside IT."""
    return create_user(db_session, roles=[RoleName.LEVEL_2], departments=[departments["Operations"]],
                       email="ops-manager@example.com")


@pytest.fixture
def finance(db_session, departments):
    return create_user(db_session, roles=[RoleName.LEVEL_3], departments=[departments["Finance"]],
                       email="finance@example.com")


@pytest.fixture
def management(db_session, departments):
    return create_user(db_session, roles=[RoleName.LEVEL_4], departments=[departments["Operations"]],
                       email="management@example.com")


@pytest.fixture
def security(db_session, departments):
    return create_user(db_session, roles=[RoleName.SECURITY], departments=[departments["Security"]],
                       email="security@example.com")


@pytest.fixture
def admin(db_session, departments):
    return create_user(db_session, roles=[RoleName.ADMIN], departments=[departments["HR"]],
                       email="admin@example.com")


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's database session."""
    from gatepass.api.deps import get_db
    from gatepass.api.main import app

    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user."""
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers
