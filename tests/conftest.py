"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test. API tests get a TestClient whose `get_db` points at a
seeded in-memory database shared across threads (StaticPool).
"""
from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from fintrack.db.base import Base
    from fintrack.models import movements, security  # noqa: F401  (register tables)

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def session_factory(tables):
    return sessionmaker(bind=tables, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture
def seeded(session_factory):
    """Seed the demo data (admin, user, sessions, movements) and return ids."""
    from fintrack.db.init_db import seed_demo_data
    from fintrack.models.security import AuthSession, User, utcnow

    with session_factory() as db:
        seed_demo_data(db)
        admin = db.query(User).filter_by(role="ADMIN").one()
        user = db.query(User).filter_by(role="USER").one()

        # A user whose stored role is garbage, and an expired session.
        stranger = User(name="Sam Stranger", email="sam@example.com", role="superuser")
        db.add(stranger)
        db.flush()
        db.add_all(
            [
                AuthSession(token="stranger-token", user_id=stranger.id, expires_at=utcnow() + timedelta(days=1)),
                AuthSession(token="expired-token", user_id=user.id, expires_at=utcnow() - timedelta(minutes=1)),
            ]
        )
        db.commit()
        return {"admin_id": admin.id, "user_id": user.id, "stranger_id": stranger.id}


@pytest.fixture
def client(session_factory, seeded):
    """TestClient running the real app (real YAML config) against the seeded test DB."""
    from fintrack.db.session import get_db
    from fintrack.main import create_app

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = create_app(init_database=False)
    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    from fintrack.db.init_db import DEMO_ADMIN_TOKEN

    return bearer(DEMO_ADMIN_TOKEN)


@pytest.fixture
def user_headers():
    from fintrack.db.init_db import DEMO_USER_TOKEN

    return bearer(DEMO_USER_TOKEN)


@pytest.fixture
def stranger_headers():
    return bearer("stranger-token")
