"""
Tests for demo seeding.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

from sqlalchemy import select

from fintrack.db.init_db import DEMO_ADMIN_TOKEN, DEMO_USER_TOKEN, seed_demo_data
from fintrack.models.movements import Movement
from fintrack.models.security import User
from fintrack.rbac import Role, parse_role
from fintrack.security.auth import load_session_user


def test_seed_creates_one_user_per_role(db_session):
    seed_demo_data(db_session)

    roles = sorted(parse_role(u.role).value for u in db_session.scalars(select(User)).all())
    assert roles == [Role.ADMIN.value, Role.USER.value]


def test_seed_sessions_resolve_to_users(db_session):
    seed_demo_data(db_session)

    assert load_session_user(db_session, DEMO_ADMIN_TOKEN).role == "ADMIN"
    assert load_session_user(db_session, DEMO_USER_TOKEN).role == "USER"


def test_seed_movements_belong_to_admin(db_session):
    seed_demo_data(db_session)

    admin = db_session.scalars(select(User).where(User.role == "ADMIN")).one()
    movements = db_session.scalars(select(Movement)).all()
    assert len(movements) == 3
    assert {m.user_id for m in movements} == {admin.id}
