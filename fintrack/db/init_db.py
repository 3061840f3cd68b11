from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from fintrack.db.base import Base
from fintrack.db.session import SessionLocal, engine
from fintrack.models.movements import Movement, MovementType
from fintrack.models.security import AuthSession, User, utcnow

logger = logging.getLogger(__name__)

# Fixed tokens so the API can be tried without running the auth provider.
DEMO_ADMIN_TOKEN = "demo-admin-token"
DEMO_USER_TOKEN = "demo-user-token"


def init_db(seed: bool = True) -> None:
    """
    Create tables + seed demo data.

    Seeding only happens on an empty database, so restarts are harmless.
    """

    Base.metadata.create_all(bind=engine)

    if not seed:
        return

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed_demo_data(db)
        logger.info("Seeded demo data")


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(User.id).limit(1)).first() is not None


def seed_demo_data(db: Session) -> None:
    now = utcnow()

    admin = User(name="Ada Admin", email="ada.admin@example.com", role="ADMIN", email_verified=True)
    user = User(name="Uma User", email="uma.user@example.com", role="USER", email_verified=True)
    db.add_all([admin, user])
    db.flush()

    db.add_all(
        [
            AuthSession(token=DEMO_ADMIN_TOKEN, user_id=admin.id, expires_at=now + timedelta(days=30)),
            AuthSession(token=DEMO_USER_TOKEN, user_id=user.id, expires_at=now + timedelta(days=30)),
        ]
    )

    base = datetime(now.year, now.month, 1)
    db.add_all(
        [
            Movement(
                concept="Monthly retainer",
                amount=Decimal("2500.00"),
                date=base,
                type=MovementType.INCOME.value,
                user_id=admin.id,
            ),
            Movement(
                concept="Office rent",
                amount=Decimal("900.00"),
                date=base + timedelta(days=2),
                type=MovementType.EXPENSE.value,
                user_id=admin.id,
            ),
            Movement(
                concept="Software licenses",
                amount=Decimal("120.50"),
                date=base + timedelta(days=5),
                type=MovementType.EXPENSE.value,
                user_id=admin.id,
            ),
        ]
    )

    db.commit()
