from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.db.base import Base
from fintrack.models.security import User, new_id, utcnow


class MovementType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Movement(Base):
    __tablename__ = "movements"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    concept: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    # Stored as plain strings ("INCOME" / "EXPENSE"); validated at the API boundary.
    type: Mapped[str] = mapped_column(String(10), nullable=False)

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user: Mapped[User] = relationship()

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == MovementType.INCOME.value else -self.amount

    @property
    def user_name(self) -> str | None:
        return self.user.name if self.user is not None else None
