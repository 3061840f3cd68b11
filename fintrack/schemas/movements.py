from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fintrack.models.movements import MovementType

MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999.99")


class MovementCreate(BaseModel):
    concept: str = Field(max_length=255)
    amount: Decimal = Field(ge=MIN_AMOUNT, le=MAX_AMOUNT, decimal_places=2)
    date: datetime
    type: MovementType

    @field_validator("concept")
    @classmethod
    def check_concept(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("concept is required")
        return stripped


class MovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    concept: str
    amount: Decimal
    date: datetime
    type: MovementType
    user_id: str
    user_name: str | None
    created_at: datetime


class ChartPoint(BaseModel):
    index: int
    id: str
    concept: str
    amount: Decimal
    type: MovementType
    date: datetime
    user: str | None


class ReportStatistics(BaseModel):
    total_income: Decimal
    total_expense: Decimal
    movement_count: int


class ReportOut(BaseModel):
    balance: Decimal
    chart_data: list[ChartPoint]
    statistics: ReportStatistics
    movements: list[MovementOut]
