from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from fintrack.db.session import get_db
from fintrack.models.movements import Movement
from fintrack.reporting import build_report
from fintrack.schemas.common import ApiResponse
from fintrack.schemas.movements import ReportOut

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=ApiResponse[ReportOut])
def get_report(db: Session = Depends(get_db)) -> dict:
    stmt = select(Movement).options(selectinload(Movement.user)).order_by(Movement.date.asc(), Movement.id)
    movements = list(db.scalars(stmt).all())
    return {"message": "Report generated", "data": build_report(movements)}
