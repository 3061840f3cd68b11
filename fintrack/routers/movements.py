from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from fintrack.db.session import get_db
from fintrack.models.movements import Movement
from fintrack.models.security import User
from fintrack.schemas.common import ApiResponse
from fintrack.schemas.movements import MovementCreate, MovementOut
from fintrack.security.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.get("", response_model=ApiResponse[list[MovementOut]])
def list_movements(db: Session = Depends(get_db)) -> dict:
    stmt = select(Movement).options(selectinload(Movement.user)).order_by(Movement.date.desc(), Movement.id)
    return {"message": "Movements retrieved", "data": list(db.scalars(stmt).all())}


@router.post("", response_model=ApiResponse[MovementOut], status_code=status.HTTP_201_CREATED)
def create_movement(
    payload: MovementCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict:
    movement = Movement(
        concept=payload.concept,
        amount=payload.amount,
        date=payload.date,
        type=payload.type.value,
        user_id=user.id,
    )
    db.add(movement)
    db.commit()
    db.refresh(movement)
    logger.info("Movement created id=%s type=%s user_id=%s", movement.id, movement.type, user.id)
    return {"message": "Movement created", "data": movement}
