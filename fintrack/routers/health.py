from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fintrack.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)) -> JSONResponse:
    try:
        db.execute(text("SELECT 1"))
        database = {"status": "healthy", "message": "Database connection is working"}
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", type(exc).__name__)
        database = {"status": "unhealthy", "message": "Database connection failed"}

    status_code = 200 if database["status"] == "healthy" else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": database["status"],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": database,
        },
    )
