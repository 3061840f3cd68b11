from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from fintrack.db.init_db import init_db
from fintrack.logging_config import configure_app_logging
from fintrack.routers import account, health, movements, reports, users
from fintrack.security.config import load_security_config
from fintrack.security.dependencies import enforce_security
from fintrack.settings import get_settings

logger = logging.getLogger(__name__)


def create_app(init_database: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())

        if init_database:
            init_db(seed=settings.seed_demo_data)
            logger.info("Database initialized (tables ensured + seed if needed)")

        yield
        logger.info("App shutdown")

    # Global dependency: every route goes through the same authorization protocol.
    app = FastAPI(title="fintrack", dependencies=[Depends(enforce_security)], lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(account.router)
    app.include_router(users.router)
    app.include_router(movements.router)
    app.include_router(reports.router)

    return app


app = create_app()
