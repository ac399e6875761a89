"""
Care Dashboard - Backend API

Staff dashboard for job applications and contact inquiries:
live unread counters, status transitions, email replies and PDF export.

Run with:
    uvicorn modules.dashboard.app:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from common.auth import require_admin
from modules.mail import ResendClient
from modules.store import create_store

from .config import DashboardConfig, get_config
from .routers import health, submissions
from .service import Dashboard

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def create_app(config: Optional[DashboardConfig] = None, store=None, mailer=None) -> FastAPI:
    """Build the API.

    ``store`` and ``mailer`` may be injected; an injected store is not
    closed on shutdown.
    """
    config = config or get_config()
    logging.basicConfig(level=config.log_level.upper(), format=LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        owned = store is None
        app_store = store if store is not None else create_store(config.store)
        try:
            dashboard = Dashboard(app_store, mailer or ResendClient(config.mail), config)
            with dashboard.running():
                app.state.dashboard = dashboard
                logger.info(
                    f"Dashboard started. Store: {type(app_store).__name__}, "
                    f"feeds: {dashboard.feed_states()}"
                )
                yield
                app.state.dashboard = None
        finally:
            # Shutdown
            if owned:
                app_store.close()
            logger.info("Dashboard shutdown.")

    app = FastAPI(
        title="Care Dashboard API",
        description="Applications & inquiries for home care staff",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.dashboard = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(
        submissions.router,
        prefix="/api",
        tags=["Submissions"],
        dependencies=[Depends(require_admin)],
    )
    return app
