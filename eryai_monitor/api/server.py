"""FastAPI server for the monitor."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from eryai_monitor.api.routes import router
from eryai_monitor.catalog import ServiceCatalog
from eryai_monitor.checks.orchestrator import Orchestrator
from eryai_monitor.config import settings
from eryai_monitor.notifications import AlertNotifier
from eryai_monitor.scheduler import DailyTestScheduler
from eryai_monitor.suites import build_services

logger = logging.getLogger(__name__)


def init_state(app: FastAPI) -> None:
    """Attach catalog, collaborators and orchestrator to ``app.state``."""
    catalog = ServiceCatalog()
    catalog.load()
    services = build_services()
    notifier = AlertNotifier(sender=services.email)
    app.state.catalog = catalog
    app.state.services = services
    app.state.orchestrator = Orchestrator(
        critical_services=catalog.critical_services,
        notifier=notifier,
        store=services.store if services.store.is_configured else None,
    )
    logger.info("Alerts %s", "enabled" if notifier.is_enabled else "disabled (no RESEND_API_KEY)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize shared resources on startup."""
    if not hasattr(app.state, "orchestrator"):
        init_state(app)

    scheduler = None
    if settings.daily_run_enabled:
        scheduler = DailyTestScheduler(
            app.state.orchestrator, app.state.services, app.state.catalog,
            hour=settings.daily_run_hour,
        )
        try:
            await scheduler.start()
        except Exception:
            logger.exception("Daily scheduler failed to start")
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()


def create_app() -> FastAPI:
    app = FastAPI(title="EryAI Monitor", version="0.1.0", lifespan=lifespan)
    app.include_router(router, prefix="/api")
    return app


app = create_app()
