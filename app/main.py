import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import events, history, metrics, ping, verification
from app.core.config import get_settings
from app.core.logging import configure_logging, init_tracer, shutdown_tracer
from app.events.repository import EventRepository
from app.events.service import EventService
from app.services.postgres import TRANSIENT_ERRORS, PostgresConnectionTester
from app.verification.repository import TicketStore
from app.verification.service import TicketVerificationService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    app.state.logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    postgres_tester = PostgresConnectionTester(
        dsn=settings.postgres_dsn,
        min_size=settings.postgres_pool_min_size,
        max_size=settings.postgres_pool_max_size,
    )
    app.state.postgres_tester = postgres_tester
    app.state.verification_service = None
    app.state.event_service = None
    try:
        pool = await postgres_tester.get_pool()
        store = TicketStore(pool)
        await store.ensure_schema()
        app.state.verification_service = TicketVerificationService(
            store,
            timezone=settings.verification_timezone,
        )
        app.state.event_service = EventService(EventRepository(pool))
    except TRANSIENT_ERRORS:
        logger.exception("Database initialisation failed; ticket services are disabled")
    try:
        yield
    finally:
        await postgres_tester.close()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(ping.router)
    app.include_router(events.router)
    app.include_router(verification.router)
    app.include_router(history.router)
    app.include_router(metrics.router)
    return app


app = create_app()
