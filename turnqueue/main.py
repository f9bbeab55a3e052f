from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI

from turnqueue.api.routes import metrics, ping, turns
from turnqueue.core.config import Settings, get_settings
from turnqueue.core.logging import configure_logging, init_tracer, shutdown_tracer
from turnqueue.tickets import QueueEngine, RetentionScheduler, TurnService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)
    app.state.logger = logger
    app.state.tracer_provider = tracer_provider

    scheduler = None
    if settings.retention_enabled:
        scheduler = RetentionScheduler(
            app.state.turn_service,
            max_age=timedelta(seconds=settings.retention_max_age_seconds),
            interval=settings.retention_interval_seconds,
        )
        scheduler.start()
    app.state.retention_scheduler = scheduler
    logger.info("%s started (environment=%s)", settings.app_name, settings.environment)
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()
        shutdown_tracer(tracer_provider)
        logger.info("%s stopped", settings.app_name)


def create_app(settings: Settings | None = None, *, service: TurnService | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.turn_service = service if service is not None else TurnService(QueueEngine())
    app.include_router(ping.router)
    app.include_router(metrics.router)
    app.include_router(turns.router, prefix=settings.api_prefix)
    app.add_exception_handler(turns.TurnRequestError, turns.turn_error_handler)
    return app


app = create_app()
