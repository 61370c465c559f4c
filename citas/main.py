"""FastAPI Application - Main entry point.

Run with ``python -m citas.main`` or ``uvicorn citas.main:app``.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from citas import __version__
from citas.config.settings import get_settings
from citas.core.dependencies import build_dependencies
from citas.handlers.webhook import router as webhook_router
from citas.services.evolution import get_evolution_client
from citas.services.observability import instrument_fastapi, setup_tracing
from citas.utils.logger import get_logger, setup_logging

settings = get_settings()

setup_logging(settings.log_level, json_logs=not settings.is_development)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire the booking engine for the configured backend; close it on exit."""
    logger.info(
        "application_starting",
        environment=settings.app_env,
        reservation_backend=settings.reservation_backend,
        slots=settings.booking_slots,
        days_ahead=settings.booking_days_ahead,
    )

    setup_tracing(settings)
    app.state.deps = await build_dependencies(settings)

    try:
        yield
    finally:
        logger.info("application_shutting_down")
        await app.state.deps.aclose()
        await get_evolution_client().close()


app = FastAPI(
    title="Citas Bot API",
    description="Agendamiento de citas por WhatsApp",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

instrument_fastapi(app, settings)

app.include_router(webhook_router)


@app.get("/")
async def root() -> dict:
    return {"message": "Citas Bot API", "version": __version__, "docs": "/docs"}


@app.get("/health")
async def health_check() -> dict:
    """Liveness probe. Does not touch the reservation store."""
    return {
        "status": "healthy",
        "environment": settings.app_env,
        "reservation_backend": settings.reservation_backend,
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "citas.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
