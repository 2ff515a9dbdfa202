"""FastAPI application entrypoint."""
from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import specs
from .config import get_settings
from .observability.logs import configure_logging
from .observability.otel import configure_telemetry

__version__ = "0.1.0"

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    telemetry = configure_telemetry(settings, version=__version__)

    app = FastAPI(
        title="Specgen",
        version=__version__,
        openapi_version="3.1.0",
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.telemetry = telemetry

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI lifecycle
        telemetry.shutdown()

    @app.exception_handler(Exception)
    async def _generic_exception_handler(request: Request, exc: Exception):  # pragma: no cover - fallback
        logger.exception("specgen.unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to generate specs",
                "details": str(exc),
            },
        )

    app.include_router(specs.router)

    @app.get("/healthz")
    async def healthcheck():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()


__all__ = ["app", "create_app"]
