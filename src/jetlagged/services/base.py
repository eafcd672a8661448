"""Common helpers for FastAPI-based services."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from jetlagged.config import Settings, get_settings
from jetlagged.logging import configure_logging

Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[None]]

SERVICE_DESCRIPTION = {
    "resolver": "Resolves flight markets from flight-status data and settles them on-chain.",
    "coverage": "Quotes and books coverage requests against flight markets.",
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    service_name: str,
    settings: Settings | None = None,
    lifespan: Lifespan | None = None,
) -> FastAPI:
    """Create a FastAPI app configured for the given service."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=f"JetLagged {service_name.title()} Service",
        description=SERVICE_DESCRIPTION.get(service_name, ""),
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def options_responder(request: Request, call_next: Callable) -> Response:
        # Real preflights never get here; CORSMiddleware answers them first.
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Not found" if exc.status_code == 404 else exc.detail
        return JSONResponse({"error": message}, status_code=exc.status_code)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, object]:
        """Liveness plus which secrets and endpoints are configured."""

        return {
            "status": "ok",
            "service": service_name,
            "timestamp": datetime.now(UTC).isoformat(),
            "config": settings.presence(),
        }

    return app
