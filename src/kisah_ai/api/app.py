"""FastAPI application for the AI proxy.

Endpoints:
    POST   /api/ai                      full answer as JSON
    POST   /api/ai/stream               answer as server-sent events
    GET    /api/ai/sessions/{id}        session history
    DELETE /api/ai/sessions/{id}        forget a session
    GET    /api/ai/cache/stats          cache statistics
    DELETE /api/ai/cache                clear the cache
    GET    /health                      liveness
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from kisah_ai.api.dependencies import HandlerDep, lifespan
from kisah_ai.api.security import SlidingWindowRateLimiter, enforce_rate_limit, require_auth
from kisah_ai.config import Settings, settings
from kisah_ai.dto import (
    AskRequestDTO,
    AskResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    SessionHistoryResponse,
)
from kisah_ai.protocols import RemoteCapability

API_TITLE = "Kisah Sukses AI Proxy"
API_VERSION = "0.1.0"

router = APIRouter(
    prefix="/api/ai",
    tags=["ai"],
    dependencies=[Depends(enforce_rate_limit), Depends(require_auth)],
)


@router.post("", response_model=AskResponse, response_model_exclude_none=True)
async def ask(request: AskRequestDTO, handler: HandlerDep) -> AskResponse:
    """Answer a prompt via the hosted model, or the local rule engine when none is configured."""
    return await handler.ask(request)


@router.post("/stream")
async def stream(request: AskRequestDTO, handler: HandlerDep):
    """Stream an answer as `data:` events terminated by `[DONE]`."""
    return await handler.stream(request)


@router.get("/sessions/{session_id}", response_model=SessionHistoryResponse)
async def get_session(session_id: str, handler: HandlerDep) -> SessionHistoryResponse:
    return await handler.get_session(session_id)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, handler: HandlerDep) -> dict:
    return await handler.delete_session(session_id)


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    return await handler.get_cache_stats()


@router.delete("/cache")
async def clear_cache(handler: HandlerDep) -> dict:
    return await handler.clear_cache()


def create_app(
    app_settings: Settings | None = None,
    remote: RemoteCapability | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        app_settings: Settings to use. Defaults to the environment settings.
        remote: Remote capability to use instead of the OpenAI client.

    Returns:
        Configured FastAPI app (services are created in its lifespan)
    """
    app_settings = app_settings or settings
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=API_TITLE,
        description="AI proxy with response caching, session memory and offline fallback",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.remote_override = remote
    app.state.rate_limiter = SlidingWindowRateLimiter(
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "endpoints": {
                "ask": "/api/ai",
                "stream": "/api/ai/stream",
                "sessions": "/api/ai/sessions/{session_id}",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(request: Request) -> HealthCheckResponse:
        """Health check endpoint."""
        resolver = request.app.state.resolver
        mirror = resolver.cache.mirror
        return HealthCheckResponse(
            ok=True,
            openai=request.app.state.remote is not None,
            cache_healthy=mirror.health_check() if mirror is not None else True,
        )

    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    """Run the proxy with uvicorn."""
    import uvicorn

    uvicorn.run(
        "kisah_ai.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
