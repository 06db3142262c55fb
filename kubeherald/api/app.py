"""FastAPI application factory for kubeherald.

Usage::

    from kubeherald.api.app import create_app

    app = create_app(
        executor=executor,
        event_handler=event_handler,
        notifier_state=notifier_state,
        cluster_name="prod",
    )

Used by both the production bootstrap (``kubeherald.app``) and tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from kubeherald.api.routes import router
from kubeherald.api.schemas import ErrorResponse

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(
    executor: Any,
    event_handler: Any,
    notifier_state: Any,
    cluster_name: str = "",
) -> FastAPI:
    """Create and configure the kubeherald FastAPI application.

    Args:
        executor:       CommandExecutor handling relayed chat messages.
        event_handler:  EventHandler for posted events.
        notifier_state: Shared NotifierState, reported by /health.
        cluster_name:   Local cluster identity.
    """
    from kubeherald import __version__

    app = FastAPI(
        title="kubeherald",
        summary="Kubernetes event enrichment and chat-ops gateway",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    app.state.executor = executor
    app.state.event_handler = event_handler
    app.state.notifier_state = notifier_state
    app.state.cluster_name = cluster_name

    app.include_router(router, prefix=_API_PREFIX)
    app.mount("/metrics", make_asgi_app())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        detail = ""
        if errors:
            # loc is ("body", "event", "type") for nested fields
            field = ".".join(str(part) for part in errors[0].get("loc", ())[1:])
            msg = str(errors[0].get("msg", ""))
            detail = f"{field}: {msg}" if field else msg
        _log.debug("request_rejected", path=str(request.url.path), detail=detail)
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=detail).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
