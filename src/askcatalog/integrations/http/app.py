"""HTTP API for the NL2SQL gateway.

Exposes ``POST /api/ai-query`` (body ``{"question": "..."}``) returning the
query result, and ``GET /health``.

Run with:
    askcatalog serve
    # or
    uvicorn askcatalog.integrations.http.app:create_app --factory
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import askcatalog
from askcatalog.core.config import GatewaySettings
from askcatalog.core.gateway import QueryGateway
from askcatalog.core.types import QueryResult
from askcatalog.exceptions import (
    AskCatalogError,
    ExecutionError,
    GenerationError,
    InputError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_FAILURE_MESSAGE = "Failed to process your question. Please try again."

# Seconds between client-disconnect checks while a question is in flight
DISCONNECT_POLL_INTERVAL = 0.5


class AiQueryRequest(BaseModel):
    """Request body. ``question`` is checked by the gateway, not here."""

    question: str | None = None


async def _cancel_on_disconnect(request: Request, work: Awaitable[T]) -> T:
    """Await ``work``, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(work)
    while not task.done():
        await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
        if not task.done() and await request.is_disconnected():
            logger.info("Client disconnected, cancelling question")
            task.cancel()
            break
    return await task


def get_gateway(request: Request) -> QueryGateway:
    gateway: QueryGateway = request.app.state.gateway
    return gateway


def create_app(
    gateway: QueryGateway | None = None,
    settings: GatewaySettings | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        gateway: Prebuilt gateway (tests inject one with fake collaborators)
        settings: Settings used to build the gateway when none is given.
            Defaults to :meth:`GatewaySettings.from_env`.
    """
    settings = settings or (gateway.settings if gateway else GatewaySettings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = gateway is None
        app.state.gateway = gateway or QueryGateway.from_settings(settings)
        try:
            yield
        finally:
            if owned:
                await app.state.gateway.aclose()

    app = FastAPI(
        title="askcatalog",
        version=askcatalog.__version__,
        description="Natural-language questions over the product catalog.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if gateway is not None:
        app.state.gateway = gateway

    @app.exception_handler(AskCatalogError)
    async def handle_gateway_error(request: Request, exc: AskCatalogError) -> JSONResponse:
        question = getattr(request.state, "question", None)
        if isinstance(exc, InputError):
            return _error_response(400, exc.message, exc)
        if isinstance(exc, ValidationError):
            logger.warning("NL2SQL validation error for question %r: %s", question, exc.reason)
            return _error_response(400, exc.message, exc)
        if isinstance(exc, GenerationError):
            logger.error("NL2SQL generation error for question %r: %s", question, exc.message)
            return _error_response(502, GENERIC_FAILURE_MESSAGE, exc, include_context=False)
        if isinstance(exc, ExecutionError):
            logger.error("NL2SQL execution error for question %r: %s", question, exc.message)
        else:
            logger.error("NL2SQL processing error for question %r: %s", question, exc.message)
        return _error_response(500, GENERIC_FAILURE_MESSAGE, exc, include_context=False)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/ai-query", response_model=QueryResult, response_model_by_alias=True)
    async def ai_query(
        body: AiQueryRequest,
        request: Request,
        gw: QueryGateway = Depends(get_gateway),
    ) -> QueryResult:
        request.state.question = body.question
        return await _cancel_on_disconnect(request, gw.process_question(body.question or ""))

    return app


def _error_response(
    status_code: int,
    message: str,
    exc: AskCatalogError,
    include_context: bool = True,
) -> JSONResponse:
    content: dict[str, Any] = {"message": message, "error": exc.__class__.__name__}
    if include_context and exc.context:
        content["context"] = exc.context
    return JSONResponse(status_code=status_code, content=content)
