"""Centralized error handlers.

Consistent JSON error bodies; internal details stay in the logs.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from quiz.errors import PersistenceError, QuizRunNotFound
from services.tavus import ConversationServiceError


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(Exception)
    async def global_error_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = request.headers.get("x-request-id", "no-id")
        logger.error("[{rid}] Unhandled error: {err}", rid=request_id, err=str(exc))

        # Don't leak internal details
        return JSONResponse(
            status_code=500,
            content={"error": "An internal error occurred"},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": str(exc)},
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"error": str(exc), "quiz_available": False},
        )

    @app.exception_handler(QuizRunNotFound)
    async def run_not_found_handler(request: Request, exc: QuizRunNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": str(exc)},
        )

    @app.exception_handler(ConversationServiceError)
    async def conversation_error_handler(request: Request, exc: ConversationServiceError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"error": f"Conversation service error: {exc}"},
        )
