"""
FastAPI application entry point for the blogging backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_backend.config import get_settings
from blog_backend.errors import BlogBackendError
from blog_backend.routes import INVALID_BODY_STATUS, router

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    endpoint = request.scope.get("endpoint")
    status_code = INVALID_BODY_STATUS.get(getattr(endpoint, "__name__", ""), 400)
    message = "Invalid request body"
    errors = exc.errors()
    if errors:
        fields = [
            part
            for part in errors[0].get("loc", ())
            if isinstance(part, str) and part != "body"
        ]
        if fields:
            message = f"Invalid {'.'.join(fields)}"
    return JSONResponse(status_code=status_code, content={"error": message})


async def backend_error_handler(request: Request, exc: BlogBackendError):
    if exc.status_code >= 500:
        logger.error("Unhandled backend error: %s", exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Blogging Backend (FastAPI)", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(BlogBackendError, backend_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
