"""Exception handler registration for FastAPI applications."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from exhandler.core.failures import DomainFailure
from exhandler.core.failures import UpstreamFailure
from exhandler.core.failures import ValidationFailure
from exhandler.core.request_context import build_request_context
from exhandler.services.normalizer import ResponseNormalizer

BODILESS_STATUS_CODES = frozenset({204, 304})


class ErrorBoundary:
    """Render every failure raised inside an app through one normalizer."""

    def __init__(self, normalizer: ResponseNormalizer, *, fallback_locale: str) -> None:
        self._normalizer = normalizer
        self._fallback_locale = fallback_locale

    async def __call__(self, request: Request, exc: Exception) -> Response:
        context = build_request_context(request, fallback_locale=self._fallback_locale)
        # Store lookups block, keep them off the event loop.
        normalized = await run_in_threadpool(self._normalizer.normalize, exc, context)
        headers = dict(normalized.headers) if normalized.headers else None
        if normalized.status_code in BODILESS_STATUS_CODES:
            return Response(status_code=normalized.status_code, headers=headers)
        return JSONResponse(
            status_code=normalized.status_code,
            content=normalized.output.to_payload(),
            headers=headers,
        )


def register_error_handlers(app: FastAPI, normalizer: ResponseNormalizer, *, fallback_locale: str) -> None:
    """Attach the error boundary to a FastAPI app instance."""
    boundary = ErrorBoundary(normalizer, fallback_locale=fallback_locale)

    app.add_exception_handler(DomainFailure, boundary)
    app.add_exception_handler(UpstreamFailure, boundary)
    app.add_exception_handler(ValidationFailure, boundary)
    app.add_exception_handler(RequestValidationError, boundary)
    app.add_exception_handler(StarletteHTTPException, boundary)
    app.add_exception_handler(Exception, boundary)
