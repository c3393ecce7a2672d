from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from app.careplans.router import CARE_PLAN_PATH, failure_response
from app.careplans.router import router as careplans_router
from app.careplans.service import CarePlanFailure
from app.core.metrics import record_care_plan_outcome
from app.core.middleware.security_headers import SECURITY_HEADERS

logger = logging.getLogger("app.errors")

_CARE_PLAN_URL = careplans_router.prefix + CARE_PLAN_PATH


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        # Every unsupported method gets the care plan error envelope, whatever the verb.
        if exc.status_code != status.HTTP_405_METHOD_NOT_ALLOWED:
            return await http_exception_handler(request, exc)

        response = failure_response(CarePlanFailure.METHOD_NOT_ALLOWED)
        if request.url.path == _CARE_PLAN_URL:
            record_care_plan_outcome(CarePlanFailure.METHOD_NOT_ALLOWED.value)
        elif exc.headers and "Allow" in exc.headers:
            response.headers["Allow"] = exc.headers["Allow"]
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        # Last resort for errors outside the care plan service (e.g. invalid settings).
        # IMPORTANT: do not log request bodies, query values, or any PHI.
        logger.error(
            "Unexpected error",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "http_method": request.method,
                "request_path": request.url.path,  # no query string
                "status_code": 500,
                "error": type(exc).__name__,
            },
        )
        response = failure_response(CarePlanFailure.GENERATION_FAILED)
        # Runs outside the middleware stack, so the fixed headers are added here.
        response.headers.update(SECURITY_HEADERS)
        return response
