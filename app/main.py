from __future__ import annotations

from fastapi import FastAPI

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut
from app.careplans.router import router as careplans_router
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.core.middleware.security_headers import SecurityHeadersMiddleware

setup_logging()


def create_app() -> FastAPI:
    # Settings (including OPENAI_API_KEY) are read per request, so a missing key is
    # reported by the care plan endpoint rather than failing startup.
    app = FastAPI(
        title="GP Chronic Condition Management Plan API",
        description=(
            "Generates Australian GP Chronic Condition Management Plan (GPCCMP) tables from a "
            "free-text list of a patient's chronic conditions.\n\n"
            "Design principles:\n"
            "- Stateless: nothing submitted or generated is stored.\n"
            "- Input is trimmed and stripped of angle brackets before use.\n"
            "- Logging and metrics avoid PHI by using route templates and metadata only."
        ),
        docs_url="/swagger",
        redoc_url="/docs",
        openapi_tags=[
            {
                "name": "health",
                "description": (
                    "Basic uptime and readiness checks for load balancers and monitoring."
                ),
            },
            {
                "name": "careplans",
                "description": "Generate GPCCMP care plan tables via the completion service.",
            },
            {
                "name": "monitoring",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    # Last added is outermost, so security headers land on every routed response.
    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running.\n\n"
            "This endpoint intentionally does not call the completion service or check that "
            "an API key is configured."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(careplans_router)
    return app


app = create_app()
