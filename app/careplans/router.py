from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.responses import Response

from app.api.schemas import ErrorOut
from app.careplans.schemas import CarePlanIn, CarePlanOut
from app.careplans.service import CarePlanFailure, CarePlanOutcome, CarePlanService
from app.core.llm.deps import get_openai_client
from app.core.llm.openai_client import OpenAIClient
from app.core.metrics import record_care_plan_outcome
from app.core.settings import get_settings

router = APIRouter(prefix="/api", tags=["careplans"])

CARE_PLAN_PATH = "/careplan"
ALLOWED_METHODS = "POST, OPTIONS"

# One row per failure; every CarePlanFailure member must be listed here.
FAILURE_RESPONSES: dict[CarePlanFailure, tuple[int, str]] = {
    CarePlanFailure.METHOD_NOT_ALLOWED: (
        status.HTTP_405_METHOD_NOT_ALLOWED,
        "Method not allowed",
    ),
    CarePlanFailure.CONDITIONS_REQUIRED: (
        status.HTTP_400_BAD_REQUEST,
        "Patient conditions are required",
    ),
    CarePlanFailure.API_KEY_NOT_CONFIGURED: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "OpenAI API key not configured",
    ),
    CarePlanFailure.RATE_LIMITED: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        "API rate limit exceeded. Please try again later.",
    ),
    CarePlanFailure.INVALID_API_KEY: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Invalid API key configuration.",
    ),
    CarePlanFailure.UPSTREAM_UNAVAILABLE: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "OpenAI service temporarily unavailable.",
    ),
    CarePlanFailure.GENERATION_FAILED: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Failed to generate care plan. Please try again.",
    ),
}


def failure_response(failure: CarePlanFailure) -> JSONResponse:
    status_code, message = FAILURE_RESPONSES[failure]
    headers = {"Allow": ALLOWED_METHODS} if failure is CarePlanFailure.METHOD_NOT_ALLOWED else None
    return JSONResponse(
        status_code=status_code,
        content=ErrorOut(error=message).model_dump(),
        headers=headers,
    )


def _outcome_response(outcome: CarePlanOutcome) -> JSONResponse:
    record_care_plan_outcome(outcome.label)
    if outcome.failure is not None:
        return failure_response(outcome.failure)
    body = CarePlanOut(care_plan=outcome.care_plan or "", timestamp=outcome.timestamp or "")
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump(by_alias=True))


async def _read_care_plan_request(request: Request) -> CarePlanIn:
    """
    Parse the body leniently.

    A body that is not JSON or not an object is treated as if `conditions` were
    missing. A present `conditions` value is passed through untyped; the service
    decides whether it is blank or unusable.
    """

    try:
        raw = await request.json()
    except ValueError:
        return CarePlanIn()
    if not isinstance(raw, dict):
        return CarePlanIn()
    return CarePlanIn.model_validate(raw)


@router.options(CARE_PLAN_PATH, include_in_schema=False)
async def care_plan_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    CARE_PLAN_PATH,
    response_model=CarePlanOut,
    summary="Generate a GP Chronic Condition Management Plan",
    description=(
        "Appends the submitted chronic conditions to the fixed GPCCMP prompt and returns the "
        "model's care plan tables as text.\n\n"
        "Angle brackets are stripped from the input. Upstream error bodies are never "
        "returned; failures map to a fixed set of messages."
    ),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": CarePlanIn.model_json_schema()}},
        }
    },
    responses={
        200: {"model": CarePlanOut, "description": "Care plan generated"},
        400: {"model": ErrorOut, "description": "Missing or empty conditions"},
        429: {"model": ErrorOut, "description": "Upstream rate limit exceeded"},
        500: {"model": ErrorOut, "description": "Configuration or upstream failure"},
    },
)
async def generate_care_plan(
    request: Request,
    llm_client: OpenAIClient | None = Depends(get_openai_client),
) -> JSONResponse:
    body = await _read_care_plan_request(request)
    settings = get_settings()
    service = CarePlanService(
        llm_client=llm_client,
        temperature=float(settings.care_plan_temperature),
        max_tokens=int(settings.care_plan_max_tokens),
        request_id=getattr(request.state, "request_id", None),
        log_upstream_error_messages=bool(settings.openai_log_upstream_error_messages),
    )
    outcome = await service.generate(conditions=body.conditions)
    return _outcome_response(outcome)

