from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from app.careplans.prompt import build_care_plan_prompt
from app.core.llm.openai_client import OpenAIStatusError

logger = logging.getLogger("app.careplan")

_ANGLE_BRACKETS = re.compile(r"[<>]")


class LLMClient(Protocol):
    async def complete_text(self, *, prompt: str, temperature: float, max_tokens: int) -> str: ...


class CarePlanFailure(str, Enum):
    """Every way a care plan request can end without a plan."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    CONDITIONS_REQUIRED = "conditions_required"
    API_KEY_NOT_CONFIGURED = "api_key_not_configured"
    RATE_LIMITED = "rate_limited"
    INVALID_API_KEY = "invalid_api_key"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    GENERATION_FAILED = "generation_failed"


@dataclass(frozen=True)
class CarePlanOutcome:
    """Result of one generation attempt: either a plan or a failure, never both."""

    care_plan: str | None = None
    timestamp: str | None = None
    failure: CarePlanFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def label(self) -> str:
        return "success" if self.failure is None else self.failure.value


def sanitize_conditions(conditions: str) -> str:
    """
    Remove every `<` and `>` from the trimmed input.

    This is a narrow defanging step, not HTML escaping. Ampersands, quotes and
    the rest of the clinical text are passed through unchanged.
    """

    return _ANGLE_BRACKETS.sub("", conditions.strip()).strip()


def utc_timestamp(*, now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix."""

    now = now or datetime.now(UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_blank(value: object) -> bool:
    """
    True for an absent value or one that carries no text.

    Matches JSON falsiness: null, false, 0 and a whitespace-only string are blank.
    Empty arrays and objects are not blank; they are rejected as non-strings.
    """

    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def _failure_for_status(status_code: int) -> CarePlanFailure:
    if status_code == 429:
        return CarePlanFailure.RATE_LIMITED
    if status_code == 401:
        return CarePlanFailure.INVALID_API_KEY
    return CarePlanFailure.UPSTREAM_UNAVAILABLE


class CarePlanService:
    """Validate, sanitize, compose and forward one care plan request.

    Failures are returned as `CarePlanOutcome` values; no exception raised while
    generating escapes `generate`.
    """

    def __init__(
        self,
        *,
        llm_client: LLMClient | None,
        temperature: float,
        max_tokens: int,
        request_id: str | None = None,
        log_upstream_error_messages: bool = False,
    ):
        self._llm = llm_client
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._request_id = request_id
        self._log_upstream_error_messages = log_upstream_error_messages

    async def generate(self, *, conditions: object) -> CarePlanOutcome:
        if _is_blank(conditions):
            return CarePlanOutcome(failure=CarePlanFailure.CONDITIONS_REQUIRED)
        if not isinstance(conditions, str):
            logger.error(
                "Error generating care plan",
                extra={
                    "request_id": self._request_id,
                    "error": f"conditions must be a string, got {type(conditions).__name__}",
                },
            )
            return CarePlanOutcome(failure=CarePlanFailure.GENERATION_FAILED)

        # Checked after input validation so a bad request is reported as such even
        # on a misconfigured deployment.
        if self._llm is None:
            return CarePlanOutcome(failure=CarePlanFailure.API_KEY_NOT_CONFIGURED)

        try:
            prompt = build_care_plan_prompt(sanitized_conditions=sanitize_conditions(conditions))
            care_plan = await self._llm.complete_text(
                prompt=prompt,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except OpenAIStatusError as exc:
            # The raw body is never returned to the caller.
            logger.warning(
                "OpenAI API error",
                extra={
                    "request_id": self._request_id,
                    "upstream_status": exc.status_code,
                    "upstream_error_type": exc.error_type,
                    "upstream_error_code": exc.error_code,
                },
            )
            if self._log_upstream_error_messages and exc.error_message is not None:
                logger.debug(
                    "OpenAI API error message",
                    extra={
                        "request_id": self._request_id,
                        "upstream_status": exc.status_code,
                        "upstream_error_message": exc.error_message,
                    },
                )
            return CarePlanOutcome(failure=_failure_for_status(exc.status_code))
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Error generating care plan",
                extra={"request_id": self._request_id, "error": str(exc)},
            )
            return CarePlanOutcome(failure=CarePlanFailure.GENERATION_FAILED)

        # IMPORTANT: length only. The plan text is derived from patient data.
        logger.info(
            "Care plan generated",
            extra={"request_id": self._request_id, "care_plan_length": len(care_plan)},
        )
        return CarePlanOutcome(care_plan=care_plan, timestamp=utc_timestamp())
