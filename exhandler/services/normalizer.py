"""Turn any raised failure into the normalized, localized response body."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone

from fastapi import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from exhandler.core.failures import DomainFailure
from exhandler.core.failures import Failure
from exhandler.core.failures import UnknownFailure
from exhandler.core.failures import UpstreamFailure
from exhandler.core.failures import ValidationFailure
from exhandler.core.failures import classify
from exhandler.core.logging import FailureLogEvent
from exhandler.core.logging import FailureLogSink
from exhandler.core.logging import LoggingFailureSink
from exhandler.core.request_context import RequestContext
from exhandler.schemas.error import ExceptionOutput
from exhandler.services.translations import TranslationResolver

VALIDATION_ERROR_CODE = "999"
VALIDATION_ERROR_MODULE = "Self"


@dataclass(frozen=True)
class NormalizedResponse:
    """Status code plus body for one handled failure."""

    status_code: int
    output: ExceptionOutput
    headers: Mapping[str, str] | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def format_field_error(field: str, message: str) -> str:
    return f"'{field}' field is wrong. {message}"


class ResponseNormalizer:
    """Single dispatch point from failure variants to ``NormalizedResponse``."""

    def __init__(
        self,
        *,
        resolver: TranslationResolver,
        application_name: str,
        log_sink: FailureLogSink | None = None,
    ) -> None:
        self._resolver = resolver
        self._policy = resolver.policy
        self._application_name = application_name
        self._log_sink = log_sink or LoggingFailureSink()

    def normalize(self, exc: BaseException | Failure, context: RequestContext) -> NormalizedResponse:
        """Classify ``exc`` and render it for ``context``."""
        failure = exc if isinstance(exc, UnknownFailure) else classify(exc)

        if isinstance(failure, DomainFailure):
            return self._domain(failure, context)
        if isinstance(failure, UpstreamFailure):
            return self._upstream(failure, context)
        if isinstance(failure, ValidationFailure):
            return self._validation(failure, context)
        return self._unknown(failure, context)

    def _domain(self, failure: DomainFailure, context: RequestContext) -> NormalizedResponse:
        resolution = self._resolver.describe(
            failure.api,
            failure.module,
            failure.code,
            failure.parameters,
            context.locale,
        )
        output = ExceptionOutput(
            code=resolution.code,
            description=resolution.description,
            module=failure.module,
            api=failure.api,
            timestamp=_now(),
        )
        self._log("DomainFailure", context, output, failure)
        return NormalizedResponse(status_code=status.HTTP_417_EXPECTATION_FAILED, output=output)

    def _upstream(self, failure: UpstreamFailure, context: RequestContext) -> NormalizedResponse:
        output = ExceptionOutput(
            code=failure.code,
            description=failure.description,
            module=failure.module,
            api=failure.api,
            timestamp=failure.timestamp or _now(),
        )
        self._log("UpstreamFailure", context, output, failure)
        return NormalizedResponse(status_code=status.HTTP_417_EXPECTATION_FAILED, output=output)

    def _validation(self, failure: ValidationFailure, context: RequestContext) -> NormalizedResponse:
        resolution = self._resolver.describe_reserved(
            self._application_name,
            VALIDATION_ERROR_MODULE,
            VALIDATION_ERROR_CODE,
            context.locale,
        )
        output = ExceptionOutput(
            code=resolution.code,
            description=resolution.description,
            module=VALIDATION_ERROR_MODULE,
            api=self._application_name,
            timestamp=_now(),
        )
        output.errors.extend(format_field_error(error.field, error.message) for error in failure.errors)
        self._log("FieldValidation", context, output, failure)
        return NormalizedResponse(status_code=status.HTTP_400_BAD_REQUEST, output=output)

    def _unknown(self, failure: UnknownFailure, context: RequestContext) -> NormalizedResponse:
        output = ExceptionOutput(
            code=self._policy.code,
            description=self._resolver.describe_default(self._application_name, context.locale),
            module=self._policy.module,
            api=self._application_name,
            timestamp=_now(),
        )
        self._log(type(failure.cause).__name__, context, output, failure.cause)

        if isinstance(failure.cause, StarletteHTTPException):
            return NormalizedResponse(
                status_code=failure.cause.status_code,
                output=output,
                headers=getattr(failure.cause, "headers", None),
            )
        return NormalizedResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, output=output)

    def _log(
        self,
        kind: str,
        context: RequestContext,
        output: ExceptionOutput,
        exc: BaseException,
    ) -> None:
        self._log_sink(
            FailureLogEvent(
                kind=kind,
                request_id=context.request_id,
                client_ip=context.client_ip,
                api=output.api,
                module=output.module,
                code=output.code,
                description=output.description,
                exc=exc,
            )
        )
