"""Decode normalized error bodies returned by downstream services."""

from __future__ import annotations

from datetime import datetime
import logging

from pydantic import Field
from pydantic import ValidationError
import requests

from exhandler.core.failures import UpstreamFailure
from exhandler.schemas.error import ExceptionOutput

logger = logging.getLogger(__name__)


class _UpstreamBody(ExceptionOutput):
    """Normalized error body; the origin service may omit the timestamp."""

    timestamp: datetime | None = Field(default=None, alias="timeStamp")


def decode_upstream_failure(response: requests.Response) -> UpstreamFailure | None:
    """Return the failure carried by an error response, if it has the normalized shape."""
    if response.status_code < 400:
        return None

    try:
        body = response.json()
    except ValueError:
        logger.warning("Upstream error response is not JSON status=%s", response.status_code)
        return None

    if not isinstance(body, dict):
        return None

    try:
        output = _UpstreamBody.model_validate(body)
    except ValidationError:
        logger.warning("Upstream error response is not a normalized error status=%s", response.status_code)
        return None

    return UpstreamFailure(
        code=output.code,
        description=output.description,
        api=output.api,
        module=output.module,
        timestamp=output.timestamp,
    )


def raise_for_upstream_failure(response: requests.Response) -> None:
    """Raise the decoded ``UpstreamFailure`` or fall back to ``raise_for_status``."""
    failure = decode_upstream_failure(response)
    if failure is not None:
        raise failure
    response.raise_for_status()


def request_upstream(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout_seconds: float = 10.0,
    **kwargs: object,
) -> requests.Response:
    """Call a downstream service, surfacing its normalized errors as ``UpstreamFailure``."""
    response = session.request(method, url, timeout=timeout_seconds, **kwargs)
    raise_for_upstream_failure(response)
    return response
