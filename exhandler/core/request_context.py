"""Per-request context used by the error normalization boundary."""

from __future__ import annotations

from dataclasses import dataclass
import uuid

from fastapi import Request

REQUEST_ID_HEADER = "RequestId"
MIN_REQUEST_ID_LENGTH = 8
UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RequestContext:
    """Locale, correlation id and caller address of one request."""

    locale: str
    request_id: str
    client_ip: str


def _parse_quality(params: list[str]) -> float:
    for param in params:
        key, _, value = param.strip().partition("=")
        if key.strip().lower() == "q":
            try:
                return float(value)
            except ValueError:
                return 0.0
    return 1.0


def preferred_language(accept_language: str | None) -> str | None:
    """Return the primary subtag of the highest-quality ``Accept-Language`` entry."""
    if not accept_language:
        return None

    candidates: list[tuple[float, int, str]] = []
    for position, entry in enumerate(accept_language.split(",")):
        tag, *params = entry.split(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue
        quality = _parse_quality(params)
        if quality <= 0:
            continue
        candidates.append((-quality, position, tag))

    if not candidates:
        return None

    _, _, best = min(candidates)
    language = best.replace("_", "-").split("-")[0]
    return language or None


def extract_locale(accept_language: str | None, fallback: str) -> str:
    """Resolve the uppercased lookup locale for a request."""
    language = preferred_language(accept_language)
    return (language or fallback).upper()


def extract_request_id(header_value: str | None) -> str:
    """Reuse a caller supplied correlation id or synthesize a new one."""
    if header_value is not None and len(header_value) >= MIN_REQUEST_ID_LENGTH:
        return header_value
    return uuid.uuid4().hex


def client_address(request: Request) -> str:
    if request.client is None or not request.client.host:
        return UNKNOWN_CLIENT
    return request.client.host


def build_request_context(request: Request, *, fallback_locale: str) -> RequestContext:
    """Collect locale, request id and client address from a FastAPI request."""
    return RequestContext(
        locale=extract_locale(request.headers.get("accept-language"), fallback_locale),
        request_id=extract_request_id(request.headers.get(REQUEST_ID_HEADER)),
        client_ip=client_address(request),
    )
