"""Failure contract shared by every service that raises API errors.

Four variants reach the normalization boundary:

* ``DomainFailure``: a code-identified business rule violation, translated
  from the catalog.
* ``UpstreamFailure``: an error already normalized by a downstream service,
  rendered as-is.
* ``ValidationFailure``: field-level input errors, rendered with a reserved code.
* ``UnknownFailure``: anything else; only the default description is exposed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any
from typing import NoReturn
from typing import Union

from fastapi.exceptions import RequestValidationError

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})


@dataclass(frozen=True)
class FailureIdentity:
    """Identity of one raised failure."""

    code: str
    description: str
    module: str
    api: str
    parameters: tuple[str, ...] = field(default_factory=tuple)

    def with_parameters(self, *parameters: object) -> FailureIdentity:
        """Return a copy whose parameters replace the current ones."""
        return replace(self, parameters=tuple(str(param) for param in parameters))


@dataclass(frozen=True)
class FailureDefinition:
    """Static definition of a failure kind inside a ``ServiceFailure`` catalog."""

    code: str
    description: str
    module: str
    api: str


class ServiceFailure(Enum):
    """Base class for per-service failure catalogs.

    Subclass it with members whose values are ``FailureDefinition``. Enum
    folds members with equal values into aliases of the first one, so two
    kinds sharing code, text, module and api would become one member.
    Decorate catalogs with ``enum.unique`` to reject that at import time::

        @unique
        class OrderFailure(ServiceFailure):
            ITEM_NOT_FOUND = FailureDefinition("404", "Item not found", "ORDER", "ORD")

        OrderFailure.ITEM_NOT_FOUND.raise_error("Widget")
    """

    @property
    def code(self) -> str:
        return self.value.code

    @property
    def description(self) -> str:
        return self.value.description

    @property
    def module(self) -> str:
        return self.value.module

    @property
    def api(self) -> str:
        return self.value.api

    @property
    def parameters(self) -> tuple[str, ...]:
        return ()

    def identity(self, *parameters: object) -> FailureIdentity:
        """Build a fresh identity for one raise of this failure kind."""
        definition = self.value
        return FailureIdentity(
            code=definition.code,
            description=definition.description,
            module=definition.module,
            api=definition.api,
        ).with_parameters(*parameters)

    def exception(self, *parameters: object) -> DomainFailure:
        """Return the raiseable exception for this failure kind."""
        return DomainFailure(self.identity(*parameters))

    def raise_error(self, *parameters: object) -> NoReturn:
        """Raise this failure, optionally with message parameters."""
        raise self.exception(*parameters)


class DomainFailure(Exception):
    """Expected, code-identified business rule violation."""

    def __init__(self, identity: FailureIdentity) -> None:
        super().__init__(identity.description)
        self.identity = identity

    @property
    def code(self) -> str:
        return self.identity.code

    @property
    def description(self) -> str:
        return self.identity.description

    @property
    def module(self) -> str:
        return self.identity.module

    @property
    def api(self) -> str:
        return self.identity.api

    @property
    def parameters(self) -> tuple[str, ...]:
        return self.identity.parameters


class UpstreamFailure(Exception):
    """Failure already normalized by the service that raised it."""

    def __init__(
        self,
        *,
        code: str,
        description: str,
        api: str,
        module: str,
        timestamp: datetime | None = None,
    ) -> None:
        super().__init__(description)
        self.code = code
        self.description = description
        self.api = api
        self.module = module
        self.timestamp = timestamp


@dataclass(frozen=True)
class FieldError:
    """Single invalid input field."""

    field: str
    message: str


class ValidationFailure(Exception):
    """Structural input failure made of one or more invalid fields."""

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors = tuple(errors)
        super().__init__(f"{len(self.errors)} invalid field(s)")

    @classmethod
    def from_request_validation_error(cls, exc: RequestValidationError) -> ValidationFailure:
        """Adapt FastAPI request validation issues to field errors."""
        return cls(
            FieldError(
                field=_format_location(issue.get("loc", ())),
                message=str(issue.get("msg", "Invalid value")),
            )
            for issue in exc.errors()
        )


@dataclass(frozen=True)
class UnknownFailure:
    """Any fault that is not part of the failure contract."""

    cause: BaseException


Failure = Union[DomainFailure, UpstreamFailure, ValidationFailure, UnknownFailure]


def classify(exc: BaseException) -> Failure:
    """Map an arbitrary exception to exactly one failure variant."""
    if isinstance(exc, (DomainFailure, UpstreamFailure, ValidationFailure)):
        return exc
    if isinstance(exc, RequestValidationError):
        return ValidationFailure.from_request_validation_error(exc)
    return UnknownFailure(cause=exc)


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    filtered = [str(part) for part in location if part not in _LOCATION_PREFIXES]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])
