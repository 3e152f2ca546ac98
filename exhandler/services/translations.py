"""Translation lookups with the default-identity fallback chain."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
import logging
from typing import Protocol

from exhandler.core.config import DefaultPolicy
from exhandler.core.formatting import format_message

logger = logging.getLogger(__name__)

NOT_DEFINED_PREFIX = "ND_"

TranslationKey = tuple[str, str, str, str]


class TranslationStore(Protocol):
    """Read-only catalog of localized exception texts."""

    def find_description(self, application: str, module: str, code: str, locale: str) -> str | None: ...


class InMemoryTranslationStore:
    """Dictionary backed store keyed by ``(application, module, code, locale)``."""

    def __init__(self, entries: Mapping[TranslationKey, str] | None = None) -> None:
        self._entries = {
            (application, module, code, locale.upper()): value
            for (application, module, code, locale), value in (entries or {}).items()
        }

    def find_description(self, application: str, module: str, code: str, locale: str) -> str | None:
        return self._entries.get((application, module, code, locale.upper()))


@dataclass(frozen=True)
class Resolution:
    """Final code and description for one failure."""

    code: str
    description: str


class TranslationResolver:
    """Resolve failure descriptions from a store, falling back to the default identity.

    The chain is: exact translation, then the catalog's default-identity text
    (marking the code with ``ND_`` when it is not the default code), then the
    configured default message.
    """

    def __init__(self, store: TranslationStore, policy: DefaultPolicy) -> None:
        self._store = store
        self._policy = policy

    @property
    def policy(self) -> DefaultPolicy:
        return self._policy

    def resolve(self, application: str, module: str, code: str, locale: str) -> str | None:
        """Exact lookup; store failures count as a miss."""
        try:
            return self._store.find_description(application, module, code, locale.upper())
        except Exception:
            logger.exception(
                "Translation store lookup failed application=%s module=%s code=%s locale=%s",
                application,
                module,
                code,
                locale,
            )
            return None

    def describe(
        self,
        api: str,
        module: str,
        code: str | None,
        parameters: Sequence[str],
        locale: str,
    ) -> Resolution:
        """Resolve a specific failure identity through the full fallback chain."""
        error_code = code or self._policy.code

        template = self.resolve(api, module, error_code, locale)
        if template is not None:
            return Resolution(code=error_code, description=format_message(template, parameters))

        logger.error("Could not find exception definition for module: %s code: %s", module, error_code)

        default_description = self._find_default(api, locale)
        if default_description is None:
            return Resolution(code=error_code, description=self._policy.message)

        prefix = ""
        if error_code.upper() != self._policy.code.upper():
            prefix = NOT_DEFINED_PREFIX
        return Resolution(code=f"{prefix}{error_code}", description=default_description)

    def describe_default(self, api: str, locale: str) -> str:
        """Description for the default identity, or the static default message."""
        description = self._find_default(api, locale)
        if description is None:
            return self._policy.message
        return description

    def describe_reserved(self, api: str, module: str, code: str, locale: str) -> Resolution:
        """Resolve a reserved identity; misses use the default text without a marker."""
        template = self.resolve(api, module, code, locale)
        if template is not None:
            return Resolution(code=code, description=template)

        logger.error("Could not find exception definition for module: %s code: %s", module, code)
        return Resolution(code=code, description=self.describe_default(api, locale))

    def _find_default(self, api: str, locale: str) -> str | None:
        template = self.resolve(api, self._policy.module, self._policy.code, locale)
        if template is None:
            logger.error(
                "Could not find default exception definition for api: %s module: %s code: %s",
                api,
                self._policy.module,
                self._policy.code,
            )
            return None
        return format_message(template, [api])
