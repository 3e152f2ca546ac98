"""Exception handler configuration helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_FALLBACK_LOCALE = "TR"

ENV_PREFIX = "EXHANDLER_"


class ConfigurationError(RuntimeError):
    """Raised at startup when required exception handler settings are missing."""


def redact_secret(secret: str | None) -> str:
    """Return a non-recoverable placeholder for sensitive values."""
    if not secret:
        return "<empty>"
    return "<redacted>"


def _get_env(environ: Mapping[str, str], name: str) -> str:
    return environ.get(f"{ENV_PREFIX}{name}", "").strip()


def _require(environ: Mapping[str, str], name: str, message: str) -> str:
    value = _get_env(environ, name)
    if not value:
        raise ConfigurationError(message)
    return value


@dataclass(frozen=True)
class DefaultPolicy:
    """Process-wide fallback failure identity."""

    code: str
    module: str
    message: str


@dataclass(frozen=True)
class DatasourceSettings:
    """Where the api_translations catalog lives."""

    name: str
    schema_name: str
    url: str = ""
    driver: str = ""
    username: str = ""
    password: str = ""

    @property
    def uses_named_datasource(self) -> bool:
        """Blank url means reuse an engine provisioned elsewhere under ``name``."""
        return not self.url

    def safe_for_logging(self) -> dict[str, str]:
        """Return datasource settings safe for logs."""
        return {
            "name": self.name,
            "schema_name": self.schema_name,
            "url": self.url or "<named>",
            "driver": self.driver,
            "username": self.username,
            "password": redact_secret(self.password),
        }


@dataclass(frozen=True)
class ExceptionHandlerSettings:
    """Runtime settings for the error normalization boundary."""

    application_name: str
    default_policy: DefaultPolicy
    fallback_locale: str = DEFAULT_FALLBACK_LOCALE
    datasource: DatasourceSettings | None = None

    def safe_for_logging(self) -> dict[str, object]:
        """Return settings safe for logs."""
        return {
            "application_name": self.application_name,
            "default_error_code": self.default_policy.code,
            "default_error_module": self.default_policy.module,
            "fallback_locale": self.fallback_locale,
            "datasource": self.datasource.safe_for_logging() if self.datasource else None,
        }


def _load_datasource(environ: Mapping[str, str]) -> DatasourceSettings | None:
    keys = ("DATASOURCE_NAME", "DATASOURCE_SCHEMA_NAME", "DATASOURCE_URL")
    if not any(_get_env(environ, key) for key in keys):
        return None

    return DatasourceSettings(
        name=_require(environ, "DATASOURCE_NAME", "Datasource name isn't defined."),
        schema_name=_require(environ, "DATASOURCE_SCHEMA_NAME", "Schema name isn't defined."),
        url=_get_env(environ, "DATASOURCE_URL"),
        driver=_get_env(environ, "DATASOURCE_DRIVER"),
        username=_get_env(environ, "DATASOURCE_USERNAME"),
        password=environ.get(f"{ENV_PREFIX}DATASOURCE_PASSWORD", ""),
    )


def load_settings(environ: Mapping[str, str] | None = None) -> ExceptionHandlerSettings:
    """Build settings from an environment mapping, failing on missing values."""
    if environ is None:
        environ = os.environ

    policy = DefaultPolicy(
        code=_require(environ, "DEFAULT_ERROR_CODE", "Default Error Code isn't defined."),
        module=_require(environ, "DEFAULT_ERROR_MODULE", "Default Error Module isn't defined."),
        message=_require(environ, "DEFAULT_ERROR_MESSAGE", "Default Error Message isn't defined."),
    )
    fallback_locale = _get_env(environ, "FALLBACK_LOCALE") or DEFAULT_FALLBACK_LOCALE

    return ExceptionHandlerSettings(
        application_name=_require(environ, "APPLICATION_NAME", "Application name isn't defined."),
        default_policy=policy,
        fallback_locale=fallback_locale.upper(),
        datasource=_load_datasource(environ),
    )


@lru_cache(maxsize=1)
def get_settings() -> ExceptionHandlerSettings:
    """Load exception handler settings from the process environment."""
    return load_settings()
