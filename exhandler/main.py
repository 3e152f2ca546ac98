"""FastAPI application factory wired with the error normalization boundary."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from exhandler.core.config import ExceptionHandlerSettings
from exhandler.core.config import get_settings
from exhandler.core.errors import register_error_handlers
from exhandler.core.logging import FailureLogSink
from exhandler.db.base import DatasourceRegistry
from exhandler.db.base import build_translation_store
from exhandler.services.normalizer import ResponseNormalizer
from exhandler.services.translations import TranslationResolver
from exhandler.services.translations import TranslationStore

logger = logging.getLogger(__name__)


def build_normalizer(
    settings: ExceptionHandlerSettings,
    store: TranslationStore,
    log_sink: FailureLogSink | None = None,
) -> ResponseNormalizer:
    """Compose the normalizer from settings and a ready translation store."""
    resolver = TranslationResolver(store, settings.default_policy)
    return ResponseNormalizer(
        resolver=resolver,
        application_name=settings.application_name,
        log_sink=log_sink,
    )


def create_app(
    settings: ExceptionHandlerSettings | None = None,
    *,
    store: TranslationStore | None = None,
    registry: DatasourceRegistry | None = None,
    log_sink: FailureLogSink | None = None,
) -> FastAPI:
    """Create an app whose failures all render as normalized error bodies.

    Missing settings or an unusable translation datasource raise
    ``ConfigurationError`` here, before the app can serve traffic.
    """
    settings = settings or get_settings()
    if store is None:
        store = build_translation_store(settings, registry)

    logger.info("Starting error boundary with settings=%s", settings.safe_for_logging())

    app = FastAPI(title=settings.application_name)
    register_error_handlers(
        app,
        build_normalizer(settings, store, log_sink),
        fallback_locale=settings.fallback_locale,
    )

    return app
