"""Database engine and session helpers for the translation catalog."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from exhandler.core.config import ConfigurationError
from exhandler.core.config import DatasourceSettings
from exhandler.core.config import ExceptionHandlerSettings
from exhandler.db.store import SqlTranslationStore

logger = logging.getLogger(__name__)

POOL_NAME_PREFIX = "GEH_"


class DatasourceRegistry:
    """Engines already provisioned by the host application, by name."""

    def __init__(self, engines: dict[str, Engine] | None = None) -> None:
        self._engines: dict[str, Engine] = dict(engines or {})

    def register(self, name: str, engine: Engine) -> None:
        self._engines[name] = engine

    def get(self, name: str) -> Engine | None:
        return self._engines.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._engines


def create_translation_engine(datasource: DatasourceSettings) -> Engine:
    """Create a dedicated engine for the translation catalog."""
    url = make_url(datasource.url)
    overrides: dict[str, str] = {}
    if datasource.driver:
        overrides["drivername"] = datasource.driver
    if datasource.username:
        overrides["username"] = datasource.username
    if datasource.password:
        overrides["password"] = datasource.password
    if overrides:
        url = url.set(**overrides)

    pool_name = f"{POOL_NAME_PREFIX}{datasource.name}"
    engine = create_engine(url, pool_pre_ping=True, pool_logging_name=pool_name)
    logger.info("Created translation datasource pool=%s", pool_name)
    return engine


def resolve_translation_engine(datasource: DatasourceSettings, registry: DatasourceRegistry) -> Engine:
    """Pick a new engine or an already provisioned one, failing on unknown names."""
    if not datasource.uses_named_datasource:
        return create_translation_engine(datasource)

    engine = registry.get(datasource.name)
    if engine is None:
        logger.error("No datasource registered with name=%s", datasource.name)
        raise ConfigurationError(f"No datasource registered with name: {datasource.name}")

    logger.info("Using already defined datasource name=%s", datasource.name)
    return engine


def build_session_factory(engine: Engine, schema_name: str | None = None) -> sessionmaker[Session]:
    """Return a session factory whose models resolve to ``schema_name``."""
    if schema_name:
        engine = engine.execution_options(schema_translate_map={None: schema_name.lower()})

    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=Session,
    )


def build_translation_store(
    settings: ExceptionHandlerSettings,
    registry: DatasourceRegistry | None = None,
) -> SqlTranslationStore:
    """Compose the SQL translation store from settings at startup."""
    datasource = settings.datasource
    if datasource is None:
        raise ConfigurationError("Translation datasource isn't defined.")

    engine = resolve_translation_engine(datasource, registry or DatasourceRegistry())
    store = SqlTranslationStore(build_session_factory(engine, datasource.schema_name))
    logger.info(
        "Api translations store created schema=%s table=api_translations",
        datasource.schema_name.lower(),
    )
    return store
