"""Integration tests for the SQL translation store and datasource bootstrap."""

from __future__ import annotations

from collections.abc import Generator
import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from exhandler.core.config import ConfigurationError
from exhandler.core.config import DatasourceSettings
from exhandler.core.config import ExceptionHandlerSettings
from exhandler.core.failures import FailureDefinition
from exhandler.core.failures import ServiceFailure
from exhandler.db.base import DatasourceRegistry
from exhandler.db.base import build_session_factory
from exhandler.db.base import build_translation_store
from exhandler.db.base import create_translation_engine
from exhandler.db.base import resolve_translation_engine
from exhandler.db.models import Base
from exhandler.db.repository.translations import create_translation
from exhandler.db.store import SqlTranslationStore
from exhandler.main import create_app

ROOT = Path(__file__).resolve().parents[2]
MIGRATION_PATH = ROOT / "migrations" / "versions" / "001_api_translations.py"


class OrderFailure(ServiceFailure):
    ITEM_NOT_FOUND = FailureDefinition("404", "Item not found", "ORDER", "ORD")


def _memory_engine() -> Engine:
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = _memory_engine()
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        create_translation(
            session,
            application="ORD",
            module="ORDER",
            code="404",
            locale="tr",
            value="Item ''{0}'' not found",
        )
        create_translation(
            session,
            application="ORD",
            module="ORDER",
            code="404",
            locale="EN",
            value="Label text",
            type="LBL",
        )
        create_translation(
            session,
            application="ORD",
            module="DEFAULT_MODULE",
            code="DEFAULT_CODE",
            locale="TR",
            value="Unexpected error in {0}",
        )
        session.commit()
    yield engine
    engine.dispose()


def test_store_finds_exact_exception_text(engine: Engine) -> None:
    store = SqlTranslationStore(build_session_factory(engine))

    assert store.find_description("ORD", "ORDER", "404", "TR") == "Item ''{0}'' not found"
    assert store.find_description("ORD", "ORDER", "404", "tr") == "Item ''{0}'' not found"


def test_store_ignores_other_keys_and_types(engine: Engine) -> None:
    store = SqlTranslationStore(build_session_factory(engine))

    assert store.find_description("ORD", "ORDER", "404", "EN") is None
    assert store.find_description("ORD", "order", "404", "TR") is None
    assert store.find_description("INV", "ORDER", "404", "TR") is None


def test_session_factory_maps_models_to_schema(engine: Engine) -> None:
    store = SqlTranslationStore(build_session_factory(engine, "MAIN"))

    assert store.find_description("ORD", "DEFAULT_MODULE", "DEFAULT_CODE", "TR") == "Unexpected error in {0}"


def test_named_datasource_is_reused(engine: Engine) -> None:
    registry = DatasourceRegistry({"errors": engine})
    datasource = DatasourceSettings(name="errors", schema_name="main")

    assert resolve_translation_engine(datasource, registry) is engine


def test_unknown_named_datasource_fails_fast() -> None:
    datasource = DatasourceSettings(name="errors", schema_name="main")

    with pytest.raises(ConfigurationError, match="errors"):
        resolve_translation_engine(datasource, DatasourceRegistry())


def test_url_datasource_creates_its_own_engine() -> None:
    datasource = DatasourceSettings(name="errors", schema_name="main", url="sqlite://", driver="sqlite+pysqlite")

    engine = create_translation_engine(datasource)

    assert engine.url.drivername == "sqlite+pysqlite"
    engine.dispose()


def test_store_requires_datasource_settings(settings: ExceptionHandlerSettings) -> None:
    with pytest.raises(ConfigurationError, match="datasource"):
        build_translation_store(settings)


def test_app_translates_from_sql_catalog(settings: ExceptionHandlerSettings, engine: Engine, sink) -> None:
    configured = ExceptionHandlerSettings(
        application_name=settings.application_name,
        default_policy=settings.default_policy,
        datasource=DatasourceSettings(name="errors", schema_name="MAIN"),
    )
    app = create_app(configured, registry=DatasourceRegistry({"errors": engine}), log_sink=sink)

    @app.get("/items/{name}")
    def get_item(name: str) -> None:
        OrderFailure.ITEM_NOT_FOUND.raise_error(name)

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/items/Widget")

    assert response.status_code == 417
    assert response.json()["desc"] == "Item 'Widget' not found"


def test_migration_creates_translation_table(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXHANDLER_DATASOURCE_SCHEMA_NAME", raising=False)
    spec = importlib.util.spec_from_file_location("migration_001_api_translations", MIGRATION_PATH)
    migration = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(migration)

    engine = _memory_engine()
    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        with Operations.context(context):
            migration.upgrade()

        inspector = inspect(connection)
        columns = {column["name"] for column in inspector.get_columns("api_translations")}

    assert columns == {"id", "application", "module", "code", "locale", "type", "value"}
    engine.dispose()
