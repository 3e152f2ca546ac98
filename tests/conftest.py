"""Shared pytest fixtures for exhandler test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from exhandler.core.config import DefaultPolicy  # noqa: E402
from exhandler.core.config import ExceptionHandlerSettings  # noqa: E402
from exhandler.core.logging import FailureLogEvent  # noqa: E402
from exhandler.services.translations import InMemoryTranslationStore  # noqa: E402

APPLICATION = "ORD"
DEFAULT_CODE = "DEFAULT_CODE"
DEFAULT_MODULE = "DEFAULT_MODULE"
DEFAULT_MESSAGE = "Something went wrong"


class RecordingSink:
    """Log sink that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[FailureLogEvent] = []

    def __call__(self, event: FailureLogEvent) -> None:
        self.events.append(event)


@pytest.fixture
def policy() -> DefaultPolicy:
    return DefaultPolicy(code=DEFAULT_CODE, module=DEFAULT_MODULE, message=DEFAULT_MESSAGE)


@pytest.fixture
def settings(policy: DefaultPolicy) -> ExceptionHandlerSettings:
    return ExceptionHandlerSettings(application_name=APPLICATION, default_policy=policy)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store() -> InMemoryTranslationStore:
    """Catalog with one specific text and the default-identity text in Turkish."""
    return InMemoryTranslationStore(
        {
            (APPLICATION, "ORDER", "404", "TR"): "Item ''{0}'' not found",
            (APPLICATION, DEFAULT_MODULE, DEFAULT_CODE, "TR"): "Unexpected error in {0}",
            (APPLICATION, DEFAULT_MODULE, DEFAULT_CODE, "EN"): "Unexpected error in {0} (en)",
        }
    )


@pytest.fixture
def client(
    settings: ExceptionHandlerSettings,
    store: InMemoryTranslationStore,
    sink: RecordingSink,
) -> Generator[TestClient, None, None]:
    """Provide an API test client wired with the in-memory catalog."""
    from exhandler.main import create_app

    app = create_app(settings, store=store, log_sink=sink)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
