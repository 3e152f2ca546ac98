"""SQL-backed translation store."""

from __future__ import annotations

from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from exhandler.db.repository.translations import find_translation


class SqlTranslationStore:
    """Look up exception texts in the api_translations table.

    Each lookup uses its own short-lived session, so one store can serve
    concurrent requests.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def find_description(self, application: str, module: str, code: str, locale: str) -> str | None:
        with self._session_factory() as session:
            return find_translation(
                session,
                application=application,
                module=module,
                code=code,
                locale=locale,
            )
