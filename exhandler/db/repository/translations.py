"""Repository primitives for api translation rows."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from exhandler.db.models.translation import EXCEPTION_TRANSLATION_TYPE
from exhandler.db.models.translation import ApiTranslation


def find_translation(
    session: Session,
    *,
    application: str,
    module: str,
    code: str,
    locale: str,
) -> str | None:
    """Return the exception text for an exact key, or ``None``."""
    stmt = (
        select(ApiTranslation.value)
        .where(
            ApiTranslation.application == application,
            ApiTranslation.module == module,
            ApiTranslation.code == code,
            ApiTranslation.locale == locale.upper(),
            ApiTranslation.type == EXCEPTION_TRANSLATION_TYPE,
        )
        .limit(1)
    )
    return session.scalars(stmt).first()


def create_translation(
    session: Session,
    *,
    application: str,
    module: str,
    code: str,
    locale: str,
    value: str,
    type: str = EXCEPTION_TRANSLATION_TYPE,
) -> ApiTranslation:
    """Create and return a translation row."""
    translation = ApiTranslation(
        application=application,
        module=module,
        code=code,
        locale=locale.upper(),
        type=type,
        value=value,
    )
    session.add(translation)
    session.flush()
    session.refresh(translation)
    return translation
