"""SQLAlchemy model for localized API texts."""

from __future__ import annotations

from sqlalchemy import Integer
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy import text
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

EXCEPTION_TRANSLATION_TYPE = "EX"


class Base(DeclarativeBase):
    """Declarative base for exhandler ORM models."""


class ApiTranslation(Base):
    """One localized text keyed by application, module, code and locale.

    The table has no fixed schema; the session factory maps it to the
    configured catalog schema at runtime.
    """

    __tablename__ = "api_translations"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_api_translations"),
        UniqueConstraint(
            "application",
            "module",
            "code",
            "locale",
            "type",
            name="uq_api_translations_key",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application: Mapped[str] = mapped_column(String(64), nullable=False)
    module: Mapped[str] = mapped_column(String(64), nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    locale: Mapped[str] = mapped_column(String(8), nullable=False)
    type: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default=EXCEPTION_TRANSLATION_TYPE,
        server_default=text(f"'{EXCEPTION_TRANSLATION_TYPE}'"),
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)
