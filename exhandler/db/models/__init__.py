"""Model module imports for SQLAlchemy metadata registration."""

from exhandler.db.models.translation import ApiTranslation
from exhandler.db.models.translation import Base

__all__ = [
    "ApiTranslation",
    "Base",
]
