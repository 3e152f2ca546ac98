"""Create the api_translations catalog table."""

import os
from typing import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_api_translations"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _schema() -> Union[str, None]:
    schema = os.getenv("EXHANDLER_DATASOURCE_SCHEMA_NAME", "").strip()
    return schema.lower() or None


def upgrade() -> None:
    """Create the translation table keyed by application/module/code/locale/type."""
    schema = _schema()
    if schema is not None:
        op.execute(sa.schema.CreateSchema(schema, if_not_exists=True))

    op.create_table(
        "api_translations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application", sa.String(length=64), nullable=False),
        sa.Column("module", sa.String(length=64), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("locale", sa.String(length=8), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False, server_default=sa.text("'EX'")),
        sa.Column("value", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_api_translations"),
        sa.UniqueConstraint(
            "application",
            "module",
            "code",
            "locale",
            "type",
            name="uq_api_translations_key",
        ),
        schema=schema,
    )


def downgrade() -> None:
    """Drop the translation table."""
    op.drop_table("api_translations", schema=_schema())
