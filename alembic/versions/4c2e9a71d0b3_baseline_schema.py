"""baseline schema

Revision ID: 4c2e9a71d0b3
Revises:
Create Date: 2026-10-19 10:02:41.118204

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy.engine import Connection

from stackit.database import Base
from stackit import models  # noqa: F401

# revision identifiers, used by Alembic.
revision: str = "4c2e9a71d0b3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all database objects for the current metadata."""
    bind: Connection = op.get_bind()
    Base.metadata.create_all(bind)


def downgrade() -> None:
    """Drop all database objects managed by the metadata."""
    bind: Connection = op.get_bind()
    Base.metadata.drop_all(bind)
