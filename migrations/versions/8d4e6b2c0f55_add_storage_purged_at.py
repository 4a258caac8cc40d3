"""Add storage_purged_at to vault_files

Revision ID: 8d4e6b2c0f55
Revises: 3f1c2d9a7b10
Create Date: 2026-09-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d4e6b2c0f55'
down_revision: Union[str, Sequence[str], None] = '3f1c2d9a7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        'vault_files',
        sa.Column('storage_purged_at', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_column('vault_files', 'storage_purged_at')
