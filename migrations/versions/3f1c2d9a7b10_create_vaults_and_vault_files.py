"""Create vaults and vault_files

Revision ID: 3f1c2d9a7b10
Revises:
Create Date: 2026-09-02 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2d9a7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'vaults',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.String(length=36), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('allow_downloads', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('share_token', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_vaults_name', 'vaults', ['name'], unique=True)
    op.create_index('ix_vaults_owner_id', 'vaults', ['owner_id'], unique=False)
    op.create_index('ix_vaults_share_token', 'vaults', ['share_token'], unique=True)

    op.create_table(
        'vault_files',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('vault_id', sa.String(length=36), sa.ForeignKey('vaults.id'), nullable=False),
        sa.Column('owner_id', sa.String(length=36), nullable=False),
        sa.Column('uploaded_by', sa.String(length=36), nullable=False),
        sa.Column('storage_path', sa.String(length=512), nullable=False, unique=True),
        sa.Column('original_name', sa.String(length=255), nullable=True),
        sa.Column('content_type', sa.String(length=255), nullable=True),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('sort_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(length=36), nullable=True),
    )
    op.create_index('ix_vault_files_vault_id', 'vault_files', ['vault_id'], unique=False)
    op.create_index('ix_vault_files_deleted_at', 'vault_files', ['deleted_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_vault_files_deleted_at', table_name='vault_files')
    op.drop_index('ix_vault_files_vault_id', table_name='vault_files')
    op.drop_table('vault_files')
    op.drop_index('ix_vaults_share_token', table_name='vaults')
    op.drop_index('ix_vaults_owner_id', table_name='vaults')
    op.drop_index('ix_vaults_name', table_name='vaults')
    op.drop_table('vaults')
