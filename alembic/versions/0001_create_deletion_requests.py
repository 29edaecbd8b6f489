"""Create deletion_requests

Revision ID: 0001
Revises:
Create Date: 2025-03-02 10:12:41.118204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'deletion_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('confirmation_code', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_deletion_requests_confirmation_code'), 'deletion_requests',
                    ['confirmation_code'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_deletion_requests_confirmation_code'), table_name='deletion_requests')
    op.drop_table('deletion_requests')
