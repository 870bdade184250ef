"""add_onboarding_responses_table

Revision ID: 9d8633ce5d41
Revises: d573044e2507
Create Date: 2026-01-13 12:59:41.174373

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '9d8633ce5d41'
down_revision: Union[str, Sequence[str], None] = 'd573044e2507'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_document = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('onboarding_responses',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=True),
        sa.Column('question_set_version', sa.String(length=64), nullable=False),
        sa.Column('answers', json_document, nullable=False),
        sa.Column('formatted_answers', json_document, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_onboarding_responses_user_id', 'onboarding_responses', ['user_id'])
    op.create_index('ix_onboarding_responses_username', 'onboarding_responses', ['username'])
    op.create_index('ix_onboarding_responses_user_id_created_at', 'onboarding_responses', ['user_id', 'created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_onboarding_responses_user_id_created_at', table_name='onboarding_responses')
    op.drop_index('ix_onboarding_responses_username', table_name='onboarding_responses')
    op.drop_index('ix_onboarding_responses_user_id', table_name='onboarding_responses')
    op.drop_table('onboarding_responses')
