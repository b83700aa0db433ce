"""Create profiles and submissions tables

Revision ID: a1c4e2f7b9d0
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f7b9d0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Profiles keyed by the provider identity; submissions with multi-file and legacy columns."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=True),
        sa.Column('papers_passed', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('paper', sa.String(), nullable=False),
        sa.Column('question', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('files', sa.JSON(), nullable=True),
        sa.Column('marked_files', sa.JSON(), nullable=True),
        sa.Column('file_path', sa.String(), nullable=True),
        sa.Column('file_name', sa.String(), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('marked_file_path', sa.String(), nullable=True),
        sa.Column('marked_file_name', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('marker_notes', sa.Text(), nullable=True),
        sa.Column('marker_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'under_review', 'reviewed')", name='ck_submissions_status'),
        sa.CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name='ck_submissions_score'),
    )
    for column in ('id', 'user_id', 'paper', 'status', 'marker_id'):
        op.create_index(f'ix_submissions_{column}', 'submissions', [column])


def downgrade() -> None:
    """Drop both tables."""
    for column in ('marker_id', 'status', 'paper', 'user_id', 'id'):
        op.drop_index(f'ix_submissions_{column}', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_id', table_name='profiles')
    op.drop_table('profiles')
