"""Workshop tables - v1.0

Revision ID: 001_workshop_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from snowflake.sqlalchemy import VARIANT

# revision identifiers, used by Alembic.
revision: str = '001_workshop_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the 4 workshop tables."""

    # ===== 1. WORKSHOPS =====
    op.create_table(
        'workshops',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('industry', sa.String(255), nullable=True),
        sa.Column('facilitator_name', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('research_app_report_id', sa.String(255), nullable=True),
        sa.Column('cognition_two_analysis_id', sa.String(255), nullable=True),
        sa.Column('research_app_data', VARIANT(), nullable=True),
        sa.Column('cognition_two_data', VARIANT(), nullable=True),
        sa.Column('survey', VARIANT(), nullable=True),
        sa.Column('readiness_scores', VARIANT(), nullable=True),
        sa.Column('challenge_results', VARIANT(), nullable=True),
        sa.Column('validation_results', VARIANT(), nullable=True),
        sa.Column('prioritization_matrix', VARIANT(), nullable=True),
        sa.Column('workflow_maps', VARIANT(), nullable=True),
        sa.Column('data_lineage', VARIANT(), nullable=True),
        sa.Column('synthesis', VARIANT(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # ===== 2. USE_CASES =====
    op.create_table(
        'use_cases',
        sa.Column('workshop_id', sa.String(36), primary_key=True),
        sa.Column('id', sa.String(20), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('data', VARIANT(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['workshop_id'], ['workshops.id']),
    )

    # ===== 3. CHALLENGE_LOGS =====
    op.create_table(
        'challenge_logs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('workshop_id', sa.String(36), nullable=False),
        sa.Column('use_case_id', sa.String(20), nullable=False),
        sa.Column('batch_id', sa.String(36), nullable=False),
        sa.Column('challenge_type', sa.String(20), nullable=False),
        sa.Column('field_name', sa.String(100), nullable=True),
        sa.Column('severity', sa.String(10), nullable=False),
        sa.Column('original_value', VARIANT(), nullable=True),
        sa.Column('challenged_value', VARIANT(), nullable=True),
        sa.Column('evidence', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('responded_by', sa.String(255), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['workshop_id'], ['workshops.id']),
    )

    # ===== 4. SURVEY_RESPONSES =====
    op.create_table(
        'survey_responses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('workshop_id', sa.String(36), nullable=False),
        sa.Column('respondent', sa.String(255), nullable=True),
        sa.Column('answers', VARIANT(), nullable=False),
        sa.Column('readiness_scores', VARIANT(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['workshop_id'], ['workshops.id']),
    )

    # ===== INDEXES =====
    op.create_index('idx_workshops_status', 'workshops', ['status'])
    op.create_index('idx_challenge_logs_workshop', 'challenge_logs', ['workshop_id', 'batch_id'])
    op.create_index('idx_survey_responses_workshop', 'survey_responses', ['workshop_id'])


def downgrade() -> None:
    """Drop all workshop tables."""
    op.drop_index('idx_survey_responses_workshop', table_name='survey_responses')
    op.drop_index('idx_challenge_logs_workshop', table_name='challenge_logs')
    op.drop_index('idx_workshops_status', table_name='workshops')
    op.drop_table('survey_responses')
    op.drop_table('challenge_logs')
    op.drop_table('use_cases')
    op.drop_table('workshops')
