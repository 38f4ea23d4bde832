"""create_assessment_workflow_tables

Revision ID: 3c1e9b2a7d40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3c1e9b2a7d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AutoString = sqlmodel.sql.sqltypes.AutoString


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('subdomain', AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_clients_name'), 'clients', ['name'], unique=True)
    op.create_index(op.f('ix_clients_subdomain'), 'clients', ['subdomain'], unique=False)

    op.create_table(
        'api_keys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key_hash', AutoString(), nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key_hash'),
    )
    op.create_index(op.f('ix_api_keys_key_hash'), 'api_keys', ['key_hash'], unique=False)
    op.create_index(op.f('ix_api_keys_client_id'), 'api_keys', ['client_id'], unique=False)

    op.create_table(
        'plans',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assessment_definitions', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'cohorts',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('plan_id', AutoString(), nullable=True),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cohorts_client_id'), 'cohorts', ['client_id'], unique=False)
    op.create_index(op.f('ix_cohorts_plan_id'), 'cohorts', ['plan_id'], unique=False)

    op.create_table(
        'assessment_types',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('description', AutoString(), nullable=True),
        sa.Column('is_step_grouped', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_assessment_types_name'), 'assessment_types', ['name'], unique=False)

    op.create_table(
        'cohort_assessments',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('cohort_id', AutoString(), nullable=False),
        sa.Column('assessment_type_id', AutoString(), nullable=False),
        sa.Column('name', AutoString(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['cohort_id'], ['cohorts.id']),
        sa.ForeignKeyConstraint(['assessment_type_id'], ['assessment_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cohort_assessments_cohort_id'), 'cohort_assessments', ['cohort_id'], unique=False)
    op.create_index(
        op.f('ix_cohort_assessments_assessment_type_id'), 'cohort_assessments', ['assessment_type_id'], unique=False
    )

    op.create_table(
        'assessment_definitions',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('assessment_type_id', AutoString(), nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('description', AutoString(), nullable=True),
        sa.Column('is_system', sa.Boolean(), nullable=False),
        sa.Column('nomination_quota', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['assessment_type_id'], ['assessment_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_assessment_definitions_assessment_type_id'), 'assessment_definitions', ['assessment_type_id'],
        unique=False,
    )
    op.create_index(op.f('ix_assessment_definitions_is_system'), 'assessment_definitions', ['is_system'], unique=False)

    op.create_table(
        'assessment_steps',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('assessment_definition_id', AutoString(), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False),
        sa.Column('title', AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['assessment_definition_id'], ['assessment_definitions.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_assessment_steps_assessment_definition_id'), 'assessment_steps', ['assessment_definition_id'],
        unique=False,
    )
    op.create_index(op.f('ix_assessment_steps_step_order'), 'assessment_steps', ['step_order'], unique=False)

    op.create_table(
        'assessment_questions',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('assessment_definition_id', AutoString(), nullable=False),
        sa.Column('step_id', AutoString(), nullable=True),
        sa.Column('question_text', sa.Text(), nullable=True),
        sa.Column('question_type', AutoString(), nullable=False),
        sa.Column('question_order', sa.Integer(), nullable=False),
        sa.Column('required', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['assessment_definition_id'], ['assessment_definitions.id']),
        sa.ForeignKeyConstraint(['step_id'], ['assessment_steps.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_assessment_questions_assessment_definition_id'), 'assessment_questions',
        ['assessment_definition_id'], unique=False,
    )
    op.create_index(op.f('ix_assessment_questions_step_id'), 'assessment_questions', ['step_id'], unique=False)
    op.create_index(
        op.f('ix_assessment_questions_question_order'), 'assessment_questions', ['question_order'], unique=False
    )

    op.create_table(
        'participant_assessments',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('participant_id', AutoString(), nullable=False),
        sa.Column('cohort_assessment_id', AutoString(), nullable=False),
        sa.Column('status', AutoString(), nullable=False),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('allow_reviewer_nominations', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['cohort_assessment_id'], ['cohort_assessments.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'cohort_assessment_id', name='uq_participant_assessments_participant_ca'),
    )
    op.create_index(
        op.f('ix_participant_assessments_participant_id'), 'participant_assessments', ['participant_id'],
        unique=False,
    )
    op.create_index(
        op.f('ix_participant_assessments_cohort_assessment_id'), 'participant_assessments',
        ['cohort_assessment_id'], unique=False,
    )
    op.create_index(op.f('ix_participant_assessments_status'), 'participant_assessments', ['status'], unique=False)

    op.create_table(
        'external_reviewers',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('email', AutoString(), nullable=False),
        sa.Column('name', AutoString(), nullable=True),
        sa.Column('invited_by', AutoString(), nullable=True),
        sa.Column('review_status', AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', 'email', name='uq_external_reviewers_client_email'),
    )
    op.create_index(op.f('ix_external_reviewers_client_id'), 'external_reviewers', ['client_id'], unique=False)
    op.create_index(op.f('ix_external_reviewers_email'), 'external_reviewers', ['email'], unique=False)

    op.create_table(
        'reviewer_nominations',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('participant_assessment_id', AutoString(), nullable=False),
        sa.Column('reviewer_id', AutoString(), nullable=True),
        sa.Column('external_reviewer_id', AutoString(), nullable=True),
        sa.Column('is_external', sa.Boolean(), nullable=False),
        sa.Column('nominated_by_id', AutoString(), nullable=False),
        sa.Column('request_status', AutoString(), nullable=False),
        sa.Column('review_status', AutoString(), nullable=True),
        sa.Column('review_submitted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['participant_assessment_id'], ['participant_assessments.id']),
        sa.ForeignKeyConstraint(['external_reviewer_id'], ['external_reviewers.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_reviewer_nominations_participant_assessment_id'), 'reviewer_nominations',
        ['participant_assessment_id'], unique=False,
    )
    op.create_index(op.f('ix_reviewer_nominations_reviewer_id'), 'reviewer_nominations', ['reviewer_id'], unique=False)
    op.create_index(
        op.f('ix_reviewer_nominations_external_reviewer_id'), 'reviewer_nominations', ['external_reviewer_id'],
        unique=False,
    )
    op.create_index(
        op.f('ix_reviewer_nominations_nominated_by_id'), 'reviewer_nominations', ['nominated_by_id'], unique=False
    )
    op.create_index(
        op.f('ix_reviewer_nominations_request_status'), 'reviewer_nominations', ['request_status'], unique=False
    )

    op.create_table(
        'response_sessions',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('owner_key', AutoString(), nullable=False),
        sa.Column('participant_assessment_id', AutoString(), nullable=False),
        sa.Column('assessment_definition_id', AutoString(), nullable=False),
        sa.Column('respondent_type', AutoString(), nullable=False),
        sa.Column('reviewer_nomination_id', AutoString(), nullable=True),
        sa.Column('respondent_client_user_id', AutoString(), nullable=True),
        sa.Column('respondent_external_reviewer_id', AutoString(), nullable=True),
        sa.Column('status', AutoString(), nullable=False),
        sa.Column('completion_percent', sa.Integer(), nullable=False),
        sa.Column('last_question_id', AutoString(), nullable=True),
        sa.Column('last_step_id', AutoString(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['participant_assessment_id'], ['participant_assessments.id']),
        sa.ForeignKeyConstraint(['assessment_definition_id'], ['assessment_definitions.id']),
        sa.ForeignKeyConstraint(['reviewer_nomination_id'], ['reviewer_nominations.id']),
        sa.ForeignKeyConstraint(['respondent_external_reviewer_id'], ['external_reviewers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_key'),
    )
    op.create_index(op.f('ix_response_sessions_owner_key'), 'response_sessions', ['owner_key'], unique=False)
    op.create_index(
        op.f('ix_response_sessions_participant_assessment_id'), 'response_sessions', ['participant_assessment_id'],
        unique=False,
    )
    op.create_index(
        op.f('ix_response_sessions_assessment_definition_id'), 'response_sessions', ['assessment_definition_id'],
        unique=False,
    )
    op.create_index(op.f('ix_response_sessions_respondent_type'), 'response_sessions', ['respondent_type'], unique=False)
    op.create_index(
        op.f('ix_response_sessions_reviewer_nomination_id'), 'response_sessions', ['reviewer_nomination_id'],
        unique=False,
    )

    op.create_table(
        'assessment_responses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', AutoString(), nullable=False),
        sa.Column('question_id', AutoString(), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('is_answered', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['response_sessions.id']),
        sa.ForeignKeyConstraint(['question_id'], ['assessment_questions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'question_id', name='uq_assessment_responses_session_question'),
    )
    op.create_index(op.f('ix_assessment_responses_session_id'), 'assessment_responses', ['session_id'], unique=False)
    op.create_index(op.f('ix_assessment_responses_question_id'), 'assessment_responses', ['question_id'], unique=False)
    op.create_index(op.f('ix_assessment_responses_is_answered'), 'assessment_responses', ['is_answered'], unique=False)

    op.create_table(
        'assessment_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('participant_assessment_id', AutoString(), nullable=False),
        sa.Column('report_type', AutoString(), nullable=False),
        sa.Column('storage_path', AutoString(), nullable=False),
        sa.Column('source_updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['participant_assessment_id'], ['participant_assessments.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_assessment_id', 'report_type', name='uq_assessment_reports_pa_type'),
    )
    op.create_index(
        op.f('ix_assessment_reports_participant_assessment_id'), 'assessment_reports', ['participant_assessment_id'],
        unique=False,
    )

    op.create_table(
        'background_tasks',
        sa.Column('id', AutoString(), nullable=False),
        sa.Column('task_type', AutoString(), nullable=False),
        sa.Column('status', AutoString(), nullable=False),
        sa.Column('triggered_by', AutoString(), nullable=True),
        sa.Column('related_entity_type', AutoString(), nullable=False),
        sa.Column('related_entity_id', AutoString(), nullable=False),
        sa.Column('result', AutoString(), nullable=True),
        sa.Column('error_message', AutoString(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_background_tasks_task_type'), 'background_tasks', ['task_type'], unique=False)
    op.create_index(op.f('ix_background_tasks_status'), 'background_tasks', ['status'], unique=False)
    op.create_index(
        op.f('ix_background_tasks_related_entity_id'), 'background_tasks', ['related_entity_id'], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('background_tasks')
    op.drop_table('assessment_reports')
    op.drop_table('assessment_responses')
    op.drop_table('response_sessions')
    op.drop_table('reviewer_nominations')
    op.drop_table('external_reviewers')
    op.drop_table('participant_assessments')
    op.drop_table('assessment_questions')
    op.drop_table('assessment_steps')
    op.drop_table('assessment_definitions')
    op.drop_table('cohort_assessments')
    op.drop_table('assessment_types')
    op.drop_table('cohorts')
    op.drop_table('plans')
    op.drop_table('api_keys')
    op.drop_table('clients')
