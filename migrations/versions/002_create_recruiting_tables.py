"""Create recruiting tables

Directly scoped tables (organization_id column):
    workspaces, flow_templates, jobs, candidates, applications
Indirectly scoped tables (tenant resolved through the owning record):
    interviews -> applications
    interview_interviewers -> interviews -> applications
    communications -> applications

Revision ID: 002
Revises: 001
Create Date: 2026-10-05 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None

TABLES = (
    'workspaces',
    'flow_templates',
    'jobs',
    'candidates',
    'applications',
    'interviews',
    'interview_interviewers',
    'communications',
)


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _organization_id():
    return sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]


def _organization_fk(table):
    return sa.ForeignKeyConstraint(
        ['organization_id'], ['organizations.id'], name=f'fk_{table}_organization', ondelete='CASCADE'
    )


def upgrade():
    op.create_table(
        'workspaces',
        _id(),
        _organization_id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        _organization_fk('workspaces'),
        sa.UniqueConstraint('organization_id', 'slug', name='uq_workspaces_organization_slug'),
    )
    op.create_index('ix_workspaces_organization_id', 'workspaces', ['organization_id'])

    op.create_table(
        'flow_templates',
        _id(),
        _organization_id(),
        sa.Column('workspace_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.Text(), nullable=True),
        sa.Column('stages', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('is_default', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        _organization_fk('flow_templates'),
        sa.ForeignKeyConstraint(['workspace_id'], ['workspaces.id'], name='fk_flow_templates_workspace', ondelete='CASCADE'),
    )
    op.create_index('ix_flow_templates_organization_id', 'flow_templates', ['organization_id'])
    op.create_index('ix_flow_templates_workspace_id', 'flow_templates', ['workspace_id'])

    op.create_table(
        'jobs',
        _id(),
        _organization_id(),
        sa.Column('workspace_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('flow_template_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('department', sa.Text(), nullable=True),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('employment_type', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), server_default='draft', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        _organization_fk('jobs'),
        sa.ForeignKeyConstraint(['workspace_id'], ['workspaces.id'], name='fk_jobs_workspace', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['flow_template_id'], ['flow_templates.id'], name='fk_jobs_flow_template', ondelete='SET NULL'),
        sa.CheckConstraint(
            "status IN ('draft', 'open', 'paused', 'closed', 'archived')",
            name='ck_jobs_status',
        ),
    )
    op.create_index('ix_jobs_organization_id', 'jobs', ['organization_id'])
    op.create_index('ix_jobs_organization_status', 'jobs', ['organization_id', 'status'])
    op.create_index('ix_jobs_flow_template_id', 'jobs', ['flow_template_id'])

    op.create_table(
        'candidates',
        _id(),
        _organization_id(),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('source', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        _organization_fk('candidates'),
        sa.UniqueConstraint('organization_id', 'email', name='uq_candidates_organization_email'),
    )
    op.create_index('ix_candidates_organization_id', 'candidates', ['organization_id'])

    op.create_table(
        'applications',
        _id(),
        _organization_id(),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('candidate_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.Text(), server_default='active', nullable=False),
        sa.Column('stage', sa.Text(), nullable=True),
        sa.Column('applied_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        _organization_fk('applications'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], name='fk_applications_job', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['candidate_id'], ['candidates.id'], name='fk_applications_candidate', ondelete='CASCADE'),
        sa.UniqueConstraint('job_id', 'candidate_id', name='uq_applications_job_candidate'),
    )
    op.create_index('ix_applications_organization_id', 'applications', ['organization_id'])

    op.create_table(
        'interviews',
        _id(),
        sa.Column('application_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('interview_type', sa.Text(), server_default='video', nullable=False),
        sa.Column('status', sa.Text(), server_default='scheduled', nullable=False),
        sa.Column('scheduled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), server_default='60', nullable=False),
        sa.Column('location', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], name='fk_interviews_application', ondelete='CASCADE'),
    )
    op.create_index('ix_interviews_application_id', 'interviews', ['application_id'])

    op.create_table(
        'interview_interviewers',
        _id(),
        sa.Column('interview_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('interviewer_email', sa.Text(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('feedback_submitted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], name='fk_interview_interviewers_interview', ondelete='CASCADE'),
        sa.UniqueConstraint('interview_id', 'interviewer_email', name='uq_interview_interviewers_interview_email'),
        sa.CheckConstraint('rating IS NULL OR rating BETWEEN 1 AND 5', name='ck_interview_interviewers_rating'),
    )
    op.create_index('ix_interview_interviewers_interview_id', 'interview_interviewers', ['interview_id'])

    op.create_table(
        'communications',
        _id(),
        sa.Column('application_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('direction', sa.Text(), server_default='outbound', nullable=False),
        sa.Column('channel', sa.Text(), server_default='email', nullable=False),
        sa.Column('subject', sa.Text(), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], name='fk_communications_application', ondelete='CASCADE'),
        sa.CheckConstraint("direction IN ('inbound', 'outbound')", name='ck_communications_direction'),
    )
    op.create_index('ix_communications_application_id', 'communications', ['application_id'])

    for table in TABLES:
        op.execute(f"""
            CREATE TRIGGER update_{table}_updated_at
            BEFORE UPDATE ON {table}
            FOR EACH ROW
            EXECUTE FUNCTION update_updated_at_column();
        """)


def downgrade():
    for table in reversed(TABLES):
        op.execute(f'DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}')
        op.drop_table(table)
