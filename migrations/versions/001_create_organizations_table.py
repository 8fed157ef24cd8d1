"""Create organizations table

Revision ID: 001
Revises:
Create Date: 2026-10-05 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Reusable updated_at trigger function
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = NOW();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.create_table(
        'organizations',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('tier', sa.Text(), server_default='starter', nullable=False),
        sa.Column('subscription_status', sa.Text(), server_default='active', nullable=False),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("tier IN ('starter', 'professional', 'enterprise')", name='ck_organizations_tier'),
    )

    op.create_index('idx_organizations_slug', 'organizations', ['slug'], unique=True)

    op.execute("""
        CREATE TRIGGER update_organizations_updated_at
        BEFORE UPDATE ON organizations
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade():
    op.execute('DROP TRIGGER IF EXISTS update_organizations_updated_at ON organizations')
    op.drop_index('idx_organizations_slug', table_name='organizations')
    op.drop_table('organizations')
    op.execute('DROP FUNCTION IF EXISTS update_updated_at_column()')
