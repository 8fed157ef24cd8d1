"""Enable row-level security on tenant tables

Policies are generated from the ownership declarations on the models, so the
database enforces the same isolation as the ORM session for raw SQL.

Revision ID: 003
Revises: 002
Create Date: 2026-10-05 10:00:00.000000

"""
from alembic import op

from recruitiq import models  # noqa: F401  (registers every tenant-scoped model)
from recruitiq.tenancy.rls import disable_row_level_security_ddl, enable_row_level_security_ddl

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


def upgrade():
    for statement in enable_row_level_security_ddl():
        op.execute(statement)


def downgrade():
    for statement in disable_row_level_security_ddl():
        op.execute(statement)
