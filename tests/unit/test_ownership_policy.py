"""Unit tests for ownership declarations and generated policies

Tests cover:
- Direct and indirect tenant scoping of every model
- Ownership chains for children and grandchildren
- ORM isolation predicates
- PostgreSQL row-level security DDL
"""

from uuid import uuid4

import pytest
from sqlalchemy import insert, select, update
from sqlalchemy.dialects import postgresql

from recruitiq.models import (
    Application,
    Candidate,
    Communication,
    FlowTemplate,
    Interview,
    InterviewInterviewer,
    Job,
    Organization,
    Workspace,
)
from recruitiq.tenancy.errors import UnsupportedTenantOperation
from recruitiq.tenancy.ownership import (
    is_directly_scoped,
    is_tenant_root,
    is_tenant_scoped,
    ownership_chain,
    tenant_scoped_models,
)
from recruitiq.tenancy.policy import row_predicate, tenant_tables_in
from recruitiq.tenancy.rls import (
    apply_tenant_setting,
    current_organization_function_ddl,
    disable_row_level_security_ddl,
    enable_row_level_security_ddl,
    policy_ddl,
    tenant_predicate_sql,
)


class TestOwnership:
    """Test ownership metadata"""

    @pytest.mark.parametrize("model", [Workspace, FlowTemplate, Job, Candidate, Application])
    def test_directly_scoped_models(self, model):
        assert is_directly_scoped(model)
        assert ownership_chain(model) == []

    @pytest.mark.parametrize("model", [Interview, InterviewInterviewer, Communication])
    def test_indirectly_scoped_models(self, model):
        assert not is_directly_scoped(model)
        assert is_tenant_scoped(model)

    def test_organizations_are_global(self):
        assert not is_tenant_scoped(Organization)
        assert is_tenant_root(Organization)
        assert not is_tenant_root(Workspace)
        with pytest.raises(UnsupportedTenantOperation):
            ownership_chain(Organization)

    def test_child_chain(self):
        assert [rel.key for rel in ownership_chain(Interview)] == ["application"]
        assert [rel.key for rel in ownership_chain(Communication)] == ["application"]

    def test_grandchild_chain(self):
        assert [rel.key for rel in ownership_chain(InterviewInterviewer)] == ["interview", "application"]

    def test_tenant_scoped_models_sorted_by_table(self):
        tables = [model.__table__.name for model in tenant_scoped_models()]
        assert tables == [
            "applications",
            "candidates",
            "communications",
            "flow_templates",
            "interview_interviewers",
            "interviews",
            "jobs",
            "workspaces",
        ]


class TestRowPredicate:
    """Test ORM isolation predicates"""

    def test_missing_tenant_matches_nothing(self):
        compiled = str(row_predicate(Job, None).compile(dialect=postgresql.dialect()))
        assert compiled == "false"

    def test_direct_predicate_compares_tenant_column(self):
        compiled = str(row_predicate(Job, uuid4()).compile(dialect=postgresql.dialect()))
        assert "jobs.organization_id = " in compiled

    def test_indirect_predicate_walks_owner(self):
        compiled = str(row_predicate(InterviewInterviewer, uuid4()).compile(dialect=postgresql.dialect()))
        assert "EXISTS" in compiled
        assert "interviews" in compiled
        assert "applications.organization_id" in compiled

    def test_unscoped_model_is_refused(self):
        with pytest.raises(UnsupportedTenantOperation):
            row_predicate(Organization, uuid4())


class TestStatementTables:
    """Test detection of tenant tables in table-level statements"""

    def test_table_select(self):
        assert tenant_tables_in(select(Job.__table__)) == ["jobs"]

    def test_column_select(self):
        assert tenant_tables_in(select(Candidate.__table__.c.email)) == ["candidates"]

    def test_join_lists_every_table(self):
        joined = Interview.__table__.join(
            Application.__table__, Interview.__table__.c.application_id == Application.__table__.c.id
        )
        stmt = select(Interview.__table__.c.id).select_from(joined)
        assert tenant_tables_in(stmt) == ["applications", "interviews"]

    def test_subquery_columns_are_followed(self):
        subquery = select(FlowTemplate.__table__.c.id).subquery()
        assert tenant_tables_in(select(subquery.c.id)) == ["flow_templates"]

    def test_alias_is_followed(self):
        alias = Workspace.__table__.alias("w")
        assert tenant_tables_in(select(alias.c.slug)) == ["workspaces"]

    def test_dml_targets(self):
        assert tenant_tables_in(update(Job.__table__).values(title="x")) == ["jobs"]
        assert tenant_tables_in(insert(Candidate.__table__)) == ["candidates"]

    def test_organizations_only_counted_on_request(self):
        stmt = update(Organization.__table__).values(tier="free")
        assert tenant_tables_in(stmt) == []
        assert tenant_tables_in(stmt, include_root=True) == ["organizations"]


class TestRowLevelSecurityDDL:
    """Test generated PostgreSQL policies"""

    def test_direct_table_predicate(self):
        assert tenant_predicate_sql(Job) == "organization_id = get_current_organization_id()"

    def test_child_table_predicate(self):
        assert tenant_predicate_sql(Interview) == (
            "EXISTS (SELECT 1 FROM applications t1 "
            "WHERE t1.id = interviews.application_id "
            "AND t1.organization_id = get_current_organization_id())"
        )

    def test_grandchild_table_predicate(self):
        assert tenant_predicate_sql(InterviewInterviewer) == (
            "EXISTS (SELECT 1 FROM interviews t1 "
            "JOIN applications t2 ON t2.id = t1.application_id "
            "WHERE t1.id = interview_interviewers.interview_id "
            "AND t2.organization_id = get_current_organization_id())"
        )

    def test_policy_ddl_enables_rls_with_insert_check(self):
        statements = policy_ddl(Candidate)
        assert statements[0] == "ALTER TABLE candidates ENABLE ROW LEVEL SECURITY"
        assert statements[1] == "ALTER TABLE candidates FORCE ROW LEVEL SECURITY"
        assert statements[2].startswith("CREATE POLICY candidates_tenant_isolation ON candidates USING (")
        assert "FOR INSERT WITH CHECK" in statements[3]

    def test_function_reads_transaction_setting(self):
        ddl = current_organization_function_ddl()
        assert "current_setting('app.current_organization_id', true)" in ddl
        assert "RAISE EXCEPTION" in ddl

    def test_function_wraps_every_failure(self):
        ddl = current_organization_function_ddl()
        assert "WHEN OTHERS THEN" in ddl
        assert "'Invalid organization context: %', SQLERRM" in ddl
        assert "SECURITY DEFINER SET search_path = pg_catalog, pg_temp" in ddl

    def test_invalid_setting_name_rejected(self):
        with pytest.raises(ValueError):
            current_organization_function_ddl("app.x'; DROP TABLE jobs; --")

    def test_upgrade_covers_every_tenant_table(self):
        statements = enable_row_level_security_ddl()
        for model in tenant_scoped_models():
            table = model.__table__.name
            assert f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY" in statements
            assert f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY" in statements

    def test_downgrade_drops_function_last(self):
        statements = disable_row_level_security_ddl()
        assert "ALTER TABLE jobs NO FORCE ROW LEVEL SECURITY" in statements
        assert statements[-1] == "DROP FUNCTION IF EXISTS get_current_organization_id()"

    def test_tenant_setting_applies_without_error(self, db_session):
        apply_tenant_setting(db_session.connection(), uuid4())
        apply_tenant_setting(db_session.connection(), None)
