"""Tenant ownership metadata declared on the models.

A model is directly scoped when it maps an ``organization_id`` column, and
indirectly scoped when it names its owning relationship in
``__tenant_owner__``. Both the Python policy evaluator and the PostgreSQL
policy generator read the same declarations.
"""

from typing import List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import RelationshipProperty

from ..models.base import Base
from .errors import UnsupportedTenantOperation

TENANT_COLUMN = "organization_id"
TENANT_ROOT_TABLE = "organizations"

# Ownership chains deeper than this indicate a modelling error
MAX_OWNERSHIP_DEPTH = 8


def is_directly_scoped(model) -> bool:
    mapper = sa_inspect(model, raiseerr=False)
    return mapper is not None and TENANT_COLUMN in mapper.columns


def is_tenant_root(model) -> bool:
    """True for the organization model itself: the row each tenant owns."""
    mapper = sa_inspect(model, raiseerr=False)
    return mapper is not None and mapper.local_table.name == TENANT_ROOT_TABLE


def owner_relationship(model) -> Optional[RelationshipProperty]:
    """Return the relationship named by ``__tenant_owner__``, if declared."""
    name = getattr(model, "__tenant_owner__", None)
    if name is None:
        return None
    return sa_inspect(model).relationships[name]


def is_tenant_scoped(model) -> bool:
    return is_directly_scoped(model) or owner_relationship(model) is not None


def ownership_chain(model) -> List[RelationshipProperty]:
    """List the relationships walked from ``model`` to a directly scoped ancestor.

    Empty for directly scoped models.

    Raises:
        UnsupportedTenantOperation: If the model has no tenant linkage or the
            chain does not terminate
    """
    chain: List[RelationshipProperty] = []
    current = model
    while not is_directly_scoped(current):
        rel = owner_relationship(current)
        if rel is None:
            raise UnsupportedTenantOperation(f"{current.__name__} has no tenant linkage")
        chain.append(rel)
        if len(chain) > MAX_OWNERSHIP_DEPTH:
            raise UnsupportedTenantOperation(f"Ownership chain of {model.__name__} does not terminate")
        current = rel.mapper.class_
    return chain


def tenant_scoped_models() -> List[type]:
    """All mapped classes that carry tenant linkage, sorted by table name."""
    models = [mapper.class_ for mapper in Base.registry.mappers if is_tenant_scoped(mapper.class_)]
    return sorted(models, key=lambda model: model.__table__.name)
