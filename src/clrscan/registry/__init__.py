"""Registry reconciliation — curated list + local registry -> project list."""

from clrscan.registry.lookup import get_project
from clrscan.registry.reconciler import get_projects
from clrscan.registry.schema import get_tcr_columns

__all__ = ["get_project", "get_projects", "get_tcr_columns"]
