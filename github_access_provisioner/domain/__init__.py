"""Provide the access grant resolution engine."""

from github_access_provisioner.domain.aggregator import aggregate_entries
from github_access_provisioner.domain.catalog import RoleCatalog, load_role_catalog
from github_access_provisioner.domain.entities import (
    CustomPermission,
    Entry,
    GrantMode,
    Outcome,
    OutcomeResult,
    PermissionSource,
    ResolutionUnit,
    ResolvedGrant,
    RunSummary,
    StandardPermission,
    Team,
)
from github_access_provisioner.domain.resolver import classify_role, resolve_unit
from github_access_provisioner.domain.use_case import Reconciler, TeamProvisioner

__all__ = [
    "CustomPermission",
    "Entry",
    "GrantMode",
    "Outcome",
    "OutcomeResult",
    "PermissionSource",
    "Reconciler",
    "ResolutionUnit",
    "ResolvedGrant",
    "RoleCatalog",
    "RunSummary",
    "StandardPermission",
    "Team",
    "TeamProvisioner",
    "aggregate_entries",
    "classify_role",
    "load_role_catalog",
    "resolve_unit",
]
