"""Resolve the roles asserted for a unit into the single permission to grant."""

from typing import TYPE_CHECKING, Union

from github_access_provisioner.domain.entities import (
    LEAST_PRIVILEGE,
    CustomPermission,
    ResolutionUnit,
    ResolvedGrant,
    StandardPermission,
)
from github_access_provisioner.ports.errors import (
    ConflictingCustomRolesWarning,
    UnknownRoleWarning,
)

if TYPE_CHECKING:
    from github_access_provisioner.domain.catalog import RoleCatalog


def classify_role(
    role: str, catalog: "RoleCatalog"
) -> tuple[Union[StandardPermission, CustomPermission], list[Warning]]:
    """Classify one raw role string.

    Custom roles are looked up first, then the standard table. Unknown strings
    fall back to the least privileged standard permission with a warning.
    """
    custom = catalog.custom_role(role)
    if custom is not None:
        return custom, []
    standard = catalog.standard_role(role)
    if standard is not None:
        return standard, []
    return StandardPermission(token=LEAST_PRIVILEGE), [
        UnknownRoleWarning(
            f"Unknown role '{role}', defaulting to '{LEAST_PRIVILEGE}'.",
            role=role,
            default=LEAST_PRIVILEGE,
        )
    ]


def resolve_unit(unit: ResolutionUnit, catalog: "RoleCatalog") -> ResolvedGrant:
    """Resolve a unit into exactly one grant.

    Resolution is lexicographic, tier first:
        1. any custom role beats every standard role, the first one in input order wins;
        2. among standard roles the highest of admin > maintain > push > triage > pull wins;
        3. no role at all resolves to pull.

    Args:
        unit(ResolutionUnit): The unit to resolve.
        catalog(RoleCatalog): The run role catalog.

    Returns:
        ResolvedGrant: The permission and the diagnostics gathered while classifying.

    """
    diagnostics: list[Warning] = []
    customs: list[CustomPermission] = []
    standards: list[StandardPermission] = []

    for role in unit.roles:
        permission, warnings = classify_role(role, catalog)
        diagnostics.extend(warnings)
        if isinstance(permission, CustomPermission):
            customs.append(permission)
        else:
            standards.append(permission)

    if customs:
        chosen = customs[0]
        discarded = sorted(
            {c.name for c in customs if c.name.lower() != chosen.name.lower()}
        )
        if discarded:
            diagnostics.append(
                ConflictingCustomRolesWarning(
                    f"Several custom roles asserted, keeping '{chosen.name}'.",
                    kept=chosen.name,
                    discarded=discarded,
                )
            )
        return ResolvedGrant(
            unit=unit, permission=chosen, diagnostics=tuple(diagnostics)
        )

    present = {permission.token for permission in standards}
    for _, token in catalog.standard_order:
        if token in present:
            return ResolvedGrant(
                unit=unit,
                permission=StandardPermission(token=token),
                diagnostics=tuple(diagnostics),
            )

    return ResolvedGrant(
        unit=unit,
        permission=StandardPermission(token=LEAST_PRIVILEGE),
        diagnostics=tuple(diagnostics),
    )
