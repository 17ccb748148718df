"""Provide the role catalog: the fixed standard ladder plus the organization custom roles."""

from typing import TYPE_CHECKING, Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from github_access_provisioner.domain.entities import (
    STANDARD_ROLES,
    CustomPermission,
    StandardPermission,
    StandardToken,
)
from github_access_provisioner.ports.errors import CatalogWarning, DataRetrievalError

if TYPE_CHECKING:
    from github_access_provisioner.ports.directory import DirectoryPort
    from github_access_provisioner.utils import AppLogger


class RoleCatalog(BaseModel):
    """Snapshot of the roles a raw role string can resolve to.

    Custom role names are compared case insensitively. The snapshot is immutable for
    the duration of a run.
    """

    model_config = ConfigDict(frozen=True)

    standard_order: tuple[tuple[str, StandardToken], ...] = Field(
        default=STANDARD_ROLES
    )
    custom_roles: tuple[str, ...] = Field(default=())

    _custom_index: dict[str, str] = PrivateAttr(default_factory=dict)
    _standard_index: dict[str, StandardToken] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        """Build the lookup indexes once, the catalog being immutable."""
        self._custom_index = {name.lower(): name for name in self.custom_roles}
        for role_name, token in self.standard_order:
            self._standard_index[role_name.lower()] = token
            self._standard_index[token] = token

    @classmethod
    def from_custom_roles(cls, names: Iterable[str]) -> "RoleCatalog":
        """Build a catalog, de-duplicating custom names case insensitively (first spelling kept)."""
        seen: dict[str, str] = {}
        for name in names:
            stripped = name.strip()
            if stripped and stripped.lower() not in seen:
                seen[stripped.lower()] = stripped
        return cls(custom_roles=tuple(seen.values()))

    def custom_index(self) -> dict[str, str]:
        """Map lower-cased custom role names to their catalog spelling."""
        return self._custom_index

    def standard_index(self) -> dict[str, StandardToken]:
        """Map lower-cased role display names and tokens to standard tokens."""
        return self._standard_index

    def custom_role(self, role: str) -> Optional[CustomPermission]:
        """Return the custom permission matching the role string, if any."""
        name = self.custom_index().get(role.strip().lower())
        return CustomPermission(name=name) if name is not None else None

    def standard_role(self, role: str) -> Optional[StandardPermission]:
        """Return the standard permission matching a role display name or token, if any."""
        token = self.standard_index().get(role.strip().lower())
        return StandardPermission(token=token) if token is not None else None


def load_role_catalog(
    directory: "DirectoryPort", organization: str, logger: "AppLogger"
) -> RoleCatalog:
    """Fetch the organization custom roles once and build the run catalog.

    Failures never abort the run: they are logged and the catalog is standard only.
    """
    try:
        names = directory.fetch_custom_roles(organization)
    except DataRetrievalError as err:
        warning = CatalogWarning(
            "[CATALOG] Unable to fetch custom repository roles, only standard roles will be used.",
            organization=organization,
            error=str(err),
        )
        logger.warning(warning.message, warning.attributes)
        return RoleCatalog()

    catalog = RoleCatalog.from_custom_roles(names)
    logger.info(
        "[CATALOG] Role catalog loaded.",
        {
            "organization": organization,
            "custom_roles": list(catalog.custom_roles),
        },
    )
    return catalog
