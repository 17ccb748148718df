"""Define the AccessProvisioner class orchestrating a provisioning run.

It validates the prerequisites, reads the entries, resolves one grant per target and
reconciles it with GitHub, then reports the run summary.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from github_access_provisioner.domain.aggregator import aggregate_entries
from github_access_provisioner.domain.catalog import load_role_catalog
from github_access_provisioner.domain.entities import (
    Entry,
    GrantMode,
    Outcome,
    ResolvedGrant,
    RunSummary,
)
from github_access_provisioner.domain.resolver import resolve_unit
from github_access_provisioner.domain.use_case import Reconciler, TeamProvisioner
from github_access_provisioner.ports.errors import (
    DataRetrievalError,
    PrerequisiteError,
)

if TYPE_CHECKING:
    from github_access_provisioner.domain.catalog import RoleCatalog
    from github_access_provisioner.ports.directory import DirectoryPort
    from github_access_provisioner.ports.entries import EntriesReaderPort
    from github_access_provisioner.utils import AppLogger


class AccessProvisioner:
    """Run the provisioning stages against one organization."""

    def __init__(
        self,
        directory: "DirectoryPort",
        entries_reader: "EntriesReaderPort",
        logger: "AppLogger",
        organization: str,
        mode: GrantMode = GrantMode.TEAM,
        dry_run: bool = False,
        num_threads: int = 1,
        team_privacy: Literal["closed", "secret"] = "closed",
        team_membership_role: Literal["member", "maintainer"] = "member",
    ):
        """Initialize the provisioner."""
        self.directory = directory
        self.entries_reader = entries_reader
        self.logger = logger
        self.organization = organization
        self.mode = mode
        self.dry_run = dry_run
        self.num_threads = num_threads
        self.team_privacy = team_privacy
        self.team_membership_role = team_membership_role

    def _tag(self, message: str) -> str:
        return f"[DRY-RUN] {message}" if self.dry_run else message

    def check_prerequisites(self) -> None:
        """Validate the credentials and the organization before any processing.

        Raises:
            PrerequisiteError: if one of them is invalid.

        """
        login = self.directory.authenticated_login()
        try:
            organization_found = self.directory.organization_exists(self.organization)
        except DataRetrievalError as err:
            raise PrerequisiteError(str(err)) from err
        if not organization_found:
            raise PrerequisiteError(f"Organization not found: {self.organization}")
        self.logger.info(
            "[PROVISIONER] Prerequisites validated.",
            {"login": login, "organization": self.organization},
        )

    def read_entries(self, path: Path) -> list[Entry]:
        """Read the entries, raising InputError before anything is applied."""
        entries = self.entries_reader.read_entries(path)
        self.logger.info(
            "[PROVISIONER] Entries read.", {"path": str(path), "entries": len(entries)}
        )
        return entries

    def resolve(
        self, entries: list[Entry], catalog: "RoleCatalog"
    ) -> list[ResolvedGrant]:
        """Aggregate the entries and resolve one grant per unit."""
        units = aggregate_entries(entries, self.mode)
        self.logger.info(
            "[PROVISIONER] Entries aggregated.",
            {"mode": self.mode.value, "entries": len(entries), "units": len(units)},
        )

        grants = []
        for unit in units.values():
            grant = resolve_unit(unit, catalog)
            for diagnostic in grant.diagnostics:
                attributes = getattr(diagnostic, "attributes", {})
                self.logger.warning(
                    f"[RESOLVER] {diagnostic}",
                    {
                        **unit.describe(),
                        "warning": type(diagnostic).__name__,
                        **attributes,
                    },
                )
            self.logger.debug(
                "[RESOLVER] Unit resolved.",
                {
                    **unit.describe(),
                    "roles": list(unit.roles),
                    "permission": grant.permission.value,
                    "source": grant.source.value,
                },
            )
            grants.append(grant)
        return grants

    def _summarize(self, stage: str, outcomes: list[Outcome]) -> RunSummary:
        summary = RunSummary.from_outcomes(outcomes, dry_run=self.dry_run)
        message = f"[PROVISIONER] {stage} finished."
        if self.dry_run:
            message = f"{message} Dry run, no change was applied to GitHub."
        log = self.logger.info if summary.success else self.logger.error
        log(self._tag(message), summary.model_dump())
        return summary

    def provision_grants(self, path: Path) -> RunSummary:
        """Resolve and apply the repository grants described by the entries file."""
        entries = self.read_entries(path)
        catalog = load_role_catalog(self.directory, self.organization, self.logger)
        grants = self.resolve(entries, catalog)
        reconciler = Reconciler(
            directory=self.directory,
            organization=self.organization,
            logger=self.logger,
            dry_run=self.dry_run,
            num_threads=self.num_threads,
        )
        outcomes = reconciler.reconcile_all(grants)
        return self._summarize("Grant provisioning", outcomes)

    def provision_teams(self, path: Path) -> RunSummary:
        """Create the teams and team memberships described by the entries file."""
        entries = self.read_entries(path)
        provisioner = TeamProvisioner(
            directory=self.directory,
            organization=self.organization,
            logger=self.logger,
            dry_run=self.dry_run,
            privacy=self.team_privacy,
            membership_role=self.team_membership_role,
        )
        outcomes = provisioner.provision(entries)
        return self._summarize("Team provisioning", outcomes)
