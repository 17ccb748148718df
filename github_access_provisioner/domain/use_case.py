"""Provide the use cases reconciling resolved grants and teams against the directory."""

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable, Literal

from github_access_provisioner.domain.entities import (
    Entry,
    GrantMode,
    Outcome,
    OutcomeResult,
    PermissionSource,
    ResolutionUnit,
    ResolvedGrant,
)
from github_access_provisioner.ports.errors import DataRetrievalError, GrantError
from github_access_provisioner.utils import team_slug

if TYPE_CHECKING:
    from github_access_provisioner.ports.directory import DirectoryPort
    from github_access_provisioner.utils import AppLogger

REPOSITORY_NOT_FOUND = "repository not found"
TEAM_NOT_FOUND = (
    "team not found, create it first with the team provisioning stage "
    "(`github-access-provisioner teams`)"
)


def _tag(message: str, dry_run: bool) -> str:
    return f"[DRY-RUN] {message}" if dry_run else message


class Reconciler:
    """Apply resolved grants to the directory, one independent unit at a time.

    Each unit goes through Pending -> ValidatingTarget -> Skipped | Simulated |
    Granting -> Granted | Failed. Every state is terminal after one pass, nothing is
    retried.
    """

    def __init__(
        self,
        directory: "DirectoryPort",
        organization: str,
        logger: "AppLogger",
        dry_run: bool = False,
        num_threads: int = 1,
    ):
        """Initialize the reconciler."""
        self.directory = directory
        self.organization = organization
        self.logger = logger
        self.dry_run = dry_run
        self.num_threads = num_threads

    def _outcome(
        self,
        grant: ResolvedGrant,
        result: OutcomeResult,
        reason: str,
        simulated: bool = False,
    ) -> Outcome:
        outcome = Outcome(
            unit=grant.unit,
            result=result,
            reason=reason,
            permission=grant.permission.value,
            simulated=simulated,
        )
        meta = {
            **grant.unit.describe(),
            "permission": grant.permission.value,
            "source": grant.source.value,
            "reason": reason,
        }
        message = _tag(f"[RECONCILER] Unit {result.value}.", self.dry_run)
        if result is OutcomeResult.FAILED:
            self.logger.error(message, meta)
        elif result is OutcomeResult.SKIPPED:
            self.logger.warning(message, meta)
        else:
            self.logger.info(message, meta)
        return outcome

    def _validate_target(self, unit: ResolutionUnit) -> str | None:
        """Return the skip reason when the target does not exist, None otherwise."""
        if not self.directory.repository_exists(self.organization, unit.repository):
            return REPOSITORY_NOT_FOUND
        if unit.mode is GrantMode.TEAM:
            if self.directory.get_team(self.organization, unit.target) is None:
                return TEAM_NOT_FOUND
        return None

    def _grant(self, grant: ResolvedGrant) -> None:
        unit = grant.unit
        value = grant.permission.value
        custom_role = grant.source is PermissionSource.CUSTOM
        if unit.mode is GrantMode.TEAM:
            self.directory.grant_team_repository_access(
                self.organization, unit.target, unit.repository, value, custom_role
            )
        else:
            self.directory.grant_user_repository_access(
                self.organization, unit.repository, unit.target, value, custom_role
            )

    def reconcile(self, grant: ResolvedGrant) -> Outcome:
        """Validate the target of a grant then apply or simulate it."""
        try:
            skip_reason = self._validate_target(grant.unit)
        except DataRetrievalError as err:
            return self._outcome(grant, OutcomeResult.FAILED, str(err))

        if skip_reason is not None:
            return self._outcome(grant, OutcomeResult.SKIPPED, skip_reason)

        if self.dry_run:
            return self._outcome(
                grant, OutcomeResult.GRANTED, "simulated grant", simulated=True
            )

        try:
            self._grant(grant)
        except GrantError as err:
            return self._outcome(grant, OutcomeResult.FAILED, str(err))
        return self._outcome(grant, OutcomeResult.GRANTED, "grant applied")

    def reconcile_all(self, grants: Iterable[ResolvedGrant]) -> list[Outcome]:
        """Reconcile every grant, concurrently when more than one thread is configured.

        Outcomes are returned in the grants order.
        """
        grants = list(grants)
        if self.num_threads <= 1:
            return [self.reconcile(grant) for grant in grants]
        with ThreadPoolExecutor(self.num_threads) as executor:
            return list(executor.map(self.reconcile, grants))


class TeamProvisioner:
    """Create the teams named in the entries and add their users as members."""

    def __init__(
        self,
        directory: "DirectoryPort",
        organization: str,
        logger: "AppLogger",
        dry_run: bool = False,
        privacy: Literal["closed", "secret"] = "closed",
        membership_role: Literal["member", "maintainer"] = "member",
    ):
        """Initialize the team provisioner."""
        self.directory = directory
        self.organization = organization
        self.logger = logger
        self.dry_run = dry_run
        self.privacy = privacy
        self.membership_role = membership_role

    @staticmethod
    def group_members(entries: Iterable[Entry]) -> dict[str, tuple[str, list[str]]]:
        """Group the users of each team.

        Returns:
            dict[str, tuple[str, list[str]]]: team slug -> (first display name, distinct
                users in input order, compared case insensitively).

        """
        teams: dict[str, tuple[str, list[str]]] = {}
        for entry in entries:
            if not entry.team:
                continue
            _, members = teams.setdefault(team_slug(entry.team), (entry.team, []))
            if entry.subject and entry.subject.lower() not in {
                member.lower() for member in members
            }:
                members.append(entry.subject)
        return teams

    def _membership_outcome(
        self,
        team_name: str,
        slug: str,
        username: str,
        result: OutcomeResult,
        reason: str,
        simulated: bool = False,
    ) -> Outcome:
        unit = ResolutionUnit(
            repository="",
            mode=GrantMode.TEAM,
            team=team_name,
            team_slug=slug,
            subject=username,
        )
        meta = {
            "team": slug,
            "user": username,
            "role": self.membership_role,
            "reason": reason,
        }
        message = _tag(f"[TEAMS] Membership {result.value}.", self.dry_run)
        if result is OutcomeResult.FAILED:
            self.logger.error(message, meta)
        else:
            self.logger.info(message, meta)
        return Outcome(
            unit=unit,
            result=result,
            reason=reason,
            permission=self.membership_role,
            simulated=simulated,
        )

    def _ensure_team(self, team_name: str, slug: str) -> str | None:
        """Make sure the team exists, return an error text on failure."""
        try:
            if self.directory.get_team(self.organization, slug) is not None:
                return None
        except DataRetrievalError as err:
            return str(err)

        self.logger.info(
            _tag("[TEAMS] Creating missing team.", self.dry_run),
            {"team": team_name, "slug": slug, "privacy": self.privacy},
        )
        if self.dry_run:
            return None
        try:
            team = self.directory.create_team(self.organization, team_name, self.privacy)
        except GrantError as err:
            return str(err)
        if team.slug != slug:
            self.logger.warning(
                "[TEAMS] Created team slug differs from the computed slug.",
                {"expected": slug, "actual": team.slug},
            )
        return None

    def provision(self, entries: Iterable[Entry]) -> list[Outcome]:
        """Create missing teams and add or update the memberships of their users."""
        outcomes: list[Outcome] = []
        for slug, (team_name, members) in self.group_members(entries).items():
            error = self._ensure_team(team_name, slug)
            if error is not None:
                self.logger.error(
                    "[TEAMS] Unable to prepare team.", {"team": slug, "error": error}
                )
                outcomes.extend(
                    self._membership_outcome(
                        team_name, slug, username, OutcomeResult.FAILED, error
                    )
                    for username in members
                )
                continue

            for username in members:
                if self.dry_run:
                    outcomes.append(
                        self._membership_outcome(
                            team_name,
                            slug,
                            username,
                            OutcomeResult.GRANTED,
                            "simulated membership",
                            simulated=True,
                        )
                    )
                    continue
                try:
                    self.directory.add_team_member(
                        self.organization, slug, username, self.membership_role
                    )
                except GrantError as err:
                    outcomes.append(
                        self._membership_outcome(
                            team_name, slug, username, OutcomeResult.FAILED, str(err)
                        )
                    )
                    continue
                outcomes.append(
                    self._membership_outcome(
                        team_name, slug, username, OutcomeResult.GRANTED, "membership applied"
                    )
                )
        return outcomes
