from typing import Optional
from unittest.mock import Mock

import pytest
from github_access_provisioner.domain.entities import Team
from github_access_provisioner.ports.directory import DirectoryPort
from github_access_provisioner.ports.errors import DataRetrievalError, GrantError
from github_access_provisioner.utils import AppLogger, team_slug


class FakeDirectory(DirectoryPort):
    """In memory directory recording every mutation."""

    def __init__(
        self,
        organization: str = "acme",
        repositories: tuple[str, ...] = (),
        teams: tuple[str, ...] = (),
        custom_roles: tuple[str, ...] = (),
    ):
        self.login = "provisioner-bot"
        self.organizations = {organization}
        self.repositories = set(repositories)
        self.teams = {
            team_slug(name): Team(id=index, name=name, slug=team_slug(name))
            for index, name in enumerate(teams, start=1)
        }
        self.custom_roles = set(custom_roles)
        self.catalog_error: Optional[Exception] = None
        self.lookup_errors: set[str] = set()
        self.rejected_targets: set[str] = set()
        self.grants: list[tuple] = []
        self.memberships: list[tuple] = []
        self.created_teams: list[tuple] = []

    def authenticated_login(self) -> str:
        return self.login

    def organization_exists(self, organization: str) -> bool:
        return organization in self.organizations

    def fetch_custom_roles(self, organization: str) -> set[str]:
        if self.catalog_error is not None:
            raise self.catalog_error
        return set(self.custom_roles)

    def repository_exists(self, organization: str, repository: str) -> bool:
        if repository in self.lookup_errors:
            raise DataRetrievalError(f"GET /repos/{organization}/{repository} timed out")
        return repository in self.repositories

    def get_team(self, organization: str, team_slug: str) -> Optional[Team]:
        if team_slug in self.lookup_errors:
            raise DataRetrievalError(f"GET /orgs/{organization}/teams/{team_slug} timed out")
        return self.teams.get(team_slug)

    def create_team(self, organization: str, name: str, privacy) -> Team:
        if name in self.rejected_targets:
            raise GrantError("Validation Failed", status_code=422)
        team = Team(id=len(self.teams) + 1, name=name, slug=team_slug(name))
        self.teams[team.slug] = team
        self.created_teams.append((organization, name, privacy))
        return team

    def add_team_member(self, organization, team_slug, username, role) -> None:
        if username in self.rejected_targets:
            raise GrantError("Not Found", status_code=404)
        self.memberships.append((organization, team_slug, username, role))

    def grant_team_repository_access(
        self, organization, team_slug, repository, permission, custom_role
    ) -> None:
        if team_slug in self.rejected_targets:
            raise GrantError("Forbidden", status_code=403)
        self.grants.append(("team", team_slug, repository, permission, custom_role))

    def grant_user_repository_access(
        self, organization, repository, subject, permission, custom_role
    ) -> None:
        if subject in self.rejected_targets:
            raise GrantError("Forbidden", status_code=403)
        self.grants.append(("user", subject, repository, permission, custom_role))


@pytest.fixture
def mock_logger():
    return Mock(spec=AppLogger)


@pytest.fixture
def directory():
    return FakeDirectory(
        repositories=("api-gateway", "billing"),
        teams=("Platform Team", "Payments"),
        custom_roles=("Security Auditor", "Release Manager"),
    )
