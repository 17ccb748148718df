"""Provide the interface to the remote directory holding teams, repositories and grants."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal, Optional

if TYPE_CHECKING:
    from github_access_provisioner.domain.entities import Team


class DirectoryPort(ABC):
    """Port to the hosted source-control directory.

    Lookups raise DataRetrievalError on transport failures or unexpected answers,
    "not found" is reported through their return value. Mutations raise GrantError.
    """

    @abstractmethod
    def authenticated_login(self) -> str:
        """Return the login the credentials belong to.

        Raises:
            PrerequisiteError: if the credentials are rejected.

        """

    @abstractmethod
    def organization_exists(self, organization: str) -> bool:
        """Tell whether the organization exists and is visible."""

    @abstractmethod
    def fetch_custom_roles(self, organization: str) -> set[str]:
        """Return the names of the organization custom repository roles.

        An empty set is returned when the organization does not support them.
        """

    @abstractmethod
    def repository_exists(self, organization: str, repository: str) -> bool:
        """Tell whether the repository exists in the organization."""

    @abstractmethod
    def get_team(self, organization: str, team_slug: str) -> Optional["Team"]:
        """Return the team with the given slug, None if it does not exist."""

    @abstractmethod
    def create_team(
        self, organization: str, name: str, privacy: Literal["closed", "secret"]
    ) -> "Team":
        """Create a team named after its display name."""

    @abstractmethod
    def add_team_member(
        self,
        organization: str,
        team_slug: str,
        username: str,
        role: Literal["member", "maintainer"],
    ) -> None:
        """Add or update a team membership."""

    @abstractmethod
    def grant_team_repository_access(
        self,
        organization: str,
        team_slug: str,
        repository: str,
        permission: str,
        custom_role: bool,
    ) -> None:
        """Create or update the team permission on a repository.

        Args:
            organization(str): Owner of the team and of the repository.
            team_slug(str): Team identifier.
            repository(str): Repository name.
            permission(str): Standard permission token or custom role name.
            custom_role(bool): True to use the role name channel.

        """

    @abstractmethod
    def grant_user_repository_access(
        self,
        organization: str,
        repository: str,
        subject: str,
        permission: str,
        custom_role: bool,
    ) -> None:
        """Create or update a direct collaborator permission on a repository."""
