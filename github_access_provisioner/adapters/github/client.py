"""Provide the GitHub REST API implementation of the directory port."""

from typing import TYPE_CHECKING, Any, Literal, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError

from github_access_provisioner.domain.entities import Team
from github_access_provisioner.ports.directory import DirectoryPort
from github_access_provisioner.ports.errors import (
    DataRetrievalError,
    GrantError,
    PrerequisiteError,
)

if TYPE_CHECKING:
    from github_access_provisioner.utils import AppLogger

API_VERSION = "2022-11-28"
API_TIMEOUT = 30
API_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": API_VERSION,
    "User-Agent": "github-access-provisioner",
}


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_text(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        details = body.get("errors")
        message = str(body["message"])
        return f"{message} ({details})" if details else message
    return response.text or response.reason or "no response body"


class GitHubClient(DirectoryPort):
    """Directory port backed by the GitHub REST API.

    Every request is a single bounded call: no retry, a finite timeout.
    """

    def __init__(
        self,
        token: str,
        logger: "AppLogger",
        api_url: str = "https://api.github.com",
        timeout: int = API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client with necessary configurations."""
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger

        # Define headers in session and update when needed
        self.session = session or requests.Session()
        self.session.headers.update(
            {**API_HEADERS, "Authorization": f"Bearer {token}"}
        )

    def _request(
        self, method: str, path: str, json: Optional[dict[str, Any]] = None
    ) -> requests.Response:
        """Send one request and return the response whatever its status code.

        Raises:
            DataRetrievalError: on transport failures (connection, timeout).

        """
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(
                method, url, json=json, timeout=self.timeout
            )
        except requests.RequestException as err:
            self.logger.error(
                "[API] Error while requesting endpoint",
                {"method": method, "url_path": path, "error": str(err)},
            )
            raise DataRetrievalError(
                f"{method} {path} failed: {type(err).__name__}: {err}"
            ) from err

        self.logger.debug(
            "[API] HTTP Request to endpoint",
            {"method": method, "url_path": path, "status": response.status_code},
        )
        return response

    def _exists(self, path: str) -> bool:
        response = self._request("GET", path)
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise DataRetrievalError(
            f"GET {path} answered {response.status_code}: {_error_text(response)}"
        )

    def _mutate(self, method: str, path: str, payload: dict[str, Any]) -> requests.Response:
        try:
            response = self._request(method, path, json=payload)
        except DataRetrievalError as err:
            raise GrantError(str(err)) from err
        if not response.ok:
            raise GrantError(
                f"{method} {path} answered {response.status_code}: {_error_text(response)}",
                status_code=response.status_code,
            )
        return response

    def authenticated_login(self) -> str:
        """Return the login the token belongs to."""
        try:
            response = self._request("GET", "/user")
        except DataRetrievalError as err:
            raise PrerequisiteError(str(err)) from err
        if response.status_code in (401, 403):
            raise PrerequisiteError(
                f"GitHub rejected the credentials ({response.status_code}): {_error_text(response)}"
            )
        if not response.ok:
            raise PrerequisiteError(
                f"Unable to validate credentials ({response.status_code}): {_error_text(response)}"
            )
        try:
            return str(response.json().get("login", ""))
        except (ValueError, AttributeError) as err:
            raise PrerequisiteError("GET /user returned an invalid body") from err

    def organization_exists(self, organization: str) -> bool:
        """Tell whether the organization exists."""
        return self._exists(f"/orgs/{_segment(organization)}")

    def fetch_custom_roles(self, organization: str) -> set[str]:
        """Return the organization custom repository role names."""
        path = f"/orgs/{_segment(organization)}/custom-repository-roles"
        response = self._request("GET", path)
        if response.status_code == 404:
            return set()
        if not response.ok:
            raise DataRetrievalError(
                f"GET {path} answered {response.status_code}: {_error_text(response)}"
            )
        try:
            roles = response.json().get("custom_roles") or []
            return {str(role["name"]) for role in roles if role.get("name")}
        except (ValueError, AttributeError, KeyError, TypeError) as err:
            raise DataRetrievalError(f"GET {path} returned an invalid body") from err

    def repository_exists(self, organization: str, repository: str) -> bool:
        """Tell whether the repository exists."""
        return self._exists(f"/repos/{_segment(organization)}/{_segment(repository)}")

    def get_team(self, organization: str, team_slug: str) -> Optional[Team]:
        """Return the team or None when not found."""
        path = f"/orgs/{_segment(organization)}/teams/{_segment(team_slug)}"
        response = self._request("GET", path)
        if response.status_code == 404:
            return None
        if not response.ok:
            raise DataRetrievalError(
                f"GET {path} answered {response.status_code}: {_error_text(response)}"
            )
        try:
            return Team.model_validate(response.json())
        except (ValueError, ValidationError) as err:
            raise DataRetrievalError(f"GET {path} returned an invalid team body") from err

    def create_team(
        self, organization: str, name: str, privacy: Literal["closed", "secret"]
    ) -> Team:
        """Create a team."""
        path = f"/orgs/{_segment(organization)}/teams"
        response = self._mutate("POST", path, {"name": name, "privacy": privacy})
        try:
            return Team.model_validate(response.json())
        except (ValueError, ValidationError) as err:
            raise GrantError(
                f"POST {path} returned an invalid team body",
                status_code=response.status_code,
            ) from err

    def add_team_member(
        self,
        organization: str,
        team_slug: str,
        username: str,
        role: Literal["member", "maintainer"],
    ) -> None:
        """Add or update a team membership."""
        self._mutate(
            "PUT",
            f"/orgs/{_segment(organization)}/teams/{_segment(team_slug)}"
            f"/memberships/{_segment(username)}",
            {"role": role},
        )

    @staticmethod
    def _permission_payload(permission: str, custom_role: bool) -> dict[str, str]:
        # GitHub takes custom role names in the same field as standard tokens,
        # the name must be sent with the exact spelling of the role definition.
        if custom_role:
            return {"permission": permission}
        return {"permission": permission.lower()}

    def grant_team_repository_access(
        self,
        organization: str,
        team_slug: str,
        repository: str,
        permission: str,
        custom_role: bool,
    ) -> None:
        """Create or update the team permission on a repository."""
        org = _segment(organization)
        self._mutate(
            "PUT",
            f"/orgs/{org}/teams/{_segment(team_slug)}/repos/{org}/{_segment(repository)}",
            self._permission_payload(permission, custom_role),
        )

    def grant_user_repository_access(
        self,
        organization: str,
        repository: str,
        subject: str,
        permission: str,
        custom_role: bool,
    ) -> None:
        """Create or update a direct collaborator permission on a repository."""
        self._mutate(
            "PUT",
            f"/repos/{_segment(organization)}/{_segment(repository)}"
            f"/collaborators/{_segment(subject)}",
            self._permission_payload(permission, custom_role),
        )
