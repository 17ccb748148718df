"""Define the domain entities handled by the access grant resolution engine."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

StandardToken = Literal["admin", "maintain", "push", "triage", "pull"]

# Highest priority first.
STANDARD_ROLES: tuple[tuple[str, StandardToken], ...] = (
    ("Admin", "admin"),
    ("Maintain", "maintain"),
    ("Write", "push"),
    ("Triage", "triage"),
    ("Read", "pull"),
)
STANDARD_PRIORITY: tuple[StandardToken, ...] = tuple(
    token for _, token in STANDARD_ROLES
)
LEAST_PRIVILEGE: StandardToken = "pull"


class _FrozenModel(BaseModel):
    """Base model which can not be modified after initialization."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class GrantMode(str, Enum):
    """Kind of grant target a resolution unit points to."""

    TEAM = "team"
    DIRECT = "direct"


class OutcomeResult(str, Enum):
    """Terminal state of a processed unit."""

    GRANTED = "granted"
    SKIPPED = "skipped"
    FAILED = "failed"


class PermissionSource(str, Enum):
    """Catalog branch a permission comes from."""

    STANDARD = "standard"
    CUSTOM = "custom"


class Entry(_FrozenModel):
    """One row of the input file."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", str_strip_whitespace=True, populate_by_name=True
    )

    repository: str = Field(default="")
    subject: str = Field(default="", alias="user")
    role: Optional[str] = Field(default=None)
    team: Optional[str] = Field(default=None)

    @field_validator("role", "team", mode="after")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class StandardPermission(_FrozenModel):
    """Permission taken from the fixed standard ladder."""

    kind: Literal["standard"] = "standard"
    token: StandardToken

    @property
    def value(self) -> str:
        """Value sent to the directory."""
        return self.token

    @property
    def source(self) -> PermissionSource:
        """Catalog branch."""
        return PermissionSource.STANDARD


class CustomPermission(_FrozenModel):
    """Organization defined repository role, carried by name."""

    kind: Literal["custom"] = "custom"
    name: str

    @property
    def value(self) -> str:
        """Value sent to the directory."""
        return self.name

    @property
    def source(self) -> PermissionSource:
        """Catalog branch."""
        return PermissionSource.CUSTOM


Permission = Annotated[
    Union[StandardPermission, CustomPermission], Field(discriminator="kind")
]


class Team(_FrozenModel):
    """A team as known by the directory."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    slug: str


class ResolutionUnit(BaseModel):
    """A grant target and the ordered roles contributed by every entry sharing it."""

    repository: str
    mode: GrantMode
    team: Optional[str] = Field(default=None)
    team_slug: Optional[str] = Field(default=None)
    subject: Optional[str] = Field(default=None)
    roles: list[str] = Field(default_factory=list)

    @property
    def target(self) -> str:
        """Identity of the grantee: team slug or user login."""
        if self.mode is GrantMode.TEAM:
            return self.team_slug or ""
        return self.subject or ""

    @property
    def key(self) -> tuple[str, str]:
        """Aggregation key of the unit."""
        if self.mode is GrantMode.TEAM:
            return self.repository, self.target
        return self.repository, self.target.lower()

    def describe(self) -> dict[str, str]:
        """Return the unit identity as log attributes."""
        return {
            "repository": self.repository,
            "mode": self.mode.value,
            "target": self.target,
        }


class ResolvedGrant(_FrozenModel):
    """Single permission to apply to a unit plus the resolution diagnostics."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    unit: ResolutionUnit
    permission: Permission
    diagnostics: tuple[Warning, ...] = Field(default=())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def source(self) -> PermissionSource:
        """Catalog branch which produced the permission."""
        return self.permission.source


class Outcome(_FrozenModel):
    """Terminal result of one unit (grant) or one team membership."""

    unit: ResolutionUnit
    result: OutcomeResult
    reason: str
    permission: Optional[str] = Field(default=None)
    simulated: bool = Field(default=False)


class RunSummary(_FrozenModel):
    """Final counters exposed to the invoking surface."""

    granted: int = 0
    skipped: int = 0
    failed: int = 0
    dry_run: bool = False

    @classmethod
    def from_outcomes(cls, outcomes: list[Outcome], dry_run: bool) -> "RunSummary":
        """Count outcomes by result."""
        return cls(
            granted=sum(o.result is OutcomeResult.GRANTED for o in outcomes),
            skipped=sum(o.result is OutcomeResult.SKIPPED for o in outcomes),
            failed=sum(o.result is OutcomeResult.FAILED for o in outcomes),
            dry_run=dry_run,
        )

    @property
    def success(self) -> bool:
        """True when no unit failed."""
        return self.failed == 0
