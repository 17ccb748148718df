"""Load the provisioner configuration from a .env file, a config.yml file or the environment."""

from pathlib import Path
from typing import Annotated, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    PlainSerializer,
    PositiveInt,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import (
    BaseSettings,
    DotEnvSettingsSource,
    EnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from github_access_provisioner.domain.entities import GrantMode
from github_access_provisioner.ports.errors import ConfigLoaderError
from github_access_provisioner.utils import LogLevel

# Resolved against the working directory the provisioner is started from.
ENV_FILE_PATH = Path(".env")
YAML_FILE_PATH = Path("config.yml")

HttpUrlToString = Annotated[HttpUrl, PlainSerializer(str, return_type=str)]


class ConfigBaseModel(BaseModel):
    """Base class for configuration sections.
    To prevent attributes from being modified after initialization.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")


class _ConfigLoaderGitHub(ConfigBaseModel):
    """Interface for loading GitHub dedicated configuration."""

    api_url: HttpUrlToString = Field(
        default=HttpUrl("https://api.github.com"),
        description="Base URL of the GitHub REST API (change it for GitHub Enterprise Server).",
    )
    token: SecretStr = Field(
        description="Token with admin:org and repo scopes used for every API call.",
    )
    organization: str = Field(
        description="Organization owning the teams and repositories.",
    )
    request_timeout: PositiveInt = Field(
        default=30,
        description="Timeout in seconds of each API call. A timed out call fails its unit.",
    )


class _ConfigLoaderProvisioner(ConfigBaseModel):
    """Interface for loading the provisioning run configuration."""

    input_file: Optional[Path] = Field(
        default=None,
        description="CSV file with repository, user, role and team columns.",
    )
    grant_mode: GrantMode = Field(
        default=GrantMode.TEAM,
        description="`team` grants repository access to teams, `direct` to users.",
    )
    dry_run: bool = Field(
        default=False,
        description="Resolve and validate everything without changing GitHub.",
    )
    num_threads: PositiveInt = Field(
        default=1,
        description="Number of units reconciled concurrently.",
    )
    team_privacy: Literal["closed", "secret"] = Field(
        default="closed",
        description="Privacy of the teams created by the team provisioning stage.",
    )
    team_membership_role: Literal["member", "maintainer"] = Field(
        default="member",
        description="Role given to users added to a team.",
    )
    log_level: LogLevel = Field(
        default="info",
        description="Determines the verbosity of the logs.",
    )
    json_logging: bool = Field(
        default=False,
        description="Emit logs as JSON lines instead of plain text.",
    )

    @field_validator("grant_mode", "log_level", mode="before")
    @classmethod
    def _lower(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class ConfigLoader(BaseSettings):
    """Interface for loading global configuration settings.

    Environment variables are split once on the first underscore, so that
    `GITHUB_API_URL` fills `github.api_url` and `PROVISIONER_DRY_RUN` fills
    `provisioner.dry_run`.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        env_nested_delimiter="_",
        env_nested_max_split=1,
    )

    github: _ConfigLoaderGitHub = Field(
        description="GitHub configurations.",
    )
    provisioner: _ConfigLoaderProvisioner = Field(
        default_factory=_ConfigLoaderProvisioner,
        description="Provisioning run configurations.",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Select the configuration sources.

        Explicit keyword arguments always win, then environment variables, then
        a single configuration file:
        1. .env file, if present in the working directory;
        2. config.yml file, if present in the working directory;
        3. no file otherwise.
        """
        env_source = EnvSettingsSource(settings_cls, env_ignore_empty=True)
        if ENV_FILE_PATH.is_file():
            return (
                init_settings,
                env_source,
                DotEnvSettingsSource(
                    settings_cls,
                    env_file=ENV_FILE_PATH,
                    env_ignore_empty=True,
                    env_file_encoding="utf-8",
                ),
            )
        if YAML_FILE_PATH.is_file():
            return (
                init_settings,
                env_source,
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=YAML_FILE_PATH,
                    yaml_file_encoding="utf-8",
                ),
            )
        return (init_settings, env_source)


def load_config() -> ConfigLoader:
    """Load and validate the configuration.

    Returns:
        ConfigLoader: A model containing the validated configuration.

    Raises:
        ConfigLoaderError: if a value is missing or invalid.

    """
    try:
        return ConfigLoader()
    except ValidationError as err:
        raise ConfigLoaderError(f"Invalid configuration: {err}") from err
