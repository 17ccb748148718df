"""Provide the interfaces between the resolution engine and its collaborators."""

from github_access_provisioner.ports.directory import DirectoryPort
from github_access_provisioner.ports.entries import EntriesReaderPort
from github_access_provisioner.ports.errors import (
    CatalogWarning,
    ConfigLoaderError,
    ConflictingCustomRolesWarning,
    DataRetrievalError,
    GrantError,
    InputError,
    PrerequisiteError,
    ProvisionerError,
    ProvisionerWarning,
    UnknownRoleWarning,
)

__all__ = [
    "CatalogWarning",
    "ConfigLoaderError",
    "ConflictingCustomRolesWarning",
    "DataRetrievalError",
    "DirectoryPort",
    "EntriesReaderPort",
    "GrantError",
    "InputError",
    "PrerequisiteError",
    "ProvisionerError",
    "ProvisionerWarning",
    "UnknownRoleWarning",
]
