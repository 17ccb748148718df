"""Provide error and warning classes for the GitHub access provisioner."""


class ProvisionerError(Exception):
    """Base exception for the provisioner."""


class ConfigLoaderError(ProvisionerError):
    """Exception for configuration loader errors."""


class InputError(ProvisionerError):
    """Raised when the entries file is missing or malformed.

    It aborts the whole run before any grant is attempted.
    """


class PrerequisiteError(ProvisionerError):
    """Raised when credentials or the target organization cannot be validated."""


class DataRetrievalError(ProvisionerError):
    """Raised when a lookup against the directory fails.

    A lookup answering "not found" is not an error, only transport failures and
    unexpected status codes are.
    """


class GrantError(ProvisionerError):
    """Raised when the directory rejects a mutation (grant, team, membership)."""

    def __init__(self, message: str, status_code: int | None = None):
        """Initialize the error with the upstream status code, if any."""
        super().__init__(message)
        self.status_code = status_code


class ProvisionerWarning(Warning):
    """Base class for non fatal diagnostics."""

    def __init__(self, message: str, **attributes: object):
        """Initialize the warning with structured attributes for the logger."""
        super().__init__(message)
        self.message = message
        self.attributes = attributes

    def __str__(self) -> str:
        """Return the warning message."""
        return self.message


class CatalogWarning(ProvisionerWarning):
    """Custom roles could not be fetched, resolution falls back to standard roles."""


class UnknownRoleWarning(ProvisionerWarning):
    """A role string matched neither a custom nor a standard role."""


class ConflictingCustomRolesWarning(ProvisionerWarning):
    """Several distinct custom roles were asserted for the same grant target."""
