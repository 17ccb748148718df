"""Tests for the role catalog."""

from github_access_provisioner.domain.catalog import RoleCatalog, load_role_catalog
from github_access_provisioner.domain.entities import STANDARD_ROLES
from github_access_provisioner.ports.errors import DataRetrievalError


def test_from_custom_roles_should_deduplicate_case_insensitively():
    """Test that the first spelling of a custom role is kept."""
    # Given custom role names differing only by case
    names = ["Security Auditor", "security auditor", " Release Manager ", ""]
    # When building the catalog
    catalog = RoleCatalog.from_custom_roles(names)
    # Then duplicates and blanks are dropped
    assert catalog.custom_roles == ("Security Auditor", "Release Manager")
    assert catalog.standard_order == STANDARD_ROLES


def test_custom_role_should_compare_case_insensitively():
    """Test the custom role lookup."""
    # Given a catalog with one custom role
    catalog = RoleCatalog.from_custom_roles(["Security Auditor"])
    # When looking up values
    # Then only the custom role matches, with the catalog spelling
    assert catalog.custom_role("SECURITY AUDITOR").name == "Security Auditor"
    assert catalog.custom_role("pull") is None


def test_indexes_should_be_built_once_per_catalog():
    """Test that lookups reuse the indexes built with the catalog."""
    # Given a catalog
    catalog = RoleCatalog.from_custom_roles(["Security Auditor"])
    # When reading its indexes twice
    # Then the same mappings are returned
    assert catalog.custom_index() is catalog.custom_index()
    assert catalog.standard_index() is catalog.standard_index()
    assert catalog.custom_index() == {"security auditor": "Security Auditor"}
    assert catalog.standard_index()["write"] == "push"
    assert catalog.standard_index()["pull"] == "pull"


def test_load_role_catalog_should_fetch_custom_roles(directory, mock_logger):
    """Test that the catalog holds the organization custom roles."""
    # Given a directory with custom roles
    # When loading the catalog
    catalog = load_role_catalog(directory, "acme", mock_logger)
    # Then both custom roles are known
    assert sorted(catalog.custom_roles) == ["Release Manager", "Security Auditor"]
    mock_logger.info.assert_called_once()
    mock_logger.warning.assert_not_called()


def test_load_role_catalog_should_degrade_to_standard_roles(directory, mock_logger):
    """Test that a failed fetch gives a standard only catalog and a warning."""
    # Given a directory failing to list custom roles
    directory.catalog_error = DataRetrievalError("GET custom roles answered 500")
    # When loading the catalog
    catalog = load_role_catalog(directory, "acme", mock_logger)
    # Then the catalog has no custom role and a warning is logged
    assert catalog.custom_roles == ()
    mock_logger.warning.assert_called_once()
    message, meta = mock_logger.warning.call_args.args
    assert message.startswith("[CATALOG]")
    assert meta["error"] == "GET custom roles answered 500"
