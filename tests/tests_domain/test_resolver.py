"""Tests for the role resolution."""

import pytest
from github_access_provisioner.domain.catalog import RoleCatalog
from github_access_provisioner.domain.entities import (
    CustomPermission,
    GrantMode,
    PermissionSource,
    ResolutionUnit,
    StandardPermission,
)
from github_access_provisioner.domain.resolver import classify_role, resolve_unit
from github_access_provisioner.ports.errors import (
    ConflictingCustomRolesWarning,
    UnknownRoleWarning,
)


@pytest.fixture
def catalog():
    return RoleCatalog.from_custom_roles(["Security Auditor", "Release Manager"])


def _unit(*roles: str) -> ResolutionUnit:
    return ResolutionUnit(
        repository="api-gateway",
        mode=GrantMode.TEAM,
        team="Platform Team",
        team_slug="platform-team",
        roles=list(roles),
    )


### TEST CLASSIFY_ROLE


@pytest.mark.parametrize(
    "role, token",
    [
        ("Admin", "admin"),
        ("Maintain", "maintain"),
        ("Write", "push"),
        ("Triage", "triage"),
        ("Read", "pull"),
        ("write", "push"),
        ("push", "push"),
        (" READ ", "pull"),
    ],
)
def test_classify_role_should_map_standard_roles_to_tokens(catalog, role, token):
    """Test that display names and tokens map to the standard token."""
    # Given a standard role string
    # When classifying it
    permission, warnings = classify_role(role, catalog)
    # Then the standard token is returned without warning
    assert permission == StandardPermission(token=token)
    assert warnings == []


def test_classify_role_should_return_catalog_spelling_of_custom_roles(catalog):
    """Test that custom roles are matched case insensitively."""
    # Given a custom role in another case
    # When classifying it
    permission, warnings = classify_role("security auditor", catalog)
    # Then the catalog spelling is kept
    assert permission == CustomPermission(name="Security Auditor")
    assert warnings == []


def test_classify_role_should_default_unknown_roles_to_pull(catalog):
    """Test that an unknown role falls back to the least privilege with a warning."""
    # Given an unknown role
    # When classifying it
    permission, warnings = classify_role("Owner", catalog)
    # Then pull is returned with an unknown role warning
    assert permission == StandardPermission(token="pull")
    assert len(warnings) == 1
    assert isinstance(warnings[0], UnknownRoleWarning)
    assert warnings[0].attributes == {"role": "Owner", "default": "pull"}


def test_classify_role_should_prefer_custom_role_shadowing_a_standard_name():
    """Test that a custom role named like a standard role is classified as custom."""
    # Given a catalog where a custom role is named "Write"
    catalog = RoleCatalog.from_custom_roles(["Write"])
    # When classifying "Write"
    permission, _ = classify_role("Write", catalog)
    # Then the custom role wins
    assert permission == CustomPermission(name="Write")


### TEST RESOLVE_UNIT


def test_resolve_unit_should_keep_pull_when_all_roles_are_read(catalog):
    """Test that several Read roles resolve to pull."""
    # Given a unit where every entry asserts Read
    unit = _unit("Read", "Read")
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then the permission is pull
    assert grant.permission == StandardPermission(token="pull")
    assert grant.source is PermissionSource.STANDARD
    assert grant.diagnostics == ()


@pytest.mark.parametrize(
    "roles, token",
    [
        (("Admin", "Write"), "admin"),
        (("Write", "Admin"), "admin"),
        (("Read", "Triage"), "triage"),
        (("Triage", "Maintain", "Read"), "maintain"),
        (("Read", "Write"), "push"),
    ],
)
def test_resolve_unit_should_keep_highest_standard_role(catalog, roles, token):
    """Test that the highest standard role wins whatever the input order."""
    # Given a unit with several standard roles
    unit = _unit(*roles)
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then the highest one is granted
    assert grant.permission == StandardPermission(token=token)


def test_resolve_unit_should_grant_pull_when_no_role(catalog):
    """Test that a unit without role resolves to pull."""
    # Given a unit without roles
    unit = _unit()
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then pull is granted without diagnostic
    assert grant.permission == StandardPermission(token="pull")
    assert grant.diagnostics == ()


def test_resolve_unit_should_let_custom_role_beat_admin(catalog):
    """Test that any custom role beats every standard role."""
    # Given a unit mixing Admin and a custom role
    unit = _unit("Admin", "Security Auditor", "Maintain")
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then the custom role is granted
    assert grant.permission == CustomPermission(name="Security Auditor")
    assert grant.source is PermissionSource.CUSTOM
    assert grant.diagnostics == ()


def test_resolve_unit_should_keep_first_custom_role_and_report_conflict(catalog):
    """Test that the first custom role in input order wins."""
    # Given a unit with two distinct custom roles
    unit = _unit("Release Manager", "Read", "Security Auditor")
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then the first one wins and the conflict is reported
    assert grant.permission == CustomPermission(name="Release Manager")
    assert len(grant.diagnostics) == 1
    warning = grant.diagnostics[0]
    assert isinstance(warning, ConflictingCustomRolesWarning)
    assert warning.attributes == {
        "kept": "Release Manager",
        "discarded": ["Security Auditor"],
    }


def test_resolve_unit_should_not_report_conflict_for_repeated_custom_role(catalog):
    """Test that the same custom role asserted twice is not a conflict."""
    # Given a unit asserting the same custom role in two spellings
    unit = _unit("Security Auditor", "security AUDITOR")
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then no conflict is reported
    assert grant.permission == CustomPermission(name="Security Auditor")
    assert grant.diagnostics == ()


def test_resolve_unit_should_ignore_unknown_role_next_to_known_ones(catalog):
    """Test that an unknown role defaults to pull and loses against higher roles."""
    # Given a unit with an unknown role and Write
    unit = _unit("Superuser", "Write")
    # When resolving it
    grant = resolve_unit(unit, catalog)
    # Then push is granted and the unknown role is reported
    assert grant.permission == StandardPermission(token="push")
    assert [type(w) for w in grant.diagnostics] == [UnknownRoleWarning]


def test_resolve_unit_should_treat_custom_roles_as_unknown_without_catalog():
    """Test that custom roles degrade to pull when the catalog is standard only."""
    # Given an empty custom catalog
    catalog = RoleCatalog()
    unit = _unit("Security Auditor")
    # When resolving
    grant = resolve_unit(unit, catalog)
    # Then pull is granted with an unknown role warning
    assert grant.permission == StandardPermission(token="pull")
    assert isinstance(grant.diagnostics[0], UnknownRoleWarning)


def test_resolve_unit_should_be_deterministic(catalog):
    """Test that resolving the same unit twice gives the same grant."""
    # Given a unit
    unit = _unit("Triage", "Release Manager", "Security Auditor", "Admin")
    # When resolving it twice
    first = resolve_unit(unit, catalog)
    second = resolve_unit(unit, catalog)
    # Then both grants are equal
    assert first.permission == second.permission
    assert [str(w) for w in first.diagnostics] == [str(w) for w in second.diagnostics]
