"""Tests for the package layout."""

import importlib
import pkgutil

import github_access_provisioner
import pytest

MODULES = [
    module.name
    for module in pkgutil.walk_packages(
        github_access_provisioner.__path__, prefix="github_access_provisioner."
    )
]


@pytest.mark.parametrize("name", ["github_access_provisioner", *MODULES])
def test_every_module_should_have_a_docstring(name):
    """Test that every package and module documents itself."""
    # Given a module of the package
    module = importlib.import_module(name)
    # When reading its docstring
    # Then it is not empty
    assert module.__doc__ and module.__doc__.strip()
