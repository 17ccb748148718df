"""Provide the configuration loader."""

from github_access_provisioner.adapters.config.settings import (
    ConfigLoader,
    load_config,
)

__all__ = ["ConfigLoader", "load_config"]
