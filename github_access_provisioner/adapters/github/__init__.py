"""Provide the GitHub REST API adapter."""

from github_access_provisioner.adapters.github.client import GitHubClient

__all__ = ["GitHubClient"]
