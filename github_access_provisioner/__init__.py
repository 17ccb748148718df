"""Provision GitHub teams and repository access from a CSV file."""

__version__ = "0.1.0"
