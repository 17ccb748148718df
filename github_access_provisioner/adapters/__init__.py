"""Provide the implementations of the provisioner ports."""
