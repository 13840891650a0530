"""Workflow definitions shipped with the package."""
