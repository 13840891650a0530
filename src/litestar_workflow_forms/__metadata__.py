"""Project Metadata based on its ``pyproject.toml``."""

from __future__ import annotations

import importlib.metadata

__all__ = ("__version__", "__project__")

__version__ = importlib.metadata.version("litestar-workflow-forms")
"""Version of the project."""
__project__ = importlib.metadata.metadata("litestar-workflow-forms")["Name"]
"""Name of the project."""
