"""Configuration for the workflow forms plugin.

This module provides the options of the
:class:`~litestar_workflow_forms.web.plugin.WorkflowFormsPlugin`: the engine and
definitions to serve, the custom handler registry, token storage and the
route settings of the form endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Union

from litestar_workflow_forms.core.definition import WorkflowDefinition
from litestar_workflow_forms.core.loader import load_definition_file, load_definitions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from litestar.stores.base import Store
    from litestar.types import Guard

    from litestar_workflow_forms.core.protocols import EngineClient, FieldValidator
    from litestar_workflow_forms.forms.delegation import HandlerRegistry

__all__ = ["DefinitionSource", "WorkflowFormsConfig"]

DefinitionSource = Union[WorkflowDefinition, str, Path]
"""A loaded definition, a YAML file or a directory of YAML files."""


@dataclass
class WorkflowFormsConfig:
    """Configuration for the WorkflowFormsPlugin.

    Attributes:
        engine: The workflow engine client. If not provided, an
            :class:`~litestar_workflow_forms.engine.InMemoryEngine` serving
            ``definitions`` is created.
        definitions: Definitions, YAML files or directories. They feed the
            default engine and the startup check of custom handlers.
        handlers: Registry of custom render handlers. A new, empty one is
            created if not provided.
        validators: Field validation hooks keyed by context key.
        token_store: Litestar store holding pending action tokens. Defaults to
            a new in-memory store.
        token_expires_in: Lifetime of a pending action token in seconds.
        check_staleness: Reject submissions for instances that changed since
            their form was rendered.
        session_key: Session entry holding the token scope of a browser session.
        add_session_middleware: Whether the plugin installs a server side
            session middleware. Disable when the app configures its own.
        dependency_key_engine: The key used for dependency injection of the engine.
        dependency_key_handlers: The key used for dependency injection of the
            handler registry.
        enable_api: Whether to register the form endpoints.
        path_prefix: URL path prefix of the form endpoints.
        guards: List of Litestar guards applied to the form endpoints.
        tags: OpenAPI tags applied to the form endpoints.
        include_in_schema: Whether to include the endpoints in the OpenAPI schema.

    Example:
        >>> config = WorkflowFormsConfig(
        ...     definitions=["workflows/"],
        ...     path_prefix="/ui/workflow",
        ...     guards=[require_login],
        ... )
    """

    engine: EngineClient | None = None
    definitions: list[DefinitionSource] = field(default_factory=list)
    handlers: HandlerRegistry | None = None
    validators: Mapping[str, FieldValidator] = field(default_factory=dict)
    token_store: Store | None = None
    token_expires_in: int | None = 3600
    check_staleness: bool = False
    session_key: str = "wf_session"
    add_session_middleware: bool = True
    dependency_key_engine: str = "workflow_engine"
    dependency_key_handlers: str = "workflow_handlers"
    enable_api: bool = True
    path_prefix: str = "/workflow"
    guards: list[Guard] = field(default_factory=list)
    tags: list[str] = field(default_factory=lambda: ["Workflow Forms"])
    include_in_schema: bool = True

    def load_definitions(self) -> list[WorkflowDefinition]:
        """Resolve ``definitions`` into loaded definitions.

        Returns:
            The definitions in configuration order.

        Raises:
            DefinitionError: If a file fails to load or validate.
        """
        loaded: list[WorkflowDefinition] = []
        for source in self.definitions:
            if isinstance(source, WorkflowDefinition):
                loaded.append(source)
            elif Path(source).is_dir():
                loaded.extend(load_definitions(source).values())
            else:
                loaded.append(load_definition_file(source))
        return loaded
