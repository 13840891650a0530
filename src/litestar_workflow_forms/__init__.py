"""Litestar Workflow Forms - Form rendering for declarative workflows.

This package turns the state of externally hosted workflows into form
descriptors and turns browser submissions back into workflow actions.

Key Features:
    - YAML workflow definitions with states, actions, fields and conditions
    - Single-use action tokens bound to the browser session
    - Sequence (``name[]``) and mapping (``name{key}``) form fields
    - Explicit render decision table with custom handler delegation
    - Litestar plugin with form endpoints and an in-memory reference engine

Example:
    >>> from litestar import Litestar
    >>> from litestar_workflow_forms import WorkflowFormsConfig, WorkflowFormsPlugin
    >>>
    >>> app = Litestar(
    ...     plugins=[WorkflowFormsPlugin(WorkflowFormsConfig(definitions=["workflows/"]))],
    ... )
"""

from __future__ import annotations

from litestar_workflow_forms.__metadata__ import __project__, __version__
from litestar_workflow_forms.exceptions import (
    ActionNotAvailableError,
    ActivityExecutionError,
    DefinitionError,
    DelegationError,
    EngineError,
    FieldValidationError,
    InvalidTokenError,
    RequestError,
    UnauthorizedWorkflowError,
    WorkflowFormsError,
    WorkflowInstanceNotFoundError,
    WorkflowTypeNotFoundError,
)
from litestar_workflow_forms.web import WorkflowFormsConfig, WorkflowFormsPlugin

__all__ = (
    "ActionNotAvailableError",
    "ActivityExecutionError",
    "DefinitionError",
    "DelegationError",
    "EngineError",
    "FieldValidationError",
    "InvalidTokenError",
    "RequestError",
    "UnauthorizedWorkflowError",
    "WorkflowFormsConfig",
    "WorkflowFormsError",
    "WorkflowFormsPlugin",
    "WorkflowInstanceNotFoundError",
    "WorkflowTypeNotFoundError",
    "__project__",
    "__version__",
)
