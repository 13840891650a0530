"""Web integration for workflow forms.

This module provides the Litestar plugin, its configuration, the form
endpoints and the exception handlers for fatal configuration errors.

Example:
    Basic usage::

        from litestar import Litestar
        from litestar_workflow_forms.web import WorkflowFormsConfig, WorkflowFormsPlugin

        app = Litestar(
            plugins=[
                WorkflowFormsPlugin(
                    config=WorkflowFormsConfig(
                        definitions=["workflows/"],
                        path_prefix="/workflow",
                    )
                ),
            ],
        )

    The endpoints are then available as ``GET /workflow/index?wf_type=...``,
    ``GET /workflow/load?wf_id=...``, ``POST /workflow/action`` and
    ``POST /workflow/select``.
"""

from __future__ import annotations

from litestar_workflow_forms.web.config import DefinitionSource, WorkflowFormsConfig
from litestar_workflow_forms.web.controllers import EXECUTOR_DEPENDENCY_KEY, WorkflowFormController
from litestar_workflow_forms.web.exceptions import (
    GENERIC_ERROR_MESSAGE,
    exception_handlers,
    workflow_forms_error_handler,
)
from litestar_workflow_forms.web.plugin import WorkflowFormsPlugin

__all__ = [
    "EXECUTOR_DEPENDENCY_KEY",
    "GENERIC_ERROR_MESSAGE",
    "DefinitionSource",
    "WorkflowFormController",
    "WorkflowFormsConfig",
    "WorkflowFormsPlugin",
    "exception_handlers",
    "workflow_forms_error_handler",
]
