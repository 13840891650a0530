"""Core domain module for litestar-workflow-forms.

This module exports the workflow definition model, the snapshot and render
models exchanged with the engine and the view layer, and the collaborator
protocols.
"""

from __future__ import annotations

from litestar_workflow_forms.core.definition import (
    AclRule,
    Action,
    Condition,
    Field,
    State,
    Transition,
    WorkflowDefinition,
)
from litestar_workflow_forms.core.loader import (
    load_definition,
    load_definition_file,
    load_definitions,
    load_packaged_definition,
)
from litestar_workflow_forms.core.models import (
    ActivityInfo,
    FieldDescriptor,
    FormSection,
    PageInfo,
    PendingActionToken,
    RenderContext,
    RenderResult,
    StateInfo,
    Status,
    WorkflowId,
    WorkflowInitialInfo,
    WorkflowSnapshot,
)
from litestar_workflow_forms.core.protocols import EngineClient, FieldValidator, RenderHandler, SessionStore
from litestar_workflow_forms.core.types import (
    Context,
    FieldType,
    FormTarget,
    RenderMode,
    ReservedParam,
    StatusLevel,
    SubmittedData,
)
from litestar_workflow_forms.core.values import (
    FieldValue,
    MappingValue,
    ScalarValue,
    SequenceValue,
    context_value,
    parse_field_name,
)

__all__ = [
    "AclRule",
    "Action",
    "ActivityInfo",
    "Condition",
    "Context",
    "EngineClient",
    "Field",
    "FieldDescriptor",
    "FieldType",
    "FieldValidator",
    "FieldValue",
    "FormSection",
    "FormTarget",
    "MappingValue",
    "PageInfo",
    "PendingActionToken",
    "RenderContext",
    "RenderHandler",
    "RenderMode",
    "RenderResult",
    "ReservedParam",
    "ScalarValue",
    "SequenceValue",
    "SessionStore",
    "State",
    "StateInfo",
    "Status",
    "StatusLevel",
    "SubmittedData",
    "Transition",
    "WorkflowDefinition",
    "WorkflowId",
    "WorkflowInitialInfo",
    "WorkflowSnapshot",
    "context_value",
    "load_definition",
    "load_definition_file",
    "load_definitions",
    "load_packaged_definition",
    "parse_field_name",
]
