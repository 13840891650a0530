"""In-memory workflow engine.

A reference implementation of the engine client used by the bundled examples
and the test suite. Production deployments talk to an external engine.
"""

from __future__ import annotations

from litestar_workflow_forms.engine.activities import (
    DEFAULT_ACTIVITIES,
    Activity,
    Noop,
    SearchWorkflow,
    SetContext,
    SetErrorCode,
)
from litestar_workflow_forms.engine.memory import InMemoryEngine, WorkflowInstance

__all__ = [
    "DEFAULT_ACTIVITIES",
    "Activity",
    "InMemoryEngine",
    "Noop",
    "SearchWorkflow",
    "SetContext",
    "SetErrorCode",
    "WorkflowInstance",
]
