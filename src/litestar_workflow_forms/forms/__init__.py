"""Form rendering and submission handling.

This module exports the pieces between the web layer and the workflow engine:
the token registry and its session stores, the field normalizer, the
delegation registry, the render dispatcher and the action executor.
"""

from __future__ import annotations

from litestar_workflow_forms.forms.delegation import HandlerRegistry
from litestar_workflow_forms.forms.dispatcher import RenderDispatcher, effective_action, select_render_mode
from litestar_workflow_forms.forms.executor import WorkflowActionExecutor
from litestar_workflow_forms.forms.normalizer import collect_pairs, normalize_fields, serialize_params
from litestar_workflow_forms.forms.session import LitestarSessionStore, MemorySessionStore
from litestar_workflow_forms.forms.tokens import TokenRegistry

__all__ = [
    "HandlerRegistry",
    "LitestarSessionStore",
    "MemorySessionStore",
    "RenderDispatcher",
    "TokenRegistry",
    "WorkflowActionExecutor",
    "collect_pairs",
    "effective_action",
    "normalize_fields",
    "select_render_mode",
    "serialize_params",
]
