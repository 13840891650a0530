"""Core protocols for litestar-workflow-forms.

This module defines the Protocol-based interfaces of the collaborators the
form layer talks to: the external workflow engine, the session store, custom
render handlers and field validators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Mapping

    from litestar_workflow_forms.core.models import (
        RenderContext,
        RenderResult,
        WorkflowId,
        WorkflowInitialInfo,
        WorkflowSnapshot,
    )
    from litestar_workflow_forms.core.values import FieldValue

__all__ = ["EngineClient", "FieldValidator", "RenderHandler", "SessionStore"]


@runtime_checkable
class EngineClient(Protocol):
    """Command interface of the external workflow engine.

    Every command either returns a snapshot or raises an
    :class:`~litestar_workflow_forms.exceptions.EngineError`. Timeouts and
    retries are the responsibility of the implementation.
    """

    async def get_workflow_initial_info(self, workflow_type: str) -> WorkflowInitialInfo:
        """Describe a workflow type without creating an instance.

        Args:
            workflow_type: The workflow type identifier.

        Returns:
            Label and description of the type.
        """
        ...

    async def get_workflow_info(self, workflow_id: WorkflowId) -> WorkflowSnapshot:
        """Fetch the current snapshot of an instance.

        Args:
            workflow_id: The instance id.

        Returns:
            The current snapshot.
        """
        ...

    async def create_workflow_instance(self, workflow_type: str) -> WorkflowSnapshot:
        """Create an instance, firing its initial transition server side.

        Args:
            workflow_type: The workflow type identifier.

        Returns:
            Snapshot of the new instance.
        """
        ...

    async def execute_workflow_activity(
        self,
        workflow_type: str,
        workflow_id: WorkflowId,
        action: str,
        params: Mapping[str, str] | None = None,
    ) -> WorkflowSnapshot:
        """Execute an action on an instance.

        Args:
            workflow_type: The workflow type identifier.
            workflow_id: The instance id.
            action: The action to execute.
            params: String typed input parameters.

        Returns:
            Snapshot after the transition.
        """
        ...


@runtime_checkable
class SessionStore(Protocol):
    """Key value store scoped to one browser session.

    ``pop`` must read and delete atomically: of several concurrent pops of
    the same key at most one returns the value.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def pop(self, key: str) -> Any | None: ...


@runtime_checkable
class RenderHandler(Protocol):
    """A custom handler replacing default rendering of a state or action.

    Handlers may be plain or async callables.
    """

    def __call__(self, context: RenderContext) -> RenderResult | Awaitable[RenderResult]: ...


@runtime_checkable
class FieldValidator(Protocol):
    """Validation hook for one submitted field.

    A validator returns the (possibly cleaned) value or raises
    :class:`~litestar_workflow_forms.exceptions.FieldValidationError`.
    """

    def __call__(self, name: str, value: FieldValue) -> FieldValue: ...
