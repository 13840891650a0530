"""Render dispatcher.

Decides what to show for a workflow snapshot and builds the form descriptor.
The decision is an explicit table evaluated top-down, first match wins:

==================  =====================================================
mode                when
==================  =====================================================
DELEGATE_STATE      the state declares a custom handler
DELEGATE_ACTION     the effective action declares a custom handler
FIELD_FORM          an effective action exists
CHOICE_FORM         several activities are available, none chosen
OUTPUT              no activity is available
==================  =====================================================

The effective action is the only available activity, or else the explicitly
requested one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import cached_property
from typing import TYPE_CHECKING

from litestar_workflow_forms.core.models import (
    FieldDescriptor,
    FormSection,
    PageInfo,
    RenderResult,
)
from litestar_workflow_forms.core.types import FieldType, FormTarget, RenderMode, ReservedParam
from litestar_workflow_forms.core.values import context_value
from litestar_workflow_forms.exceptions import ActionNotAvailableError

if TYPE_CHECKING:
    from litestar_workflow_forms.core.definition import Field
    from litestar_workflow_forms.core.models import ActivityInfo, RenderContext, WorkflowSnapshot
    from litestar_workflow_forms.forms.delegation import HandlerRegistry
    from litestar_workflow_forms.forms.tokens import TokenRegistry

__all__ = ["RenderDispatcher", "effective_action", "select_render_mode"]

logger = logging.getLogger(__name__)

DEFAULT_SUBMIT_LABEL = "proceed"

_OPTION_TYPES = frozenset({FieldType.SELECT, FieldType.CHECKBOX})


def effective_action(snapshot: WorkflowSnapshot, requested: str | None) -> ActivityInfo | None:
    """Determine the action to render.

    Args:
        snapshot: The workflow snapshot.
        requested: Explicitly chosen action name.

    Returns:
        The only available activity, else the requested one, else ``None``.

    Raises:
        ActionNotAvailableError: If the requested action is not available.
    """
    if len(snapshot.activities) == 1:
        return next(iter(snapshot.activities.values()))
    if requested:
        try:
            return snapshot.activities[requested]
        except KeyError as e:
            raise ActionNotAvailableError(requested) from e
    return None


class _Facts:
    """Inputs of the decision table, the effective action is resolved lazily."""

    def __init__(self, snapshot: WorkflowSnapshot, requested: str | None) -> None:
        self.snapshot = snapshot
        self.requested = requested

    @cached_property
    def activity(self) -> ActivityInfo | None:
        return effective_action(self.snapshot, self.requested)


_DECISION_TABLE: tuple[tuple[RenderMode, Callable[[_Facts], bool]], ...] = (
    (RenderMode.DELEGATE_STATE, lambda f: bool(f.snapshot.state.ui_handler)),
    (RenderMode.DELEGATE_ACTION, lambda f: f.activity is not None and bool(f.activity.ui_handler)),
    (RenderMode.FIELD_FORM, lambda f: f.activity is not None),
    (RenderMode.CHOICE_FORM, lambda f: bool(f.snapshot.activities)),
    (RenderMode.OUTPUT, lambda f: True),
)


def select_render_mode(snapshot: WorkflowSnapshot, requested: str | None = None) -> tuple[RenderMode, ActivityInfo | None]:
    """Evaluate the decision table.

    Args:
        snapshot: The workflow snapshot.
        requested: Explicitly chosen action name.

    Returns:
        The render mode and the effective action (``None`` unless the mode
        renders or delegates an action).

    Raises:
        ActionNotAvailableError: If the requested action is not available and
            the state does not delegate.
    """
    facts = _Facts(snapshot, requested)
    for mode, rule in _DECISION_TABLE:
        if rule(facts):
            activity = facts.activity if mode in (RenderMode.DELEGATE_ACTION, RenderMode.FIELD_FORM) else None
            return mode, activity
    raise AssertionError("decision table is exhaustive")  # pragma: no cover


class RenderDispatcher:
    """Builds render results from workflow snapshots.

    Attributes:
        tokens: Registry recording the action behind every rendered field form.
        handlers: Registry of custom render handlers.
    """

    __slots__ = ("handlers", "tokens")

    def __init__(self, tokens: TokenRegistry, handlers: HandlerRegistry) -> None:
        self.tokens = tokens
        self.handlers = handlers

    async def render(self, context: RenderContext) -> RenderResult:
        """Render the snapshot of a render context.

        Args:
            context: Snapshot, request parameters and the chosen action.

        Returns:
            The render result. Delegated results are returned unchanged.
        """
        snapshot = context.snapshot
        mode, activity = select_render_mode(snapshot, context.action)
        logger.debug("Rendering workflow %s in state %s as %s", snapshot.id, snapshot.state.name, mode)

        if mode is RenderMode.DELEGATE_STATE:
            return await self.handlers.delegate(snapshot.state.ui_handler or "", context)

        if mode is RenderMode.DELEGATE_ACTION and activity is not None:
            context.action = activity.name
            return await self.handlers.delegate(activity.ui_handler or "", context)

        if mode is RenderMode.FIELD_FORM and activity is not None:
            result = await self._field_form(snapshot, activity)
        elif mode is RenderMode.CHOICE_FORM:
            result = self._choice_form(snapshot)
        else:
            result = self._output(snapshot)

        if result.status is None:
            result.status = context.status
        return result

    @staticmethod
    def page(snapshot: WorkflowSnapshot) -> PageInfo:
        return PageInfo(
            label=snapshot.label or snapshot.type,
            description=snapshot.state.description or snapshot.description,
        )

    @staticmethod
    def _descriptor(field: Field, snapshot: WorkflowSnapshot, field_type: FieldType | None = None) -> FieldDescriptor:
        field_type = field_type or field.type
        return FieldDescriptor(
            name=field.name,
            type=field_type,
            label=field.display_label,
            value=context_value(field.name, snapshot.context),
            options=field.options if field_type in _OPTION_TYPES else None,
        )

    async def _field_form(self, snapshot: WorkflowSnapshot, activity: ActivityInfo) -> RenderResult:
        fields = [self._descriptor(f, snapshot) for f in activity.fields]

        # record the offered action and fields in the session
        token_field = await self.tokens.register(snapshot, activity.name, fields)

        section = FormSection(
            target=FormTarget.ACTION,
            submit_label=activity.label or DEFAULT_SUBMIT_LABEL,
            fields=[*fields, token_field],
        )
        return RenderResult(page=self.page(snapshot), sections=[section])

    def _choice_form(self, snapshot: WorkflowSnapshot) -> RenderResult:
        sections = [
            FormSection(
                target=FormTarget.SELECT,
                submit_label=activity.display_label,
                fields=[
                    FieldDescriptor.hidden(str(ReservedParam.ACTION), name),
                    FieldDescriptor.hidden(str(ReservedParam.ID), snapshot.id),
                ],
            )
            for name, activity in snapshot.activities.items()
        ]
        return RenderResult(page=self.page(snapshot), sections=sections)

    def _output(self, snapshot: WorkflowSnapshot) -> RenderResult:
        for field in snapshot.state.output:
            if field.type is FieldType.REDIRECT:
                target = snapshot.context.get(field.name)
                if target:
                    return RenderResult.redirect_to(str(target))

        fields = [
            self._descriptor(f, snapshot, FieldType.INFO) for f in snapshot.state.output if f.type is not FieldType.REDIRECT
        ]
        sections = [FormSection(target=None, submit_label=None, fields=fields)] if fields else []
        return RenderResult(page=self.page(snapshot), sections=sections)
