"""Data models exchanged between the engine, the dispatcher and the view layer.

Snapshots describe a workflow instance as reported by the engine. Render
results are the descriptors handed to the view layer, they are plain data and
serialize to JSON-compatible dicts with :meth:`RenderResult.to_dict`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeAlias

from litestar_workflow_forms.core.definition import Field  # noqa: TC001
from litestar_workflow_forms.core.types import FieldType, FormTarget, StatusLevel

__all__ = [
    "ActivityInfo",
    "FieldDescriptor",
    "FormSection",
    "PageInfo",
    "PendingActionToken",
    "RenderContext",
    "RenderResult",
    "StateInfo",
    "Status",
    "WorkflowId",
    "WorkflowInitialInfo",
    "WorkflowSnapshot",
]

WorkflowId: TypeAlias = int | str
"""Identifier of a workflow instance as issued by the engine."""


@dataclass(frozen=True)
class WorkflowInitialInfo:
    """Description of a workflow type before any instance exists.

    Attributes:
        type: Workflow type identifier.
        label: Display label of the type.
        description: Description shown on the start page.
    """

    type: str
    label: str
    description: str = ""


@dataclass(frozen=True)
class StateInfo:
    """The current state of an instance.

    Attributes:
        name: State name.
        label: Display label.
        description: State description.
        ui_handler: Custom render handler of the state, if any.
        output: Output fields shown when no activity is available.
    """

    name: str
    label: str = ""
    description: str = ""
    ui_handler: str | None = None
    output: tuple[Field, ...] = ()


@dataclass(frozen=True)
class ActivityInfo:
    """An action currently executable on an instance.

    Attributes:
        name: Action name.
        label: Display label, falls back to the name.
        fields: Input fields the action requires.
        ui_handler: Custom render handler of the action, if any.
    """

    name: str
    label: str = ""
    fields: tuple[Field, ...] = ()
    ui_handler: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Point in time view of a workflow instance.

    Attributes:
        id: Instance id.
        type: Workflow type identifier.
        label: Display label of the workflow type.
        description: Description of the workflow type.
        state: The current state.
        context: Workflow context values.
        last_update: Time of the last change, used for staleness checks.
        activities: Executable actions by name.
    """

    id: WorkflowId
    type: str
    state: StateInfo
    label: str = ""
    description: str = ""
    context: Mapping[str, Any] = field(default_factory=dict)
    last_update: datetime | None = None
    activities: Mapping[str, ActivityInfo] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldDescriptor:
    """A field as rendered into a form.

    Attributes:
        name: Submission name.
        type: Display type.
        label: Display label.
        value: Pre-populated value.
        options: Choices for select and checkbox fields.
    """

    name: str
    type: FieldType = FieldType.TEXT
    label: str = ""
    value: Any = None
    options: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": str(self.type), "label": self.label}
        if self.value is not None:
            data["value"] = self.value
        if self.options is not None:
            data["options"] = list(self.options)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldDescriptor:
        options = data.get("options")
        return cls(
            name=data["name"],
            type=FieldType.parse(data.get("type")),
            label=data.get("label", ""),
            value=data.get("value"),
            options=tuple(options) if options is not None else None,
        )

    @classmethod
    def hidden(cls, name: str, value: Any) -> FieldDescriptor:
        return cls(name=name, type=FieldType.HIDDEN, value=value)


@dataclass(frozen=True)
class PendingActionToken:
    """Server side record binding a rendered form to the action it offers.

    Attributes:
        id: Random, unguessable token id.
        workflow_id: Instance the form belongs to.
        workflow_type: Workflow type of the instance.
        last_update: Last update of the instance when the form was rendered.
        action: The action the form executes.
        fields: The exact field list offered to the client.
        handler: Optional custom handler processing the submission.
    """

    id: str
    workflow_id: WorkflowId
    workflow_type: str
    action: str | None
    fields: tuple[FieldDescriptor, ...] = ()
    last_update: datetime | None = None
    handler: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "workflow_id": self.workflow_id,
            "workflow_type": self.workflow_type,
            "action": self.action,
            "fields": [f.to_dict() for f in self.fields],
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "handler": self.handler,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PendingActionToken:
        last_update = data.get("last_update")
        return cls(
            id=data["id"],
            workflow_id=data["workflow_id"],
            workflow_type=data["workflow_type"],
            action=data.get("action"),
            fields=tuple(FieldDescriptor.from_dict(f) for f in data.get("fields", ())),
            last_update=datetime.fromisoformat(last_update) if last_update else None,
            handler=data.get("handler"),
        )


@dataclass(frozen=True)
class Status:
    """User visible status message."""

    message: str
    level: StatusLevel = StatusLevel.INFO

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "level": str(self.level)}


@dataclass(frozen=True)
class PageInfo:
    """Page heading and body text."""

    label: str
    description: str = ""


@dataclass
class FormSection:
    """One form on the page.

    Attributes:
        target: Entry point the form posts to.
        submit_label: Text of the submit button.
        fields: Rendered fields.
    """

    target: FormTarget | None
    submit_label: str | None
    fields: list[FieldDescriptor] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": str(self.target) if self.target else None,
            "submit_label": self.submit_label,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass
class RenderResult:
    """Render outcome handed to the view layer.

    A result is either a page made of form sections, a redirect, or an error
    status with neither.

    Attributes:
        page: Page heading and description.
        sections: Forms on the page.
        redirect: Redirect target, exclusive with ``page``.
        status: Status message to display.
    """

    page: PageInfo | None = None
    sections: list[FormSection] = field(default_factory=list)
    redirect: str | None = None
    status: Status | None = None

    @classmethod
    def error(cls, message: str) -> RenderResult:
        return cls(status=Status(message=message, level=StatusLevel.ERROR))

    @classmethod
    def redirect_to(cls, target: str, status: Status | None = None) -> RenderResult:
        return cls(redirect=target, status=status)

    @property
    def is_error(self) -> bool:
        return self.status is not None and self.status.level == StatusLevel.ERROR

    @property
    def is_redirect(self) -> bool:
        return self.redirect is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.to_dict() if self.status else None}
        if self.redirect is not None:
            data["redirect"] = self.redirect
            return data
        data["page"] = {"label": self.page.label, "description": self.page.description} if self.page else None
        data["sections"] = [s.to_dict() for s in self.sections]
        return data


@dataclass
class RenderContext:
    """Everything a render pass, default or delegated, gets to see.

    Attributes:
        snapshot: The workflow snapshot to render.
        params: The original request parameters.
        action: Explicitly chosen action, if any.
        token: Token the request was bound to, if any.
        status: Status to carry into the rendered result.
    """

    snapshot: WorkflowSnapshot
    params: Mapping[str, Any] = field(default_factory=dict)
    action: str | None = None
    token: PendingActionToken | None = None
    status: Status | None = None
