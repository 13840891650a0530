"""Core type definitions for litestar-workflow-forms.

This module defines the enums and type aliases shared by the definition model,
the dispatcher and the web layer.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeAlias

# StrEnum backport for Python < 3.11
if sys.version_info >= (3, 11):
    from enum import StrEnum
else:

    class StrEnum(str, Enum):
        """String enumeration compatibility for Python < 3.11."""

        def __str__(self) -> str:
            return str(self.value)


__all__ = [
    "RESERVED_PREFIX",
    "Context",
    "FieldType",
    "FormTarget",
    "RenderMode",
    "ReservedParam",
    "StatusLevel",
    "SubmittedData",
]


class FieldType(StrEnum):
    """Display type of a rendered field.

    Attributes:
        TEXT: Single line text input, the default.
        HIDDEN: Hidden input carrying bookkeeping values.
        PASSWORD: Masked text input.
        TEXTAREA: Multi line text input.
        SELECT: Drop down with options.
        CHECKBOX: Checkbox or checkbox group with options.
        REDIRECT: Output only, the value is a redirect target.
        INFO: Output only, read-only display of a context value.
    """

    TEXT = "text"
    HIDDEN = "hidden"
    PASSWORD = "password"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    REDIRECT = "redirect"
    INFO = "info"

    @classmethod
    def parse(cls, value: str | None) -> FieldType:
        """Map a declared type to a display type.

        Missing types and the engine's internal ``basic`` type render as text.
        Unknown types are kept as text as well so that new engine types degrade
        to an editable field instead of breaking the form.
        """
        if not value or value == "basic":
            return cls.TEXT
        try:
            return cls(value)
        except ValueError:
            return cls.TEXT


class FormTarget(StrEnum):
    """Entry point a rendered form posts back to.

    Attributes:
        ACTION: Generic action submission (token-bound or fresh start).
        SELECT: Action selection in a state with several activities.
    """

    ACTION = "action"
    SELECT = "select"


class StatusLevel(StrEnum):
    """Severity of the status message attached to a render result."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class RenderMode(StrEnum):
    """Outcome of the render decision table.

    Attributes:
        DELEGATE_STATE: The state carries a custom handler.
        DELEGATE_ACTION: The effective action carries a custom handler.
        FIELD_FORM: Render the input form of the effective action.
        CHOICE_FORM: Offer one button per available activity.
        OUTPUT: No activities left, render the state output.
    """

    DELEGATE_STATE = "delegate_state"
    DELEGATE_ACTION = "delegate_action"
    FIELD_FORM = "field_form"
    CHOICE_FORM = "choice_form"
    OUTPUT = "output"


class ReservedParam(StrEnum):
    """Submission parameters used for bookkeeping."""

    TOKEN = "wf_token"
    TYPE = "wf_type"
    ID = "wf_id"
    ACTION = "wf_action"
    HANDLER = "wf_handler"


RESERVED_PREFIX = "wf_"
"""Field names with this prefix are never forwarded to the engine."""

Context: TypeAlias = dict[str, Any]
"""Type alias for workflow context data dictionary."""

SubmittedData: TypeAlias = Mapping[str, str | list[str]]
"""Raw browser submission, multi-valued names map to lists."""
