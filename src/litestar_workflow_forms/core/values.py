"""Normalized field values.

Submitted form data is flat, but a field name can address a collection:
``tag[]`` appends to an ordered sequence under ``tag`` and ``opt{x}`` sets the
key ``x`` of a mapping under ``opt``. The variant is chosen by parsing the
submitted name, never by inspecting the value.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any, TypeAlias

from litestar_workflow_forms.core.types import StrEnum

__all__ = [
    "FieldName",
    "FieldTarget",
    "FieldValue",
    "MappingValue",
    "ScalarValue",
    "SequenceValue",
    "context_value",
    "parse_field_name",
]

_SEQUENCE_RE = re.compile(r"^(\w+)\[\]$")
_MAPPING_RE = re.compile(r"^(\w+)\{(\w+)\}$")


class FieldTarget(StrEnum):
    """Kind of value a submitted field name addresses."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


@dataclass(frozen=True)
class FieldName:
    """A parsed submitted field name.

    Attributes:
        raw: The name as submitted.
        key: The context key the value is collected under.
        target: Whether the name addresses a scalar, a sequence or a mapping.
        subkey: The mapping key for ``name{subkey}`` names.
    """

    raw: str
    key: str
    target: FieldTarget
    subkey: str | None = None


def parse_field_name(name: str) -> FieldName:
    """Parse a submitted field name according to the collection convention.

    Args:
        name: The submitted field name.

    Returns:
        The parsed name.

    Example:
        >>> parse_field_name("tag[]").target
        <FieldTarget.SEQUENCE: 'sequence'>
        >>> parse_field_name("opt{x}").subkey
        'x'
    """
    if match := _SEQUENCE_RE.match(name):
        return FieldName(raw=name, key=match.group(1), target=FieldTarget.SEQUENCE)
    if match := _MAPPING_RE.match(name):
        return FieldName(raw=name, key=match.group(1), target=FieldTarget.MAPPING, subkey=match.group(2))
    return FieldName(raw=name, key=name, target=FieldTarget.SCALAR)


@dataclass(frozen=True)
class ScalarValue:
    """A single submitted string."""

    value: str

    def serialize(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value


@dataclass
class SequenceValue:
    """Values collected from ``name[]`` fields, in submission order."""

    values: list[str] = field(default_factory=list)

    def append(self, value: str) -> None:
        self.values.append(value)

    def serialize(self) -> str:
        """Serialize to JSON, the engine parameter contract is string typed."""
        return json.dumps(self.values)

    def to_python(self) -> list[str]:
        return list(self.values)


@dataclass
class MappingValue:
    """Values collected from ``name{sub}`` fields."""

    values: dict[str, str] = field(default_factory=dict)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def serialize(self) -> str:
        """Serialize to JSON, the engine parameter contract is string typed."""
        return json.dumps(self.values, sort_keys=True)

    def to_python(self) -> dict[str, str]:
        return dict(self.values)


FieldValue: TypeAlias = ScalarValue | SequenceValue | MappingValue
"""Tagged variant of a normalized field value."""


def _decode(value: Any) -> Any:
    # the engine stores collections in their serialized JSON form
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def context_value(name: str, context: Mapping[str, Any]) -> Any:
    """Look up the context value a field name addresses.

    ``tag[]`` yields the list under ``tag`` and ``opt{x}`` the ``x`` entry of
    the mapping under ``opt``. Collections stored as JSON strings are decoded.

    Args:
        name: The field name.
        context: The workflow context.

    Returns:
        The value, ``None`` when the context has none or it does not fit the
        addressed collection.

    Example:
        >>> context_value("opt{x}", {"opt": '{"x": "1", "y": "2"}'})
        '1'
        >>> context_value("tag[]", {"tag": '["a", "b"]'})
        ['a', 'b']
    """
    parsed = parse_field_name(name)
    value = context.get(parsed.key)
    if value is None or parsed.target is FieldTarget.SCALAR:
        return value

    value = _decode(value)
    if parsed.target is FieldTarget.SEQUENCE:
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]
    if isinstance(value, Mapping):
        return value.get(parsed.subkey)
    return None
