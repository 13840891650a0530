"""Field normalization.

Turns the flat name/value pairs of a browser submission into the parameters
forwarded to the engine. Only the fields recorded in the pending action token
are read, and names addressing collections are folded into sequences or
mappings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from litestar_workflow_forms.core.types import RESERVED_PREFIX
from litestar_workflow_forms.core.values import (
    FieldTarget,
    FieldValue,
    MappingValue,
    ScalarValue,
    SequenceValue,
    parse_field_name,
)

if TYPE_CHECKING:
    from litestar_workflow_forms.core.models import FieldDescriptor
    from litestar_workflow_forms.core.protocols import FieldValidator
    from litestar_workflow_forms.core.types import SubmittedData

__all__ = ["collect_pairs", "normalize_fields", "serialize_params"]


def collect_pairs(pairs: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Group raw name/value pairs, keeping repeated names in order.

    Example:
        >>> collect_pairs([("tag[]", "a"), ("tag[]", "b"), ("name", "v")])
        {'tag[]': ['a', 'b'], 'name': ['v']}
    """
    collected: dict[str, list[str]] = {}
    for name, value in pairs:
        collected.setdefault(name, []).append(value)
    return collected


def _values(submitted: SubmittedData, name: str) -> list[str]:
    value = submitted.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def normalize_fields(
    fields: Iterable[FieldDescriptor],
    submitted: SubmittedData,
    validators: Mapping[str, FieldValidator] | None = None,
) -> dict[str, FieldValue]:
    """Map the submission onto the recorded fields.

    Args:
        fields: The fields recorded when the form was rendered.
        submitted: Raw submission, repeated names map to lists.
        validators: Optional validation hooks keyed by context key.

    Returns:
        Normalized values keyed by context key. Fields missing from the
        submission are left out.

    Raises:
        FieldValidationError: If a validator rejects a value.

    Example:
        >>> from litestar_workflow_forms.core.models import FieldDescriptor
        >>> fields = [FieldDescriptor(name="tag[]"), FieldDescriptor(name="opt{x}")]
        >>> normalize_fields(fields, {"tag[]": ["a", "b"], "opt{x}": "1"})
        {'tag': SequenceValue(values=['a', 'b']), 'opt': MappingValue(values={'x': '1'})}
    """
    normalized: dict[str, FieldValue] = {}
    seen: set[str] = set()

    for descriptor in fields:
        name = descriptor.name
        # strip internal fields
        if name.startswith(RESERVED_PREFIX) or name in seen:
            continue
        seen.add(name)

        values = _values(submitted, name)
        if not values:
            continue

        parsed = parse_field_name(name)
        if parsed.target is FieldTarget.SEQUENCE:
            current = normalized.get(parsed.key)
            if not isinstance(current, SequenceValue):
                current = normalized[parsed.key] = SequenceValue()
            for value in values:
                current.append(value)
        elif parsed.target is FieldTarget.MAPPING:
            current = normalized.get(parsed.key)
            if not isinstance(current, MappingValue):
                current = normalized[parsed.key] = MappingValue()
            current.set(parsed.subkey or "", values[-1])
        else:
            normalized[parsed.key] = ScalarValue(values[-1])

    if validators:
        for key, validator in validators.items():
            if key in normalized:
                normalized[key] = validator(key, normalized[key])

    return normalized


def serialize_params(values: Mapping[str, FieldValue]) -> dict[str, str]:
    """Serialize normalized values for the string typed engine interface.

    Example:
        >>> serialize_params({"tag": SequenceValue(["a", "b"]), "name": ScalarValue("v")})
        {'tag': '["a", "b"]', 'name': 'v'}
    """
    return {key: value.serialize() for key, value in values.items()}
