"""YAML loader for declarative workflow definitions.

A definition file has the sections ``head``, ``state``, ``action``, ``field``,
``condition`` and ``acl``. Transitions are written as
``action > TARGET_STATE ? condition`` where the guard is optional and may be
negated with ``!``::

    head:
        prefix: searchscep
        label: Search
    state:
        INITIAL:
            action:
              - initialize > RESULT
        RESULT:
            autorun: 1
            action:
              - create_redirect > SUCCESS ? has_result
              - set_error > NORESULT ? !has_result
"""

from __future__ import annotations

import importlib.resources
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from litestar_workflow_forms.core.definition import (
    AclRule,
    Action,
    Condition,
    Field,
    State,
    Transition,
    WorkflowDefinition,
)
from litestar_workflow_forms.core.types import FieldType
from litestar_workflow_forms.exceptions import DefinitionError

__all__ = [
    "load_definition",
    "load_definition_file",
    "load_definitions",
    "load_packaged_definition",
    "parse_transition",
    "short_class_name",
]

logger = logging.getLogger(__name__)

_TRANSITION_RE = re.compile(r"^\s*(?P<action>[\w-]+)\s*>\s*(?P<target>[\w-]+)\s*(?:\?\s*(?P<neg>!)?\s*(?P<cond>[\w-]+))?\s*$")


def parse_transition(text: str) -> Transition:
    """Parse the ``action > TARGET ? condition`` mini syntax.

    Args:
        text: The transition string.

    Returns:
        The parsed transition.

    Raises:
        DefinitionError: If the string is malformed.

    Example:
        >>> parse_transition("create_redirect > SUCCESS ? !has_result")
        Transition(action='create_redirect', target='SUCCESS', condition='has_result', negate=True)
    """
    match = _TRANSITION_RE.match(text)
    if not match:
        raise DefinitionError(f"Malformed transition '{text}'")
    return Transition(
        action=match.group("action"),
        target=match.group("target"),
        condition=match.group("cond"),
        negate=bool(match.group("neg")),
    )


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def short_class_name(name: str | None) -> str | None:
    """Strip a namespace from a class reference (``A::B::Evaluate`` -> ``Evaluate``)."""
    if not name:
        return None
    return re.split(r"::|\.", name)[-1]


def _parse_field(key: str, data: dict[str, Any]) -> Field:
    declared = data.get("format") or data.get("type")
    options = data.get("option", data.get("options"))
    if isinstance(options, dict):
        options = options.get("item")
    return Field(
        name=data.get("name", key),
        label=data.get("label", ""),
        description=data.get("description", ""),
        type=FieldType.parse(declared),
        options=tuple(str(o) for o in _as_list(options)),
        required=bool(data.get("required", False)),
    )


def _parse_state(name: str, data: dict[str, Any]) -> State:
    return State(
        name=name,
        label=data.get("label", ""),
        description=data.get("description", ""),
        autorun=bool(data.get("autorun", False)),
        ui_handler=data.get("uihandle") or data.get("ui_handler"),
        transitions=tuple(parse_transition(t) for t in _as_list(data.get("action"))),
        output=tuple(_as_list(data.get("output"))),
    )


def _parse_action(name: str, data: dict[str, Any]) -> Action:
    return Action(
        name=name,
        label=data.get("label", ""),
        description=data.get("description", ""),
        activity_class=data.get("class"),
        ui_handler=data.get("uihandle") or data.get("ui_handler"),
        params=data.get("param") or {},
        input=tuple(_as_list(data.get("input"))),
    )


def _parse_condition(name: str, data: dict[str, Any]) -> Condition:
    return Condition(
        name=name,
        evaluator=short_class_name(data.get("class")) or "Evaluate",
        params=data.get("param") or {},
    )


def _parse_acl(role: str, data: dict[str, Any] | None) -> AclRule:
    data = dict(data or {})
    creator = str(data.pop("creator", "any"))
    return AclRule(role=role, creator=creator, operations=data)


def load_definition(data: dict[str, Any], name: str | None = None) -> WorkflowDefinition:
    """Build a definition from parsed YAML data.

    Args:
        data: The parsed document.
        name: Workflow type identifier, used when ``head.type`` is absent.

    Returns:
        The validated definition.

    Raises:
        DefinitionError: If the document is malformed or has dangling references.
    """
    if not isinstance(data, dict):
        raise DefinitionError("Workflow definition must be a YAML object")

    head = data.get("head") or {}
    workflow_type = head.get("type") or name
    if not workflow_type:
        raise DefinitionError("Workflow definition has no type")

    try:
        definition = WorkflowDefinition(
            name=workflow_type,
            prefix=head.get("prefix", ""),
            persister=head.get("persister", "Volatile"),
            label=head.get("label", ""),
            description=head.get("description", ""),
            states={k: _parse_state(k, v or {}) for k, v in (data.get("state") or {}).items()},
            actions={k: _parse_action(k, v or {}) for k, v in (data.get("action") or {}).items()},
            fields={k: _parse_field(k, v or {}) for k, v in (data.get("field") or {}).items()},
            conditions={k: _parse_condition(k, v or {}) for k, v in (data.get("condition") or {}).items()},
            acl={k: _parse_acl(k, v) for k, v in (data.get("acl") or {}).items()},
            initial_state=head.get("initial_state", "INITIAL"),
        )
    except (AttributeError, TypeError) as e:
        raise DefinitionError(f"Malformed workflow definition '{workflow_type}': {e}") from e

    errors = definition.validate()
    if errors:
        raise DefinitionError(errors)

    logger.debug("Loaded workflow definition %s with %d states", definition.name, len(definition.states))
    return definition


def load_definition_file(path: str | Path) -> WorkflowDefinition:
    """Load a definition from a YAML file.

    The workflow type defaults to the file name without extension.

    Args:
        path: Path to the YAML file.

    Returns:
        The validated definition.
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise DefinitionError(f"YAML parsing error in {path}: {e}") from e
    return load_definition(data, name=path.stem)


def load_definitions(directory: str | Path) -> dict[str, WorkflowDefinition]:
    """Load every ``*.yaml`` definition in a directory.

    Args:
        directory: Directory to scan, not recursive.

    Returns:
        Definitions keyed by workflow type.
    """
    definitions: dict[str, WorkflowDefinition] = {}
    for path in sorted(Path(directory).glob("*.yaml")):
        definition = load_definition_file(path)
        if definition.name in definitions:
            raise DefinitionError(f"Duplicate workflow type '{definition.name}' in {path}")
        definitions[definition.name] = definition
    return definitions


def load_packaged_definition(name: str) -> WorkflowDefinition:
    """Load one of the definitions shipped with the package.

    Args:
        name: File name without extension, e.g. ``search_scep``.

    Returns:
        The validated definition.
    """
    resource = importlib.resources.files("litestar_workflow_forms.definitions") / f"{name}.yaml"
    try:
        data = yaml.safe_load(resource.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise DefinitionError(f"No packaged workflow definition '{name}'") from e
    return load_definition(data, name=name)
