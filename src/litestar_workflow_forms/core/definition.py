"""Workflow definition model.

This module provides the immutable data structures a declarative workflow
definition is parsed into: states with their transitions, actions, fields,
conditions and the ACL table.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from litestar_workflow_forms.core.conditions import CONDITION_EVALUATORS
from litestar_workflow_forms.core.types import FieldType
from litestar_workflow_forms.exceptions import DefinitionError

__all__ = [
    "AclRule",
    "Action",
    "Condition",
    "Field",
    "State",
    "Transition",
    "WorkflowDefinition",
]


@dataclass(frozen=True)
class Field:
    """An input or output field.

    Attributes:
        name: Context key the field reads from and writes to. May use the
            ``name[]`` or ``name{sub}`` collection convention.
        label: Display label, passed through untranslated.
        description: Help text.
        type: Display type.
        options: Choices for select and checkbox fields.
        required: Whether the field must be filled.
    """

    name: str
    label: str = ""
    description: str = ""
    type: FieldType = FieldType.TEXT
    options: tuple[str, ...] = ()
    required: bool = False

    @property
    def display_label(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class Transition:
    """A transition out of a state.

    Attributes:
        action: The action that triggers the transition.
        target: Name of the resulting state.
        condition: Optional guard condition name.
        negate: Whether the guard is negated (``!condition``).
    """

    action: str
    target: str
    condition: str | None = None
    negate: bool = False


@dataclass(frozen=True)
class State:
    """A workflow state.

    Attributes:
        name: State name.
        label: Display label.
        description: Text shown on the page while the workflow sits in this state.
        autorun: Whether the engine fires the first applicable transition
            immediately.
        ui_handler: Custom render handler replacing default rendering.
        transitions: Ordered transitions out of this state.
        output: Field keys displayed when the state has no activities.
    """

    name: str
    label: str = ""
    description: str = ""
    autorun: bool = False
    ui_handler: str | None = None
    transitions: tuple[Transition, ...] = ()
    output: tuple[str, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return not self.transitions


@dataclass(frozen=True)
class Action:
    """A named activity.

    Attributes:
        name: Action name.
        label: Display label, used as the submit button text.
        description: Help text.
        activity_class: Name of the engine activity executing the action.
        ui_handler: Custom render handler used when the action is selected.
        params: Static parameters. String values starting with ``$`` are
            references into the workflow context.
        input: Keys of the fields the action reads from the submission.
    """

    name: str
    label: str = ""
    description: str = ""
    activity_class: str | None = None
    ui_handler: str | None = None
    params: Mapping[str, Any] = field(default_factory=dict)
    input: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def resolve_params(self, context: Mapping[str, Any]) -> dict[str, Any]:
        """Resolve ``$variable`` references against the workflow context.

        Args:
            context: The active workflow context.

        Returns:
            A new dict with constants copied and references replaced by the
            context value (``None`` when the key is missing).

        Example:
            >>> action = Action(name="search", params={"wf_type": "enrollment", "tid": "$transaction_id"})
            >>> action.resolve_params({"transaction_id": "ABC123"})
            {'wf_type': 'enrollment', 'tid': 'ABC123'}
        """
        resolved: dict[str, Any] = {}
        for key, value in self.params.items():
            if isinstance(value, str) and value.startswith("$"):
                resolved[key] = context.get(value[1:])
            else:
                resolved[key] = value
        return resolved


@dataclass(frozen=True)
class Condition:
    """A named boolean predicate over the workflow context.

    Attributes:
        name: Condition name referenced by transitions.
        evaluator: Name of the evaluator in the condition registry.
        params: Evaluator parameters.
    """

    name: str
    evaluator: str = "Evaluate"
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def evaluate(self, context: Mapping[str, Any]) -> bool:
        try:
            evaluator = CONDITION_EVALUATORS[self.evaluator]
        except KeyError as e:
            raise DefinitionError(f"Condition '{self.name}' uses unknown evaluator '{self.evaluator}'") from e
        return evaluator(self.params, context)


@dataclass(frozen=True)
class AclRule:
    """Access rule of one role.

    Attributes:
        role: Role name.
        creator: ``any`` to allow access to instances of any creator, ``self``
            to restrict access to instances the role holder created.
        operations: Further allowed operations, passed through to the engine.
    """

    role: str
    creator: str = "any"
    operations: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkflowDefinition:
    """Declarative workflow structure.

    The definition is immutable once loaded. Lookups raise
    :class:`~litestar_workflow_forms.exceptions.DefinitionError` for unknown
    names since a miss means the engine and the loaded configuration disagree.

    Attributes:
        name: Workflow type identifier.
        prefix: Short prefix used for instance ids by the engine.
        persister: Persistence backend name, ``Volatile`` for short-lived types.
        label: Display label of the workflow type.
        description: Description shown on the start page.
        states: States in declaration order.
        actions: Actions by name.
        fields: Fields by definition key.
        conditions: Conditions by name.
        acl: Access rules by role.
        initial_state: Name of the state new instances start in.

    Example:
        >>> definition = WorkflowDefinition(
        ...     name="change_metadata",
        ...     states={
        ...         "INITIAL": State(name="INITIAL", transitions=(Transition("start", "DONE"),)),
        ...         "DONE": State(name="DONE"),
        ...     },
        ...     actions={"start": Action(name="start")},
        ... )
        >>> definition.validate()
        []
    """

    name: str
    prefix: str = ""
    persister: str = "Volatile"
    label: str = ""
    description: str = ""
    states: Mapping[str, State] = field(default_factory=dict)
    actions: Mapping[str, Action] = field(default_factory=dict)
    fields: Mapping[str, Field] = field(default_factory=dict)
    conditions: Mapping[str, Condition] = field(default_factory=dict)
    acl: Mapping[str, AclRule] = field(default_factory=dict)
    initial_state: str = "INITIAL"

    def __post_init__(self) -> None:
        for attr in ("states", "actions", "fields", "conditions", "acl"):
            object.__setattr__(self, attr, MappingProxyType(dict(getattr(self, attr))))

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def get_state(self, name: str) -> State:
        try:
            return self.states[name]
        except KeyError as e:
            raise DefinitionError(f"Unknown state '{name}' in workflow '{self.name}'") from e

    def get_action(self, name: str) -> Action:
        try:
            return self.actions[name]
        except KeyError as e:
            raise DefinitionError(f"Unknown action '{name}' in workflow '{self.name}'") from e

    def get_field(self, name: str) -> Field:
        try:
            return self.fields[name]
        except KeyError as e:
            raise DefinitionError(f"Unknown field '{name}' in workflow '{self.name}'") from e

    def evaluate_condition(self, name: str, context: Mapping[str, Any]) -> bool:
        """Evaluate a named condition against the current context.

        Args:
            name: The condition name.
            context: The current workflow context.

        Returns:
            The condition outcome.

        Raises:
            DefinitionError: If the condition is not defined.
        """
        try:
            condition = self.conditions[name]
        except KeyError as e:
            raise DefinitionError(f"Unknown condition '{name}' in workflow '{self.name}'") from e
        return condition.evaluate(context)

    def transition_applies(self, transition: Transition, context: Mapping[str, Any]) -> bool:
        if transition.condition is None:
            return True
        result = self.evaluate_condition(transition.condition, context)
        return not result if transition.negate else result

    def available_transitions(self, state_name: str, context: Mapping[str, Any]) -> list[Transition]:
        """List the transitions of a state whose guard holds.

        Args:
            state_name: Name of the current state.
            context: The current workflow context.

        Returns:
            Applicable transitions in declaration order.
        """
        state = self.get_state(state_name)
        return [t for t in state.transitions if self.transition_applies(t, context)]

    def input_fields(self, action_name: str) -> tuple[Field, ...]:
        return tuple(self.get_field(key) for key in self.get_action(action_name).input)

    def output_fields(self, state_name: str) -> tuple[Field, ...]:
        return tuple(self.get_field(key) for key in self.get_state(state_name).output)

    def ui_handlers(self) -> set[str]:
        """Collect every custom render handler referenced by the definition."""
        handlers = {s.ui_handler for s in self.states.values() if s.ui_handler}
        handlers.update(a.ui_handler for a in self.actions.values() if a.ui_handler)
        return handlers

    def is_role_allowed(self, role: str | None) -> bool:
        """Check the ACL table. An empty table allows every role."""
        if not self.acl:
            return True
        return role is not None and role in self.acl

    def validate(self) -> list[str]:
        """Validate the definition for dangling references.

        Returns:
            List of validation error messages. Empty list if valid.
        """
        errors: list[str] = []

        if self.initial_state not in self.states:
            errors.append(f"Initial state '{self.initial_state}' not found in states")

        for state in self.states.values():
            for transition in state.transitions:
                if transition.action not in self.actions:
                    errors.append(f"State '{state.name}': action '{transition.action}' not found")
                if transition.target not in self.states:
                    errors.append(f"State '{state.name}': target state '{transition.target}' not found")
                if transition.condition and transition.condition not in self.conditions:
                    errors.append(f"State '{state.name}': condition '{transition.condition}' not found")
            errors.extend(
                f"State '{state.name}': output field '{key}' not found" for key in state.output if key not in self.fields
            )

        for action in self.actions.values():
            errors.extend(
                f"Action '{action.name}': input field '{key}' not found" for key in action.input if key not in self.fields
            )

        errors.extend(
            f"Condition '{condition.name}': unknown evaluator '{condition.evaluator}'"
            for condition in self.conditions.values()
            if condition.evaluator not in CONDITION_EVALUATORS
        )

        return errors
