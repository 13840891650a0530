"""In-memory workflow engine.

This module provides a local, in-process implementation of the
:class:`~litestar_workflow_forms.core.protocols.EngineClient` protocol. It
executes declarative definitions directly and is suitable for development,
testing and the bundled examples.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from litestar_workflow_forms.core.loader import short_class_name
from litestar_workflow_forms.core.models import (
    ActivityInfo,
    StateInfo,
    WorkflowInitialInfo,
    WorkflowSnapshot,
)
from litestar_workflow_forms.core.values import parse_field_name
from litestar_workflow_forms.engine.activities import DEFAULT_ACTIVITIES, Activity
from litestar_workflow_forms.exceptions import (
    ActivityExecutionError,
    DefinitionError,
    UnauthorizedWorkflowError,
    WorkflowInstanceNotFoundError,
    WorkflowTypeNotFoundError,
)

if TYPE_CHECKING:
    from litestar_workflow_forms.core.definition import Transition, WorkflowDefinition
    from litestar_workflow_forms.core.models import WorkflowId
    from litestar_workflow_forms.core.types import Context

__all__ = ["InMemoryEngine", "WorkflowInstance"]

logger = logging.getLogger(__name__)

MAX_AUTORUN_STEPS = 100


@dataclass
class WorkflowInstance:
    """Runtime state of one workflow instance.

    Attributes:
        id: Instance id.
        definition: The definition the instance runs.
        state: Name of the current state.
        context: Context values.
        creator: User that created the instance.
        last_update: Time of the last change.
    """

    id: int
    definition: WorkflowDefinition
    state: str
    context: Context = field(default_factory=dict)
    creator: str | None = None
    last_update: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryEngine:
    """Executes workflow definitions in the current process.

    Attributes:
        definitions: Known definitions keyed by workflow type.
        activities: Activity classes keyed by class name.
        role: Role of the acting user. ``None`` disables ACL checks.
        user: Name of the acting user, recorded as creator of new instances.
    """

    def __init__(
        self,
        definitions: Iterable[WorkflowDefinition] | Mapping[str, WorkflowDefinition] = (),
        activities: Mapping[str, type[Activity]] | None = None,
        role: str | None = None,
        user: str | None = None,
        first_id: int = 1,
    ) -> None:
        """Initialize the engine.

        Args:
            definitions: Definitions to serve.
            activities: Additional activity classes, merged over the built-ins.
            role: Role of the acting user.
            user: Name of the acting user.
            first_id: First instance id handed out.
        """
        if isinstance(definitions, Mapping):
            definitions = definitions.values()
        self.definitions: dict[str, WorkflowDefinition] = {d.name: d for d in definitions}
        self.activities: dict[str, type[Activity]] = {**DEFAULT_ACTIVITIES, **(activities or {})}
        self.role = role
        self.user = user
        self._instances: dict[int, WorkflowInstance] = {}
        self._next_id = first_id

    def add_definition(self, definition: WorkflowDefinition) -> None:
        self.definitions[definition.name] = definition

    def _definition(self, workflow_type: str) -> WorkflowDefinition:
        try:
            definition = self.definitions[workflow_type]
        except KeyError as e:
            raise WorkflowTypeNotFoundError(workflow_type) from e
        self._check_acl(definition)
        return definition

    def _check_acl(self, definition: WorkflowDefinition, instance: WorkflowInstance | None = None) -> None:
        if self.role is None:
            return
        if not definition.is_role_allowed(self.role):
            raise UnauthorizedWorkflowError(definition.name, self.role)
        rule = definition.acl.get(self.role)
        if instance is not None and rule is not None and rule.creator == "self" and instance.creator != self.user:
            raise UnauthorizedWorkflowError(definition.name, self.role)

    @staticmethod
    def _coerce_id(workflow_id: WorkflowId) -> int:
        try:
            return int(workflow_id)
        except (TypeError, ValueError) as e:
            raise WorkflowInstanceNotFoundError(workflow_id) from e

    def _instance(self, workflow_id: WorkflowId) -> WorkflowInstance:
        try:
            instance = self._instances[self._coerce_id(workflow_id)]
        except KeyError as e:
            raise WorkflowInstanceNotFoundError(workflow_id) from e
        self._check_acl(instance.definition, instance)
        return instance

    def _allocate_id(self) -> int:
        instance_id = self._next_id
        self._next_id += 1
        return instance_id

    def add_instance(
        self,
        workflow_type: str,
        context: Mapping[str, Any] | None = None,
        state: str | None = None,
        instance_id: int | None = None,
        creator: str | None = None,
    ) -> WorkflowInstance:
        """Register an instance directly, without running any action.

        Args:
            workflow_type: Type of the instance.
            context: Initial context values.
            state: State to place the instance in, defaults to the initial state.
            instance_id: Explicit id, allocated when omitted.
            creator: Creator of the instance.

        Returns:
            The stored instance.
        """
        try:
            definition = self.definitions[workflow_type]
        except KeyError as e:
            raise WorkflowTypeNotFoundError(workflow_type) from e
        state = state or definition.initial_state
        definition.get_state(state)

        if instance_id is None:
            instance_id = self._allocate_id()
        else:
            self._next_id = max(self._next_id, instance_id + 1)

        instance = WorkflowInstance(
            id=instance_id,
            definition=definition,
            state=state,
            context=dict(context or {}),
            creator=creator,
        )
        self._instances[instance_id] = instance
        return instance

    def search_instances(
        self,
        workflow_type: str | None,
        attributes: Mapping[str, Any],
        creator: str | None = None,
    ) -> list[int]:
        """Find instances by type, context attributes and creator.

        Args:
            workflow_type: Workflow type to match, any type when empty.
            attributes: Context values every match must carry.
            creator: Creator every match must have, any when empty.

        Returns:
            Ids of the matching instances in ascending order.
        """
        matches = []
        for instance in self._instances.values():
            if workflow_type and instance.definition.name != workflow_type:
                continue
            if creator and instance.creator != creator:
                continue
            if all(k in instance.context and str(instance.context[k]) == str(v) for k, v in attributes.items()):
                matches.append(instance.id)
        return sorted(matches)

    def snapshot(self, instance: WorkflowInstance) -> WorkflowSnapshot:
        """Build the read-only view of an instance."""
        definition = instance.definition
        state = definition.get_state(instance.state)

        activities: dict[str, ActivityInfo] = {}
        if not state.autorun:
            for transition in definition.available_transitions(state.name, instance.context):
                if transition.action in activities:
                    continue
                action = definition.get_action(transition.action)
                activities[action.name] = ActivityInfo(
                    name=action.name,
                    label=action.label,
                    fields=definition.input_fields(action.name),
                    ui_handler=action.ui_handler,
                )

        return WorkflowSnapshot(
            id=instance.id,
            type=definition.name,
            label=definition.label,
            description=definition.description,
            state=StateInfo(
                name=state.name,
                label=state.label,
                description=state.description,
                ui_handler=state.ui_handler,
                output=definition.output_fields(state.name),
            ),
            context=copy.deepcopy(instance.context),
            last_update=instance.last_update,
            activities=activities,
        )

    async def get_workflow_initial_info(self, workflow_type: str) -> WorkflowInitialInfo:
        definition = self._definition(workflow_type)
        return WorkflowInitialInfo(
            type=definition.name,
            label=definition.display_label,
            description=definition.description,
        )

    async def get_workflow_info(self, workflow_id: WorkflowId) -> WorkflowSnapshot:
        return self.snapshot(self._instance(workflow_id))

    async def create_workflow_instance(self, workflow_type: str) -> WorkflowSnapshot:
        """Create an instance and run its initial action where possible.

        The initial action fires right away when it is the only one and needs no
        input. Otherwise the instance waits in the initial state and its
        activities are offered.

        Args:
            workflow_type: Type of the new instance.

        Returns:
            Snapshot of the new instance.
        """
        definition = self._definition(workflow_type)
        instance = self.add_instance(workflow_type, creator=self.user)
        logger.info("Created workflow %s of type %s", instance.id, workflow_type)

        transitions = definition.available_transitions(instance.state, instance.context)
        if len(transitions) == 1 and not definition.input_fields(transitions[0].action):
            await self._fire(instance, transitions[0], {})
        else:
            await self._autorun(instance)

        return self.snapshot(instance)

    async def execute_workflow_activity(
        self,
        workflow_type: str,
        workflow_id: WorkflowId,
        action: str,
        params: Mapping[str, Any] | None = None,
    ) -> WorkflowSnapshot:
        """Execute an action on an instance.

        Submitted parameters are stored in the context under the keys of the
        action's input fields, unknown parameters are ignored.

        Args:
            workflow_type: Expected type of the instance.
            workflow_id: Instance id.
            action: Name of the action to execute.
            params: Submitted input values.

        Returns:
            Snapshot after the transition and any autorun states.

        Raises:
            WorkflowInstanceNotFoundError: If no such instance exists.
            ActivityExecutionError: If the action is not available or fails.
        """
        instance = self._instance(workflow_id)
        if instance.definition.name != workflow_type:
            raise WorkflowInstanceNotFoundError(workflow_id)

        transition = self._find_transition(instance, action)
        if transition is None:
            raise ActivityExecutionError(action, f"not available in state {instance.state}")

        await self._fire(instance, transition, params or {})
        return self.snapshot(instance)

    @staticmethod
    def _find_transition(instance: WorkflowInstance, action: str) -> Transition | None:
        state = instance.definition.get_state(instance.state)
        if state.autorun:
            return None
        for transition in instance.definition.available_transitions(state.name, instance.context):
            if transition.action == action:
                return transition
        return None

    async def _fire(self, instance: WorkflowInstance, transition: Transition, params: Mapping[str, Any]) -> None:
        await self._run_action(instance, transition, params)
        await self._autorun(instance)

    async def _run_action(self, instance: WorkflowInstance, transition: Transition, params: Mapping[str, Any]) -> None:
        definition = instance.definition
        action = definition.get_action(transition.action)

        # activities work on a copy, a failure leaves the instance untouched
        context = copy.deepcopy(instance.context)
        inputs = {parse_field_name(f.name).key for f in definition.input_fields(action.name)}
        context.update({k: v for k, v in params.items() if k in inputs})

        activity_name = short_class_name(action.activity_class) or "Noop"
        try:
            activity = self.activities[activity_name]()
        except KeyError as e:
            raise DefinitionError(f"Action '{action.name}' uses unknown activity '{activity_name}'") from e

        try:
            await activity.execute(self, context, action.resolve_params(context))
        except Exception as e:
            logger.exception("Activity %s of workflow %s failed", action.name, instance.id)
            raise ActivityExecutionError(action.name, e) from e

        logger.debug("Workflow %s: %s -> %s", instance.id, instance.state, transition.target)
        instance.context = context
        instance.state = transition.target
        instance.last_update = datetime.now(timezone.utc)

    async def _autorun(self, instance: WorkflowInstance) -> None:
        definition = instance.definition
        for _ in range(MAX_AUTORUN_STEPS):
            state = definition.get_state(instance.state)
            if not state.autorun:
                return
            transitions = definition.available_transitions(state.name, instance.context)
            if not transitions:
                raise ActivityExecutionError(state.name, "autorun state has no applicable transition")
            await self._run_action(instance, transitions[0], {})
        raise ActivityExecutionError(instance.state, "autorun loop limit reached")
