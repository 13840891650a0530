"""Shared test fixtures for litestar-workflow-forms test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from litestar_workflow_forms.core.definition import WorkflowDefinition
    from litestar_workflow_forms.core.models import ActivityInfo, WorkflowSnapshot
    from litestar_workflow_forms.engine.memory import InMemoryEngine
    from litestar_workflow_forms.forms.delegation import HandlerRegistry
    from litestar_workflow_forms.forms.dispatcher import RenderDispatcher
    from litestar_workflow_forms.forms.executor import WorkflowActionExecutor
    from litestar_workflow_forms.forms.session import MemorySessionStore
    from litestar_workflow_forms.forms.tokens import TokenRegistry

SnapshotFactory = Callable[..., "WorkflowSnapshot"]

ENROLLMENT_ID = 42
TRANSACTION_ID = "ABC123"


@pytest.fixture
def last_update() -> datetime:
    """Fixed modification time for snapshots."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_activity() -> Callable[..., ActivityInfo]:
    """Factory for activities with input fields given by name.

    Returns:
        A callable ``(name, *field_names, label="", ui_handler=None)``.
    """
    from litestar_workflow_forms.core.definition import Field
    from litestar_workflow_forms.core.models import ActivityInfo

    def factory(name: str, *field_names: str, label: str = "", ui_handler: str | None = None) -> ActivityInfo:
        return ActivityInfo(
            name=name,
            label=label,
            fields=tuple(Field(name=f, label=f.title()) for f in field_names),
            ui_handler=ui_handler,
        )

    return factory


@pytest.fixture
def make_snapshot(last_update: datetime) -> SnapshotFactory:
    """Factory for workflow snapshots.

    Returns:
        A callable building a snapshot of instance 7 of type ``change_metadata``.
    """
    from litestar_workflow_forms.core.definition import Field
    from litestar_workflow_forms.core.models import StateInfo, WorkflowSnapshot

    def factory(
        activities: Iterable[ActivityInfo] = (),
        context: dict[str, Any] | None = None,
        state: str = "DATA_UPDATE",
        state_handler: str | None = None,
        output: Iterable[Field] = (),
        description: str = "",
        workflow_id: int = 7,
    ) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            id=workflow_id,
            type="change_metadata",
            label="Change Metadata",
            description="Edit certificate metadata",
            state=StateInfo(
                name=state,
                description=description,
                ui_handler=state_handler,
                output=tuple(output),
            ),
            context=context or {},
            last_update=last_update,
            activities={a.name: a for a in activities},
        )

    return factory


@pytest.fixture
def search_definition() -> WorkflowDefinition:
    """The packaged search workflow."""
    from litestar_workflow_forms.core.loader import load_packaged_definition

    return load_packaged_definition("search_scep")


@pytest.fixture
def enrollment_definition() -> WorkflowDefinition:
    """The packaged enrollment workflow."""
    from litestar_workflow_forms.core.loader import load_packaged_definition

    return load_packaged_definition("enrollment")


@pytest.fixture
def engine(search_definition: WorkflowDefinition, enrollment_definition: WorkflowDefinition) -> InMemoryEngine:
    """In-memory engine with one pending enrollment (id 42, transaction ABC123).

    Returns:
        InMemoryEngine instance
    """
    from litestar_workflow_forms.engine.memory import InMemoryEngine

    engine = InMemoryEngine([search_definition, enrollment_definition], first_id=100)
    engine.add_instance(
        "enrollment",
        context={"transaction_id": TRANSACTION_ID},
        state="PENDING",
        instance_id=ENROLLMENT_ID,
    )
    return engine


@pytest.fixture
def session_store() -> MemorySessionStore:
    """Fresh in-memory session store."""
    from litestar_workflow_forms.forms.session import MemorySessionStore

    return MemorySessionStore()


@pytest.fixture
def tokens(session_store: MemorySessionStore) -> TokenRegistry:
    """Token registry over the session store fixture."""
    from litestar_workflow_forms.forms.tokens import TokenRegistry

    return TokenRegistry(session_store)


@pytest.fixture
def handlers() -> HandlerRegistry:
    """Empty custom handler registry."""
    from litestar_workflow_forms.forms.delegation import HandlerRegistry

    return HandlerRegistry()


@pytest.fixture
def dispatcher(tokens: TokenRegistry, handlers: HandlerRegistry) -> RenderDispatcher:
    """Render dispatcher sharing the token and handler fixtures."""
    from litestar_workflow_forms.forms.dispatcher import RenderDispatcher

    return RenderDispatcher(tokens, handlers)


@pytest.fixture
def executor(engine: InMemoryEngine, dispatcher: RenderDispatcher) -> WorkflowActionExecutor:
    """Action executor over the in-memory engine.

    Returns:
        WorkflowActionExecutor instance
    """
    from litestar_workflow_forms.forms.executor import WorkflowActionExecutor

    return WorkflowActionExecutor(engine, dispatcher)
