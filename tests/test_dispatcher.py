"""Tests for the render decision table and the default renderings."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from litestar_workflow_forms.core.definition import Field
from litestar_workflow_forms.core.models import ActivityInfo, RenderContext, RenderResult, Status
from litestar_workflow_forms.core.types import FieldType, FormTarget, RenderMode, StatusLevel
from litestar_workflow_forms.exceptions import ActionNotAvailableError
from litestar_workflow_forms.forms.dispatcher import effective_action, select_render_mode

if TYPE_CHECKING:
    from conftest import SnapshotFactory

    from litestar_workflow_forms.forms.delegation import HandlerRegistry
    from litestar_workflow_forms.forms.dispatcher import RenderDispatcher
    from litestar_workflow_forms.forms.session import MemorySessionStore
    from litestar_workflow_forms.forms.tokens import TokenRegistry

ActivityFactory = Callable[..., ActivityInfo]


@pytest.mark.unit
class TestDecisionTable:
    """Tests for select_render_mode."""

    def test_single_activity_is_implicit(self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory) -> None:
        snapshot = make_snapshot([make_activity("update", "comment")])

        mode, activity = select_render_mode(snapshot)

        assert mode is RenderMode.FIELD_FORM
        assert activity is not None
        assert activity.name == "update"

    def test_several_activities_without_choice(
        self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory
    ) -> None:
        snapshot = make_snapshot([make_activity("approve"), make_activity("reject")])

        assert select_render_mode(snapshot) == (RenderMode.CHOICE_FORM, None)

    def test_requested_activity(self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory) -> None:
        snapshot = make_snapshot([make_activity("approve"), make_activity("reject", "comment")])

        mode, activity = select_render_mode(snapshot, "reject")

        assert mode is RenderMode.FIELD_FORM
        assert activity is not None
        assert activity.name == "reject"

    def test_no_activities(self, make_snapshot: SnapshotFactory) -> None:
        assert select_render_mode(make_snapshot()) == (RenderMode.OUTPUT, None)

    def test_state_handler_wins(self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory) -> None:
        """A state handler is chosen regardless of the available activities."""
        snapshot = make_snapshot(
            [make_activity("a"), make_activity("b"), make_activity("c")],
            state_handler="metadata.render_current_data",
        )

        assert select_render_mode(snapshot) == (RenderMode.DELEGATE_STATE, None)
        assert select_render_mode(snapshot, "missing") == (RenderMode.DELEGATE_STATE, None)

    def test_action_handler(self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory) -> None:
        snapshot = make_snapshot([make_activity("upload", ui_handler="csr.upload")])

        mode, activity = select_render_mode(snapshot)

        assert mode is RenderMode.DELEGATE_ACTION
        assert activity is not None
        assert activity.ui_handler == "csr.upload"

    def test_single_activity_ignores_requested_action(
        self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory
    ) -> None:
        snapshot = make_snapshot([make_activity("update")])

        activity = effective_action(snapshot, "other")

        assert activity is not None
        assert activity.name == "update"

    def test_unknown_requested_action(self, make_snapshot: SnapshotFactory, make_activity: ActivityFactory) -> None:
        snapshot = make_snapshot([make_activity("approve"), make_activity("reject")])

        with pytest.raises(ActionNotAvailableError, match="Requested action is not available"):
            select_render_mode(snapshot, "delete")


@pytest.mark.unit
@pytest.mark.asyncio
class TestRenderDispatcher:
    """Tests for RenderDispatcher.render."""

    async def test_field_form(
        self,
        dispatcher: RenderDispatcher,
        tokens: TokenRegistry,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        snapshot = make_snapshot(
            [make_activity("update", "comment", "tag[]", label="Save")],
            context={"comment": "current", "tag": ["a", "b"]},
            description="Edit the metadata",
        )

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        assert result.page is not None
        assert result.page.label == "Change Metadata"
        assert result.page.description == "Edit the metadata"
        [section] = result.sections
        assert section.target is FormTarget.ACTION
        assert section.submit_label == "Save"
        assert [f.name for f in section.fields] == ["comment", "tag[]", "wf_token"]
        assert section.fields[0].value == "current"
        assert section.fields[1].value == ["a", "b"]

        token = await tokens.fetch(section.fields[-1].value)
        assert token is not None
        assert token.action == "update"
        assert [f.name for f in token.fields] == ["comment", "tag[]"]

    async def test_field_form_prefills_collection_entries(
        self,
        dispatcher: RenderDispatcher,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        snapshot = make_snapshot(
            [make_activity("update", "meta{email}", "meta{phone}", "tag[]")],
            context={"meta": '{"email": "a@example.com", "phone": "555"}', "tag": '["a", "b"]'},
        )

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        values = {f.name: f.value for f in result.sections[0].fields[:-1]}
        assert values == {"meta{email}": "a@example.com", "meta{phone}": "555", "tag[]": ["a", "b"]}

    async def test_field_form_defaults(
        self,
        dispatcher: RenderDispatcher,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        snapshot = make_snapshot([make_activity("update", "comment")])

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        section = result.sections[0]
        assert section.submit_label == "proceed"
        assert section.fields[0].type is FieldType.TEXT
        assert section.fields[0].value is None
        assert result.page is not None
        assert result.page.description == "Edit certificate metadata"

    async def test_field_form_options(
        self,
        dispatcher: RenderDispatcher,
        make_snapshot: SnapshotFactory,
    ) -> None:
        activity = ActivityInfo(
            name="choose",
            fields=(
                Field(name="endpoint", type=FieldType.SELECT, options=("scep-1", "scep-2")),
                Field(name="comment", options=("ignored",)),
            ),
        )

        result = await dispatcher.render(RenderContext(snapshot=make_snapshot([activity])))

        endpoint, comment, _ = result.sections[0].fields
        assert endpoint.options == ("scep-1", "scep-2")
        assert comment.options is None

    async def test_choice_form(
        self,
        dispatcher: RenderDispatcher,
        session_store: MemorySessionStore,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        snapshot = make_snapshot([make_activity("approve", label="Approve"), make_activity("reject")])

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        assert [s.submit_label for s in result.sections] == ["Approve", "reject"]
        for section, action in zip(result.sections, ["approve", "reject"]):
            assert section.target is FormTarget.SELECT
            assert {f.name: f.value for f in section.fields} == {"wf_action": action, "wf_id": 7}
        assert len(session_store) == 0

    async def test_requested_action_renders_its_form(
        self,
        dispatcher: RenderDispatcher,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        snapshot = make_snapshot([make_activity("approve"), make_activity("reject", "comment")])

        result = await dispatcher.render(RenderContext(snapshot=snapshot, action="reject"))

        assert [f.name for f in result.sections[0].fields] == ["comment", "wf_token"]

    async def test_single_activity_without_fields_is_a_confirm_form(
        self,
        dispatcher: RenderDispatcher,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        result = await dispatcher.render(RenderContext(snapshot=make_snapshot([make_activity("confirm")])))

        [section] = result.sections
        assert [f.name for f in section.fields] == ["wf_token"]

    async def test_output_redirect(self, dispatcher: RenderDispatcher, make_snapshot: SnapshotFactory) -> None:
        snapshot = make_snapshot(
            state="SUCCESS",
            output=[Field(name="redirect", type=FieldType.REDIRECT)],
            context={"redirect": "workflow!load!wf_id!42"},
        )

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        assert result.is_redirect
        assert result.redirect == "workflow!load!wf_id!42"
        assert result.to_dict() == {"status": None, "redirect": "workflow!load!wf_id!42"}

    async def test_output_info(self, dispatcher: RenderDispatcher, make_snapshot: SnapshotFactory) -> None:
        snapshot = make_snapshot(
            state="NORESULT",
            output=[
                Field(name="redirect", type=FieldType.REDIRECT),
                Field(name="error_code", label="Error"),
                Field(name="transaction_id"),
            ],
            context={"error_code": "NO_MATCHES", "transaction_id": "XYZ"},
        )

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        assert not result.is_redirect
        [section] = result.sections
        assert section.target is None
        assert [(f.name, f.type, f.label, f.value) for f in section.fields] == [
            ("error_code", FieldType.INFO, "Error", "NO_MATCHES"),
            ("transaction_id", FieldType.INFO, "transaction_id", "XYZ"),
        ]

    async def test_output_without_fields(self, dispatcher: RenderDispatcher, make_snapshot: SnapshotFactory) -> None:
        result = await dispatcher.render(RenderContext(snapshot=make_snapshot(state="DONE")))

        assert result.sections == []
        assert result.page is not None

    async def test_status_is_carried(
        self,
        dispatcher: RenderDispatcher,
        make_snapshot: SnapshotFactory,
    ) -> None:
        status = Status(message="Workflow was updated", level=StatusLevel.SUCCESS)

        result = await dispatcher.render(RenderContext(snapshot=make_snapshot(), status=status))

        assert result.status == status

    async def test_state_handler_delegation(
        self,
        dispatcher: RenderDispatcher,
        handlers: HandlerRegistry,
        session_store: MemorySessionStore,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        """The handler receives the full context and its result is returned as is."""
        seen: list[RenderContext] = []
        custom = RenderResult.redirect_to("custom")

        @handlers.register("metadata.render_current_data")
        def render_current_data(context: RenderContext) -> RenderResult:
            seen.append(context)
            return custom

        snapshot = make_snapshot(
            [make_activity("a"), make_activity("b"), make_activity("c")],
            state_handler="metadata.render_current_data",
        )
        context = RenderContext(snapshot=snapshot, params={"x": "1"})

        result = await dispatcher.render(context)

        assert result is custom
        assert seen == [context]
        assert len(session_store) == 0

    async def test_action_handler_delegation(
        self,
        dispatcher: RenderDispatcher,
        handlers: HandlerRegistry,
        make_snapshot: SnapshotFactory,
        make_activity: ActivityFactory,
    ) -> None:
        async def upload_form(context: RenderContext) -> RenderResult:
            return RenderResult.error(f"handled {context.action}")

        handlers.register("csr.upload", upload_form)
        snapshot = make_snapshot([make_activity("upload", ui_handler="csr.upload")])

        result = await dispatcher.render(RenderContext(snapshot=snapshot))

        assert result.status is not None
        assert result.status.message == "handled upload"
