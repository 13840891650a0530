"""Tests for type definitions, enums and render models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest


@pytest.mark.unit
class TestFieldType:
    """Tests for FieldType enum."""

    def test_string_conversion(self) -> None:
        """Test FieldType can be converted to string."""
        from litestar_workflow_forms.core.types import FieldType

        assert str(FieldType.TEXT) == "text"
        assert str(FieldType.HIDDEN) == "hidden"
        assert FieldType.SELECT == "select"

    @pytest.mark.parametrize(
        ("declared", "expected"),
        [
            (None, "text"),
            ("", "text"),
            ("basic", "text"),
            ("textarea", "textarea"),
            ("select", "select"),
            ("redirect", "redirect"),
            ("datetime", "text"),
        ],
    )
    def test_parse(self, declared: str | None, expected: str) -> None:
        """Test declared types map to display types, unknown ones to text."""
        from litestar_workflow_forms.core.types import FieldType

        assert FieldType.parse(declared) == expected


@pytest.mark.unit
class TestReservedParam:
    """Tests for ReservedParam enum."""

    def test_values(self) -> None:
        """Test the bookkeeping parameter names."""
        from litestar_workflow_forms.core.types import RESERVED_PREFIX, ReservedParam

        assert ReservedParam.TOKEN == "wf_token"
        assert ReservedParam.TYPE == "wf_type"
        assert ReservedParam.ID == "wf_id"
        assert ReservedParam.ACTION == "wf_action"
        assert all(str(p).startswith(RESERVED_PREFIX) for p in ReservedParam)

    def test_render_modes(self) -> None:
        """Test RenderMode has one member per decision table row."""
        from litestar_workflow_forms.core.types import RenderMode

        assert len(RenderMode) == 5


@pytest.mark.unit
class TestFieldDescriptor:
    """Tests for FieldDescriptor serialization."""

    def test_to_dict_omits_empty(self) -> None:
        """Test value and options are only present when set."""
        from litestar_workflow_forms.core.models import FieldDescriptor

        data = FieldDescriptor(name="comment").to_dict()

        assert data == {"name": "comment", "type": "text", "label": ""}

    def test_to_dict_with_options(self) -> None:
        """Test options serialize as a list."""
        from litestar_workflow_forms.core.models import FieldDescriptor
        from litestar_workflow_forms.core.types import FieldType

        descriptor = FieldDescriptor(name="endpoint", type=FieldType.SELECT, value="a", options=("a", "b"))

        assert descriptor.to_dict() == {
            "name": "endpoint",
            "type": "select",
            "label": "",
            "value": "a",
            "options": ["a", "b"],
        }

    def test_hidden(self) -> None:
        """Test the hidden field shortcut."""
        from litestar_workflow_forms.core.models import FieldDescriptor
        from litestar_workflow_forms.core.types import FieldType

        descriptor = FieldDescriptor.hidden("wf_id", 42)

        assert descriptor.type is FieldType.HIDDEN
        assert descriptor.value == 42


@pytest.mark.unit
class TestPendingActionToken:
    """Tests for PendingActionToken persistence format."""

    def test_from_dict_restores_token(self) -> None:
        """Test a stored token is restored with typed fields and timestamp."""
        from litestar_workflow_forms.core.models import FieldDescriptor, PendingActionToken
        from litestar_workflow_forms.core.types import FieldType

        token = PendingActionToken(
            id="abc",
            workflow_id=7,
            workflow_type="change_metadata",
            action="update",
            fields=(FieldDescriptor(name="owner[]", type=FieldType.TEXTAREA, label="Owner"),),
            last_update=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )

        restored = PendingActionToken.from_dict(token.to_dict())

        assert restored == token
        assert restored.fields[0].type is FieldType.TEXTAREA

    def test_to_dict_without_timestamp(self) -> None:
        """Test a token without last update serializes to None."""
        from litestar_workflow_forms.core.models import PendingActionToken

        data = PendingActionToken(id="abc", workflow_id=7, workflow_type="t", action=None).to_dict()

        assert data["last_update"] is None
        assert data["fields"] == []
        assert data["handler"] is None


@pytest.mark.unit
class TestRenderResult:
    """Tests for RenderResult."""

    def test_error(self) -> None:
        """Test an error result has a status and nothing else."""
        from litestar_workflow_forms.core.models import RenderResult

        result = RenderResult.error("Invalid request")

        assert result.is_error
        assert not result.is_redirect
        assert result.to_dict() == {
            "status": {"message": "Invalid request", "level": "error"},
            "page": None,
            "sections": [],
        }

    def test_redirect(self) -> None:
        """Test a redirect result carries no page."""
        from litestar_workflow_forms.core.models import RenderResult

        result = RenderResult.redirect_to("workflow!load!wf_id!42")

        assert result.is_redirect
        assert not result.is_error
        assert result.to_dict() == {"status": None, "redirect": "workflow!load!wf_id!42"}

    def test_page(self) -> None:
        """Test a page result serializes its sections."""
        from litestar_workflow_forms.core.models import FieldDescriptor, FormSection, PageInfo, RenderResult
        from litestar_workflow_forms.core.types import FormTarget

        result = RenderResult(
            page=PageInfo(label="Search", description="Find a request"),
            sections=[FormSection(target=FormTarget.ACTION, submit_label="start", fields=[FieldDescriptor.hidden("wf_type", "search_scep")])],
        )

        data = result.to_dict()

        assert data["page"] == {"label": "Search", "description": "Find a request"}
        assert data["sections"][0]["target"] == "action"
        assert data["sections"][0]["fields"][0] == {"name": "wf_type", "type": "hidden", "label": "", "value": "search_scep"}
