"""Tests for exception hierarchy."""

from __future__ import annotations

import pytest


@pytest.mark.unit
class TestWorkflowFormsError:
    """Tests for base WorkflowFormsError exception."""

    def test_base_exception_creation(self) -> None:
        """Test creating base WorkflowFormsError."""
        from litestar_workflow_forms.exceptions import WorkflowFormsError

        error = WorkflowFormsError("Test error message")

        assert str(error) == "Test error message"
        assert isinstance(error, Exception)

    @pytest.mark.parametrize(
        "name",
        ["DefinitionError", "DelegationError", "RequestError", "EngineError"],
    )
    def test_families_inherit_from_base(self, name: str) -> None:
        """Test every error family can be caught with the base class."""
        from litestar_workflow_forms import exceptions

        assert issubclass(getattr(exceptions, name), exceptions.WorkflowFormsError)

    def test_families_are_distinct(self) -> None:
        """Test recoverable and fatal families do not overlap."""
        from litestar_workflow_forms.exceptions import DefinitionError, DelegationError, EngineError, RequestError

        assert not issubclass(RequestError, EngineError)
        assert not issubclass(EngineError, RequestError)
        assert not issubclass(DefinitionError, (RequestError, EngineError))
        assert not issubclass(DelegationError, (RequestError, EngineError))


@pytest.mark.unit
class TestDefinitionError:
    """Tests for DefinitionError exception."""

    def test_single_message(self) -> None:
        """Test a single message is wrapped into the error list."""
        from litestar_workflow_forms.exceptions import DefinitionError

        error = DefinitionError("Unknown state 'RESULT'")

        assert error.errors == ["Unknown state 'RESULT'"]
        assert str(error) == "Workflow definition mismatch: Unknown state 'RESULT'"

    def test_multiple_messages(self) -> None:
        """Test all validation messages end up in the error string."""
        from litestar_workflow_forms.exceptions import DefinitionError

        error = DefinitionError(["first problem", "second problem"])

        assert len(error.errors) == 2
        assert "first problem; second problem" in str(error)


@pytest.mark.unit
class TestDelegationError:
    """Tests for DelegationError exception."""

    def test_with_reason(self) -> None:
        """Test the reason is appended to the message."""
        from litestar_workflow_forms.exceptions import DelegationError

        error = DelegationError("metadata.render", "No module named 'metadata'")

        assert error.identifier == "metadata.render"
        assert str(error) == "Unable to resolve render handler 'metadata.render': No module named 'metadata'"

    def test_without_reason(self) -> None:
        """Test the message without a reason."""
        from litestar_workflow_forms.exceptions import DelegationError

        assert str(DelegationError("x")) == "Unable to resolve render handler 'x'"


@pytest.mark.unit
class TestRequestErrors:
    """Tests for the user facing request errors."""

    def test_invalid_token_hides_token(self) -> None:
        """Test the submitted token is kept but not shown."""
        from litestar_workflow_forms.exceptions import InvalidTokenError, RequestError

        error = InvalidTokenError("secret-token")

        assert isinstance(error, RequestError)
        assert error.token_id == "secret-token"
        assert str(error) == "Invalid request"
        assert "secret-token" not in str(error)

    def test_action_not_available(self) -> None:
        """Test ActionNotAvailableError keeps the action name."""
        from litestar_workflow_forms.exceptions import ActionNotAvailableError

        error = ActionNotAvailableError("approve")

        assert error.action == "approve"
        assert str(error) == "Requested action is not available"

    def test_field_validation_error(self) -> None:
        """Test FieldValidationError shows the validator message."""
        from litestar_workflow_forms.exceptions import FieldValidationError, RequestError

        error = FieldValidationError("transaction_id", "Transaction id is malformed")

        assert isinstance(error, RequestError)
        assert error.field_name == "transaction_id"
        assert str(error) == "Transaction id is malformed"


@pytest.mark.unit
class TestEngineErrors:
    """Tests for errors reported by the workflow engine."""

    def test_type_not_found(self) -> None:
        """Test WorkflowTypeNotFoundError."""
        from litestar_workflow_forms.exceptions import EngineError, WorkflowTypeNotFoundError

        error = WorkflowTypeNotFoundError("nonexistent")

        assert isinstance(error, EngineError)
        assert error.workflow_type == "nonexistent"
        assert str(error) == "Workflow type 'nonexistent' not found"

    def test_instance_not_found(self) -> None:
        """Test WorkflowInstanceNotFoundError."""
        from litestar_workflow_forms.exceptions import WorkflowInstanceNotFoundError

        error = WorkflowInstanceNotFoundError(42)

        assert error.instance_id == 42
        assert str(error) == "Workflow instance '42' not found"

    def test_unauthorized(self) -> None:
        """Test UnauthorizedWorkflowError names role and type."""
        from litestar_workflow_forms.exceptions import UnauthorizedWorkflowError

        error = UnauthorizedWorkflowError("search_scep", "Guest")

        assert error.workflow_type == "search_scep"
        assert error.role == "Guest"
        assert str(error) == "Role 'Guest' is not authorized for workflow 'search_scep'"

    def test_activity_execution_with_cause(self) -> None:
        """Test ActivityExecutionError keeps the underlying exception."""
        from litestar_workflow_forms.exceptions import ActivityExecutionError

        cause = ValueError("boom")
        error = ActivityExecutionError("initialize", cause)

        assert error.cause is cause
        assert str(error) == "Action 'initialize' failed: boom"

    def test_activity_execution_without_cause(self) -> None:
        """Test ActivityExecutionError without cause."""
        from litestar_workflow_forms.exceptions import ActivityExecutionError

        assert str(ActivityExecutionError("initialize")) == "Action 'initialize' failed"
