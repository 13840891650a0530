"""Exception hierarchy for litestar-workflow-forms.

Errors fall into four families:

- :class:`DefinitionError`: the declarative workflow definition is inconsistent.
  Fatal, it reflects a misconfiguration.
- :class:`RequestError`: the browser submission is unusable (missing or
  replayed token, unavailable action, invalid field data). Recoverable, reported
  to the user as a single status message.
- :class:`EngineError`: the external workflow engine failed or refused the
  command. Recoverable at this layer, never retried.
- :class:`DelegationError`: a custom render handler cannot be resolved. Fatal.
"""

from __future__ import annotations

__all__ = (
    "ActionNotAvailableError",
    "ActivityExecutionError",
    "DefinitionError",
    "DelegationError",
    "EngineError",
    "FieldValidationError",
    "InvalidTokenError",
    "RequestError",
    "UnauthorizedWorkflowError",
    "WorkflowFormsError",
    "WorkflowInstanceNotFoundError",
    "WorkflowTypeNotFoundError",
)


class WorkflowFormsError(Exception):
    """Base exception for all litestar-workflow-forms errors.

    All exceptions raised by litestar-workflow-forms inherit from this class.
    This allows users to catch all workflow form errors with a single except clause.
    """


class DefinitionError(WorkflowFormsError):
    """Raised when a workflow definition is inconsistent or a lookup misses.

    This occurs at load time for dangling references (unknown target states,
    actions, fields or conditions) and at runtime when the engine reports a
    state or action the loaded definition does not know about.

    Attributes:
        errors: List of problems found in the definition.
    """

    def __init__(self, errors: list[str] | str) -> None:
        """Initialize the exception with the definition problems.

        Args:
            errors: A single message or the list of validation messages.
        """
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__(f"Workflow definition mismatch: {'; '.join(self.errors)}")


class DelegationError(WorkflowFormsError):
    """Raised when a custom render handler identifier cannot be resolved.

    Attributes:
        identifier: The handler identifier that failed to resolve.
    """

    def __init__(self, identifier: str, reason: str | None = None) -> None:
        """Initialize the exception with the handler identifier.

        Args:
            identifier: The handler identifier that failed to resolve.
            reason: Additional context about the failure.
        """
        self.identifier = identifier
        msg = f"Unable to resolve render handler '{identifier}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class RequestError(WorkflowFormsError):
    """Base exception for unusable browser submissions.

    The message of a request error is shown to the user verbatim, so it
    should not leak internals.
    """


class InvalidTokenError(RequestError):
    """Raised when a submission carries no known workflow token.

    Attributes:
        token_id: The token id that was submitted, if any.
    """

    def __init__(self, token_id: str | None = None) -> None:
        """Initialize the exception.

        Args:
            token_id: The token id that was submitted, if any.
        """
        self.token_id = token_id
        super().__init__("Invalid request")


class ActionNotAvailableError(RequestError):
    """Raised when the requested action is not offered in the current state.

    Attributes:
        action: The requested action name.
    """

    def __init__(self, action: str) -> None:
        """Initialize the exception.

        Args:
            action: The requested action name.
        """
        self.action = action
        super().__init__("Requested action is not available")


class FieldValidationError(RequestError):
    """Raised by a field validator hook when submitted data is rejected.

    Attributes:
        field_name: Name of the rejected field.
    """

    def __init__(self, field_name: str, message: str) -> None:
        """Initialize the exception.

        Args:
            field_name: Name of the rejected field.
            message: User facing explanation.
        """
        self.field_name = field_name
        super().__init__(message)


class EngineError(WorkflowFormsError):
    """Base exception for failures reported by the workflow engine."""


class WorkflowTypeNotFoundError(EngineError):
    """Raised when the engine does not know a workflow type.

    Attributes:
        workflow_type: The unknown workflow type.
    """

    def __init__(self, workflow_type: str) -> None:
        """Initialize the exception.

        Args:
            workflow_type: The unknown workflow type.
        """
        self.workflow_type = workflow_type
        super().__init__(f"Workflow type '{workflow_type}' not found")


class WorkflowInstanceNotFoundError(EngineError):
    """Raised when a workflow instance is not found.

    Attributes:
        instance_id: The ID of the workflow instance that was not found.
    """

    def __init__(self, instance_id: str | int) -> None:
        """Initialize the exception with instance details.

        Args:
            instance_id: The ID of the workflow instance that was not found.
        """
        self.instance_id = instance_id
        super().__init__(f"Workflow instance '{instance_id}' not found")


class UnauthorizedWorkflowError(EngineError):
    """Raised when the current role may not access a workflow.

    Attributes:
        workflow_type: The workflow type.
        role: The role that was refused.
    """

    def __init__(self, workflow_type: str, role: str | None) -> None:
        """Initialize the exception with authorization details.

        Args:
            workflow_type: The workflow type.
            role: The role that was refused.
        """
        self.workflow_type = workflow_type
        self.role = role
        super().__init__(f"Role '{role}' is not authorized for workflow '{workflow_type}'")


class ActivityExecutionError(EngineError):
    """Raised when executing a workflow activity fails.

    Attributes:
        action: The action that failed.
        cause: The underlying exception, if any.
    """

    def __init__(self, action: str, cause: Exception | str | None = None) -> None:
        """Initialize the exception with execution details.

        Args:
            action: The action that failed.
            cause: The underlying exception or a message, if any.
        """
        self.action = action
        self.cause = cause
        msg = f"Action '{action}' failed"
        if cause:
            msg += f": {cause}"
        super().__init__(msg)
