"""Action executor.

Entry points called by the web layer for each browser request:

- :meth:`WorkflowActionExecutor.index` shows the start page of a workflow type,
- :meth:`WorkflowActionExecutor.load` renders an existing instance,
- :meth:`WorkflowActionExecutor.submit` executes a token-bound action or
  creates a new instance,
- :meth:`WorkflowActionExecutor.select` handles the choice between several
  activities.

Request and engine errors never escape: they end the request with exactly one
error status. Definition and delegation errors are configuration problems and
propagate.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from litestar_workflow_forms.core.models import (
    FieldDescriptor,
    FormSection,
    PageInfo,
    RenderContext,
    RenderResult,
    Status,
)
from litestar_workflow_forms.core.types import FormTarget, ReservedParam, StatusLevel
from litestar_workflow_forms.exceptions import (
    ActionNotAvailableError,
    EngineError,
    InvalidTokenError,
    RequestError,
)
from litestar_workflow_forms.forms.normalizer import normalize_fields, serialize_params

if TYPE_CHECKING:
    from litestar_workflow_forms.core.models import PendingActionToken, WorkflowId
    from litestar_workflow_forms.core.protocols import EngineClient, FieldValidator
    from litestar_workflow_forms.core.types import SubmittedData
    from litestar_workflow_forms.forms.dispatcher import RenderDispatcher
    from litestar_workflow_forms.forms.tokens import TokenRegistry

__all__ = ["WorkflowActionExecutor"]

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[RenderResult]])

START_LABEL = "start"
UPDATED_MESSAGE = "Workflow was updated"


def _reports_errors(func: F) -> F:
    """Turn recoverable errors into a single error status."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> RenderResult:
        try:
            return await func(*args, **kwargs)
        except RequestError as e:
            logger.info("Rejected request in %s: %s", func.__name__, e)
            return RenderResult.error(str(e))
        except EngineError as e:
            logger.warning("Workflow engine error in %s: %s", func.__name__, e)
            return RenderResult.error(str(e))

    return wrapper  # type: ignore[return-value]


def _param(params: SubmittedData | Mapping[str, Any], name: str) -> str | None:
    value = params.get(name)
    if isinstance(value, (list, tuple)):
        value = value[-1] if value else None
    return str(value) if value not in (None, "") else None


class WorkflowActionExecutor:
    """Validates submissions and forwards them to the workflow engine.

    Attributes:
        engine: The external workflow engine.
        dispatcher: Renders snapshots returned by the engine.
        validators: Optional field validation hooks keyed by context key.
        check_staleness: Reject token-bound submissions when the instance
            changed since the form was rendered.
    """

    __slots__ = ("check_staleness", "dispatcher", "engine", "validators")

    def __init__(
        self,
        engine: EngineClient,
        dispatcher: RenderDispatcher,
        validators: Mapping[str, FieldValidator] | None = None,
        check_staleness: bool = False,
    ) -> None:
        """Initialize the executor.

        Args:
            engine: The external workflow engine.
            dispatcher: The render dispatcher, its token registry is shared.
            validators: Optional field validation hooks keyed by context key.
            check_staleness: Reject submissions for instances changed since rendering.
        """
        self.engine = engine
        self.dispatcher = dispatcher
        self.validators = validators
        self.check_staleness = check_staleness

    @property
    def tokens(self) -> TokenRegistry:
        return self.dispatcher.tokens

    @_reports_errors
    async def index(self, workflow_type: str | None) -> RenderResult:
        """Render the start page of a workflow type.

        No instance is created, that happens on the first submission.

        Args:
            workflow_type: The workflow type identifier.

        Returns:
            A page with the type description and a start button.
        """
        if not workflow_type:
            raise RequestError("Invalid request (no workflow type)")

        info = await self.engine.get_workflow_initial_info(workflow_type)
        section = FormSection(
            target=FormTarget.ACTION,
            submit_label=START_LABEL,
            fields=[FieldDescriptor.hidden(str(ReservedParam.TYPE), workflow_type)],
        )
        return RenderResult(page=PageInfo(label=info.label or info.type, description=info.description), sections=[section])

    @_reports_errors
    async def load(self, workflow_id: WorkflowId | None, params: SubmittedData | None = None) -> RenderResult:
        """Render an existing instance at its current state.

        Args:
            workflow_id: The instance id.
            params: The original request parameters.

        Returns:
            The rendered state.
        """
        if workflow_id in (None, ""):
            raise RequestError("Invalid request (no workflow id)")

        snapshot = await self.engine.get_workflow_info(workflow_id)
        return await self.dispatcher.render(RenderContext(snapshot=snapshot, params=params or {}))

    @_reports_errors
    async def submit(self, params: SubmittedData) -> RenderResult:
        """Handle a generic form submission.

        With a ``wf_token`` the recorded action is executed with the recorded
        fields. Without a token but with ``wf_type`` a new instance is created.

        Args:
            params: The submitted form data.

        Returns:
            The rendered state after the transition.

        Raises:
            InvalidTokenError: Caught and reported, when neither a valid token
                nor a workflow type is present.
        """
        token_id = _param(params, ReservedParam.TOKEN)
        if token_id:
            return await self._submit_token(token_id, params)

        workflow_type = _param(params, ReservedParam.TYPE)
        if workflow_type:
            snapshot = await self.engine.create_workflow_instance(workflow_type)
            logger.debug("Created workflow %s of type %s", snapshot.id, workflow_type)
            return await self.dispatcher.render(RenderContext(snapshot=snapshot, params=params))

        raise InvalidTokenError()

    async def _submit_token(self, token_id: str, params: SubmittedData) -> RenderResult:
        token = await self.tokens.fetch(token_id)
        if token is None:
            raise InvalidTokenError(token_id)

        if token.handler:
            token = await self._consume(token_id)
            snapshot = await self.engine.get_workflow_info(token.workflow_id)
            context = RenderContext(snapshot=snapshot, params=params, action=token.action, token=token)
            return await self.dispatcher.handlers.delegate(token.handler or "", context)

        if not token.action:
            raise RequestError("Invalid request (no action)")

        values = normalize_fields(token.fields, params, self.validators)

        if self.check_staleness:
            await self._ensure_current(token)

        token = await self._consume(token_id)
        action = token.action or ""
        snapshot = await self.engine.execute_workflow_activity(
            token.workflow_type,
            token.workflow_id,
            action,
            serialize_params(values),
        )
        logger.debug("Executed %s on workflow %s", action, token.workflow_id)

        return await self.dispatcher.render(
            RenderContext(
                snapshot=snapshot,
                params=params,
                token=token,
                status=Status(message=UPDATED_MESSAGE, level=StatusLevel.SUCCESS),
            )
        )

    async def _consume(self, token_id: str) -> PendingActionToken:
        # purging read, a concurrent submission of the same token gets nothing
        token = await self.tokens.fetch(token_id, purge=True)
        if token is None:
            logger.warning("Token was consumed concurrently")
            raise InvalidTokenError(token_id)
        return token

    async def _ensure_current(self, token: PendingActionToken) -> None:
        snapshot = await self.engine.get_workflow_info(token.workflow_id)
        if token.last_update is not None and snapshot.last_update != token.last_update:
            await self.tokens.purge(token.id)
            raise RequestError("Workflow was changed in the meantime, please reload")

    @_reports_errors
    async def select(self, params: SubmittedData) -> RenderResult:
        """Handle the choice of one of several activities.

        The instance is referenced by ``wf_id`` or by a token. An action
        without input fields and without custom handler executes immediately,
        otherwise its form is rendered.

        Args:
            params: The submitted form data with ``wf_action``.

        Returns:
            The rendered result.
        """
        action = _param(params, ReservedParam.ACTION)
        logger.debug("Activity select %s", action)

        workflow_id: WorkflowId | None = _param(params, ReservedParam.ID)
        if workflow_id is None:
            token = await self.tokens.fetch(_param(params, ReservedParam.TOKEN) or "")
            if token is None:
                raise InvalidTokenError()
            workflow_id = token.workflow_id

        if not action:
            raise RequestError("Invalid request (no action)")

        snapshot = await self.engine.get_workflow_info(workflow_id)
        activity = snapshot.activities.get(action)
        if activity is None:
            raise ActionNotAvailableError(action)

        if not activity.fields and not activity.ui_handler:
            logger.debug("Activity %s has no input, executing", action)
            snapshot = await self.engine.execute_workflow_activity(snapshot.type, snapshot.id, action)
            return await self.dispatcher.render(RenderContext(snapshot=snapshot, params=params))

        return await self.dispatcher.render(RenderContext(snapshot=snapshot, params=params, action=action))

