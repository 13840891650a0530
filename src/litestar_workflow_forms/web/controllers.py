"""HTTP endpoints of the workflow form layer.

The controller is a thin adapter: it reads query or form data, calls the
matching entry point of the
:class:`~litestar_workflow_forms.forms.executor.WorkflowActionExecutor` and
returns the render descriptor as JSON. Request and engine errors are part of
the descriptor, so every endpoint answers ``200``.
"""

from __future__ import annotations

from typing import Any

from litestar import Controller, Request, get, post
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK

from litestar_workflow_forms.forms.executor import WorkflowActionExecutor  # noqa: TC001 - needed for DI
from litestar_workflow_forms.forms.normalizer import collect_pairs

__all__ = ["EXECUTOR_DEPENDENCY_KEY", "WorkflowFormController"]

EXECUTOR_DEPENDENCY_KEY = "workflow_executor"


async def _form_data(request: Request) -> dict[str, list[str]]:
    form = await request.form()
    return collect_pairs((name, str(value)) for name, value in form.multi_items())


class WorkflowFormController(Controller):
    """Form endpoints for declarative workflows.

    - ``GET /index`` shows the start page of a workflow type.
    - ``GET /load`` renders an existing instance.
    - ``POST /action`` submits a rendered form or starts a new instance.
    - ``POST /select`` picks one of several activities.
    """

    path = "/"

    @get("/index")
    async def index(
        self,
        workflow_executor: WorkflowActionExecutor,
        wf_type: str | None = Parameter(default=None, description="Workflow type to start"),
    ) -> dict[str, Any]:
        """Render the start page of a workflow type.

        Args:
            workflow_executor: Injected action executor.
            wf_type: The workflow type.

        Returns:
            The render descriptor.
        """
        result = await workflow_executor.index(wf_type)
        return result.to_dict()

    @get("/load")
    async def load(
        self,
        request: Request,
        workflow_executor: WorkflowActionExecutor,
        wf_id: str | None = Parameter(default=None, description="Workflow instance id"),
    ) -> dict[str, Any]:
        """Render a workflow instance at its current state.

        Args:
            request: The current request.
            workflow_executor: Injected action executor.
            wf_id: The instance id.

        Returns:
            The render descriptor.
        """
        params = collect_pairs(request.query_params.multi_items())
        result = await workflow_executor.load(wf_id, params)
        return result.to_dict()

    @post("/action", status_code=HTTP_200_OK)
    async def action(self, request: Request, workflow_executor: WorkflowActionExecutor) -> dict[str, Any]:
        """Submit a rendered form, or start a new instance with ``wf_type``.

        Args:
            request: The current request, its body is form encoded.
            workflow_executor: Injected action executor.

        Returns:
            The render descriptor.
        """
        result = await workflow_executor.submit(await _form_data(request))
        return result.to_dict()

    @post("/select", status_code=HTTP_200_OK)
    async def select(self, request: Request, workflow_executor: WorkflowActionExecutor) -> dict[str, Any]:
        """Choose one of several activities offered by a choice form.

        Args:
            request: The current request, its body is form encoded.
            workflow_executor: Injected action executor.

        Returns:
            The render descriptor.
        """
        result = await workflow_executor.select(await _form_data(request))
        return result.to_dict()
