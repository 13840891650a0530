"""Exception handling for the workflow form endpoints.

Request and engine errors are reported inside the descriptor by the executor.
What reaches these handlers is a configuration problem: a definition that
does not match the engine or a custom handler that cannot be resolved. The
details are logged, the client gets a generic error status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar import MediaType, Response
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR

from litestar_workflow_forms.core.models import RenderResult
from litestar_workflow_forms.exceptions import DefinitionError, DelegationError, WorkflowFormsError

if TYPE_CHECKING:  # pragma: no cover
    from litestar import Request
    from litestar.types import ExceptionHandlersMap

__all__ = ["GENERIC_ERROR_MESSAGE", "exception_handlers", "workflow_forms_error_handler"]

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal error, please contact your administrator"


def workflow_forms_error_handler(request: Request, exc: WorkflowFormsError) -> Response:
    """Log a fatal workflow error and answer with a generic error status.

    Args:
        request: The failed request.
        exc: The raised exception.

    Returns:
        A 500 response carrying an error descriptor.
    """
    logger.error("Fatal workflow error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return Response(
        content=RenderResult.error(GENERIC_ERROR_MESSAGE).to_dict(),
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type=MediaType.JSON,
    )


exception_handlers: ExceptionHandlersMap = {
    DefinitionError: workflow_forms_error_handler,  # type: ignore[dict-item]
    DelegationError: workflow_forms_error_handler,  # type: ignore[dict-item]
    WorkflowFormsError: workflow_forms_error_handler,  # type: ignore[dict-item]
}
"""Handlers registered by the plugin."""
