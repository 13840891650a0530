"""Activities executed by the in-memory engine.

An action in a workflow definition names an activity class. The activity
receives the engine, a working copy of the instance context and the action
parameters with ``$variable`` references already resolved. Only
:class:`SetContext` formats ``_map_<key>`` templates against the context,
resolved values are never formatted again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from litestar_workflow_forms.core.types import Context
    from litestar_workflow_forms.engine.memory import InMemoryEngine

__all__ = [
    "DEFAULT_ACTIVITIES",
    "Activity",
    "Noop",
    "SearchWorkflow",
    "SetContext",
    "SetErrorCode",
]

logger = logging.getLogger(__name__)

MAP_PREFIX = "_map_"


class _Blank(dict):
    def __missing__(self, key: str) -> str:
        return ""


def render_template(value: Any, context: Context) -> Any:
    """Format a ``{key}`` template against the context, missing keys render empty."""
    if not isinstance(value, str):
        return value
    return value.format_map(_Blank(context))


class Activity:
    """Base class for engine activities.

    Subclasses implement :meth:`execute` and mutate the passed context. Raising
    any exception aborts the action and leaves the instance untouched.

    Attributes:
        name: Class name the definition refers to.
    """

    name: ClassVar[str] = "Activity"

    async def execute(self, engine: InMemoryEngine, context: Context, params: dict[str, Any]) -> None:
        raise NotImplementedError


class Noop(Activity):
    """Do nothing, used by actions that only move the state."""

    name = "Noop"

    async def execute(self, engine: InMemoryEngine, context: Context, params: dict[str, Any]) -> None:
        return None


class SetContext(Activity):
    """Write parameters into the context.

    ``_map_<key>`` parameters are formatted as templates, other parameters are
    copied as they are.

    Example:
        ``_map_redirect: "workflow!load!wf_id!{search_result}"`` stores the
        formatted string under ``redirect``.
    """

    name = "SetContext"

    async def execute(self, engine: InMemoryEngine, context: Context, params: dict[str, Any]) -> None:
        for key, value in params.items():
            if key.startswith(MAP_PREFIX):
                context[key[len(MAP_PREFIX) :]] = render_template(value, context)
            else:
                context[key] = value


class SetErrorCode(Activity):
    """Store an error code in the context."""

    name = "SetErrorCode"

    async def execute(self, engine: InMemoryEngine, context: Context, params: dict[str, Any]) -> None:
        context["error_code"] = params.get("error_code") or "I18N_OPENXPKI_UI_UNKNOWN_ERROR"


class SearchWorkflow(Activity):
    """Search instances of another workflow type by context attributes.

    Parameters:
        wf_type: Workflow type to search.
        _map_attr_<name>: Required value of the context attribute ``<name>``.
        _map_wf_creator: Required creator of the instance.

    Parameter values are used verbatim, ``$variable`` references are already
    resolved. Criteria the context does not provide (``None``) are ignored, an
    empty string still has to match. Without any criterion nothing matches.
    ``search_result`` is set to the instance id when exactly one instance
    matches and removed otherwise.
    """

    name = "SearchWorkflow"

    attribute_prefix = f"{MAP_PREFIX}attr_"

    async def execute(self, engine: InMemoryEngine, context: Context, params: dict[str, Any]) -> None:
        attributes: dict[str, Any] = {}
        creator = None
        for key, value in params.items():
            if value is None:
                continue
            if key.startswith(self.attribute_prefix):
                attributes[key[len(self.attribute_prefix) :]] = value
            elif key == f"{MAP_PREFIX}wf_creator" and value != "":
                creator = str(value)

        if attributes or creator:
            matches = engine.search_instances(params.get("wf_type"), attributes, creator=creator)
        else:
            matches = []
        logger.debug("Workflow search %s returned %d matches", attributes, len(matches))

        if len(matches) == 1:
            context["search_result"] = str(matches[0])
        else:
            context.pop("search_result", None)


DEFAULT_ACTIVITIES: dict[str, type[Activity]] = {
    cls.name: cls for cls in (Noop, SetContext, SetErrorCode, SearchWorkflow)
}
"""Built-in activities keyed by class name."""
