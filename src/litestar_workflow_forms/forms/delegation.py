"""Delegation of rendering to custom handlers.

A state or action may name a custom handler that replaces default rendering.
Handler identifiers are either names registered with a
:class:`HandlerRegistry` or import paths (``package.module:callable`` or
``package.module.callable``). A handler receives the whole
:class:`~litestar_workflow_forms.core.models.RenderContext` and its result is
returned verbatim.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from litestar_workflow_forms.exceptions import DelegationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from litestar_workflow_forms.core.definition import WorkflowDefinition
    from litestar_workflow_forms.core.models import RenderContext, RenderResult
    from litestar_workflow_forms.core.protocols import RenderHandler

__all__ = ["HandlerRegistry"]

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Registry mapping handler identifiers to callables.

    Example:
        >>> handlers = HandlerRegistry()
        >>> @handlers.register("metadata.render_current_data")
        ... def render_current_data(context):
        ...     return context
        >>> handlers.resolve("metadata.render_current_data") is render_current_data
        True
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._handlers: dict[str, RenderHandler] = {}

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._handlers

    def register(self, identifier: str, handler: RenderHandler | None = None) -> Any:
        """Register a handler under an identifier.

        Can be used directly or as a decorator.

        Args:
            identifier: The identifier states and actions refer to.
            handler: The callable. When omitted a decorator is returned.

        Returns:
            The handler, or a decorator registering it.
        """
        if handler is None:

            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                self._handlers[identifier] = func  # type: ignore[assignment]
                return func

            return decorator

        self._handlers[identifier] = handler
        return handler

    def unregister(self, identifier: str) -> None:
        self._handlers.pop(identifier, None)

    def resolve(self, identifier: str) -> RenderHandler:
        """Resolve an identifier to a callable.

        Registered names win. Other identifiers are imported, the resolved
        callable is cached in the registry.

        Args:
            identifier: Handler identifier.

        Returns:
            The handler callable.

        Raises:
            DelegationError: If the identifier cannot be resolved.
        """
        if identifier in self._handlers:
            return self._handlers[identifier]

        if ":" in identifier:
            module_name, _, attr = identifier.partition(":")
        else:
            module_name, _, attr = identifier.rpartition(".")
        if not module_name or not attr:
            raise DelegationError(identifier, "not registered and not an import path")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise DelegationError(identifier, str(e)) from e

        target: Any = module
        for part in attr.split("."):
            try:
                target = getattr(target, part)
            except AttributeError as e:
                raise DelegationError(identifier, f"'{module_name}' has no attribute '{attr}'") from e

        if not callable(target):
            raise DelegationError(identifier, "target is not callable")

        self._handlers[identifier] = target
        return target

    def check(self, definitions: Iterable[WorkflowDefinition]) -> None:
        """Resolve every handler the definitions reference.

        Call at startup to fail fast on deployment errors.

        Raises:
            DelegationError: On the first unresolvable identifier.
        """
        for definition in definitions:
            for identifier in sorted(definition.ui_handlers()):
                self.resolve(identifier)

    async def delegate(self, identifier: str, context: RenderContext) -> RenderResult:
        """Hand rendering over to a custom handler.

        Args:
            identifier: Handler identifier.
            context: The current render context.

        Returns:
            The handler's result, unchanged.
        """
        handler = self.resolve(identifier)
        logger.debug("Delegating render of workflow %s to %s", context.snapshot.id, identifier)
        result = handler(context)
        if inspect.isawaitable(result):
            result = await result
        return result
