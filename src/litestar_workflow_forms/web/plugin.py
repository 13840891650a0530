"""Litestar plugin for workflow forms.

This module provides the WorkflowFormsPlugin, which wires the engine client,
the custom handler registry and a per-session action executor into a Litestar
application and registers the form endpoints.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from typing import TYPE_CHECKING

from litestar import Request, Router
from litestar.di import Provide
from litestar.middleware.session.server_side import ServerSideSessionConfig
from litestar.plugins import InitPluginProtocol
from litestar.stores.memory import MemoryStore

from litestar_workflow_forms.core.protocols import EngineClient  # noqa: TC001 - needed for DI
from litestar_workflow_forms.engine.memory import InMemoryEngine
from litestar_workflow_forms.forms.delegation import HandlerRegistry
from litestar_workflow_forms.forms.dispatcher import RenderDispatcher
from litestar_workflow_forms.forms.executor import WorkflowActionExecutor
from litestar_workflow_forms.forms.session import LitestarSessionStore
from litestar_workflow_forms.forms.tokens import TokenRegistry
from litestar_workflow_forms.web.config import WorkflowFormsConfig
from litestar_workflow_forms.web.controllers import EXECUTOR_DEPENDENCY_KEY, WorkflowFormController
from litestar_workflow_forms.web.exceptions import exception_handlers

if TYPE_CHECKING:
    from litestar.config.app import AppConfig
    from litestar.stores.base import Store

    from litestar_workflow_forms.core.definition import WorkflowDefinition

__all__ = ["WorkflowFormsPlugin"]

logger = logging.getLogger(__name__)

SESSION_SCOPE_BYTES = 16


class WorkflowFormsPlugin(InitPluginProtocol):
    """Litestar plugin for workflow forms.

    On app init the plugin loads the configured definitions, resolves every
    custom handler they reference (an unresolvable handler fails startup),
    adds dependency providers and registers the form endpoints.

    Example:
        Serving the bundled search workflow with the in-memory engine::

            from litestar import Litestar
            from litestar_workflow_forms import WorkflowFormsConfig, WorkflowFormsPlugin
            from litestar_workflow_forms.core import load_packaged_definition

            app = Litestar(
                plugins=[
                    WorkflowFormsPlugin(
                        config=WorkflowFormsConfig(
                            definitions=[
                                load_packaged_definition("search_scep"),
                                load_packaged_definition("enrollment"),
                            ]
                        )
                    )
                ]
            )
    """

    __slots__ = ("_config", "_definitions", "_engine", "_handlers", "_lock", "_token_store")

    def __init__(self, config: WorkflowFormsConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or WorkflowFormsConfig()
        self._definitions: list[WorkflowDefinition] = []
        self._engine: EngineClient | None = None
        self._handlers: HandlerRegistry | None = None
        self._token_store: Store | None = None
        self._lock = asyncio.Lock()

    @property
    def engine(self) -> EngineClient:
        """Get the engine client.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._engine is None:
            msg = "WorkflowFormsPlugin has not been initialized. Access engine after app startup."
            raise RuntimeError(msg)
        return self._engine

    @property
    def handlers(self) -> HandlerRegistry:
        """Get the custom handler registry.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._handlers is None:
            msg = "WorkflowFormsPlugin has not been initialized. Access handlers after app startup."
            raise RuntimeError(msg)
        return self._handlers

    def _session_scope(self, request: Request) -> str:
        key = self._config.session_key
        scope = request.session.get(key)
        if not scope:
            scope = secrets.token_urlsafe(SESSION_SCOPE_BYTES)
            request.set_session({**request.session, key: scope})
            logger.debug("Started workflow form session")
        return scope

    def build_executor(self, request: Request) -> WorkflowActionExecutor:
        """Build the action executor for the session of a request.

        Tokens are kept in the shared token store under a per-session scope.

        Args:
            request: The current request.

        Returns:
            An executor bound to the session's tokens.
        """
        store = LitestarSessionStore(
            self._token_store,  # type: ignore[arg-type]
            scope=self._session_scope(request),
            lock=self._lock,
            expires_in=self._config.token_expires_in,
        )
        dispatcher = RenderDispatcher(TokenRegistry(store), self.handlers)
        return WorkflowActionExecutor(
            self.engine,
            dispatcher,
            validators=self._config.validators,
            check_staleness=self._config.check_staleness,
        )

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin when the Litestar app starts.

        This method:
        1. Loads the configured definitions
        2. Creates or uses the provided engine and handler registry
        3. Resolves every custom handler the definitions reference
        4. Adds dependency providers and the exception handlers
        5. Optionally registers the form endpoints

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.

        Raises:
            DefinitionError: If a configured definition fails to load.
            DelegationError: If a referenced custom handler cannot be resolved.
        """
        config = self._config
        self._definitions = config.load_definitions()
        self._engine = config.engine or InMemoryEngine(self._definitions)
        self._handlers = config.handlers or HandlerRegistry()
        self._token_store = config.token_store or MemoryStore()

        definitions = list(self._definitions)
        if isinstance(self._engine, InMemoryEngine):
            definitions.extend(self._engine.definitions.values())
        self._handlers.check(definitions)
        logger.info("Workflow forms serving %d definitions", len({d.name for d in definitions}))

        def provide_engine() -> EngineClient:
            return self.engine

        def provide_handlers() -> HandlerRegistry:
            return self.handlers

        def provide_executor(request: Request) -> WorkflowActionExecutor:
            return self.build_executor(request)

        app_config.dependencies[config.dependency_key_engine] = Provide(provide_engine, sync_to_thread=False)
        app_config.dependencies[config.dependency_key_handlers] = Provide(provide_handlers, sync_to_thread=False)
        app_config.dependencies[EXECUTOR_DEPENDENCY_KEY] = Provide(provide_executor, sync_to_thread=False)

        if config.add_session_middleware:
            app_config.middleware.append(ServerSideSessionConfig().middleware)

        if config.enable_api:
            workflow_router = Router(
                path=config.path_prefix,
                route_handlers=[WorkflowFormController],
                guards=config.guards,
                tags=config.tags,
                include_in_schema=config.include_in_schema,
            )
            app_config.route_handlers.append(workflow_router)

        for exc_class, handler in exception_handlers.items():
            app_config.exception_handlers.setdefault(exc_class, handler)

        return app_config
