"""The applications tool collection."""

from __future__ import annotations

import logging
from typing import Any, Callable

from pingone_tools.applications.client import PingOneApplicationsClientFactory
from pingone_tools.applications.read_tools import (
    GET_APPLICATION_DEF,
    LIST_APPLICATIONS_DEF,
    get_application_handler,
    list_applications_handler,
)
from pingone_tools.applications.write_tools import (
    CREATE_APPLICATION_DEF,
    UPDATE_APPLICATION_DEF,
    create_application_handler,
    update_application_handler,
)
from pingone_tools.collections import (
    TokenStore,
    ToolContext,
    ToolDefinition,
    ToolFilter,
    ToolServer,
)

_log = logging.getLogger(__name__)

COLLECTION_NAME = "applications"

_TOOLS = (
    (LIST_APPLICATIONS_DEF, list_applications_handler),
    (GET_APPLICATION_DEF, get_application_handler),
    (CREATE_APPLICATION_DEF, create_application_handler),
    (UPDATE_APPLICATION_DEF, update_application_handler),
)


def _auth_context_initializer(
    auth_client_factory: Any, token_store: TokenStore, grant_type: Any
) -> Callable[[ToolContext], ToolContext]:
    def initialize(context: ToolContext) -> ToolContext:
        return auth_client_factory.initialize_auth_context(context, token_store, grant_type)

    return initialize


class ApplicationsCollection:
    """Tools for listing, reading, creating and updating applications."""

    def name(self) -> str:
        return COLLECTION_NAME

    def register_tools(
        self,
        context: ToolContext,
        server: ToolServer,
        client_factory: Any,
        auth_client_factory: Any,
        token_store: TokenStore,
        tool_filter: ToolFilter,
        grant_type: Any,
    ) -> None:
        """Register the tools that pass ``tool_filter`` on ``server``.

        ``client_factory.new_client(context, access_token)`` builds management API
        clients; ``auth_client_factory.initialize_auth_context(context, token_store,
        grant_type)`` prepares the auth context for each invocation.
        """
        if client_factory is None:
            raise ValueError("PingOne API client factory is nil")
        if token_store is None:
            raise ValueError("token store is nil")
        if auth_client_factory is None:
            raise ValueError("auth client factory is nil")

        applications_client_factory = PingOneApplicationsClientFactory(
            client_factory, token_store
        )
        initialize = _auth_context_initializer(auth_client_factory, token_store, grant_type)

        for definition, make_handler in _TOOLS:
            if tool_filter.should_include_tool(definition):
                _log.debug(
                    "Registering MCP tool",
                    extra={"collection": self.name(), "tool": definition.mcp_tool.name},
                )
                server.add_tool(
                    definition.mcp_tool,
                    make_handler(applications_client_factory, initialize),
                )

    def list_tools(self) -> list[ToolDefinition]:
        return [definition for definition, _ in _TOOLS]