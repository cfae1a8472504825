"""Shared building blocks for PingOne tool collections: tool definitions,
filtering, a tool registry, session storage and authenticated client setup."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

SESSION_ID_HEADER = "X-Ping-External-Session-ID"
TRANSACTION_ID_HEADER = "X-Ping-External-Transaction-ID"


@dataclass(frozen=True)
class ToolContext:
    """Per-invocation context carried through a tool call."""

    session_id: str = ""
    transaction_id: str = ""
    tool_name: str = ""
    values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Tool:
    """Description of a tool as exposed to protocol clients."""

    name: str
    title: str = ""
    description: str = ""
    input_schema: Mapping[str, Any] | None = None
    output_schema: Mapping[str, Any] | None = None
    read_only_hint: bool = False
    destructive_hint: bool | None = None


@dataclass(frozen=True)
class ToolValidationPolicy:
    """Rules on which environments a tool may act on."""

    allow_production_environment_read: bool = False
    production_environment_not_applicable: bool = False


@dataclass(frozen=True)
class ToolDefinition:
    """A tool together with its validation policy."""

    mcp_tool: Tool
    validation_policy: ToolValidationPolicy | None = None

    def is_read_only(self) -> bool:
        """Return True when the tool only reads data."""
        return self.mcp_tool.read_only_hint


@dataclass(frozen=True)
class ToolFilter:
    """Decides which tools get registered."""

    read_only: bool = False
    included_tools: frozenset[str] | None = None
    excluded_tools: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if self.included_tools is not None:
            object.__setattr__(self, "included_tools", frozenset(self.included_tools))
        object.__setattr__(self, "excluded_tools", frozenset(self.excluded_tools))

    def should_include_tool(self, tool_definition: ToolDefinition) -> bool:
        """Return True when the tool passes read-only, include and exclude rules."""
        name = tool_definition.mcp_tool.name
        if self.read_only and not tool_definition.is_read_only():
            return False
        if self.included_tools is not None and name not in self.included_tools:
            return False
        return name not in self.excluded_tools


def passthrough_filter() -> ToolFilter:
    """Return a filter that includes every tool."""
    return ToolFilter()


ToolHandler = Callable[[ToolContext, Any], Any]


class ToolServer:
    """Registry of tools and their handlers."""

    def __init__(self, name: str = "pingone-mcp-server", version: str = "") -> None:
        self.name = name
        self.version = version
        self._tools: dict[str, tuple[Tool, ToolHandler]] = {}

    @property
    def tools(self) -> dict[str, Tool]:
        """Registered tools by name."""
        return {name: tool for name, (tool, _) in self._tools.items()}

    def add_tool(self, tool: Tool, handler: ToolHandler) -> None:
        """Register a tool, replacing any tool of the same name."""
        self._tools[tool.name] = (tool, handler)

    def call_tool(self, name: str, context: ToolContext, arguments: Any) -> Any:
        """Invoke the handler registered under ``name``."""
        try:
            _, handler = self._tools[name]
        except KeyError:
            raise KeyError(f"unknown tool: {name}") from None
        return handler(context, arguments)


@dataclass(frozen=True)
class AuthSession:
    """An authenticated session with PingOne."""

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None


@runtime_checkable
class TokenStore(Protocol):
    """Storage for the current auth session."""

    def has_session(self) -> bool: ...

    def get_session(self) -> AuthSession: ...


class InMemoryTokenStore:
    """Token store that keeps the session in memory."""

    def __init__(self, session: AuthSession | None = None) -> None:
        self._session = session

    def has_session(self) -> bool:
        return self._session is not None

    def get_session(self) -> AuthSession:
        if self._session is None:
            raise LookupError("no auth session stored")
        return self._session

    def set_session(self, session: AuthSession | None) -> None:
        """Store a session; None clears it."""
        self._session = session


class ToolError(Exception):
    """A failure inside a tool, outside the remote API."""

    def __init__(self, tool_name: str, cause: BaseException | str) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"error in tool '{tool_name}': {cause}")


class ApiError(Exception):
    """A failure reported by, or while talking to, the PingOne API."""

    def __init__(self, response: Any, cause: BaseException | str) -> None:
        self.response = response
        self.cause = cause
        status = self.status_code
        if status is None:
            message = f"PingOne API error: {cause}"
        else:
            message = f"PingOne API error (HTTP {status}): {cause}"
        super().__init__(message)

    @property
    def status_code(self) -> int | None:
        """HTTP status of the response, if one is known."""
        if self.response is None:
            return None
        status = getattr(self.response, "status_code", None)
        if status is None:
            status = getattr(self.response, "status", None)
        return status


@runtime_checkable
class Collection(Protocol):
    """A named group of tools that can register itself on a server."""

    def name(self) -> str: ...

    def register_tools(
        self,
        context: ToolContext,
        server: ToolServer,
        client_factory: Any,
        auth_client_factory: Any,
        token_store: TokenStore,
        tool_filter: ToolFilter,
        grant_type: Any,
    ) -> None: ...

    def list_tools(self) -> list[ToolDefinition]: ...


def _access_token(token_store: TokenStore) -> str:
    try:
        has_session = token_store.has_session()
    except Exception as exc:
        raise RuntimeError(f"failed to check for auth session: {exc}") from exc
    if not has_session:
        raise RuntimeError(
            "no active auth session found, unable to create authenticated client"
        )
    try:
        session = token_store.get_session()
    except Exception as exc:
        raise RuntimeError(f"failed to get auth session: {exc}") from exc
    return session.access_token


def initialize_authenticated_client(client_factory: Any, token_store: TokenStore) -> Any:
    """Create an API client from the stored session's access token.

    ``client_factory.new_client(access_token)`` builds the client.
    """
    access_token = _access_token(token_store)
    try:
        return client_factory.new_client(access_token)
    except Exception as exc:
        raise RuntimeError(f"failed to create PingOne API client: {exc}") from exc


def initialize_authenticated_legacy_client(
    context: ToolContext, client_factory: Any, token_store: TokenStore
) -> Any:
    """Create a management API client from the stored session's access token.

    ``client_factory.new_client(context, access_token)`` builds the client.
    """
    access_token = _access_token(token_store)
    try:
        return client_factory.new_client(context, access_token)
    except Exception as exc:
        raise RuntimeError(f"failed to create PingOne API client: {exc}") from exc