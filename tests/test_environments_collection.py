import pytest

from pingone_tools.collections import (
    AuthSession,
    InMemoryTokenStore,
    ToolContext,
    ToolError,
    ToolFilter,
    ToolServer,
    passthrough_filter,
)
from pingone_tools.environments.collection import EnvironmentsCollection

DEFAULT_GRANT_TYPE = "authorization_code"
ENV_ID = "550e8400-e29b-41d4-a716-446655440000"


class FakeAuthClientFactory:
    def __init__(self):
        self.calls = []

    def initialize_auth_context(self, context, token_store, grant_type):
        self.calls.append(grant_type)
        return context


class FakeApi:
    def __init__(self):
        self.requests = []

    def create_environment(self, request, headers):
        self.requests.append(request)
        return {"id": ENV_ID, "name": request["name"], "_links": {"self": {}}}, None


class FakeClientFactory:
    def __init__(self):
        self.api = FakeApi()
        self.tokens = []

    def new_client(self, access_token):
        self.tokens.append(access_token)
        return self.api


def test_name():
    assert EnvironmentsCollection().name() == "environments"


def test_list_tools_unique_and_not_empty():
    tools = EnvironmentsCollection().list_tools()
    assert tools
    names = [tool.mcp_tool.name for tool in tools]
    assert len(names) == len(set(names))


def test_register_tools_nil_client_factory():
    server = ToolServer("test-server", "v0.0.1")
    with pytest.raises(ValueError, match="PingOne API client factory is nil"):
        EnvironmentsCollection().register_tools(
            ToolContext(), server, None, FakeAuthClientFactory(),
            InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
        )
    assert server.tools == {}


def test_register_tools_nil_token_store():
    server = ToolServer("test-server", "v0.0.1")
    with pytest.raises(ValueError, match="token store is nil"):
        EnvironmentsCollection().register_tools(
            ToolContext(), server, FakeClientFactory(), FakeAuthClientFactory(),
            None, passthrough_filter(), DEFAULT_GRANT_TYPE,
        )


def test_register_tools_nil_auth_client_factory():
    server = ToolServer("test-server", "v0.0.1")
    with pytest.raises(ValueError, match="auth client factory is nil"):
        EnvironmentsCollection().register_tools(
            ToolContext(), server, FakeClientFactory(), None,
            InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
        )


def test_read_only_tools_marked_correctly():
    read_only = {"list_environments", "get_environment", "get_environment_services"}
    write = {"create_environment", "update_environment", "update_environment_services"}
    for tool in EnvironmentsCollection().list_tools():
        name = tool.mcp_tool.name
        assert name in read_only or name in write
        assert tool.is_read_only() == (name in read_only)


def test_register_all_tools_with_passthrough():
    collection = EnvironmentsCollection()
    server = ToolServer()
    collection.register_tools(
        ToolContext(), server, FakeClientFactory(), FakeAuthClientFactory(),
        InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
    )
    assert set(server.tools) == {t.mcp_tool.name for t in collection.list_tools()}


def test_read_only_filter_excludes_write_tools():
    server = ToolServer()
    EnvironmentsCollection().register_tools(
        ToolContext(), server, FakeClientFactory(), FakeAuthClientFactory(),
        InMemoryTokenStore(), ToolFilter(read_only=True), DEFAULT_GRANT_TYPE,
    )
    assert "create_environment" not in server.tools


def test_registered_create_handler_uses_session():
    server = ToolServer()
    client_factory = FakeClientFactory()
    auth_factory = FakeAuthClientFactory()
    store = InMemoryTokenStore(AuthSession(access_token="token"))
    EnvironmentsCollection().register_tools(
        ToolContext(), server, client_factory, auth_factory,
        store, passthrough_filter(), DEFAULT_GRANT_TYPE,
    )
    result = server.call_tool(
        "create_environment",
        ToolContext(),
        {"name": "Env", "region": "NA", "license": {"id": "license-id"}},
    )
    assert result.environment == {"id": ENV_ID, "name": "Env"}
    assert client_factory.tokens == ["token"]
    assert client_factory.api.requests[0]["type"] == "SANDBOX"
    assert auth_factory.calls == [DEFAULT_GRANT_TYPE]


def test_registered_handler_without_session_fails():
    server = ToolServer()
    client_factory = FakeClientFactory()
    EnvironmentsCollection().register_tools(
        ToolContext(), server, client_factory, FakeAuthClientFactory(),
        InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
    )
    with pytest.raises(ToolError, match="no active auth session found") as info:
        server.call_tool(
            "create_environment",
            ToolContext(),
            {"name": "Env", "region": "NA", "license": {"id": "license-id"}},
        )
    assert info.value.tool_name == "create_environment"
    assert client_factory.tokens == []