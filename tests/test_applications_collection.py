import json

import pytest

from pingone_tools.applications.collection import ApplicationsCollection
from pingone_tools.collections import (
    AuthSession,
    InMemoryTokenStore,
    ToolContext,
    ToolFilter,
    ToolServer,
    passthrough_filter,
)

DEFAULT_GRANT_TYPE = "authorization_code"
ENV_ID = "550e8400-e29b-41d4-a716-446655440000"
APP_ID = "550e8400-e29b-41d4-a716-446655440001"


class FakeAuthClientFactory:
    def __init__(self):
        self.calls = []

    def initialize_auth_context(self, context, token_store, grant_type):
        self.calls.append(grant_type)
        return context


class FakeApi:
    def read_one_application(self, environment_id, application_id, headers):
        return (
            {
                "id": application_id,
                "name": "Test SAML App",
                "protocol": "SAML",
                "type": "WEB_APP",
                "_links": {"self": {}},
            },
            None,
        )


class FakeLegacyClientFactory:
    def __init__(self):
        self.tokens = []

    def new_client(self, context, access_token):
        self.tokens.append(access_token)
        return FakeApi()


def test_name():
    assert ApplicationsCollection().name() == "applications"


def test_list_tools_unique_and_not_empty():
    tools = ApplicationsCollection().list_tools()
    assert tools
    names = [tool.mcp_tool.name for tool in tools]
    assert len(names) == len(set(names))


def test_register_tools_nil_client_factory():
    server = ToolServer("test-server", "v0.0.1")
    with pytest.raises(ValueError, match="PingOne API client factory is nil"):
        ApplicationsCollection().register_tools(
            ToolContext(), server, None, FakeAuthClientFactory(),
            InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
        )
    assert server.tools == {}


def test_register_tools_nil_token_store():
    server = ToolServer("test-server", "v0.0.1")
    with pytest.raises(ValueError, match="token store is nil"):
        ApplicationsCollection().register_tools(
            ToolContext(), server, FakeLegacyClientFactory(), FakeAuthClientFactory(),
            None, passthrough_filter(), DEFAULT_GRANT_TYPE,
        )


def test_register_tools_nil_auth_client_factory():
    server = ToolServer("test-server", "v0.0.1")
    with pytest.raises(ValueError, match="auth client factory is nil"):
        ApplicationsCollection().register_tools(
            ToolContext(), server, FakeLegacyClientFactory(), None,
            InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
        )


def test_read_only_tools_marked_correctly():
    read_only = {"list_applications", "get_application"}
    write = {"create_oidc_application", "update_oidc_application"}
    for tool in ApplicationsCollection().list_tools():
        name = tool.mcp_tool.name
        assert name in read_only or name in write
        assert tool.is_read_only() == (name in read_only)


def test_tool_definitions_have_required_fields():
    tools = ApplicationsCollection().list_tools()
    assert len(tools) == 4
    for tool in tools:
        name = tool.mcp_tool.name
        assert name
        assert tool.mcp_tool.description
        assert "pingone" not in name
        assert "-" not in name
        assert " " not in name


def test_register_all_tools_with_passthrough():
    collection = ApplicationsCollection()
    server = ToolServer()
    collection.register_tools(
        ToolContext(), server, FakeLegacyClientFactory(), FakeAuthClientFactory(),
        InMemoryTokenStore(), passthrough_filter(), DEFAULT_GRANT_TYPE,
    )
    assert set(server.tools) == {t.mcp_tool.name for t in collection.list_tools()}


def test_read_only_filter_registers_only_read_tools():
    server = ToolServer()
    ApplicationsCollection().register_tools(
        ToolContext(), server, FakeLegacyClientFactory(), FakeAuthClientFactory(),
        InMemoryTokenStore(), ToolFilter(read_only=True), DEFAULT_GRANT_TYPE,
    )
    assert set(server.tools) == {"list_applications", "get_application"}


def test_registered_handler_uses_session_and_grant_type():
    server = ToolServer()
    client_factory = FakeLegacyClientFactory()
    auth_factory = FakeAuthClientFactory()
    store = InMemoryTokenStore(AuthSession(access_token="token"))
    ApplicationsCollection().register_tools(
        ToolContext(), server, client_factory, auth_factory,
        store, passthrough_filter(), DEFAULT_GRANT_TYPE,
    )
    text = server.call_tool(
        "get_application", ToolContext(), {"environmentId": ENV_ID, "applicationId": APP_ID}
    )
    payload = json.loads(text)
    assert payload["id"] == APP_ID
    assert "_links" not in payload
    assert client_factory.tokens == ["token"]
    assert auth_factory.calls == [DEFAULT_GRANT_TYPE]