# pingone-tools

Tool definitions, tool collections and API client wrappers for managing
PingOne applications and environments. A collection registers its tools on a
`ToolServer`, a `ToolFilter` decides which tools are registered, and every
tool call builds an authenticated API client from the session held in a token
store.

The package has no third-party dependencies. The `test` extra installs pytest.

```
pip install .
```

## Building blocks (`pingone_tools.collections`)

- `Tool`: name, title, description, input and output JSON schemas, and the
  `read_only_hint` / `destructive_hint` annotations.
- `ToolDefinition`: a `Tool` (as `mcp_tool`) plus an optional
  `ToolValidationPolicy`. `is_read_only()` returns the tool's read-only hint.
- `ToolFilter(read_only=False, included_tools=None, excluded_tools=frozenset())`:
  `should_include_tool(definition)` drops write tools in read-only mode, tools
  not in `included_tools` (when given) and tools in `excluded_tools`.
  `passthrough_filter()` returns a filter that accepts every tool.
- `ToolServer`: `add_tool(tool, handler)` registers a handler under the tool's
  name (replacing any earlier one), `call_tool(name, context, arguments)`
  invokes it and raises `KeyError` for an unknown name; `tools` maps names to
  registered `Tool`s.
- `ToolContext`: per-call data; its `session_id` and `transaction_id` are sent
  as the `X-Ping-External-Session-ID` and `X-Ping-External-Transaction-ID`
  headers.
- `AuthSession`, the `TokenStore` protocol (`has_session()`, `get_session()`)
  and `InMemoryTokenStore`, which also has `set_session(session)`.
- `initialize_authenticated_client(client_factory, token_store)` and
  `initialize_authenticated_legacy_client(context, client_factory, token_store)`
  build a client from the stored access token by calling
  `client_factory.new_client(access_token)` or
  `client_factory.new_client(context, access_token)`. They raise
  `RuntimeError` when there is no session or the client cannot be built.
- `ToolError` (a failure inside a tool, carrying `tool_name` and `cause`) and
  `ApiError` (a failure from the API, carrying `response`, `cause` and
  `status_code`).
- `Collection`: the protocol a tool collection follows (`name()`,
  `register_tools(...)`, `list_tools()`).

## Applications

`pingone_tools.applications.collection.ApplicationsCollection` (name
`"applications"`) registers:

| Tool | Read-only | Handler returns |
| --- | --- | --- |
| `list_applications` | yes | `ListApplicationsOutput` with one `ApplicationSummary` per application, across all pages |
| `get_application` | yes | the application as compact JSON text, without its `_links` field |
| `create_oidc_application` | no | `CreateApplicationOutput` holding the created OIDC application |
| `update_oidc_application` | no | `UpdateApplicationOutput` holding the updated OIDC application |

The handlers live in `pingone_tools.applications.read_tools`
(`list_applications_handler`, `get_application_handler`, plus the helpers
`summarize_application` and `format_application`) and
`pingone_tools.applications.write_tools` (`create_application_handler`,
`update_application_handler`). Each takes a client factory and an auth context
initializer and returns a function of `(context, arguments)`, where
`arguments` is either the matching input dataclass or a mapping keyed as in the
tool's input schema (`environmentId`, `applicationId`, `application`). Output
dataclasses have a `to_dict()` method.

Update uses full replacement: fields left out of `application` are cleared, so
fetch the current configuration with `get_application` first.

`pingone_tools.applications.client.PingOneApplicationsClient` wraps a
management API object that provides `read_all_applications`,
`create_application`, `read_one_application` and `update_application`, each
taking string identifiers and a `headers` keyword. Single-item calls return a
`(data, http_response)` pair; the listing yields one such pair per page, each
page holding `{"_embedded": {"applications": [...]}}`.
`PingOneApplicationsClientFactory(client_factory, token_store)` builds these
clients with `client_factory.new_client(context, access_token)`.

## Environments

`pingone_tools.environments.collection.EnvironmentsCollection` (name
`"environments"`) registers one tool, `create_environment`, whose handler comes
from `pingone_tools.environments.create_tool.create_environment_handler`. It
takes `name`, `region`, `license` and optionally `description`, `icon` and
`billOfMaterials`, always creates a `SANDBOX` environment, and returns a
`CreateEnvironmentOutput` holding the new environment without its `_links`
field.

`pingone_tools.environments.client.PingOneEnvironmentsClient` wraps an API
object that provides `get_environments`, `create_environment`,
`get_environment_by_id`, `replace_environment_by_id`, `get_bill_of_materials`
and `replace_bill_of_materials`. `PingOneEnvironmentsClientFactory` builds it
with `client_factory.new_client(access_token)`.

## Registering and calling tools

`register_tools(context, server, client_factory, auth_client_factory,
token_store, tool_filter, grant_type)` raises `ValueError` when the client
factory, the token store or the auth client factory is `None`. Before every
call, the handlers run
`auth_client_factory.initialize_auth_context(context, token_store, grant_type)`.

```python
from pingone_tools.applications.collection import ApplicationsCollection
from pingone_tools.collections import (
    AuthSession,
    InMemoryTokenStore,
    ToolContext,
    ToolServer,
    passthrough_filter,
)


class ManagementApi:
    def read_all_applications(self, environment_id, headers):
        page = {"_embedded": {"applications": [
            {"id": "app-1", "name": "Web", "protocol": "OPENID_CONNECT", "type": "WEB_APP"},
        ]}}
        yield page, None


class ClientFactory:
    def new_client(self, context, access_token):
        return ManagementApi()


class AuthClientFactory:
    def initialize_auth_context(self, context, token_store, grant_type):
        return context


server = ToolServer()
collection = ApplicationsCollection()
collection.register_tools(
    ToolContext(),
    server,
    ClientFactory(),
    AuthClientFactory(),
    InMemoryTokenStore(AuthSession(access_token="token")),
    passthrough_filter(),
    "authorization_code",
)

result = server.call_tool(
    "list_applications",
    ToolContext(session_id="session-1"),
    {"environmentId": "550e8400-e29b-41d4-a716-446655440000"},
)
print(result.to_dict())
# {'applications': [{'id': 'app-1', 'name': 'Web', 'protocol': 'OPENID_CONNECT', 'type': 'WEB_APP'}]}

for definition in collection.list_tools():
    print(definition.mcp_tool.name, definition.is_read_only())
```

## What this package does not do

- It serves no protocol: `ToolServer` is an in-process registry, with no
  stdio or network transport and no command to start a server.
- It does not sign in or obtain tokens. An `AuthSession` must be put into a
  token store by the caller, and `InMemoryTokenStore` keeps it only in memory.
- It contains no HTTP client for the PingOne APIs; the API objects and client
  factories described above are supplied by the caller.
- Only environment creation is available as a tool. Listing, reading and
  updating environments and their services exist as methods of
  `PingOneEnvironmentsClient`, but no tool is registered for them.