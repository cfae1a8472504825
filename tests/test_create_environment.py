import pytest

from pingone_tools.collections import ApiError, ToolContext, ToolError
from pingone_tools.environments.create_tool import (
    CREATE_ENVIRONMENT_DEF,
    CreateEnvironmentInput,
    CreateEnvironmentOutput,
    create_environment_handler,
)

ENV_ID = "550e8400-e29b-41d4-a716-446655440000"


class FakeClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create_environment(self, context, request):
        self.calls.append((context, request))
        if self.error is not None:
            raise self.error
        return self.response


class FakeFactory:
    def __init__(self, client=None, error=None):
        self.client = client
        self.error = error
        self.contexts = []

    def get_authenticated_client(self, context):
        self.contexts.append(context)
        if self.error is not None:
            raise self.error
        return self.client


class FakeHttpResponse:
    def __init__(self, status_code):
        self.status_code = status_code


def passthrough(context):
    return context


def arguments(**extra):
    base = {"name": "Test Env", "region": "NA", "license": {"id": "license-id"}}
    base.update(extra)
    return base


def test_creates_sandbox_and_strips_links():
    client = FakeClient(
        response=({"id": ENV_ID, "name": "Test Env", "_links": {"self": {}}}, FakeHttpResponse(201))
    )
    handler = create_environment_handler(FakeFactory(client), passthrough)
    result = handler(ToolContext(), arguments())
    assert isinstance(result, CreateEnvironmentOutput)
    assert result.environment == {"id": ENV_ID, "name": "Test Env"}
    assert result.to_dict() == {"environment": {"id": ENV_ID, "name": "Test Env"}}
    _, request = client.calls[0]
    assert request["type"] == "SANDBOX"
    assert request["name"] == "Test Env"
    assert request["region"] == "NA"
    assert request["license"] == {"id": "license-id"}


def test_optional_fields_only_sent_when_given():
    client = FakeClient(response=({"id": ENV_ID}, None))
    handler = create_environment_handler(FakeFactory(client), passthrough)
    handler(ToolContext(), arguments())
    handler(
        ToolContext(),
        arguments(description="desc", icon="https://example.com/icon.png", billOfMaterials={"products": []}),
    )
    first = client.calls[0][1]
    second = client.calls[1][1]
    assert not {"description", "icon", "billOfMaterials"} & set(first)
    assert second["description"] == "desc"
    assert second["icon"] == "https://example.com/icon.png"
    assert second["billOfMaterials"] == {"products": []}


def test_context_carries_tool_name():
    client = FakeClient(response=({"id": ENV_ID}, None))
    factory = FakeFactory(client)
    seen = []

    def init(context):
        seen.append(context)
        return context

    create_environment_handler(factory, init)(ToolContext(session_id="s"), arguments())
    assert seen[0].tool_name == CREATE_ENVIRONMENT_DEF.mcp_tool.name
    assert factory.contexts[0].session_id == "s"
    assert client.calls[0][0].tool_name == "create_environment"


def test_accepts_input_dataclass():
    client = FakeClient(response=({"id": ENV_ID}, None))
    handler = create_environment_handler(FakeFactory(client), passthrough)
    args = CreateEnvironmentInput(name="Env", region="EU", license={"id": "l"})
    handler(ToolContext(), args)
    assert client.calls[0][1] == args.to_request()


def test_auth_initializer_failure_is_tool_error():
    def failing(context):
        raise RuntimeError("no session")

    handler = create_environment_handler(FakeFactory(FakeClient()), failing)
    with pytest.raises(ToolError) as info:
        handler(ToolContext(), arguments())
    assert info.value.tool_name == "create_environment"


def test_client_factory_failure_is_tool_error():
    handler = create_environment_handler(FakeFactory(error=RuntimeError("boom")), passthrough)
    with pytest.raises(ToolError, match="boom"):
        handler(ToolContext(), arguments())


def test_api_failure_is_api_error_with_status():
    error = RuntimeError("bad request")
    error.response = FakeHttpResponse(400)
    handler = create_environment_handler(FakeFactory(FakeClient(error=error)), passthrough)
    with pytest.raises(ApiError) as info:
        handler(ToolContext(), arguments())
    assert info.value.status_code == 400


def test_empty_response_is_api_error():
    handler = create_environment_handler(FakeFactory(FakeClient(response=(None, None))), passthrough)
    with pytest.raises(ApiError, match="no environment data in response"):
        handler(ToolContext(), arguments())


@pytest.mark.parametrize("missing", ["name", "region", "license"])
def test_missing_required_argument(missing):
    args = arguments()
    del args[missing]
    with pytest.raises(ValueError, match=missing):
        CreateEnvironmentInput.from_arguments(args)


def test_definition_is_not_read_only():
    assert CREATE_ENVIRONMENT_DEF.is_read_only() is False
    assert CREATE_ENVIRONMENT_DEF.validation_policy.production_environment_not_applicable is True