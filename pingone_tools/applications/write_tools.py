"""Tools that create and update OIDC applications."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pingone_tools.applications.client import ApplicationsClientFactory
from pingone_tools.collections import (
    ApiError,
    Tool,
    ToolContext,
    ToolDefinition,
    ToolError,
)

_log = logging.getLogger(__name__)

ContextInitializer = Callable[[ToolContext], ToolContext]

_LINKS_FIELD = "_links"
_OIDC_PROTOCOL = "OPENID_CONNECT"
_NON_OIDC_TYPES = frozenset(
    {"PING_ONE_PORTAL", "PING_ONE_SELF_SERVICE", "PING_ONE_ADMIN_CONSOLE"}
)


def _object_schema(properties: Mapping[str, tuple[str, str]]) -> dict[str, Any]:
    """Schema of an object whose properties are all required.

    Each property is given as (kind, description), kind being "uuid" or "object".
    """
    kinds = {
        "uuid": {"type": "string", "format": "uuid"},
        "object": {"type": "object"},
    }
    return {
        "type": "object",
        "properties": {
            name: {**kinds[kind], "description": description}
            for name, (kind, description) in properties.items()
        },
        "required": list(properties),
    }


def _output_schema(description: str) -> dict[str, Any]:
    return _object_schema({"application": ("object", description)})


_ENV_ID_PROPERTY = ("uuid", "REQUIRED. Environment UUID.")

CREATE_APPLICATION_DEF = ToolDefinition(
    mcp_tool=Tool(
        name="create_oidc_application",
        title="Create PingOne OIDC Application",
        description="Create a new OIDC application within a specified PingOne environment.",
        input_schema=_object_schema(
            {
                "environmentId": _ENV_ID_PROPERTY,
                "application": ("object", "REQUIRED. The OIDC application configuration details"),
            }
        ),
        output_schema=_output_schema("The created application details"),
        destructive_hint=False,
    )
)

UPDATE_APPLICATION_DEF = ToolDefinition(
    mcp_tool=Tool(
        name="update_oidc_application",
        title="Update PingOne OIDC Application by ID",
        description=(
            "Update OIDC application configuration using full replacement (HTTP PUT).\n"
            "\n"
            "WORKFLOW - Required to avoid data loss:\n"
            "1. Call 'get_application' to fetch current configuration\n"
            "2. Modify only the fields you want to change\n"
            "3. Pass the complete merged object to this tool\n"
            "\n"
            "Omitted optional fields will be cleared."
        ),
        input_schema=_object_schema(
            {
                "environmentId": _ENV_ID_PROPERTY,
                "applicationId": ("uuid", "REQUIRED. Application UUID."),
                "application": (
                    "object",
                    "REQUIRED. The complete OIDC application config with modifications.",
                ),
            }
        ),
        output_schema=_output_schema("The updated application configuration details"),
    )
)


def _required(arguments: Mapping[str, Any], key: str) -> Any:
    try:
        return arguments[key]
    except KeyError:
        raise ValueError(f"missing required argument: {key}") from None


def _uuid_argument(arguments: Mapping[str, Any], key: str) -> uuid.UUID:
    value = _required(arguments, key)
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValueError(f"invalid UUID for {key}: {value!r}") from None


def _object_argument(arguments: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = _required(arguments, key)
    if not isinstance(value, Mapping):
        raise ValueError(f"{key} must be an object")
    return dict(value)


def _argument(key: str, parse: Callable[[Mapping[str, Any], str], Any]) -> Any:
    return field(metadata={"key": key, "parse": parse})


class _ToolInput:
    """Tool arguments whose dataclass fields name their JSON key and parser."""

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> Any:
        """Build from JSON-style tool arguments."""
        return cls(
            **{
                f.name: f.metadata["parse"](arguments, f.metadata["key"])
                for f in dataclasses.fields(cls)
            }
        )

    def log_fields(self) -> dict[str, str]:
        """The identifiers of the call, keyed as in the tool arguments."""
        return {
            f.metadata["key"]: str(getattr(self, f.name))
            for f in dataclasses.fields(self)
            if f.metadata["parse"] is _uuid_argument
        }


@dataclass(frozen=True)
class CreateApplicationInput(_ToolInput):
    """Arguments of the create tool."""

    environment_id: uuid.UUID = _argument("environmentId", _uuid_argument)
    application: dict[str, Any] = _argument("application", _object_argument)


@dataclass(frozen=True)
class UpdateApplicationInput(_ToolInput):
    """Arguments of the update tool."""

    environment_id: uuid.UUID = _argument("environmentId", _uuid_argument)
    application_id: uuid.UUID = _argument("applicationId", _uuid_argument)
    application: dict[str, Any] = _argument("application", _object_argument)


@dataclass(frozen=True)
class _ApplicationOutput:
    application: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"application": self.application}


@dataclass(frozen=True)
class CreateApplicationOutput(_ApplicationOutput):
    """Result of the create tool."""


@dataclass(frozen=True)
class UpdateApplicationOutput(_ApplicationOutput):
    """Result of the update tool."""


def _log_http_response(response: Any) -> None:
    if response is not None:
        _log.debug(
            "PingOne API response",
            extra={"status": getattr(response, "status_code", None)},
        )


def _authenticated_client(
    tool_name: str,
    context: ToolContext,
    client_factory: ApplicationsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> tuple[ToolContext, Any]:
    context = dataclasses.replace(context, tool_name=tool_name)
    try:
        context = initialize_auth_context(context)
        client = client_factory.get_authenticated_client(context)
    except Exception as exc:
        _log.error("tool failed", extra={"tool": tool_name, "error": str(exc)})
        raise ToolError(tool_name, exc) from exc
    return context, client


def _call_api(call: Callable[[], tuple[Any, Any]]) -> tuple[Any, Any]:
    try:
        data, http_response = call()
    except Exception as exc:
        response = getattr(exc, "response", None)
        _log_http_response(response)
        raise ApiError(response, exc) from exc
    _log_http_response(http_response)
    return data, http_response


def _oidc_without_links(data: Any, http_response: Any) -> dict[str, Any]:
    if (
        not isinstance(data, Mapping)
        or data.get("protocol") != _OIDC_PROTOCOL
        or data.get("type") in _NON_OIDC_TYPES
    ):
        raise ApiError(http_response, "no application data in response")
    return {key: value for key, value in data.items() if key != _LINKS_FIELD}


def _oidc_handler(
    definition: ToolDefinition,
    input_type: type[_ToolInput],
    output_type: type[_ApplicationOutput],
    action: tuple[str, str],
    send: Callable[[Any, ToolContext, Any], tuple[Any, Any]],
    client_factory: ApplicationsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[ToolContext, Any], Any]:
    tool_name = definition.mcp_tool.name
    doing, done = action

    def handler(context: ToolContext, arguments: Any) -> Any:
        args = arguments if isinstance(arguments, input_type) else input_type.from_arguments(arguments)
        context, client = _authenticated_client(
            tool_name, context, client_factory, initialize_auth_context
        )
        fields = args.log_fields()
        _log.debug(f"{doing} application", extra=fields)
        data, http_response = _call_api(lambda: send(client, context, args))
        application = _oidc_without_links(data, http_response)
        _log.debug(f"Application {done} successfully", extra=fields)
        return output_type(application=application)

    return handler


def create_application_handler(
    client_factory: ApplicationsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[ToolContext, Any], CreateApplicationOutput]:
    """Return the handler that creates an OIDC application."""
    return _oidc_handler(
        CREATE_APPLICATION_DEF,
        CreateApplicationInput,
        CreateApplicationOutput,
        ("Creating", "created"),
        lambda client, context, args: client.create_application(
            context, args.environment_id, args.application
        ),
        client_factory,
        initialize_auth_context,
    )


def update_application_handler(
    client_factory: ApplicationsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[ToolContext, Any], UpdateApplicationOutput]:
    """Return the handler that replaces an OIDC application's configuration."""
    return _oidc_handler(
        UPDATE_APPLICATION_DEF,
        UpdateApplicationInput,
        UpdateApplicationOutput,
        ("Updating", "updated"),
        lambda client, context, args: client.update_application(
            context, args.environment_id, args.application_id, args.application
        ),
        client_factory,
        initialize_auth_context,
    )