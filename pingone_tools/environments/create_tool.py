"""Tool that creates a sandbox PingOne environment."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pingone_tools.collections import (
    ApiError,
    Tool,
    ToolContext,
    ToolDefinition,
    ToolError,
    ToolValidationPolicy,
)
from pingone_tools.environments.client import EnvironmentsClientFactory

_log = logging.getLogger(__name__)

ContextInitializer = Callable[[ToolContext], ToolContext]

SANDBOX_ENVIRONMENT_TYPE = "SANDBOX"
_LINKS_FIELD = "_links"

CREATE_ENVIRONMENT_DEF = ToolDefinition(
    validation_policy=ToolValidationPolicy(production_environment_not_applicable=True),
    mcp_tool=Tool(
        name="create_environment",
        title="Create PingOne Environment",
        description=(
            "Create a new sandbox PingOne environment. Only SANDBOX type supported via "
            "API (PRODUCTION must be created via admin console). Requires license quota. "
            "Environment becomes available immediately but services may take 10-30 "
            "seconds to initialize."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "billOfMaterials": {
                    "type": "object",
                    "description": (
                        "OPTIONAL. The Bill of Materials for the environment. Create "
                        "requests that do not specify this property receive a default "
                        "PingOne Bill of Materials on creation. Specifies the PingOne and "
                        "non-PingOne products and services associated with this "
                        "environment deployment."
                    ),
                },
                "description": {
                    "type": "string",
                    "description": "OPTIONAL. The description of the environment.",
                },
                "icon": {
                    "type": "string",
                    "description": (
                        "OPTIONAL. The URL referencing the image to use for the "
                        "environment icon. The supported image types are JPEG/JPG, PNG, "
                        "and GIF."
                    ),
                },
                "license": {
                    "type": "object",
                    "description": (
                        "REQUIRED. The active license associated with this environment. "
                        "Required only if your organization has more than one active "
                        "license."
                    ),
                },
                "name": {
                    "type": "string",
                    "description": (
                        "REQUIRED. Environment name, must be unique within organization."
                    ),
                },
                "region": {
                    "type": "string",
                    "description": (
                        "REQUIRED. Region code: NA, CA, EU, AU, SG, or AP. Cannot be "
                        "changed after creation."
                    ),
                },
            },
            "required": ["license", "name", "region"],
        },
        output_schema={
            "type": "object",
            "properties": {
                "environment": {
                    "type": "object",
                    "description": (
                        "The created environment details including ID, name, type, "
                        "region, and metadata"
                    ),
                }
            },
            "required": ["environment"],
        },
        destructive_hint=False,
    ),
)


def _required(arguments: Mapping[str, Any], key: str) -> Any:
    try:
        return arguments[key]
    except KeyError:
        raise ValueError(f"missing required argument: {key}") from None


def _optional_mapping(arguments: Mapping[str, Any], key: str) -> dict[str, Any] | None:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"{key} must be an object")
    return dict(value)


@dataclass(frozen=True)
class CreateEnvironmentInput:
    """Arguments of the create environment tool."""

    name: str
    region: str
    license: dict[str, Any]
    description: str | None = None
    icon: str | None = None
    bill_of_materials: dict[str, Any] | None = None

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> CreateEnvironmentInput:
        """Build from JSON-style tool arguments."""
        license_value = _required(arguments, "license")
        if not isinstance(license_value, Mapping):
            raise ValueError("license must be an object")
        return cls(
            name=str(_required(arguments, "name")),
            region=str(_required(arguments, "region")),
            license=dict(license_value),
            description=arguments.get("description"),
            icon=arguments.get("icon"),
            bill_of_materials=_optional_mapping(arguments, "billOfMaterials"),
        )

    def to_request(self) -> dict[str, Any]:
        """Return the API create request; the environment type is always SANDBOX."""
        request: dict[str, Any] = {
            "name": self.name,
            "region": self.region,
            "type": SANDBOX_ENVIRONMENT_TYPE,
            "license": self.license,
        }
        if self.description is not None:
            request["description"] = self.description
        if self.icon is not None:
            request["icon"] = self.icon
        if self.bill_of_materials is not None:
            request["billOfMaterials"] = self.bill_of_materials
        return request


@dataclass(frozen=True)
class CreateEnvironmentOutput:
    """Result of the create environment tool."""

    environment: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"environment": self.environment}


def _log_http_response(response: Any) -> None:
    if response is not None:
        _log.debug(
            "PingOne API response",
            extra={"status": getattr(response, "status_code", None)},
        )


def create_environment_handler(
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[ToolContext, Any], CreateEnvironmentOutput]:
    """Return the handler that creates a sandbox environment."""
    tool_name = CREATE_ENVIRONMENT_DEF.mcp_tool.name

    def handler(context: ToolContext, arguments: Any) -> CreateEnvironmentOutput:
        args = (
            arguments
            if isinstance(arguments, CreateEnvironmentInput)
            else CreateEnvironmentInput.from_arguments(arguments)
        )
        context = dataclasses.replace(context, tool_name=tool_name)
        try:
            context = initialize_auth_context(context)
            client = client_factory.get_authenticated_client(context)
        except Exception as exc:
            _log.error("tool failed", extra={"tool": tool_name, "error": str(exc)})
            raise ToolError(tool_name, exc) from exc

        _log.debug(
            "Creating environment",
            extra={"name": args.name, "region": args.region, "type": SANDBOX_ENVIRONMENT_TYPE},
        )
        try:
            data, http_response = client.create_environment(context, args.to_request())
        except Exception as exc:
            response = getattr(exc, "response", None)
            _log_http_response(response)
            raise ApiError(response, exc) from exc
        _log_http_response(http_response)

        if not isinstance(data, Mapping):
            raise ApiError(http_response, "no environment data in response")

        environment = {key: value for key, value in data.items() if key != _LINKS_FIELD}
        _log.debug(
            "Environment created successfully",
            extra={"environmentId": str(environment.get("id")), "name": environment.get("name")},
        )
        return CreateEnvironmentOutput(environment=environment)

    return handler