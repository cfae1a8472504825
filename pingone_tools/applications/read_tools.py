"""Tools that read applications: fetch one by ID and list all in an environment."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

from pingone_tools.applications.client import ApplicationsClientFactory
from pingone_tools.applications.write_tools import (
    ContextInitializer,
    _authenticated_client,
    _call_api,
    _log_http_response,
    _uuid_argument,
)
from pingone_tools.collections import (
    ApiError,
    Tool,
    ToolContext,
    ToolDefinition,
    ToolError,
    ToolValidationPolicy,
)

_log = logging.getLogger(__name__)

_LINKS_FIELD = "_links"
ADMIN_CONSOLE_APP_NAME = "PingOne Admin Console"
ADMIN_CONSOLE_TYPE = "PING_ONE_ADMIN_CONSOLE"

_UUID_SCHEMA = {"type": "string", "format": "uuid"}

GET_APPLICATION_DEF = ToolDefinition(
    validation_policy=ToolValidationPolicy(allow_production_environment_read=True),
    mcp_tool=Tool(
        name="get_application",
        title="Get PingOne Application by ID",
        description=(
            "Retrieve application configuration by ID. Use 'list_applications' first "
            "if you need to find the application ID. Call before "
            "'update_oidc_application' to get current settings."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "environmentId": {
                    **_UUID_SCHEMA,
                    "description": "REQUIRED. The unique identifier (UUID) string of the PingOne environment",
                },
                "applicationId": {
                    **_UUID_SCHEMA,
                    "description": "REQUIRED. The unique identifier (UUID) string of the PingOne application",
                },
            },
            "required": ["environmentId", "applicationId"],
        },
        read_only_hint=True,
    ),
)

LIST_APPLICATIONS_DEF = ToolDefinition(
    validation_policy=ToolValidationPolicy(allow_production_environment_read=True),
    mcp_tool=Tool(
        name="list_applications",
        title="List PingOne Applications",
        description=(
            "Lists all applications in an environment. Use to discover application IDs "
            "or review configurations before updates. Returns OIDC, SAML, External Link, "
            "and PingOne system applications."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "environmentId": {**_UUID_SCHEMA, "description": "REQUIRED. Environment UUID."},
            },
            "required": ["environmentId"],
        },
        output_schema={
            "type": "object",
            "properties": {
                "applications": {
                    "type": "array",
                    "description": "List of applications with their configuration details",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string", "description": "The UUID of the application"},
                            "name": {"type": "string", "description": "The name of the application"},
                            "protocol": {
                                "type": "string",
                                "description": "The protocol type of the application",
                            },
                            "type": {"type": "string", "description": "The type of the application"},
                            "createdAt": {
                                "type": "string",
                                "format": "date-time",
                                "description": "The creation timestamp of the application",
                            },
                        },
                        "required": ["name"],
                    },
                }
            },
            "required": ["applications"],
        },
        read_only_hint=True,
    ),
)


def _application_kind(application: Any) -> str:
    """Classify an application payload into one of the known variants."""
    if not isinstance(application, Mapping):
        raise ValueError("unknown application type in response")
    protocol = application.get("protocol")
    app_type = application.get("type")
    if protocol == "EXTERNAL_LINK":
        return "external_link"
    if protocol == "SAML":
        return "saml"
    if protocol == "WS_FED":
        return "wsfed"
    if app_type == ADMIN_CONSOLE_TYPE:
        return "admin_console"
    if app_type == "PING_ONE_PORTAL":
        return "portal"
    if app_type == "PING_ONE_SELF_SERVICE":
        return "self_service"
    if protocol == "OPENID_CONNECT":
        return "oidc"
    raise ValueError("unknown application type in response")


def _parse_time(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _format_time(value: datetime) -> str:
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def format_application(application: Any) -> dict[str, Any]:
    """Return the application payload with its ``_links`` field removed.

    Raises ValueError when the application is of no known type.
    """
    _application_kind(application)
    return {key: value for key, value in application.items() if key != _LINKS_FIELD}


@dataclass(frozen=True)
class ApplicationSummary:
    """The identifying fields of an application."""

    name: str
    id: str | None = None
    protocol: str | None = None
    type: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.id is not None:
            result["id"] = self.id
        result["name"] = self.name
        if self.protocol is not None:
            result["protocol"] = self.protocol
        if self.type is not None:
            result["type"] = self.type
        if self.created_at is not None:
            result["createdAt"] = _format_time(self.created_at)
        return result


def summarize_application(application: Any) -> ApplicationSummary:
    """Build a summary of an application payload.

    Raises ValueError when the application is of no known type.
    """
    if _application_kind(application) == "admin_console":
        return ApplicationSummary(name=ADMIN_CONSOLE_APP_NAME, type=ADMIN_CONSOLE_TYPE)
    return ApplicationSummary(
        id=application.get("id"),
        name=application.get("name", ""),
        protocol=application.get("protocol"),
        type=application.get("type"),
        created_at=_parse_time(application.get("createdAt")),
    )


@dataclass(frozen=True)
class GetApplicationInput:
    """Arguments of the get tool."""

    environment_id: uuid.UUID
    application_id: uuid.UUID

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> GetApplicationInput:
        """Build from JSON-style tool arguments."""
        return cls(
            environment_id=_uuid_argument(arguments, "environmentId"),
            application_id=_uuid_argument(arguments, "applicationId"),
        )


@dataclass(frozen=True)
class ListApplicationsInput:
    """Arguments of the list tool."""

    environment_id: uuid.UUID

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> ListApplicationsInput:
        """Build from JSON-style tool arguments."""
        return cls(environment_id=_uuid_argument(arguments, "environmentId"))


@dataclass(frozen=True)
class ListApplicationsOutput:
    """Result of the list tool."""

    applications: list[ApplicationSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"applications": [summary.to_dict() for summary in self.applications]}


def get_application_handler(
    client_factory: ApplicationsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[ToolContext, Any], str]:
    """Return the handler that fetches one application as JSON text."""
    tool_name = GET_APPLICATION_DEF.mcp_tool.name

    def handler(context: ToolContext, arguments: Any) -> str:
        args = (
            arguments
            if isinstance(arguments, GetApplicationInput)
            else GetApplicationInput.from_arguments(arguments)
        )
        context, client = _authenticated_client(
            tool_name, context, client_factory, initialize_auth_context
        )
        ids = {
            "environmentId": str(args.environment_id),
            "applicationId": str(args.application_id),
        }
        _log.debug("Retrieving application", extra=ids)
        data, http_response = _call_api(
            lambda: client.get_application(
                context, args.environment_id, args.application_id
            )
        )
        if data is None:
            raise ApiError(http_response, "no application data in response")
        _log.debug("Application retrieved successfully", extra=ids)

        try:
            formatted = format_application(data)
        except ValueError as exc:
            raise ToolError(tool_name, exc) from exc
        try:
            return json.dumps(formatted, separators=(",", ":"), default=_json_default)
        except (TypeError, ValueError) as exc:
            raise ToolError(
                tool_name, f"failed to marshal formatted application response: {exc}"
            ) from exc

    return handler


def _pages(paged: Iterable[tuple[Any, Any]]) -> Iterable[tuple[Any, Any]]:
    iterator = iter(paged)
    while True:
        try:
            page, http_response = next(iterator)
        except StopIteration:
            return
        except Exception as exc:
            response = getattr(exc, "response", None)
            _log_http_response(response)
            raise ApiError(response, exc) from exc
        _log_http_response(http_response)
        yield page, http_response


def list_applications_handler(
    client_factory: ApplicationsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[ToolContext, Any], ListApplicationsOutput]:
    """Return the handler that lists every application across all pages."""
    tool_name = LIST_APPLICATIONS_DEF.mcp_tool.name

    def handler(context: ToolContext, arguments: Any) -> ListApplicationsOutput:
        args = (
            arguments
            if isinstance(arguments, ListApplicationsInput)
            else ListApplicationsInput.from_arguments(arguments)
        )
        context, client = _authenticated_client(
            tool_name, context, client_factory, initialize_auth_context
        )
        _log.debug("Listing applications", extra={"environmentId": str(args.environment_id)})
        try:
            paged = client.get_applications(context, args.environment_id)
        except Exception as exc:
            raise ToolError(tool_name, exc) from exc

        summaries: list[ApplicationSummary] = []
        for page, http_response in _pages(paged):
            embedded = page.get("_embedded") if isinstance(page, Mapping) else None
            if embedded is None:
                raise ApiError(http_response, "no data in response")
            applications = embedded.get("applications") or []
            _log.debug("Retrieved applications page", extra={"count": len(applications)})
            for application in applications:
                try:
                    summaries.append(summarize_application(application))
                except ValueError as exc:
                    raise ToolError(GET_APPLICATION_DEF.mcp_tool.name, exc) from exc
        return ListApplicationsOutput(applications=summaries)

    return handler