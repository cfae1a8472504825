"""Client for the PingOne environments API."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from pingone_tools.applications.client import Page, _AuditedApi, _SessionClientFactory
from pingone_tools.collections import ToolContext, initialize_authenticated_client

Request = Mapping[str, Any]


@runtime_checkable
class EnvironmentsClient(Protocol):
    """Operations on PingOne environments and their services."""

    def get_environments(self, context: ToolContext, filter: str | None = None) -> Iterable[Page]: ...

    def create_environment(self, context: ToolContext, request: Request) -> Page: ...

    def get_environment(self, context: ToolContext, environment_id: uuid.UUID) -> Page: ...

    def update_environment(self, context: ToolContext, environment_id: uuid.UUID, request: Request) -> Page: ...

    def get_environment_services(self, context: ToolContext, environment_id: uuid.UUID) -> Page: ...

    def update_environment_services(self, context: ToolContext, environment_id: uuid.UUID, request: Request) -> Page: ...


@runtime_checkable
class EnvironmentsClientFactory(Protocol):
    """Produces an authenticated environments client."""

    def get_authenticated_client(self, context: ToolContext) -> EnvironmentsClient: ...


def _request_fields(request: Request) -> dict[str, str]:
    return {
        "environmentName": str(request.get("name", "")),
        "region": str(request.get("region", "")),
        "type": str(request.get("type", "")),
    }


def _env_fields(environment_id: uuid.UUID) -> dict[str, str]:
    return {"environmentId": str(environment_id)}


class PingOneEnvironmentsClient(_AuditedApi):
    """Environments client over an API object.

    The API object provides ``get_environments``, ``create_environment``,
    ``get_environment_by_id``, ``replace_environment_by_id``,
    ``get_bill_of_materials`` and ``replace_bill_of_materials``; each takes a
    ``headers`` keyword. Single-item calls return a ``(data, http_response)``
    pair and the listing yields such pairs per page.
    """

    _logger = logging.getLogger(__name__)

    def _checked_request(self, request: Request | None, what: str) -> Request:
        self._ensure_api()
        if request is None:
            raise ValueError(f"{what} request is missing")
        return request

    def get_environments(self, context: ToolContext, filter: str | None = None) -> Iterable[Page]:
        options = {"filter": filter} if filter else {}
        return self._invoke(
            context, "get_environments", "Calling PingOne API to retrieve environments", **options
        )

    def create_environment(self, context: ToolContext, request: Request) -> Page:
        request = self._checked_request(request, "environment create")
        return self._invoke(
            context,
            "create_environment",
            "Calling PingOne API to create environment",
            request,
            fields=_request_fields(request),
        )

    def get_environment(self, context: ToolContext, environment_id: uuid.UUID) -> Page:
        return self._invoke(
            context,
            "get_environment_by_id",
            "Calling PingOne API to retrieve environment by ID",
            environment_id,
            fields=_env_fields(environment_id),
        )

    def update_environment(self, context: ToolContext, environment_id: uuid.UUID, request: Request) -> Page:
        request = self._checked_request(request, "environment replace")
        return self._invoke(
            context,
            "replace_environment_by_id",
            "Calling PingOne API to update environment by ID",
            environment_id,
            request,
            fields={**_env_fields(environment_id), **_request_fields(request)},
        )

    def get_environment_services(self, context: ToolContext, environment_id: uuid.UUID) -> Page:
        return self._invoke(
            context,
            "get_bill_of_materials",
            "Calling PingOne API to retrieve environment services by ID",
            environment_id,
            fields=_env_fields(environment_id),
        )

    def update_environment_services(self, context: ToolContext, environment_id: uuid.UUID, request: Request) -> Page:
        request = self._checked_request(request, "environment services replace")
        return self._invoke(
            context,
            "replace_bill_of_materials",
            "Calling PingOne API to update environment services by ID",
            environment_id,
            request,
            fields=_env_fields(environment_id),
        )


class PingOneEnvironmentsClientFactory(_SessionClientFactory):
    """Builds environments clients from the current auth session."""

    def get_authenticated_client(self, context: ToolContext) -> PingOneEnvironmentsClient:
        api = initialize_authenticated_client(self._client_factory, self._token_store)
        return PingOneEnvironmentsClient(api)