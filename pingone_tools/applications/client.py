"""Client for the PingOne applications management API."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from pingone_tools.collections import (
    SESSION_ID_HEADER,
    TRANSACTION_ID_HEADER,
    ToolContext,
    TokenStore,
    initialize_authenticated_legacy_client,
)

_NOT_INITIALIZED = "PingOne client is not initialized"

Page = tuple[Any, Any]


@runtime_checkable
class ApplicationsClient(Protocol):
    """Operations on applications in an environment."""

    def get_applications(self, context: ToolContext, environment_id: uuid.UUID) -> Iterable[Page]: ...

    def create_application(self, context: ToolContext, environment_id: uuid.UUID, application: Any) -> Page: ...

    def get_application(self, context: ToolContext, environment_id: uuid.UUID, application_id: uuid.UUID) -> Page: ...

    def update_application(
        self, context: ToolContext, environment_id: uuid.UUID, application_id: uuid.UUID, application: Any
    ) -> Page: ...


@runtime_checkable
class ApplicationsClientFactory(Protocol):
    """Produces an authenticated applications client."""

    def get_authenticated_client(self, context: ToolContext) -> ApplicationsClient: ...


class _AuditedApi:
    """Forwards calls to an API object, adding the audit headers of the context."""

    _logger = logging.getLogger(__name__)

    def __init__(self, api: Any) -> None:
        self._api = api

    def _ensure_api(self) -> Any:
        if self._api is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._api

    def _invoke(
        self,
        context: ToolContext,
        operation: str,
        message: str,
        *args: Any,
        fields: Mapping[str, str] | None = None,
        **options: Any,
    ) -> Any:
        api = self._ensure_api()
        self._logger.debug(message, extra=dict(fields or {}))
        headers = {
            SESSION_ID_HEADER: context.session_id,
            TRANSACTION_ID_HEADER: context.transaction_id,
        }
        return getattr(api, operation)(*args, headers=headers, **options)


class _SessionClientFactory:
    """Holds what is needed to build a client from the stored auth session."""

    def __init__(self, client_factory: Any, token_store: TokenStore) -> None:
        self._client_factory = client_factory
        self._token_store = token_store


def _ids(environment_id: uuid.UUID, application_id: uuid.UUID | None = None) -> dict[str, str]:
    fields = {"environmentId": str(environment_id)}
    if application_id is not None:
        fields["applicationId"] = str(application_id)
    return fields


class PingOneApplicationsClient(_AuditedApi):
    """Applications client over a management API object.

    The API object provides ``read_all_applications``, ``create_application``,
    ``read_one_application`` and ``update_application``; each takes string
    identifiers and a ``headers`` keyword. The single-item calls return a
    ``(data, http_response)`` pair and the listing yields such pairs per page.
    """

    def get_applications(self, context: ToolContext, environment_id: uuid.UUID) -> Iterable[Page]:
        return self._invoke(
            context,
            "read_all_applications",
            "Calling PingOne API to retrieve applications",
            str(environment_id),
            fields=_ids(environment_id),
        )

    def create_application(self, context: ToolContext, environment_id: uuid.UUID, application: Any) -> Page:
        return self._invoke(
            context,
            "create_application",
            "Calling PingOne API to create application",
            str(environment_id),
            application,
            fields=_ids(environment_id),
        )

    def get_application(self, context: ToolContext, environment_id: uuid.UUID, application_id: uuid.UUID) -> Page:
        return self._invoke(
            context,
            "read_one_application",
            "Calling PingOne API to retrieve application",
            str(environment_id),
            str(application_id),
            fields=_ids(environment_id, application_id),
        )

    def update_application(
        self, context: ToolContext, environment_id: uuid.UUID, application_id: uuid.UUID, application: Any
    ) -> Page:
        return self._invoke(
            context,
            "update_application",
            "Calling PingOne API to update application",
            str(environment_id),
            str(application_id),
            application,
            fields=_ids(environment_id, application_id),
        )


class PingOneApplicationsClientFactory(_SessionClientFactory):
    """Builds applications clients from the current auth session."""

    def get_authenticated_client(self, context: ToolContext) -> PingOneApplicationsClient:
        api = initialize_authenticated_legacy_client(context, self._client_factory, self._token_store)
        return PingOneApplicationsClient(api)