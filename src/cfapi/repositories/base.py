"""Contracts implemented by the concrete resource stores.

Every call takes the caller's :class:`~cfapi.authorization.AuthInfo` and is
a coroutine, so cancelling the awaiting task aborts the in-flight call.
"""

from __future__ import annotations

from cfapi.authorization import AuthInfo

from .records import (
    AddDestinationsMessage,
    AppRecord,
    CreateAppMessage,
    CreateProcessMessage,
    CreateRouteMessage,
    CreateServiceBindingMessage,
    DomainRecord,
    ListProcessesMessage,
    ListServiceBindingsMessage,
    ListServiceInstancesMessage,
    PatchAppMessage,
    PatchProcessMessage,
    ProcessRecord,
    RemoveDestinationMessage,
    RouteRecord,
    ServiceBindingRecord,
    ServiceInstanceRecord,
)


class AppRepository:
    """Protocol implemented by application stores."""

    async def get_app_by_name_and_space(
        self, auth_info: AuthInfo, name: str, space_guid: str
    ) -> AppRecord:
        """Return the named app or raise :class:`~cfapi.core.errors.NotFoundError`."""

        raise NotImplementedError

    async def create_app(self, auth_info: AuthInfo, message: CreateAppMessage) -> AppRecord:
        raise NotImplementedError

    async def patch_app(self, auth_info: AuthInfo, message: PatchAppMessage) -> AppRecord:
        raise NotImplementedError


class DomainRepository:
    """Protocol implemented by domain stores."""

    async def get_domain_by_name(self, auth_info: AuthInfo, name: str) -> DomainRecord:
        raise NotImplementedError


class ProcessRepository:
    """Protocol implemented by process stores."""

    async def list_processes(
        self, auth_info: AuthInfo, message: ListProcessesMessage
    ) -> list[ProcessRecord]:
        raise NotImplementedError

    async def create_process(self, auth_info: AuthInfo, message: CreateProcessMessage) -> None:
        raise NotImplementedError

    async def patch_process(
        self, auth_info: AuthInfo, message: PatchProcessMessage
    ) -> ProcessRecord:
        raise NotImplementedError


class RouteRepository:
    """Protocol implemented by route stores."""

    async def list_routes_for_app(
        self, auth_info: AuthInfo, app_guid: str, space_guid: str
    ) -> list[RouteRecord]:
        raise NotImplementedError

    async def get_or_create_route(
        self, auth_info: AuthInfo, message: CreateRouteMessage
    ) -> RouteRecord:
        raise NotImplementedError

    async def add_destinations_to_route(
        self, auth_info: AuthInfo, message: AddDestinationsMessage
    ) -> RouteRecord:
        raise NotImplementedError

    async def remove_destination_from_route(
        self, auth_info: AuthInfo, message: RemoveDestinationMessage
    ) -> RouteRecord:
        raise NotImplementedError


class ServiceInstanceRepository:
    """Protocol implemented by service instance stores."""

    async def list_service_instances(
        self, auth_info: AuthInfo, message: ListServiceInstancesMessage
    ) -> list[ServiceInstanceRecord]:
        raise NotImplementedError


class ServiceBindingRepository:
    """Protocol implemented by service binding stores."""

    async def list_service_bindings(
        self, auth_info: AuthInfo, message: ListServiceBindingsMessage
    ) -> list[ServiceBindingRecord]:
        raise NotImplementedError

    async def create_service_binding(
        self, auth_info: AuthInfo, message: CreateServiceBindingMessage
    ) -> ServiceBindingRecord:
        raise NotImplementedError


__all__ = [
    "AppRepository",
    "DomainRepository",
    "ProcessRepository",
    "RouteRepository",
    "ServiceInstanceRepository",
    "ServiceBindingRepository",
]
