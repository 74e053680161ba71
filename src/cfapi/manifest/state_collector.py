"""Read the observed state of a single application."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

from cfapi.authorization import AuthInfo
from cfapi.core.errors import ForbiddenError, NotFoundError, UnknownError, forbidden_as_not_found
from cfapi.core.logging import get_logger
from cfapi.repositories.base import (
    AppRepository,
    ProcessRepository,
    RouteRepository,
    ServiceBindingRepository,
    ServiceInstanceRepository,
)
from cfapi.repositories.records import (
    AppRecord,
    ListProcessesMessage,
    ListServiceBindingsMessage,
    ListServiceInstancesMessage,
    ProcessRecord,
    RouteRecord,
    ServiceBindingRecord,
)

from .routes import canonical_route_key

T = TypeVar("T")

logger = get_logger("cfapi.manifest.state_collector")


@dataclass(frozen=True)
class AppState:
    """Snapshot of an application's records for one apply cycle.

    ``processes`` is keyed by process type, ``routes`` by canonical route
    key and ``service_bindings`` by service instance name. An empty
    snapshot (``app.guid == ""``) describes an application that does not
    exist yet.
    """

    app: AppRecord = field(default_factory=AppRecord)
    processes: dict[str, ProcessRecord] = field(default_factory=dict)
    routes: dict[str, RouteRecord] = field(default_factory=dict)
    service_bindings: dict[str, ServiceBindingRecord] = field(default_factory=dict)


def _index(records: Iterable[T], key: Callable[[T], str]) -> dict[str, T]:
    return {key(record): record for record in records}


class StateCollector:
    """Assemble an :class:`AppState` from the resource stores."""

    def __init__(
        self,
        *,
        app_repo: AppRepository,
        process_repo: ProcessRepository,
        route_repo: RouteRepository,
        service_instance_repo: ServiceInstanceRepository,
        service_binding_repo: ServiceBindingRepository,
    ) -> None:
        self._app_repo = app_repo
        self._process_repo = process_repo
        self._route_repo = route_repo
        self._service_instance_repo = service_instance_repo
        self._service_binding_repo = service_binding_repo

    async def collect_state(self, auth_info: AuthInfo, app_name: str, space_guid: str) -> AppState:
        try:
            app = await self._app_repo.get_app_by_name_and_space(auth_info, app_name, space_guid)
        except NotFoundError:
            logger.debug("manifest.state.app_absent", app=app_name, space_guid=space_guid)
            return AppState()
        except ForbiddenError as exc:
            raise forbidden_as_not_found(exc) from exc

        processes = await self._index_processes_by_type(auth_info, app.guid, space_guid)
        routes = await self._index_routes_by_key(auth_info, app.guid, space_guid)
        bindings = await self._index_bindings_by_service_name(auth_info, app.guid, space_guid)

        logger.debug(
            "manifest.state.collected",
            app=app_name,
            app_guid=app.guid,
            processes=sorted(processes),
            routes=sorted(routes),
            service_bindings=sorted(bindings),
        )
        return AppState(app=app, processes=processes, routes=routes, service_bindings=bindings)

    async def _index_processes_by_type(
        self, auth_info: AuthInfo, app_guid: str, space_guid: str
    ) -> dict[str, ProcessRecord]:
        processes = await self._process_repo.list_processes(
            auth_info,
            ListProcessesMessage(app_guids=(app_guid,), space_guids=(space_guid,)),
        )
        return _index(processes, lambda process: process.type)

    async def _index_routes_by_key(
        self, auth_info: AuthInfo, app_guid: str, space_guid: str
    ) -> dict[str, RouteRecord]:
        routes = await self._route_repo.list_routes_for_app(auth_info, app_guid, space_guid)
        return _index(
            routes, lambda route: canonical_route_key(route.host, route.domain.name, route.path)
        )

    async def _index_bindings_by_service_name(
        self, auth_info: AuthInfo, app_guid: str, space_guid: str
    ) -> dict[str, ServiceBindingRecord]:
        bindings = await self._service_binding_repo.list_service_bindings(
            auth_info,
            ListServiceBindingsMessage(app_guids=(app_guid,), space_guids=(space_guid,)),
        )
        if not bindings:
            return {}

        instance_guids = tuple(dict.fromkeys(binding.service_instance_guid for binding in bindings))
        instances = await self._service_instance_repo.list_service_instances(
            auth_info,
            ListServiceInstancesMessage(guids=instance_guids, space_guids=(space_guid,)),
        )
        instances_by_guid = _index(instances, lambda instance: instance.guid)

        indexed: dict[str, ServiceBindingRecord] = {}
        for binding in bindings:
            instance = instances_by_guid.get(binding.service_instance_guid)
            if instance is None:
                raise UnknownError(
                    f'no service instance found with guid "{binding.service_instance_guid}" '
                    f'for service binding "{binding.guid}"'
                )
            indexed[instance.name] = binding
        return indexed


__all__ = ["AppState", "StateCollector"]
