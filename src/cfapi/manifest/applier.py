"""Converge one application towards its normalized manifest."""

from __future__ import annotations

from structlog.contextvars import bound_contextvars

from cfapi.authorization import AuthInfo
from cfapi.core.errors import NotFoundError, UnprocessableEntityError
from cfapi.core.logging import get_logger
from cfapi.repositories.base import (
    AppRepository,
    DomainRepository,
    ProcessRepository,
    RouteRepository,
    ServiceBindingRepository,
    ServiceInstanceRepository,
)
from cfapi.repositories.records import (
    PROCESS_TYPE_WEB,
    SERVICE_BINDING_TYPE_APP,
    SERVICE_INSTANCE_RESOURCE_TYPE,
    AddDestinationsMessage,
    CreateRouteMessage,
    CreateServiceBindingMessage,
    DesiredDestination,
    ListServiceInstancesMessage,
    RemoveDestinationMessage,
    RouteRecord,
)
from cfapi.schemas.manifest import ManifestApplication, ManifestApplicationService

from .routes import split_route
from .state_collector import AppState

DESTINATION_PORT = 8080
DESTINATION_PROTOCOL = "http1"

logger = get_logger("cfapi.manifest.applier")


class Applier:
    """Issue the create/patch/delete calls needed for one application.

    Phases run in order (app, processes, routes, services) and the first
    failure aborts the rest without undoing earlier phases.
    """

    def __init__(
        self,
        *,
        app_repo: AppRepository,
        domain_repo: DomainRepository,
        process_repo: ProcessRepository,
        route_repo: RouteRepository,
        service_instance_repo: ServiceInstanceRepository,
        service_binding_repo: ServiceBindingRepository,
    ) -> None:
        self._app_repo = app_repo
        self._domain_repo = domain_repo
        self._process_repo = process_repo
        self._route_repo = route_repo
        self._service_instance_repo = service_instance_repo
        self._service_binding_repo = service_binding_repo

    async def apply(
        self,
        auth_info: AuthInfo,
        space_guid: str,
        app_info: ManifestApplication,
        app_state: AppState,
    ) -> None:
        with bound_contextvars(phase="app"):
            app_state = await self._apply_app(auth_info, space_guid, app_info, app_state)
        with bound_contextvars(phase="processes"):
            await self._apply_processes(auth_info, app_info, app_state)
        with bound_contextvars(phase="routes"):
            await self._apply_routes(auth_info, app_info, app_state)
        with bound_contextvars(phase="services"):
            await self._apply_services(auth_info, app_info, app_state)

    async def _apply_app(
        self,
        auth_info: AuthInfo,
        space_guid: str,
        app_info: ManifestApplication,
        app_state: AppState,
    ) -> AppState:
        if app_state.app.guid == "":
            app = await self._app_repo.create_app(
                auth_info, app_info.to_app_create_message(space_guid)
            )
            logger.info("manifest.applier.app.created", app=app.name, app_guid=app.guid)
            # a fresh app owns nothing yet
            return AppState(app=app)

        await self._app_repo.patch_app(
            auth_info, app_info.to_app_patch_message(app_state.app.guid, space_guid)
        )
        logger.info("manifest.applier.app.patched", app=app_info.name, app_guid=app_state.app.guid)
        return app_state

    async def _apply_processes(
        self, auth_info: AuthInfo, app_info: ManifestApplication, app_state: AppState
    ) -> None:
        app = app_state.app
        for process_info in app_info.processes:
            existing = app_state.processes.get(process_info.type)
            if existing is not None:
                await self._process_repo.patch_process(
                    auth_info, process_info.to_process_patch_message(existing.guid, app.space_guid)
                )
                logger.info(
                    "manifest.applier.process.patched",
                    process_type=process_info.type,
                    process_guid=existing.guid,
                )
                continue

            await self._process_repo.create_process(
                auth_info, process_info.to_process_create_message(app.guid, app.space_guid)
            )
            logger.info("manifest.applier.process.created", process_type=process_info.type)

    async def _apply_routes(
        self, auth_info: AuthInfo, app_info: ManifestApplication, app_state: AppState
    ) -> None:
        if app_info.no_route:
            await self._delete_app_destinations(auth_info, app_state)
            return

        for route in app_info.routes:
            if route.route is None:
                continue
            await self._create_or_update_route(auth_info, route.route, app_state)

    async def _create_or_update_route(
        self, auth_info: AuthInfo, route_string: str, app_state: AppState
    ) -> None:
        # destinations of existing routes are never re-synchronized
        if route_string in app_state.routes:
            logger.debug("manifest.applier.route.skipped", route=route_string)
            return

        try:
            host, domain_name, path = split_route(route_string)
        except ValueError as exc:
            raise UnprocessableEntityError(str(exc), cause=exc) from exc

        domain = await self._domain_repo.get_domain_by_name(auth_info, domain_name)
        route = await self._route_repo.get_or_create_route(
            auth_info,
            CreateRouteMessage(
                host=host,
                path=path,
                space_guid=app_state.app.space_guid,
                domain_guid=domain.guid,
                domain_namespace=domain.namespace,
                domain_name=domain.name,
            ),
        )
        await self._route_repo.add_destinations_to_route(
            auth_info,
            AddDestinationsMessage(
                route_guid=route.guid,
                space_guid=route.space_guid,
                existing_destinations=route.destinations,
                new_destinations=(
                    DesiredDestination(
                        app_guid=app_state.app.guid,
                        process_type=PROCESS_TYPE_WEB,
                        port=DESTINATION_PORT,
                        protocol=DESTINATION_PROTOCOL,
                    ),
                ),
            ),
        )
        logger.info("manifest.applier.route.mapped", route=route_string, route_guid=route.guid)

    async def _delete_app_destinations(self, auth_info: AuthInfo, app_state: AppState) -> None:
        app_guid = app_state.app.guid
        for route in app_state.routes.values():
            for destination in route.destinations:
                if destination.app_guid != app_guid:
                    continue
                await self._remove_destination(auth_info, route, destination.guid)

    async def _remove_destination(
        self, auth_info: AuthInfo, route: RouteRecord, destination_guid: str
    ) -> None:
        await self._route_repo.remove_destination_from_route(
            auth_info,
            RemoveDestinationMessage(
                route_guid=route.guid,
                space_guid=route.space_guid,
                guid=destination_guid,
            ),
        )
        logger.info(
            "manifest.applier.destination.removed",
            route_guid=route.guid,
            destination_guid=destination_guid,
        )

    async def _apply_services(
        self, auth_info: AuthInfo, app_info: ManifestApplication, app_state: AppState
    ) -> None:
        desired: dict[str, ManifestApplicationService] = {}
        for service in app_info.services:
            if service.name not in app_state.service_bindings:
                # a repeated service name keeps its first declaration
                desired.setdefault(service.name, service)
        if not desired:
            return

        instances = await self._service_instance_repo.list_service_instances(
            auth_info,
            ListServiceInstancesMessage(
                names=tuple(desired), space_guids=(app_state.app.space_guid,)
            ),
        )
        instances_by_name = {instance.name: instance for instance in instances}

        missing = [name for name in desired if name not in instances_by_name]
        if missing:
            raise NotFoundError(
                SERVICE_INSTANCE_RESOURCE_TYPE,
                context={"application": app_info.name, "service": missing[0]},
            )

        for name, service in desired.items():
            binding = await self._service_binding_repo.create_service_binding(
                auth_info,
                CreateServiceBindingMessage(
                    type=SERVICE_BINDING_TYPE_APP,
                    name=service.binding_name,
                    service_instance_guid=instances_by_name[name].guid,
                    app_guid=app_state.app.guid,
                    space_guid=app_state.app.space_guid,
                    parameters=dict(service.parameters),
                ),
            )
            logger.info("manifest.applier.binding.created", service=name, binding_guid=binding.guid)


__all__ = ["Applier", "DESTINATION_PORT", "DESTINATION_PROTOCOL"]
