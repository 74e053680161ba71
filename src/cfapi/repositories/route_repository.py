"""Routes stored as ``CFRoute`` resources carrying their destinations."""

from __future__ import annotations

from typing import Any, Iterable

from cfapi.authorization import AuthInfo

from .base import RouteRepository
from .domain_repository import K8sDomainRepository
from .k8s import (
    K8sClientFactory,
    K8sRepository,
    new_guid,
    object_guid,
    object_namespace,
    object_spec,
)
from .records import (
    ROUTE_RESOURCE_TYPE,
    AddDestinationsMessage,
    CreateRouteMessage,
    DestinationRecord,
    DomainRecord,
    RemoveDestinationMessage,
    RouteRecord,
)

CF_ROUTE_KIND = "CFRoute"


def _to_destination_record(destination: dict[str, Any]) -> DestinationRecord:
    return DestinationRecord(
        guid=destination.get("guid", ""),
        app_guid=(destination.get("appRef") or {}).get("name", ""),
        process_type=destination.get("processType", ""),
        port=destination.get("port"),
        protocol=destination.get("protocol"),
    )


def _destination_body(
    guid: str, app_guid: str, process_type: str, port: int | None, protocol: str | None
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "guid": guid,
        "appRef": {"name": app_guid},
        "processType": process_type,
    }
    if port is not None:
        body["port"] = port
    if protocol is not None:
        body["protocol"] = protocol
    return body


def _destinations_body(destinations: Iterable[DestinationRecord]) -> list[dict[str, Any]]:
    return [
        _destination_body(d.guid, d.app_guid, d.process_type, d.port, d.protocol)
        for d in destinations
    ]


class K8sRouteRepository(K8sRepository, RouteRepository):
    plural = "cfroutes"
    resource_type = ROUTE_RESOURCE_TYPE

    def __init__(
        self,
        client_factory: K8sClientFactory,
        *,
        domain_repo: K8sDomainRepository,
        request_timeout: float | None = None,
    ) -> None:
        super().__init__(client_factory, request_timeout=request_timeout)
        self._domain_repo = domain_repo

    async def _to_route_record(
        self,
        auth_info: AuthInfo,
        obj: dict[str, Any],
        domains: dict[str, DomainRecord] | None = None,
    ) -> RouteRecord:
        spec = object_spec(obj)
        domain_ref = spec.get("domainRef") or {}
        domain_guid = domain_ref.get("name", "")

        domains = {} if domains is None else domains
        domain = domains.get(domain_guid)
        if domain is None:
            domain = await self._domain_repo.get_domain(
                auth_info, domain_guid, domain_ref.get("namespace", "")
            )
            domains[domain_guid] = domain

        return RouteRecord(
            guid=object_guid(obj),
            space_guid=object_namespace(obj),
            host=spec.get("host", ""),
            path=spec.get("path", ""),
            domain=domain,
            destinations=tuple(
                _to_destination_record(destination)
                for destination in spec.get("destinations") or ()
            ),
        )

    async def list_routes_for_app(
        self, auth_info: AuthInfo, app_guid: str, space_guid: str
    ) -> list[RouteRecord]:
        domains: dict[str, DomainRecord] = {}
        routes = []
        for obj in await self._list(auth_info, (space_guid,)):
            destinations = object_spec(obj).get("destinations") or ()
            if not any((d.get("appRef") or {}).get("name") == app_guid for d in destinations):
                continue
            routes.append(await self._to_route_record(auth_info, obj, domains))
        return routes

    async def get_or_create_route(
        self, auth_info: AuthInfo, message: CreateRouteMessage
    ) -> RouteRecord:
        domain = DomainRecord(
            guid=message.domain_guid,
            name=message.domain_name,
            namespace=message.domain_namespace,
        )
        domains = {domain.guid: domain}

        for obj in await self._list(auth_info, (message.space_guid,)):
            spec = object_spec(obj)
            if (
                spec.get("host", "").lower() == message.host.lower()
                and spec.get("path", "") == message.path
                and (spec.get("domainRef") or {}).get("name") == message.domain_guid
            ):
                return await self._to_route_record(auth_info, obj, domains)

        guid = new_guid()
        created = await self._create(
            auth_info,
            message.space_guid,
            {
                "kind": CF_ROUTE_KIND,
                "metadata": {"name": guid, "namespace": message.space_guid},
                "spec": {
                    "host": message.host,
                    "path": message.path,
                    "domainRef": {
                        "name": message.domain_guid,
                        "namespace": message.domain_namespace,
                    },
                    "destinations": [],
                },
            },
        )
        return await self._to_route_record(auth_info, created, domains)

    async def add_destinations_to_route(
        self, auth_info: AuthInfo, message: AddDestinationsMessage
    ) -> RouteRecord:
        destinations = _destinations_body(message.existing_destinations)
        existing = {
            (d.app_guid, d.process_type, d.port, d.protocol)
            for d in message.existing_destinations
        }
        for desired in message.new_destinations:
            key = (desired.app_guid, desired.process_type, desired.port, desired.protocol)
            if key in existing:
                continue
            existing.add(key)
            destinations.append(
                _destination_body(
                    new_guid(),
                    desired.app_guid,
                    desired.process_type,
                    desired.port,
                    desired.protocol,
                )
            )

        patched = await self._patch(
            auth_info,
            message.space_guid,
            message.route_guid,
            {"spec": {"destinations": destinations}},
        )
        return await self._to_route_record(auth_info, patched)

    async def remove_destination_from_route(
        self, auth_info: AuthInfo, message: RemoveDestinationMessage
    ) -> RouteRecord:
        route = await self._get(auth_info, message.space_guid, message.route_guid)
        destinations = [
            destination
            for destination in object_spec(route).get("destinations") or ()
            if destination.get("guid") != message.guid
        ]
        patched = await self._patch(
            auth_info,
            message.space_guid,
            message.route_guid,
            {"spec": {"destinations": destinations}},
        )
        return await self._to_route_record(auth_info, patched)


__all__ = ["K8sRouteRepository"]
