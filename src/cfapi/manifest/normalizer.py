"""Resolve a raw manifest application into its fully specified form."""

from __future__ import annotations

import random

from cfapi.repositories.records import PROCESS_TYPE_WEB
from cfapi.schemas.manifest import (
    ManifestApplication,
    ManifestApplicationProcess,
    ManifestRoute,
)

from .routes import generate_random_host_suffix
from .state_collector import AppState

# App-level fields that imply, and are folded into, the web process.
WEB_PROCESS_FIELDS: tuple[str, ...] = (
    "command",
    "memory",
    "disk_quota",
    "instances",
    "health_check_type",
    "health_check_http_endpoint",
    "health_check_invocation_timeout",
    "timeout",
)

_IGNORED_BUILDPACKS = frozenset({"default", "null"})


class Normalizer:
    """Pure transformation from desired manifest plus observed state.

    Neither argument of :meth:`normalize` is mutated.
    """

    def __init__(self, default_domain_name: str, *, rng: random.Random | None = None) -> None:
        self._default_domain_name = default_domain_name
        self._rng = rng

    def normalize(self, app_info: ManifestApplication, app_state: AppState) -> ManifestApplication:
        return ManifestApplication(
            name=app_info.name,
            env=dict(app_info.env),
            buildpacks=self._normalize_buildpacks(app_info),
            processes=self._normalize_processes(app_info),
            routes=self._normalize_routes(app_info, app_state),
            no_route=app_info.no_route,
            services=[service.model_copy(deep=True) for service in app_info.services],
            metadata=app_info.metadata.model_copy(deep=True) if app_info.metadata else None,
        )

    def _normalize_buildpacks(self, app_info: ManifestApplication) -> list[str]:
        buildpacks = list(app_info.buildpacks)
        legacy = app_info.buildpack
        if legacy and legacy not in _IGNORED_BUILDPACKS:
            buildpacks.insert(0, legacy)
        return buildpacks

    def _normalize_processes(
        self, app_info: ManifestApplication
    ) -> list[ManifestApplicationProcess]:
        processes: dict[str, ManifestApplicationProcess] = {}
        for process in app_info.processes:
            if process.disk_quota is None and process.alt_disk_quota is not None:
                process = process.model_copy(update={"disk_quota": process.alt_disk_quota})
            else:
                process = process.model_copy()
            processes[process.type] = process

        app_values = {name: getattr(app_info, name) for name in WEB_PROCESS_FIELDS}
        if app_values["disk_quota"] is None:
            app_values["disk_quota"] = app_info.alt_disk_quota

        app_values = {name: value for name, value in app_values.items() if value is not None}
        if not app_values:
            return list(processes.values())

        web = processes.get(PROCESS_TYPE_WEB) or ManifestApplicationProcess(type=PROCESS_TYPE_WEB)
        # process-level values win over app-level ones
        inherited = {
            name: value for name, value in app_values.items() if getattr(web, name) is None
        }
        processes[PROCESS_TYPE_WEB] = web.model_copy(update=inherited)
        return list(processes.values())

    def _normalize_routes(
        self, app_info: ManifestApplication, app_state: AppState
    ) -> list[ManifestRoute]:
        if app_info.no_route:
            return []

        routes = [route.model_copy() for route in app_info.routes]
        # Once any route exists, declared or observed, no implicit route is added.
        if routes or app_state.routes:
            return routes

        if app_info.default_route:
            routes.append(ManifestRoute(route=f"{app_info.name}.{self._default_domain_name}"))

        if app_info.random_route:
            host = f"{app_info.name}-{generate_random_host_suffix(self._rng)}"
            routes.append(ManifestRoute(route=f"{host}.{self._default_domain_name}"))

        return routes


__all__ = ["Normalizer", "WEB_PROCESS_FIELDS"]
