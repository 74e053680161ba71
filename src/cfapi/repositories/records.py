"""Records returned by, and messages accepted by, the resource stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

APP_RESOURCE_TYPE = "App"
DOMAIN_RESOURCE_TYPE = "Domain"
PROCESS_RESOURCE_TYPE = "Process"
ROUTE_RESOURCE_TYPE = "Route"
SERVICE_INSTANCE_RESOURCE_TYPE = "Service Instance"
SERVICE_BINDING_RESOURCE_TYPE = "Service Binding"

PROCESS_TYPE_WEB = "web"
STATE_STOPPED = "STOPPED"
STATE_STARTED = "STARTED"
LIFECYCLE_BUILDPACK = "buildpack"
SERVICE_BINDING_TYPE_APP = "app"


@dataclass(frozen=True)
class AppRecord:
    """An application as stored in a space.

    ``guid == ""`` marks an application that does not exist yet.
    """

    guid: str = ""
    name: str = ""
    space_guid: str = ""
    state: str = STATE_STOPPED
    lifecycle_type: str = LIFECYCLE_BUILDPACK
    buildpacks: tuple[str, ...] = ()
    env_secret_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DomainRecord:
    guid: str
    name: str
    namespace: str = ""


@dataclass(frozen=True)
class HealthCheckData:
    http_endpoint: str = ""
    timeout_seconds: int = 0
    invocation_timeout_seconds: int = 0


@dataclass(frozen=True)
class HealthCheck:
    type: str = ""
    data: HealthCheckData = field(default_factory=HealthCheckData)


@dataclass(frozen=True)
class ProcessRecord:
    guid: str
    app_guid: str
    space_guid: str
    type: str
    command: str = ""
    desired_instances: int = 0
    memory_mb: int = 0
    disk_quota_mb: int = 0
    health_check: HealthCheck = field(default_factory=HealthCheck)


@dataclass(frozen=True)
class DestinationRecord:
    guid: str
    app_guid: str
    process_type: str
    port: int | None = None
    protocol: str | None = None


@dataclass(frozen=True)
class RouteRecord:
    guid: str
    space_guid: str
    host: str
    domain: DomainRecord
    path: str = ""
    destinations: tuple[DestinationRecord, ...] = ()


@dataclass(frozen=True)
class ServiceInstanceRecord:
    guid: str
    name: str
    space_guid: str


@dataclass(frozen=True)
class ServiceBindingRecord:
    guid: str
    service_instance_guid: str
    app_guid: str
    space_guid: str
    name: str | None = None
    type: str = SERVICE_BINDING_TYPE_APP


@dataclass(frozen=True)
class CreateAppMessage:
    name: str
    space_guid: str
    state: str = STATE_STOPPED
    lifecycle_type: str = LIFECYCLE_BUILDPACK
    buildpacks: tuple[str, ...] = ()
    environment_variables: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MetadataPatch:
    """Three-way patch: ``None`` removes a key, absent keys stay untouched."""

    labels: dict[str, str | None] = field(default_factory=dict)
    annotations: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class PatchAppMessage:
    app_guid: str
    space_guid: str
    buildpacks: tuple[str, ...] | None = None
    environment_variables: dict[str, str] | None = None
    metadata: MetadataPatch = field(default_factory=MetadataPatch)


@dataclass(frozen=True)
class ListProcessesMessage:
    app_guids: tuple[str, ...] = ()
    space_guids: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreateProcessMessage:
    app_guid: str
    space_guid: str
    type: str
    command: str = ""
    desired_instances: int | None = None
    memory_mb: int = 0
    disk_quota_mb: int = 0
    health_check: HealthCheck = field(default_factory=HealthCheck)


@dataclass(frozen=True)
class PatchProcessMessage:
    process_guid: str
    space_guid: str
    command: str | None = None
    desired_instances: int | None = None
    memory_mb: int | None = None
    disk_quota_mb: int | None = None
    health_check_type: str | None = None
    health_check_http_endpoint: str | None = None
    health_check_invocation_timeout_seconds: int | None = None
    health_check_timeout_seconds: int | None = None


@dataclass(frozen=True)
class CreateRouteMessage:
    host: str
    path: str
    space_guid: str
    domain_guid: str
    domain_namespace: str
    domain_name: str


@dataclass(frozen=True)
class DesiredDestination:
    app_guid: str
    process_type: str
    port: int | None = None
    protocol: str | None = None


@dataclass(frozen=True)
class AddDestinationsMessage:
    route_guid: str
    space_guid: str
    existing_destinations: tuple[DestinationRecord, ...] = ()
    new_destinations: tuple[DesiredDestination, ...] = ()


@dataclass(frozen=True)
class RemoveDestinationMessage:
    route_guid: str
    space_guid: str
    guid: str


@dataclass(frozen=True)
class ListServiceInstancesMessage:
    names: tuple[str, ...] = ()
    guids: tuple[str, ...] = ()
    space_guids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ListServiceBindingsMessage:
    app_guids: tuple[str, ...] = ()
    space_guids: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreateServiceBindingMessage:
    service_instance_guid: str
    app_guid: str
    space_guid: str
    name: str | None = None
    type: str = SERVICE_BINDING_TYPE_APP
    parameters: dict[str, Any] = field(default_factory=dict)
