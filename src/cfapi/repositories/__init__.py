"""Resource store contracts and their Kubernetes implementations."""

from .app_repository import K8sAppRepository
from .base import (
    AppRepository,
    DomainRepository,
    ProcessRepository,
    RouteRepository,
    ServiceBindingRepository,
    ServiceInstanceRepository,
)
from .domain_repository import K8sDomainRepository
from .k8s import K8sClientFactory
from .process_repository import K8sProcessRepository
from .route_repository import K8sRouteRepository
from .service_binding_repository import K8sServiceBindingRepository
from .service_instance_repository import K8sServiceInstanceRepository

__all__ = [
    "AppRepository",
    "DomainRepository",
    "ProcessRepository",
    "RouteRepository",
    "ServiceBindingRepository",
    "ServiceInstanceRepository",
    "K8sClientFactory",
    "K8sAppRepository",
    "K8sDomainRepository",
    "K8sProcessRepository",
    "K8sRouteRepository",
    "K8sServiceBindingRepository",
    "K8sServiceInstanceRepository",
]
