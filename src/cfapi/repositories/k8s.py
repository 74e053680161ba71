"""Shared plumbing for the Kubernetes-backed resource stores.

Every store talks to the Korifi custom resources through the official
``kubernetes`` client. The client is synchronous, so calls are pushed onto a
worker thread with :func:`asyncio.to_thread`; cancelling the awaiting task
abandons the result and propagates :class:`asyncio.CancelledError`.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from typing import Any, Callable, Iterable, Mapping

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from cfapi.authorization import AuthInfo
from cfapi.core.errors import from_k8s_error
from cfapi.core.logging import get_logger
from cfapi.core.settings import Settings

KORIFI_GROUP = "korifi.cloudfoundry.org"
KORIFI_VERSION = "v1alpha1"
KORIFI_API_VERSION = f"{KORIFI_GROUP}/{KORIFI_VERSION}"

APP_GUID_LABEL = "korifi.cloudfoundry.org/app-guid"
PROCESS_TYPE_LABEL = "korifi.cloudfoundry.org/process-type"

logger = get_logger("cfapi.repositories.k8s")


class K8sClientFactory:
    """Build API clients that act with the caller's bearer token."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._configuration: client.Configuration | None = None

    def _base_configuration(self) -> client.Configuration:
        if self._configuration is not None:
            return self._configuration

        configuration = client.Configuration()
        kubeconfig_path = self._settings.kubeconfig_path
        if kubeconfig_path is not None:
            config.load_kube_config(
                config_file=str(kubeconfig_path), client_configuration=configuration
            )
        elif self._settings.kube_api_host is None:
            try:
                config.load_incluster_config(client_configuration=configuration)
            except ConfigException:
                logger.debug("k8s.config.incluster_unavailable")
                config.load_kube_config(client_configuration=configuration)

        if self._settings.kube_api_host:
            configuration.host = self._settings.kube_api_host
        configuration.verify_ssl = self._settings.kube_verify_ssl

        self._configuration = configuration
        return configuration

    def api_client(self, auth_info: AuthInfo) -> client.ApiClient:
        configuration = copy.deepcopy(self._base_configuration())
        if auth_info.token:
            configuration.api_key = {"authorization": auth_info.authorization_header}
            configuration.api_key_prefix = {}
            # the user's token replaces any client certificate of the loaded config
            configuration.cert_file = None
            configuration.key_file = None
        return client.ApiClient(configuration)

    def custom_objects(self, auth_info: AuthInfo) -> client.CustomObjectsApi:
        return client.CustomObjectsApi(self.api_client(auth_info))

    def core(self, auth_info: AuthInfo) -> client.CoreV1Api:
        return client.CoreV1Api(self.api_client(auth_info))


async def call_k8s(
    resource_type: str, func: Callable[..., Any], /, *args: Any, **kwargs: Any
) -> Any:
    """Run a blocking client call and translate API failures."""

    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except ApiException as exc:
        error = from_k8s_error(exc, resource_type)
        if error is exc:
            raise
        raise error from exc


def new_guid() -> str:
    return str(uuid.uuid4())


def object_guid(obj: Mapping[str, Any]) -> str:
    return obj["metadata"]["name"]


def object_namespace(obj: Mapping[str, Any]) -> str:
    return obj["metadata"].get("namespace", "")


def object_spec(obj: Mapping[str, Any]) -> dict[str, Any]:
    return obj.get("spec") or {}


def label_selector_in(label: str, values: Iterable[str]) -> str | None:
    """Return ``label in (a,b)`` or ``None`` when there is nothing to select on."""

    values = sorted(set(values))
    if not values:
        return None
    return f"{label} in ({','.join(values)})"


class K8sRepository:
    """Base class for stores reading and writing one Korifi resource kind."""

    plural: str = ""
    resource_type: str = ""

    def __init__(
        self, client_factory: K8sClientFactory, *, request_timeout: float | None = None
    ) -> None:
        self._client_factory = client_factory
        self._request_timeout = request_timeout

    def _custom_api(self, auth_info: AuthInfo) -> client.CustomObjectsApi:
        return self._client_factory.custom_objects(auth_info)

    def _timeout_kwargs(self) -> dict[str, Any]:
        if self._request_timeout:
            return {"_request_timeout": self._request_timeout}
        return {}

    async def _list(
        self,
        auth_info: AuthInfo,
        space_guids: Iterable[str] = (),
        *,
        label_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        """List objects in the given namespaces, or cluster wide when none are given."""

        api = self._custom_api(auth_info)
        kwargs = self._timeout_kwargs()
        if label_selector:
            kwargs["label_selector"] = label_selector

        namespaces = list(dict.fromkeys(space_guids))
        if not namespaces:
            response = await call_k8s(
                self.resource_type,
                api.list_cluster_custom_object,
                KORIFI_GROUP,
                KORIFI_VERSION,
                self.plural,
                **kwargs,
            )
            return list(response.get("items", []))

        items: list[dict[str, Any]] = []
        for namespace in namespaces:
            response = await call_k8s(
                self.resource_type,
                api.list_namespaced_custom_object,
                KORIFI_GROUP,
                KORIFI_VERSION,
                namespace,
                self.plural,
                **kwargs,
            )
            items.extend(response.get("items", []))
        return items

    async def _get(self, auth_info: AuthInfo, namespace: str, name: str) -> dict[str, Any]:
        api = self._custom_api(auth_info)
        return await call_k8s(
            self.resource_type,
            api.get_namespaced_custom_object,
            KORIFI_GROUP,
            KORIFI_VERSION,
            namespace,
            self.plural,
            name,
            **self._timeout_kwargs(),
        )

    async def _create(
        self, auth_info: AuthInfo, namespace: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        api = self._custom_api(auth_info)
        body = {"apiVersion": KORIFI_API_VERSION, **body}
        return await call_k8s(
            self.resource_type,
            api.create_namespaced_custom_object,
            KORIFI_GROUP,
            KORIFI_VERSION,
            namespace,
            self.plural,
            body,
            **self._timeout_kwargs(),
        )

    async def _patch(
        self, auth_info: AuthInfo, namespace: str, name: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Send ``body`` as a JSON merge patch; ``None`` values delete keys."""

        api = self._custom_api(auth_info)
        return await call_k8s(
            self.resource_type,
            api.patch_namespaced_custom_object,
            KORIFI_GROUP,
            KORIFI_VERSION,
            namespace,
            self.plural,
            name,
            body,
            **self._timeout_kwargs(),
        )


__all__ = [
    "APP_GUID_LABEL",
    "KORIFI_API_VERSION",
    "KORIFI_GROUP",
    "KORIFI_VERSION",
    "PROCESS_TYPE_LABEL",
    "K8sClientFactory",
    "K8sRepository",
    "call_k8s",
    "label_selector_in",
    "new_guid",
    "object_guid",
    "object_namespace",
    "object_spec",
]
