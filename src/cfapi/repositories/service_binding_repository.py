"""Service bindings stored as ``CFServiceBinding`` resources."""

from __future__ import annotations

from typing import Any

from cfapi.authorization import AuthInfo

from .base import ServiceBindingRepository
from .k8s import (
    APP_GUID_LABEL,
    KORIFI_API_VERSION,
    K8sRepository,
    new_guid,
    object_guid,
    object_namespace,
    object_spec,
)
from .records import (
    SERVICE_BINDING_RESOURCE_TYPE,
    SERVICE_BINDING_TYPE_APP,
    CreateServiceBindingMessage,
    ListServiceBindingsMessage,
    ServiceBindingRecord,
)

CF_SERVICE_BINDING_KIND = "CFServiceBinding"
CF_SERVICE_INSTANCE_KIND = "CFServiceInstance"


def _to_service_binding_record(obj: dict[str, Any]) -> ServiceBindingRecord:
    spec = object_spec(obj)
    return ServiceBindingRecord(
        guid=object_guid(obj),
        service_instance_guid=(spec.get("service") or {}).get("name", ""),
        app_guid=(spec.get("appRef") or {}).get("name", ""),
        space_guid=object_namespace(obj),
        name=spec.get("displayName"),
        type=spec.get("type", SERVICE_BINDING_TYPE_APP),
    )


class K8sServiceBindingRepository(K8sRepository, ServiceBindingRepository):
    plural = "cfservicebindings"
    resource_type = SERVICE_BINDING_RESOURCE_TYPE

    async def list_service_bindings(
        self, auth_info: AuthInfo, message: ListServiceBindingsMessage
    ) -> list[ServiceBindingRecord]:
        app_guids = set(message.app_guids)
        records = [
            _to_service_binding_record(obj)
            for obj in await self._list(auth_info, message.space_guids)
        ]
        if not app_guids:
            return records
        return [record for record in records if record.app_guid in app_guids]

    async def create_service_binding(
        self, auth_info: AuthInfo, message: CreateServiceBindingMessage
    ) -> ServiceBindingRecord:
        spec: dict[str, Any] = {
            "type": message.type,
            "service": {
                "apiVersion": KORIFI_API_VERSION,
                "kind": CF_SERVICE_INSTANCE_KIND,
                "name": message.service_instance_guid,
            },
            "appRef": {"name": message.app_guid},
        }
        if message.name is not None:
            spec["displayName"] = message.name
        if message.parameters:
            spec["parameters"] = dict(message.parameters)

        guid = new_guid()
        created = await self._create(
            auth_info,
            message.space_guid,
            {
                "kind": CF_SERVICE_BINDING_KIND,
                "metadata": {
                    "name": guid,
                    "namespace": message.space_guid,
                    "labels": {APP_GUID_LABEL: message.app_guid},
                },
                "spec": spec,
            },
        )
        return _to_service_binding_record(created)


__all__ = ["K8sServiceBindingRepository"]
