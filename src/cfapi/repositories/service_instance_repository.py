"""Service instances stored as ``CFServiceInstance`` resources."""

from __future__ import annotations

from typing import Any

from cfapi.authorization import AuthInfo

from .base import ServiceInstanceRepository
from .k8s import K8sRepository, object_guid, object_namespace, object_spec
from .records import (
    SERVICE_INSTANCE_RESOURCE_TYPE,
    ListServiceInstancesMessage,
    ServiceInstanceRecord,
)


def _to_service_instance_record(obj: dict[str, Any]) -> ServiceInstanceRecord:
    return ServiceInstanceRecord(
        guid=object_guid(obj),
        name=object_spec(obj).get("displayName", ""),
        space_guid=object_namespace(obj),
    )


class K8sServiceInstanceRepository(K8sRepository, ServiceInstanceRepository):
    plural = "cfserviceinstances"
    resource_type = SERVICE_INSTANCE_RESOURCE_TYPE

    async def list_service_instances(
        self, auth_info: AuthInfo, message: ListServiceInstancesMessage
    ) -> list[ServiceInstanceRecord]:
        """List instances matching every non-empty filter of ``message``."""

        names = set(message.names)
        guids = set(message.guids)
        records = []
        for obj in await self._list(auth_info, message.space_guids):
            record = _to_service_instance_record(obj)
            if names and record.name not in names:
                continue
            if guids and record.guid not in guids:
                continue
            records.append(record)
        return records


__all__ = ["K8sServiceInstanceRepository"]
