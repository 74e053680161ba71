"""Processes stored as ``CFProcess`` resources labelled with their app."""

from __future__ import annotations

from typing import Any

from cfapi.authorization import AuthInfo

from .base import ProcessRepository
from .k8s import (
    APP_GUID_LABEL,
    PROCESS_TYPE_LABEL,
    K8sRepository,
    label_selector_in,
    object_guid,
    object_namespace,
    object_spec,
)
from .records import (
    PROCESS_RESOURCE_TYPE,
    CreateProcessMessage,
    HealthCheck,
    HealthCheckData,
    ListProcessesMessage,
    PatchProcessMessage,
    ProcessRecord,
)

CF_PROCESS_KIND = "CFProcess"


def process_guid(app_guid: str, process_type: str) -> str:
    return f"cf-proc-{app_guid}-{process_type}"


def _to_process_record(obj: dict[str, Any]) -> ProcessRecord:
    spec = object_spec(obj)
    health_check = spec.get("healthCheck") or {}
    data = health_check.get("data") or {}
    return ProcessRecord(
        guid=object_guid(obj),
        app_guid=(spec.get("appRef") or {}).get("name", ""),
        space_guid=object_namespace(obj),
        type=spec.get("processType", ""),
        command=spec.get("command", ""),
        desired_instances=spec.get("desiredInstances") or 0,
        memory_mb=spec.get("memoryMB", 0),
        disk_quota_mb=spec.get("diskQuotaMB", 0),
        health_check=HealthCheck(
            type=health_check.get("type", ""),
            data=HealthCheckData(
                http_endpoint=data.get("httpEndpoint", ""),
                timeout_seconds=data.get("timeoutSeconds", 0),
                invocation_timeout_seconds=data.get("invocationTimeoutSeconds", 0),
            ),
        ),
    )


def _health_check_data_patch(message: PatchProcessMessage) -> dict[str, Any]:
    fields = {
        "httpEndpoint": message.health_check_http_endpoint,
        "invocationTimeoutSeconds": message.health_check_invocation_timeout_seconds,
        "timeoutSeconds": message.health_check_timeout_seconds,
    }
    return {key: value for key, value in fields.items() if value is not None}


class K8sProcessRepository(K8sRepository, ProcessRepository):
    plural = "cfprocesses"
    resource_type = PROCESS_RESOURCE_TYPE

    async def list_processes(
        self, auth_info: AuthInfo, message: ListProcessesMessage
    ) -> list[ProcessRecord]:
        objects = await self._list(
            auth_info,
            message.space_guids,
            label_selector=label_selector_in(APP_GUID_LABEL, message.app_guids),
        )
        return [_to_process_record(obj) for obj in objects]

    async def create_process(self, auth_info: AuthInfo, message: CreateProcessMessage) -> None:
        health_check = message.health_check
        await self._create(
            auth_info,
            message.space_guid,
            {
                "kind": CF_PROCESS_KIND,
                "metadata": {
                    "name": process_guid(message.app_guid, message.type),
                    "namespace": message.space_guid,
                    "labels": {
                        APP_GUID_LABEL: message.app_guid,
                        PROCESS_TYPE_LABEL: message.type,
                    },
                },
                "spec": {
                    "appRef": {"name": message.app_guid},
                    "processType": message.type,
                    "command": message.command,
                    "desiredInstances": message.desired_instances,
                    "memoryMB": message.memory_mb,
                    "diskQuotaMB": message.disk_quota_mb,
                    "healthCheck": {
                        "type": health_check.type,
                        "data": {
                            "httpEndpoint": health_check.data.http_endpoint,
                            "timeoutSeconds": health_check.data.timeout_seconds,
                            "invocationTimeoutSeconds": (
                                health_check.data.invocation_timeout_seconds
                            ),
                        },
                    },
                },
            },
        )

    async def patch_process(
        self, auth_info: AuthInfo, message: PatchProcessMessage
    ) -> ProcessRecord:
        spec: dict[str, Any] = {}
        if message.command is not None:
            spec["command"] = message.command
        if message.desired_instances is not None:
            spec["desiredInstances"] = message.desired_instances
        if message.memory_mb is not None:
            spec["memoryMB"] = message.memory_mb
        if message.disk_quota_mb is not None:
            spec["diskQuotaMB"] = message.disk_quota_mb

        health_check: dict[str, Any] = {}
        if message.health_check_type is not None:
            health_check["type"] = message.health_check_type
        data = _health_check_data_patch(message)
        if data:
            health_check["data"] = data
        if health_check:
            spec["healthCheck"] = health_check

        patched = await self._patch(
            auth_info, message.space_guid, message.process_guid, {"spec": spec}
        )
        return _to_process_record(patched)


__all__ = ["K8sProcessRepository", "process_guid"]
