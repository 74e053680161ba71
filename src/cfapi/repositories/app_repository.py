"""Applications stored as ``CFApp`` resources with an env ``Secret``."""

from __future__ import annotations

from typing import Any

from cfapi.authorization import AuthInfo
from cfapi.core.errors import NotFoundError

from .base import AppRepository
from .k8s import (
    K8sRepository,
    call_k8s,
    new_guid,
    object_guid,
    object_namespace,
    object_spec,
)
from .records import (
    APP_RESOURCE_TYPE,
    LIFECYCLE_BUILDPACK,
    STATE_STOPPED,
    AppRecord,
    CreateAppMessage,
    PatchAppMessage,
)

CF_APP_KIND = "CFApp"


def env_secret_name(app_guid: str) -> str:
    return f"{app_guid}-env"


def _to_app_record(obj: dict[str, Any]) -> AppRecord:
    spec = object_spec(obj)
    lifecycle = spec.get("lifecycle") or {}
    metadata = obj.get("metadata") or {}
    return AppRecord(
        guid=object_guid(obj),
        name=spec.get("displayName", ""),
        space_guid=object_namespace(obj),
        state=spec.get("desiredState", STATE_STOPPED),
        lifecycle_type=lifecycle.get("type", LIFECYCLE_BUILDPACK),
        buildpacks=tuple((lifecycle.get("data") or {}).get("buildpacks") or ()),
        env_secret_name=spec.get("envSecretName", ""),
        labels=dict(metadata.get("labels") or {}),
        annotations=dict(metadata.get("annotations") or {}),
    )


def _env_secret_body(name: str, environment_variables: dict[str, str]) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name},
        "stringData": dict(environment_variables),
    }


class K8sAppRepository(K8sRepository, AppRepository):
    plural = "cfapps"
    resource_type = APP_RESOURCE_TYPE

    async def get_app_by_name_and_space(
        self, auth_info: AuthInfo, name: str, space_guid: str
    ) -> AppRecord:
        for obj in await self._list(auth_info, (space_guid,)):
            if object_spec(obj).get("displayName") == name:
                return _to_app_record(obj)
        raise NotFoundError(APP_RESOURCE_TYPE)

    async def create_app(self, auth_info: AuthInfo, message: CreateAppMessage) -> AppRecord:
        guid = new_guid()
        secret_name = env_secret_name(guid)
        created = await self._create(
            auth_info,
            message.space_guid,
            {
                "kind": CF_APP_KIND,
                "metadata": {
                    "name": guid,
                    "namespace": message.space_guid,
                    "labels": dict(message.labels),
                    "annotations": dict(message.annotations),
                },
                "spec": {
                    "displayName": message.name,
                    "desiredState": message.state,
                    "envSecretName": secret_name,
                    "lifecycle": {
                        "type": message.lifecycle_type,
                        "data": {"buildpacks": list(message.buildpacks)},
                    },
                },
            },
        )

        core_api = self._client_factory.core(auth_info)
        await call_k8s(
            APP_RESOURCE_TYPE,
            core_api.create_namespaced_secret,
            message.space_guid,
            _env_secret_body(secret_name, message.environment_variables),
            **self._timeout_kwargs(),
        )
        return _to_app_record(created)

    async def patch_app(self, auth_info: AuthInfo, message: PatchAppMessage) -> AppRecord:
        current = _to_app_record(await self._get(auth_info, message.space_guid, message.app_guid))

        body: dict[str, Any] = {
            "metadata": {
                "labels": dict(message.metadata.labels),
                "annotations": dict(message.metadata.annotations),
            }
        }
        if message.buildpacks is not None:
            body["spec"] = {"lifecycle": {"data": {"buildpacks": list(message.buildpacks)}}}
        patched = await self._patch(auth_info, message.space_guid, message.app_guid, body)

        if message.environment_variables is not None:
            secret_name = current.env_secret_name or env_secret_name(message.app_guid)
            core_api = self._client_factory.core(auth_info)
            # replaced rather than merged so removed variables disappear
            await call_k8s(
                APP_RESOURCE_TYPE,
                core_api.replace_namespaced_secret,
                secret_name,
                message.space_guid,
                _env_secret_body(secret_name, message.environment_variables),
                **self._timeout_kwargs(),
            )
        return _to_app_record(patched)


__all__ = ["K8sAppRepository", "env_secret_name"]
