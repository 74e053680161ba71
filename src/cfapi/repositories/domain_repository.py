"""Domains stored as ``CFDomain`` resources in the root namespace."""

from __future__ import annotations

from typing import Any

from cfapi.authorization import AuthInfo
from cfapi.core.errors import NotFoundError

from .base import DomainRepository
from .k8s import (
    K8sClientFactory,
    K8sRepository,
    object_guid,
    object_namespace,
    object_spec,
)
from .records import DOMAIN_RESOURCE_TYPE, DomainRecord


def to_domain_record(obj: dict[str, Any]) -> DomainRecord:
    return DomainRecord(
        guid=object_guid(obj),
        name=object_spec(obj).get("name", ""),
        namespace=object_namespace(obj),
    )


class K8sDomainRepository(K8sRepository, DomainRepository):
    plural = "cfdomains"
    resource_type = DOMAIN_RESOURCE_TYPE

    def __init__(
        self,
        client_factory: K8sClientFactory,
        *,
        root_namespace: str,
        request_timeout: float | None = None,
    ) -> None:
        super().__init__(client_factory, request_timeout=request_timeout)
        self._root_namespace = root_namespace

    async def get_domain_by_name(self, auth_info: AuthInfo, name: str) -> DomainRecord:
        for obj in await self._list(auth_info, (self._root_namespace,)):
            if object_spec(obj).get("name") == name:
                return to_domain_record(obj)
        raise NotFoundError(DOMAIN_RESOURCE_TYPE)

    async def get_domain(
        self, auth_info: AuthInfo, guid: str, namespace: str = ""
    ) -> DomainRecord:
        return to_domain_record(await self._get(auth_info, namespace or self._root_namespace, guid))


__all__ = ["K8sDomainRepository", "to_domain_record"]
