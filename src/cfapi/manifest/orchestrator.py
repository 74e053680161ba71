"""Top level entry point applying a whole manifest to a space."""

from __future__ import annotations

import time

from structlog.contextvars import bind_contextvars, unbind_contextvars

from cfapi.authorization import AuthInfo
from cfapi.core.errors import (
    ForbiddenError,
    NotFoundError,
    as_unprocessable_entity,
    forbidden_as_not_found,
)
from cfapi.core.logging import get_logger
from cfapi.repositories.base import DomainRepository
from cfapi.schemas.manifest import Manifest, ManifestApplication

from .applier import Applier
from .normalizer import Normalizer
from .state_collector import StateCollector

logger = get_logger("cfapi.manifest.orchestrator")


class ManifestApplier:
    """Drive collect, normalize and apply for every application in order.

    Applications are processed one at a time. The first failure stops the
    whole call: earlier applications keep their changes and later ones are
    never attempted.
    """

    def __init__(
        self,
        *,
        domain_repo: DomainRepository,
        state_collector: StateCollector,
        normalizer: Normalizer,
        applier: Applier,
        default_domain_name: str,
    ) -> None:
        self._domain_repo = domain_repo
        self._state_collector = state_collector
        self._normalizer = normalizer
        self._applier = applier
        self._default_domain_name = default_domain_name

    async def apply(self, auth_info: AuthInfo, space_guid: str, manifest: Manifest) -> None:
        logger.info(
            "manifest.apply.start",
            space_guid=space_guid,
            applications=[app_info.name for app_info in manifest.applications],
        )
        await self._ensure_default_domain_configured(auth_info)

        for app_info in manifest.applications:
            await self._apply_application(auth_info, space_guid, app_info)

        logger.info("manifest.apply.complete", space_guid=space_guid)

    async def _ensure_default_domain_configured(self, auth_info: AuthInfo) -> None:
        try:
            await self._domain_repo.get_domain_by_name(auth_info, self._default_domain_name)
        except (NotFoundError, ForbiddenError) as exc:
            not_found = forbidden_as_not_found(exc)
            raise as_unprocessable_entity(
                not_found,
                f'The configured default domain "{self._default_domain_name}" was not found',
                NotFoundError,
            ) from not_found

    async def _apply_application(
        self, auth_info: AuthInfo, space_guid: str, app_info: ManifestApplication
    ) -> None:
        bind_contextvars(space_guid=space_guid, app=app_info.name)
        start_time = time.perf_counter()
        logger.info("manifest.apply.app.start")
        try:
            app_state = await self._state_collector.collect_state(
                auth_info, app_info.name, space_guid
            )
            normalized = self._normalizer.normalize(app_info, app_state)
            await self._applier.apply(auth_info, space_guid, normalized, app_state)
        except Exception as exc:
            logger.error(
                "manifest.apply.app.error",
                error=str(exc),
                error_type=exc.__class__.__name__,
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
            raise
        else:
            logger.info(
                "manifest.apply.app.complete",
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
        finally:
            unbind_contextvars("space_guid", "app")


__all__ = ["ManifestApplier"]
