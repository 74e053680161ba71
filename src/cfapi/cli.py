"""Apply a Cloud Foundry application manifest to a space."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from .authorization import AuthInfo
from .core.errors import ApplicationError, error_response
from .core.logging import configure_logging, get_logger
from .core.settings import Settings, get_settings
from .manifest import Applier, ManifestApplier, Normalizer, StateCollector
from .repositories import (
    K8sAppRepository,
    K8sClientFactory,
    K8sDomainRepository,
    K8sProcessRepository,
    K8sRouteRepository,
    K8sServiceBindingRepository,
    K8sServiceInstanceRepository,
)
from .schemas.manifest import Manifest, load_manifest

LOGGER = get_logger("cfapi.cli")


def build_manifest_applier(
    settings: Settings, client_factory: K8sClientFactory | None = None
) -> ManifestApplier:
    """Wire the Kubernetes stores into a ready to use :class:`ManifestApplier`."""

    client_factory = client_factory or K8sClientFactory(settings)
    timeout = settings.request_timeout or None

    domain_repo = K8sDomainRepository(
        client_factory, root_namespace=settings.root_namespace, request_timeout=timeout
    )
    app_repo = K8sAppRepository(client_factory, request_timeout=timeout)
    process_repo = K8sProcessRepository(client_factory, request_timeout=timeout)
    route_repo = K8sRouteRepository(
        client_factory, domain_repo=domain_repo, request_timeout=timeout
    )
    service_instance_repo = K8sServiceInstanceRepository(client_factory, request_timeout=timeout)
    service_binding_repo = K8sServiceBindingRepository(client_factory, request_timeout=timeout)

    return ManifestApplier(
        domain_repo=domain_repo,
        state_collector=StateCollector(
            app_repo=app_repo,
            process_repo=process_repo,
            route_repo=route_repo,
            service_instance_repo=service_instance_repo,
            service_binding_repo=service_binding_repo,
        ),
        normalizer=Normalizer(settings.default_domain_name),
        applier=Applier(
            app_repo=app_repo,
            domain_repo=domain_repo,
            process_repo=process_repo,
            route_repo=route_repo,
            service_instance_repo=service_instance_repo,
            service_binding_repo=service_binding_repo,
        ),
        default_domain_name=settings.default_domain_name,
    )


async def apply_manifest(
    manifest_applier: ManifestApplier,
    auth_info: AuthInfo,
    space_guid: str,
    manifest: Manifest,
    *,
    timeout: float | None = None,
) -> None:
    """Run a whole apply within ``timeout`` seconds (unbounded when falsy)."""

    async with asyncio.timeout(timeout or None):
        await manifest_applier.apply(auth_info, space_guid, manifest)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "manifest",
        type=Path,
        help="Path to manifest.yml or to the directory containing it",
    )
    parser.add_argument("--space", required=True, help="GUID of the target space")
    parser.add_argument("--token", default="", help="Bearer token of the acting user")
    parser.add_argument(
        "--default-domain",
        default=None,
        help="Override DEFAULT_DOMAIN_NAME for this run",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    return parser.parse_args(argv)


def _print_error(error: Exception) -> None:
    print(json.dumps(error_response(error), indent=2), file=sys.stdout)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = get_settings()
    overrides = {}
    if args.default_domain:
        overrides["default_domain_name"] = args.default_domain
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level)

    try:
        manifest = load_manifest(args.manifest)
    except (FileNotFoundError, yaml.YAMLError, ValidationError) as exc:
        LOGGER.error("manifest.load.error", path=str(args.manifest), error=str(exc))
        _print_error(exc)
        return 1

    manifest_applier = build_manifest_applier(settings)
    try:
        asyncio.run(
            apply_manifest(
                manifest_applier,
                AuthInfo(token=args.token),
                args.space,
                manifest,
                timeout=settings.request_timeout,
            )
        )
    except ApplicationError as exc:
        _print_error(exc)
        return 1
    except TimeoutError as exc:
        LOGGER.error("manifest.apply.timeout", timeout=settings.request_timeout)
        _print_error(exc)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
