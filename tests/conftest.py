"""Pytest fixtures for the manifest reconciliation test suite."""

from __future__ import annotations

import random
from collections.abc import Iterator

import pytest

from cfapi.authorization import AuthInfo
from cfapi.core.settings import get_settings
from cfapi.manifest import Applier, ManifestApplier, Normalizer, StateCollector
from cfapi.repositories.records import DomainRecord

from fakes import FakeCloud, FakeRepositories

SPACE_GUID = "space-guid"
DEFAULT_DOMAIN = "apps.example.com"


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def auth_info() -> AuthInfo:
    return AuthInfo(token="user-token")


@pytest.fixture
def space_guid() -> str:
    return SPACE_GUID


@pytest.fixture
def cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def default_domain(cloud: FakeCloud) -> DomainRecord:
    return cloud.add_domain(DEFAULT_DOMAIN)


@pytest.fixture
def repos(cloud: FakeCloud) -> FakeRepositories:
    return FakeRepositories.build(cloud)


@pytest.fixture
def state_collector(repos: FakeRepositories) -> StateCollector:
    return StateCollector(
        app_repo=repos.apps,
        process_repo=repos.processes,
        route_repo=repos.routes,
        service_instance_repo=repos.service_instances,
        service_binding_repo=repos.service_bindings,
    )


@pytest.fixture
def normalizer() -> Normalizer:
    return Normalizer(DEFAULT_DOMAIN, rng=random.Random(1234))


@pytest.fixture
def applier(repos: FakeRepositories) -> Applier:
    return Applier(
        app_repo=repos.apps,
        domain_repo=repos.domains,
        process_repo=repos.processes,
        route_repo=repos.routes,
        service_instance_repo=repos.service_instances,
        service_binding_repo=repos.service_bindings,
    )


@pytest.fixture
def manifest_applier(
    repos: FakeRepositories,
    state_collector: StateCollector,
    normalizer: Normalizer,
    applier: Applier,
) -> ManifestApplier:
    return ManifestApplier(
        domain_repo=repos.domains,
        state_collector=state_collector,
        normalizer=normalizer,
        applier=applier,
        default_domain_name=DEFAULT_DOMAIN,
    )
