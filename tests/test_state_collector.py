"""Tests for collecting the observed state of an application."""

from __future__ import annotations

import pytest

from cfapi.authorization import AuthInfo
from cfapi.core.errors import ForbiddenError, NotFoundError, UnknownError
from cfapi.manifest import AppState, StateCollector
from cfapi.repositories.records import DomainRecord

from fakes import FakeCloud


@pytest.mark.asyncio
async def test_missing_app_yields_empty_state(
    state_collector: StateCollector, cloud: FakeCloud, auth_info: AuthInfo, space_guid: str
) -> None:
    state = await state_collector.collect_state(auth_info, "ghost", space_guid)

    assert state == AppState()
    assert state.app.guid == ""
    assert cloud.method_names() == ["get_app_by_name_and_space"]


@pytest.mark.asyncio
async def test_forbidden_lookup_is_reported_as_not_found(
    state_collector: StateCollector, cloud: FakeCloud, auth_info: AuthInfo, space_guid: str
) -> None:
    cloud.errors["get_app_by_name_and_space"] = ForbiddenError("App")

    with pytest.raises(NotFoundError) as excinfo:
        await state_collector.collect_state(auth_info, "secret", space_guid)

    assert excinfo.value.resource_type == "App"
    assert isinstance(excinfo.value.__cause__, ForbiddenError)


@pytest.mark.asyncio
async def test_other_lookup_errors_propagate_unchanged(
    state_collector: StateCollector, cloud: FakeCloud, auth_info: AuthInfo, space_guid: str
) -> None:
    failure = RuntimeError("etcd unavailable")
    cloud.errors["get_app_by_name_and_space"] = failure

    with pytest.raises(RuntimeError) as excinfo:
        await state_collector.collect_state(auth_info, "web-app", space_guid)

    assert excinfo.value is failure


@pytest.mark.asyncio
async def test_existing_app_state_is_indexed(
    state_collector: StateCollector,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    app = cloud.add_app("web-app", space_guid)
    other = cloud.add_app("other-app", space_guid)
    web = cloud.add_process(app, "web")
    worker = cloud.add_process(app, "worker")
    cloud.add_process(other, "web")
    root_route = cloud.add_route("web-app", default_domain, space_guid, app_guids=(app.guid,))
    api_route = cloud.add_route(
        "api", default_domain, space_guid, path="/v1", app_guids=(app.guid, other.guid)
    )
    cloud.add_route("other", default_domain, space_guid, app_guids=(other.guid,))
    db = cloud.add_service_instance("my-db", space_guid)
    binding = cloud.add_service_binding(db, app)

    state = await state_collector.collect_state(auth_info, "web-app", space_guid)

    assert state.app == app
    assert state.processes == {"web": web, "worker": worker}
    assert state.routes == {
        "web-app.apps.example.com": root_route,
        "api.apps.example.com/v1": api_route,
    }
    assert state.service_bindings == {"my-db": binding}


@pytest.mark.asyncio
async def test_instances_are_not_listed_without_bindings(
    state_collector: StateCollector, cloud: FakeCloud, auth_info: AuthInfo, space_guid: str
) -> None:
    cloud.add_app("web-app", space_guid)

    state = await state_collector.collect_state(auth_info, "web-app", space_guid)

    assert state.service_bindings == {}
    assert cloud.calls_to("list_service_instances") == []


@pytest.mark.asyncio
async def test_unresolvable_binding_instance_fails_collection(
    state_collector: StateCollector, cloud: FakeCloud, auth_info: AuthInfo, space_guid: str
) -> None:
    app = cloud.add_app("web-app", space_guid)
    instance = cloud.add_service_instance("my-db", space_guid)
    binding = cloud.add_service_binding(instance, app)
    del cloud.service_instances[instance.guid]

    with pytest.raises(UnknownError) as excinfo:
        await state_collector.collect_state(auth_info, "web-app", space_guid)

    assert binding.guid in str(excinfo.value)
    assert instance.guid in str(excinfo.value)


@pytest.mark.asyncio
async def test_list_failures_propagate(
    state_collector: StateCollector, cloud: FakeCloud, auth_info: AuthInfo, space_guid: str
) -> None:
    cloud.add_app("web-app", space_guid)
    cloud.errors["list_routes_for_app"] = ForbiddenError("Route")

    with pytest.raises(ForbiddenError):
        await state_collector.collect_state(auth_info, "web-app", space_guid)
