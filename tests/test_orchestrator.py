"""End-to-end behaviour of applying whole manifests against the fake stores."""

from __future__ import annotations

import asyncio
import re

import pytest
import structlog
from structlog.testing import capture_logs

from cfapi.authorization import AuthInfo
from cfapi.core.errors import ForbiddenError, NotFoundError, UnprocessableEntityError
from cfapi.manifest import ManifestApplier
from cfapi.manifest.routes import ADJECTIVES, NOUNS, canonical_route_key
from cfapi.repositories.records import DomainRecord
from cfapi.schemas.manifest import Manifest, parse_manifest

from fakes import FakeCloud, FakeRepositories

DEFAULT_DOMAIN = "apps.example.com"
CREATE_METHODS = ("create_app", "create_process", "get_or_create_route")


def _manifest(*applications: dict[str, object]) -> Manifest:
    return parse_manifest({"version": 1, "applications": list(applications)})


@pytest.mark.asyncio
async def test_default_route_for_new_app(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    await manifest_applier.apply(
        auth_info, space_guid, _manifest({"name": "web-app", "default-route": True})
    )

    app = cloud.app_named("web-app")
    [route] = cloud.routes_for_app(app.guid)
    assert canonical_route_key(route.host, route.domain.name, route.path) == (
        f"web-app.{DEFAULT_DOMAIN}"
    )
    [destination] = route.destinations
    assert destination.app_guid == app.guid
    assert destination.process_type == "web"
    assert destination.port == 8080
    assert destination.protocol == "http1"


@pytest.mark.asyncio
async def test_second_apply_is_idempotent(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    cloud.add_service_instance("my-db", space_guid)
    manifest = _manifest(
        {
            "name": "web-app",
            "memory": "512M",
            "default-route": True,
            "processes": [{"type": "worker", "command": "./work"}],
            "routes": [{"route": f"api.{DEFAULT_DOMAIN}/v1"}],
            "services": ["my-db"],
        }
    )
    await manifest_applier.apply(auth_info, space_guid, manifest)
    cloud.reset_calls()

    await manifest_applier.apply(auth_info, space_guid, manifest)

    for method in CREATE_METHODS + ("create_service_binding", "add_destinations_to_route"):
        assert cloud.calls_to(method) == [], method
    assert len(cloud.calls_to("patch_app")) == 1
    assert len(cloud.calls_to("patch_process")) == 2


@pytest.mark.asyncio
async def test_random_route_shape(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    await manifest_applier.apply(
        auth_info, space_guid, _manifest({"name": "web-app", "random-route": True})
    )

    app = cloud.app_named("web-app")
    [route] = cloud.routes_for_app(app.guid)
    key = canonical_route_key(route.host, route.domain.name, route.path)
    match = re.fullmatch(
        rf"web-app-([a-z]+)-([a-z]+)-[a-z]{{2}}\.{re.escape(DEFAULT_DOMAIN)}", key
    )
    assert match is not None, key
    assert match.group(1) in ADJECTIVES
    assert match.group(2) in NOUNS


@pytest.mark.asyncio
async def test_no_route_removes_only_own_destinations(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    app = cloud.add_app("web-app", space_guid)
    other = cloud.add_app("other-app", space_guid)
    own = cloud.add_route("web-app", default_domain, space_guid, app_guids=(app.guid,))
    shared = cloud.add_route(
        "shared", default_domain, space_guid, app_guids=(app.guid, other.guid)
    )
    foreign_destination = shared.destinations[1]

    await manifest_applier.apply(
        auth_info, space_guid, _manifest({"name": "web-app", "no-route": True})
    )

    assert len(cloud.calls_to("remove_destination_from_route")) == 2
    assert cloud.routes[own.guid].destinations == ()
    assert cloud.routes[shared.guid].destinations == (foreign_destination,)


@pytest.mark.asyncio
async def test_missing_service_instance_names_the_service(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        await manifest_applier.apply(
            auth_info,
            space_guid,
            _manifest({"name": "web-app", "services": ["missing-db"]}),
        )

    assert "missing-db" in str(excinfo.value)
    assert cloud.calls_to("create_service_binding") == []


@pytest.mark.asyncio
async def test_existing_route_disables_default_route_synthesis(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    app = cloud.add_app("web-app", space_guid)
    cloud.add_route("hand-made", default_domain, space_guid, app_guids=(app.guid,))

    await manifest_applier.apply(
        auth_info, space_guid, _manifest({"name": "web-app", "default-route": True})
    )

    assert cloud.calls_to("get_or_create_route") == []
    hosts = [route.host for route in cloud.routes_for_app(app.guid)]
    assert hosts == ["hand-made"]


@pytest.mark.asyncio
async def test_failure_stops_remaining_applications(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    manifest = _manifest(
        {"name": "first"},
        {"name": "second", "services": ["missing-db"]},
        {"name": "third"},
    )

    with pytest.raises(NotFoundError):
        await manifest_applier.apply(auth_info, space_guid, manifest)

    assert {app.name for app in cloud.apps.values()} == {"first", "second"}
    looked_up = [call.args[0] for call in cloud.calls_to("get_app_by_name_and_space")]
    assert looked_up == ["first", "second"]


@pytest.mark.asyncio
async def test_missing_default_domain_is_unprocessable(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    with pytest.raises(UnprocessableEntityError) as excinfo:
        await manifest_applier.apply(auth_info, space_guid, _manifest({"name": "web-app"}))

    assert DEFAULT_DOMAIN in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, NotFoundError)
    assert cloud.method_names() == ["get_domain_by_name"]


@pytest.mark.asyncio
async def test_forbidden_default_domain_is_unprocessable(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    cloud.errors["get_domain_by_name"] = ForbiddenError("Domain")

    with pytest.raises(UnprocessableEntityError) as excinfo:
        await manifest_applier.apply(auth_info, space_guid, _manifest({"name": "web-app"}))

    not_found = excinfo.value.__cause__
    assert isinstance(not_found, NotFoundError)
    assert not_found.resource_type == "Domain"
    assert excinfo.value.cause is not_found
    assert isinstance(not_found.__cause__, ForbiddenError)


@pytest.mark.asyncio
async def test_other_default_domain_errors_pass_through(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    failure = ConnectionError("api server unreachable")
    cloud.errors["get_domain_by_name"] = failure

    with pytest.raises(ConnectionError) as excinfo:
        await manifest_applier.apply(auth_info, space_guid, _manifest({"name": "web-app"}))

    assert excinfo.value is failure


@pytest.mark.asyncio
async def test_application_context_is_logged_and_cleared(
    manifest_applier: ManifestApplier,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
) -> None:
    cloud.errors["create_process"] = RuntimeError("quota exceeded")

    with capture_logs() as logs:
        with pytest.raises(RuntimeError):
            await manifest_applier.apply(
                auth_info, space_guid, _manifest({"name": "web-app", "instances": 2})
            )

    events = [entry["event"] for entry in logs]
    assert "manifest.apply.start" in events
    assert "manifest.apply.app.start" in events
    [error] = [entry for entry in logs if entry["event"] == "manifest.apply.app.error"]
    assert error["error_type"] == "RuntimeError"
    assert error["log_level"] == "error"

    assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.asyncio
async def test_cancellation_aborts_apply(
    manifest_applier: ManifestApplier,
    repos: FakeRepositories,
    cloud: FakeCloud,
    default_domain: DomainRecord,
    auth_info: AuthInfo,
    space_guid: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    started = asyncio.Event()

    async def _hanging_lookup(auth: AuthInfo, name: str, space: str) -> None:
        cloud.record("get_app_by_name_and_space", name, space)
        started.set()
        await asyncio.Event().wait()

    monkeypatch.setattr(repos.apps, "get_app_by_name_and_space", _hanging_lookup)
    manifest = _manifest({"name": "first"}, {"name": "second"})

    task = asyncio.create_task(manifest_applier.apply(auth_info, space_guid, manifest))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert cloud.apps == {}
    assert [call.args[0] for call in cloud.calls_to("get_app_by_name_and_space")] == ["first"]
