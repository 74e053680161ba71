"""Tests for the error kinds and their translation helpers."""

from __future__ import annotations

from kubernetes.client.rest import ApiException

from cfapi.core.errors import (
    ApplicationError,
    ForbiddenError,
    InvalidAuthError,
    NotFoundError,
    UnknownError,
    UnprocessableEntityError,
    as_unprocessable_entity,
    error_response,
    forbidden_as_not_found,
    from_k8s_error,
)


def test_not_found_message_names_resource_and_context() -> None:
    error = NotFoundError(
        "Service Instance", context={"application": "web-app", "service": "my-db"}
    )

    assert error.resource_type == "Service Instance"
    assert error.detail.startswith("Service Instance not found")
    assert 'application "web-app"' in str(error)
    assert 'service "my-db"' in str(error)
    assert error.details == {"application": "web-app", "service": "my-db"}


def test_forbidden_is_masked_as_not_found_of_same_resource() -> None:
    forbidden = ForbiddenError("App")

    masked = forbidden_as_not_found(forbidden)

    assert isinstance(masked, NotFoundError)
    assert masked.resource_type == "App"
    assert masked.__cause__ is forbidden


def test_forbidden_as_not_found_passes_other_errors_through() -> None:
    error = RuntimeError("boom")

    assert forbidden_as_not_found(error) is error


def test_as_unprocessable_entity_only_wraps_listed_kinds() -> None:
    not_found = NotFoundError("Domain")
    forbidden = ForbiddenError("Domain")

    wrapped = as_unprocessable_entity(not_found, "domain missing", NotFoundError)

    assert isinstance(wrapped, UnprocessableEntityError)
    assert wrapped.detail == "domain missing"
    assert wrapped.__cause__ is not_found
    assert as_unprocessable_entity(forbidden, "domain missing", NotFoundError) is forbidden


def test_from_k8s_error_maps_statuses() -> None:
    assert isinstance(from_k8s_error(ApiException(status=401), "App"), InvalidAuthError)
    assert isinstance(from_k8s_error(ApiException(status=403), "App"), ForbiddenError)

    not_found = from_k8s_error(ApiException(status=404), "Route")
    assert isinstance(not_found, NotFoundError)
    assert not_found.resource_type == "Route"


def test_from_k8s_error_passes_unknown_statuses_through() -> None:
    error = ApiException(status=500, reason="Internal Server Error")

    assert from_k8s_error(error, "App") is error


def test_error_response_includes_api_error_fields() -> None:
    payload = error_response(UnprocessableEntityError("nope"), details={"space": "s"})

    assert payload == {
        "error": {
            "type": "UnprocessableEntityError",
            "message": "nope",
            "details": {"space": "s"},
            "title": "CF-UnprocessableEntity",
            "code": 10008,
            "detail": "nope",
        }
    }


def test_error_response_for_plain_errors() -> None:
    payload = error_response(ApplicationError("broken", details={"a": 1}))

    assert payload["error"]["type"] == "ApplicationError"
    assert payload["error"]["details"] == {"a": 1}
    assert "title" not in payload["error"]


def test_unknown_error_keeps_internal_message() -> None:
    error = UnknownError("binding points at nothing")

    assert str(error) == "binding points at nothing"
    assert error.http_status == 500
