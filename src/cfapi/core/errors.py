"""Custom exception hierarchy for the manifest reconciliation engine.

API errors form a small closed set of kinds. Collaborators raise them and
the pipeline only ever translates between kinds through the helpers at the
bottom of this module, so each policy can be exercised on its own.
"""

from __future__ import annotations

from typing import Any, Mapping

ErrorDetails = Mapping[str, Any] | None


class ApplicationError(Exception):
    """Base exception carrying optional structured details."""

    def __init__(self, message: str, *, details: ErrorDetails = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:  # pragma: no cover - mirrors Exception.__str__
        return self.message


class ApiError(ApplicationError):
    """Error kind understood by API callers."""

    title = "UnknownError"
    code = 10001
    http_status = 500

    def __init__(
        self,
        message: str,
        *,
        detail: str,
        cause: BaseException | None = None,
        details: ErrorDetails = None,
    ) -> None:
        super().__init__(message, details=details)
        self.detail = detail
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class NotFoundError(ApiError):
    """Raised when a resource is absent or hidden from the caller."""

    title = "CF-ResourceNotFound"
    code = 10010
    http_status = 404

    def __init__(
        self,
        resource_type: str,
        *,
        cause: BaseException | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        detail = f"{resource_type} not found. Ensure it exists and you have access to it."
        message = detail
        if context:
            qualifiers = " ".join(f'{key} "{value}"' for key, value in context.items())
            message = f"{detail} ({qualifiers})"
        super().__init__(message, detail=detail, cause=cause, details=context)
        self.resource_type = resource_type


class ForbiddenError(ApiError):
    """Raised when the caller is not allowed to access a resource."""

    title = "CF-NotAuthorized"
    code = 10003
    http_status = 403

    def __init__(self, resource_type: str, *, cause: BaseException | None = None) -> None:
        detail = "You are not authorized to perform the requested action"
        super().__init__(detail, detail=detail, cause=cause)
        self.resource_type = resource_type


class UnprocessableEntityError(ApiError):
    """Raised when a well-formed request cannot be satisfied."""

    title = "CF-UnprocessableEntity"
    code = 10008
    http_status = 422

    def __init__(self, detail: str, *, cause: BaseException | None = None) -> None:
        super().__init__(detail, detail=detail, cause=cause)


class InvalidAuthError(ApiError):
    """Raised when the caller's credentials are rejected."""

    title = "CF-InvalidAuthToken"
    code = 1000
    http_status = 401

    def __init__(self, *, cause: BaseException | None = None) -> None:
        detail = "Invalid Auth Token"
        super().__init__(detail, detail=detail, cause=cause)


class UnknownError(ApiError):
    """Raised for internal inconsistencies that have no better kind."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message, detail="An unknown error occurred.", cause=cause)


def from_k8s_error(error: Exception, resource_type: str) -> Exception:
    """Map a Kubernetes API failure onto an API error kind.

    Failures without a recognised HTTP status are returned unchanged.
    """

    status = getattr(error, "status", None)
    if status == 401:
        return InvalidAuthError(cause=error)
    if status == 403:
        return ForbiddenError(resource_type, cause=error)
    if status == 404:
        return NotFoundError(resource_type, cause=error)
    return error


def forbidden_as_not_found(error: Exception) -> Exception:
    """Hide the existence of resources the caller may not see."""

    if isinstance(error, ForbiddenError):
        return NotFoundError(error.resource_type, cause=error)
    return error


def as_unprocessable_entity(
    error: Exception, detail: str, *kinds: type[ApiError]
) -> Exception:
    """Rewrap ``error`` as unprocessable when it is one of ``kinds``."""

    if isinstance(error, kinds):
        return UnprocessableEntityError(detail, cause=error)
    return error


def error_response(error: Exception, *, details: ErrorDetails = None) -> dict[str, Any]:
    """Normalize errors into the public response format."""

    payload: dict[str, Any]
    if isinstance(error, ApplicationError):
        payload = dict(error.details)
        if details:
            payload.update(details)
    else:
        payload = dict(details or {})

    body: dict[str, Any] = {
        "type": error.__class__.__name__,
        "message": str(error),
        "details": payload,
    }
    if isinstance(error, ApiError):
        body["title"] = error.title
        body["code"] = error.code
        body["detail"] = error.detail
    return {"error": body}


__all__ = [
    "ApplicationError",
    "ApiError",
    "NotFoundError",
    "ForbiddenError",
    "UnprocessableEntityError",
    "InvalidAuthError",
    "UnknownError",
    "from_k8s_error",
    "forbidden_as_not_found",
    "as_unprocessable_entity",
    "error_response",
]
