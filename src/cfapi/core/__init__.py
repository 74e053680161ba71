"""Core utilities for the manifest reconciliation engine."""

from .errors import (
    ApiError,
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
from .logging import configure_logging, get_logger
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
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
