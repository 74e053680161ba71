"""Pydantic models describing the Cloud Foundry application manifest."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from jsonschema import validate as jsonschema_validate
from jsonschema.exceptions import ValidationError as JSONSchemaValidationError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cfapi.repositories.records import (
    LIFECYCLE_BUILDPACK,
    PROCESS_TYPE_WEB,
    STATE_STOPPED,
    CreateAppMessage,
    CreateProcessMessage,
    HealthCheck,
    HealthCheckData,
    MetadataPatch,
    PatchAppMessage,
    PatchProcessMessage,
)

HEALTH_CHECK_TYPE_NONE = "none"
HEALTH_CHECK_TYPE_PROCESS = "process"
HEALTH_CHECK_TYPE_PORT = "port"

_MEGABYTE = 1024 * 1024
_UNIT_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "K": 1024,
    "KB": 1024,
    "M": _MEGABYTE,
    "MB": _MEGABYTE,
    "G": 1024 * _MEGABYTE,
    "GB": 1024 * _MEGABYTE,
    "T": 1024 * 1024 * _MEGABYTE,
    "TB": 1024 * 1024 * _MEGABYTE,
}
_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]+)\s*$")


def to_megabytes(value: str) -> int:
    """Convert a human readable size such as ``512M`` or ``1G`` to megabytes.

    Raises
    ------
    ValueError
        If ``value`` has no number or uses an unsupported unit.
    """

    match = _SIZE_PATTERN.match(value)
    if match is None or match.group(2).upper() not in _UNIT_MULTIPLIERS:
        raise ValueError(
            f"{value!r} must use a supported unit (B, K, KB, M, MB, G, GB, T, or TB)"
        )
    amount = float(match.group(1)) * _UNIT_MULTIPLIERS[match.group(2).upper()]
    return int(amount // _MEGABYTE)


def _health_check_type(value: str) -> str:
    # "none" is the legacy spelling of "process"
    if value == HEALTH_CHECK_TYPE_NONE:
        return HEALTH_CHECK_TYPE_PROCESS
    return value


class ManifestApplicationProcess(BaseModel):
    """Per-process overrides declared under ``processes``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = Field(..., min_length=1, description="Process type, e.g. web or worker")
    command: str | None = Field(default=None, description="Start command of the process")
    memory: str | None = Field(default=None, description="Memory limit, e.g. 512M")
    disk_quota: str | None = Field(
        default=None, alias="disk_quota", description="Disk limit, e.g. 1G"
    )
    alt_disk_quota: str | None = Field(
        default=None,
        alias="disk-quota",
        description="Deprecated spelling of disk_quota",
    )
    instances: int | None = Field(default=None, ge=0, description="Desired instance count")
    health_check_type: str | None = Field(default=None, alias="health-check-type")
    health_check_http_endpoint: str | None = Field(default=None, alias="health-check-http-endpoint")
    health_check_invocation_timeout: int | None = Field(
        default=None, ge=1, alias="health-check-invocation-timeout"
    )
    timeout: int | None = Field(default=None, ge=1, description="Health check timeout in seconds")

    def to_process_create_message(self, app_guid: str, space_guid: str) -> CreateProcessMessage:
        """Build the message creating this process with type-dependent defaults."""

        is_web = self.type == PROCESS_TYPE_WEB
        instances = self.instances
        if instances is None:
            instances = 1 if is_web else 0

        health_check_type = self.health_check_type
        if health_check_type is None:
            health_check_type = HEALTH_CHECK_TYPE_PORT if is_web else HEALTH_CHECK_TYPE_PROCESS

        return CreateProcessMessage(
            app_guid=app_guid,
            space_guid=space_guid,
            type=self.type,
            command=self.command or "",
            desired_instances=instances,
            memory_mb=to_megabytes(self.memory) if self.memory else 0,
            disk_quota_mb=to_megabytes(self.disk_quota) if self.disk_quota else 0,
            health_check=HealthCheck(
                type=_health_check_type(health_check_type),
                data=HealthCheckData(
                    http_endpoint=self.health_check_http_endpoint or "",
                    timeout_seconds=self.timeout or 0,
                    invocation_timeout_seconds=self.health_check_invocation_timeout or 0,
                ),
            ),
        )

    def to_process_patch_message(self, process_guid: str, space_guid: str) -> PatchProcessMessage:
        """Build a patch touching only the fields this process declares."""

        return PatchProcessMessage(
            process_guid=process_guid,
            space_guid=space_guid,
            command=self.command,
            desired_instances=self.instances,
            memory_mb=to_megabytes(self.memory) if self.memory else None,
            disk_quota_mb=to_megabytes(self.disk_quota) if self.disk_quota else None,
            health_check_type=(
                _health_check_type(self.health_check_type) if self.health_check_type else None
            ),
            health_check_http_endpoint=self.health_check_http_endpoint,
            health_check_invocation_timeout_seconds=self.health_check_invocation_timeout,
            health_check_timeout_seconds=self.timeout,
        )


class ManifestRoute(BaseModel):
    """A single ``host.domain[/path]`` route."""

    model_config = ConfigDict(extra="ignore")

    route: str | None = None


class ManifestApplicationService(BaseModel):
    """A service instance the application must be bound to."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Name of the service instance")
    binding_name: str | None = Field(default=None, alias="binding_name")
    parameters: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _coerce_plain_name(cls, values: Any) -> Any:
        """Accept the short ``- my-service`` form."""

        if isinstance(values, str):
            return {"name": values}
        return values


def _allow_plain_service_names(schema: dict[str, Any]) -> None:
    schema["items"] = {"anyOf": [{"type": "string"}, schema.get("items", {})]}


class ManifestMetadata(BaseModel):
    """Label and annotation patches; ``null`` values remove a key."""

    model_config = ConfigDict(extra="ignore")

    labels: dict[str, str | None] = Field(default_factory=dict)
    annotations: dict[str, str | None] = Field(default_factory=dict)


class ManifestApplication(BaseModel):
    """One entry of the manifest's ``applications`` list."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    env: dict[str, str] = Field(
        default_factory=dict,
        json_schema_extra={"additionalProperties": {}},
        description="Environment variables; scalar values are stringified",
    )
    buildpacks: list[str] = Field(default_factory=list)
    buildpack: str | None = Field(default=None, description="Deprecated single buildpack")

    command: str | None = None
    memory: str | None = None
    disk_quota: str | None = Field(default=None, alias="disk_quota")
    alt_disk_quota: str | None = Field(default=None, alias="disk-quota")
    instances: int | None = Field(default=None, ge=0)
    health_check_type: str | None = Field(default=None, alias="health-check-type")
    health_check_http_endpoint: str | None = Field(default=None, alias="health-check-http-endpoint")
    health_check_invocation_timeout: int | None = Field(
        default=None, ge=1, alias="health-check-invocation-timeout"
    )
    timeout: int | None = Field(default=None, ge=1)

    no_route: bool = Field(default=False, alias="no-route")
    default_route: bool = Field(default=False, alias="default-route")
    random_route: bool = Field(default=False, alias="random-route")

    routes: list[ManifestRoute] = Field(default_factory=list)
    processes: list[ManifestApplicationProcess] = Field(default_factory=list)
    services: list[ManifestApplicationService] = Field(
        default_factory=list, json_schema_extra=_allow_plain_service_names
    )
    metadata: ManifestMetadata | None = None

    @field_validator("env", mode="before")
    @classmethod
    def _stringify_env(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): "" if item is None else str(item) for key, item in value.items()}
        return value

    def to_app_create_message(self, space_guid: str) -> CreateAppMessage:
        metadata = self.metadata or ManifestMetadata()
        return CreateAppMessage(
            name=self.name,
            space_guid=space_guid,
            state=STATE_STOPPED,
            lifecycle_type=LIFECYCLE_BUILDPACK,
            buildpacks=tuple(self.buildpacks),
            environment_variables=dict(self.env),
            labels={key: value for key, value in metadata.labels.items() if value is not None},
            annotations={
                key: value for key, value in metadata.annotations.items() if value is not None
            },
        )

    def to_app_patch_message(self, app_guid: str, space_guid: str) -> PatchAppMessage:
        metadata = self.metadata or ManifestMetadata()
        return PatchAppMessage(
            app_guid=app_guid,
            space_guid=space_guid,
            buildpacks=tuple(self.buildpacks),
            environment_variables=dict(self.env),
            metadata=MetadataPatch(
                labels=dict(metadata.labels),
                annotations=dict(metadata.annotations),
            ),
        )


class Manifest(BaseModel):
    """Top level manifest document."""

    model_config = ConfigDict(extra="ignore")

    version: int = Field(default=1)
    applications: list[ManifestApplication] = Field(default_factory=list, min_length=1)


MANIFEST_JSON_SCHEMA = Manifest.model_json_schema(mode="validation")


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest from disk.

    Parameters
    ----------
    path:
        Directory containing ``manifest.yml`` or the manifest file itself.

    Raises
    ------
    FileNotFoundError
        If the manifest file cannot be located.
    yaml.YAMLError
        If the YAML file cannot be parsed.
    pydantic.ValidationError
        If the parsed data does not comply with :class:`Manifest`.
    """

    manifest_path = path / "manifest.yml" if path.is_dir() else path
    if not manifest_path.exists():
        raise FileNotFoundError(f"Manifest not found at: {manifest_path}")

    data = yaml.safe_load(manifest_path.read_text(encoding="utf-8")) or {}
    return parse_manifest(data)


def parse_manifest(data: Any) -> Manifest:
    """Validate an already decoded manifest document."""

    if not isinstance(data, dict):
        raise ValidationError.from_exception_data(
            Manifest.__name__,
            [
                {
                    "type": "dict_type",
                    "loc": (),
                    "input": data,
                }
            ],
        )

    try:
        jsonschema_validate(data, MANIFEST_JSON_SCHEMA)
    except JSONSchemaValidationError as exc:
        location = tuple(exc.absolute_path) if exc.absolute_path else ()
        schema_path = " / ".join(str(part) for part in exc.absolute_schema_path)
        message = exc.message
        if schema_path:
            message = f"{message} (schema path: {schema_path})"
        raise ValidationError.from_exception_data(
            Manifest.__name__,
            [
                {
                    "type": "value_error",
                    "loc": location,
                    "input": exc.instance,
                    "ctx": {"error": ValueError(message)},
                }
            ],
        ) from exc

    return Manifest.model_validate(data)


__all__ = [
    "Manifest",
    "ManifestApplication",
    "ManifestApplicationProcess",
    "ManifestApplicationService",
    "ManifestMetadata",
    "ManifestRoute",
    "MANIFEST_JSON_SCHEMA",
    "load_manifest",
    "parse_manifest",
    "to_megabytes",
]
