"""Pydantic schema definitions for application manifests."""

from .manifest import (
    MANIFEST_JSON_SCHEMA,
    Manifest,
    ManifestApplication,
    ManifestApplicationProcess,
    ManifestApplicationService,
    ManifestMetadata,
    ManifestRoute,
    load_manifest,
    parse_manifest,
    to_megabytes,
)

__all__ = [
    "MANIFEST_JSON_SCHEMA",
    "Manifest",
    "ManifestApplication",
    "ManifestApplicationProcess",
    "ManifestApplicationService",
    "ManifestMetadata",
    "ManifestRoute",
    "load_manifest",
    "parse_manifest",
    "to_megabytes",
]
