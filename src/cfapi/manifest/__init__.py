"""Collect, normalize and apply Cloud Foundry application manifests."""

from .applier import Applier
from .normalizer import Normalizer
from .orchestrator import ManifestApplier
from .routes import canonical_route_key, generate_random_host_suffix, split_route
from .state_collector import AppState, StateCollector

__all__ = [
    "AppState",
    "Applier",
    "ManifestApplier",
    "Normalizer",
    "StateCollector",
    "canonical_route_key",
    "generate_random_host_suffix",
    "split_route",
]
