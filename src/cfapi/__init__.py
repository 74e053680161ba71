"""Cloud Foundry manifest reconciliation backed by Kubernetes custom resources."""

from .core.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
