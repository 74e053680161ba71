"""Caller identity forwarded to every collaborator call."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthInfo:
    """Credentials of the user on whose behalf a manifest is applied."""

    token: str = ""

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.token}"


__all__ = ["AuthInfo"]
