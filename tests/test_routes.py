"""Tests for route string helpers."""

from __future__ import annotations

import random
import re

import pytest

from cfapi.manifest.routes import (
    ADJECTIVES,
    NOUNS,
    canonical_route_key,
    generate_random_host_suffix,
    split_route,
)


def test_canonical_route_key_without_path() -> None:
    assert canonical_route_key("web", "apps.example.com") == "web.apps.example.com"


def test_canonical_route_key_with_path() -> None:
    assert canonical_route_key("web", "apps.example.com", "/api") == "web.apps.example.com/api"


@pytest.mark.parametrize(
    ("route", "expected"),
    [
        ("web.apps.example.com", ("web", "apps.example.com", "")),
        ("web.apps.example.com/api/v1", ("web", "apps.example.com", "/api/v1")),
        ("foo.bar.example.com", ("foo", "bar.example.com", "")),
        ("web.example.com/", ("web", "example.com", "/")),
    ],
)
def test_split_route(route: str, expected: tuple[str, str, str]) -> None:
    assert split_route(route) == expected


def test_split_route_round_trips_canonical_key() -> None:
    host, domain, path = split_route("api.apps.example.com/v2")

    assert canonical_route_key(host, domain, path) == "api.apps.example.com/v2"


@pytest.mark.parametrize("route", ["localhost", ".example.com", "web."])
def test_split_route_rejects_malformed_routes(route: str) -> None:
    with pytest.raises(ValueError, match="not a valid route"):
        split_route(route)


def test_random_host_suffix_uses_word_lists() -> None:
    rng = random.Random(7)
    pattern = re.compile(r"^([a-z]+)-([a-z]+)-[a-z]{2}$")

    for _ in range(50):
        suffix = generate_random_host_suffix(rng)
        match = pattern.match(suffix)
        assert match is not None, suffix
        assert match.group(1) in ADJECTIVES
        assert match.group(2) in NOUNS


def test_random_host_suffix_is_reproducible_with_seed() -> None:
    assert generate_random_host_suffix(random.Random(3)) == generate_random_host_suffix(
        random.Random(3)
    )
