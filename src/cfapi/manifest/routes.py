"""Route string helpers shared by the normalizer and the applier."""

from __future__ import annotations

import random
import string

ADJECTIVES: tuple[str, ...] = (
    "accountable", "active", "agile", "anxious", "appreciative", "balanced",
    "bogus", "boisterous", "bold", "boring", "brash", "brave", "bright", "busy",
    "chatty", "cheerful", "chipper", "comedic", "courteous", "daring",
    "delightful", "egregious", "empathic", "excellent", "exhausted",
    "fantastic", "fearless", "fluent", "forgiving", "friendly", "funny",
    "generous", "grateful", "grouchy", "grumpy", "happy", "hilarious", "humble",
    "impressive", "insightful", "intelligent", "industrious", "interested",
    "kind", "lean", "mediating", "meditating", "nice", "noisy", "optimistic",
    "palm", "patient", "persistent", "proud", "quick", "quiet", "reflective",
    "relaxed", "reliable", "resplendent", "responsible", "responsive",
    "rested", "restless", "shiny", "shy", "silly", "sleepy", "smart",
    "spontaneous", "stellar", "surprised", "sweet", "talkative", "terrific",
    "thankful", "timely", "tired", "triumphant", "turbulent", "unexpected",
    "wacky", "wise", "zany",
)

NOUNS: tuple[str, ...] = (
    "aardvark", "alligator", "antelope", "armadillo", "baboon", "badger",
    "bandicoot", "bat", "bear", "bilby", "bongo", "buffalo", "bushbuck", "camel",
    "capybara", "cassowary", "cat", "cheetah", "chimpanzee", "chipmunk",
    "civet", "crane", "crocodile", "dingo", "dog", "dugong", "duiker", "echidna",
    "eland", "elephant", "emu", "fossa", "fox", "gazelle", "gecko", "gelada",
    "genet", "gerenuk", "giraffe", "gnu", "gorilla", "grysbok", "guanaco",
    "hartebeest", "hedgehog", "hippopotamus", "hyena", "hyrax", "impala",
    "jackal", "jaguar", "kangaroo", "klipspringer", "koala", "kob",
    "kookaburra", "kudu", "lemur", "leopard", "lion", "lizard", "llama", "lynx",
    "manatee", "mandrill", "marmot", "meerkat", "mongoose", "mouse", "numbat",
    "nyala", "okapi", "oribi", "oryx", "ostrich", "otter", "panda", "pangolin",
    "panther", "parrot", "platypus", "porcupine", "possum", "puku", "quokka",
    "quoll", "rabbit", "ratel", "raven", "reedbuck", "rhinocerous", "roan",
    "sable", "serval", "shark", "sitatunga", "springhare", "squirrel", "swan",
    "tiger", "topi", "toucan", "turtle", "vicuna", "wallaby", "warthog",
    "waterbuck", "whale", "wildebeest", "wolf", "wolverine", "wombat", "zebra",
)


def canonical_route_key(host: str, domain_name: str, path: str = "") -> str:
    """Return the ``host.domain[/path]`` string a manifest author would write."""

    return f"{host}.{domain_name}{path}"


def split_route(route: str) -> tuple[str, str, str]:
    """Split ``host.domain/path`` into its host, domain and path parts.

    The host is everything before the first dot, so multi-label hosts cannot
    be expressed.
    """

    host, separator, domain_and_path = route.partition(".")
    if not separator or not host or not domain_and_path:
        raise ValueError(f"{route!r} is not a valid route")

    domain, slash, rest = domain_and_path.partition("/")
    path = f"/{rest}" if slash else ""
    return host, domain, path


def generate_random_host_suffix(rng: random.Random | None = None) -> str:
    """Return ``<adjective>-<noun>-<two lowercase letters>``."""

    chooser = rng or random
    suffix = "".join(chooser.choice(string.ascii_lowercase) for _ in range(2))
    return f"{chooser.choice(ADJECTIVES)}-{chooser.choice(NOUNS)}-{suffix}"


__all__ = [
    "ADJECTIVES",
    "NOUNS",
    "canonical_route_key",
    "split_route",
    "generate_random_host_suffix",
]
