import re
from typing import Collection

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

FALLBACK_SLUG = "algorithm"


def slugify(name: str) -> str:
    """Turn a display name into a URL-safe identifier.

    Lowercases, collapses every run of non-alphanumeric characters into a
    single hyphen, and trims hyphens from both ends.

    Examples:
        >>> slugify("Foo Bar!")
        'foo-bar'
        >>> slugify("  A* Search (heuristic) ")
        'a-search-heuristic'
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def unique_slug(name: str, taken: Collection[str]) -> str:
    """Slugify ``name`` and append ``-2``, ``-3``... until it is not taken."""
    base = slugify(name) or FALLBACK_SLUG
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"
