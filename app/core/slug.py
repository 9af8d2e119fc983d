"""
Slug helpers shared by categories, subcategories and products.

Nothing here touches the database: callers pass in the slugs that are
already taken within the relevant scope.
"""
import re
import unicodedata
from typing import Iterable

# Upper bound on "-N" suffixes tried before giving up.
MAX_SLUG_SUFFIX = 1000

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_VALID_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class EmptySlugError(ValueError):
    """The name contains no characters that survive slugification."""


class SlugConflictError(ValueError):
    """No free slug could be found within MAX_SLUG_SUFFIX attempts."""


def slugify(name: str) -> str:
    """
    Turn a display name into a URL-safe slug.

      - lowercase
      - strip accents/diacritics ("Café" -> "cafe")
      - any run of non-alphanumeric characters -> '-'
      - strip leading/trailing '-'

    Raises:
        EmptySlugError: if nothing alphanumeric is left.
    """
    value = unicodedata.normalize("NFKD", name)
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = _NON_ALNUM.sub("-", value.lower()).strip("-")
    if not value:
        raise EmptySlugError(f"Cannot derive a slug from {name!r}")
    return value


def unique_slug(base: str, taken: Iterable[str]) -> str:
    """
    Return `base`, or the first of `base-1`, `base-2`, ... not in `taken`.

    Raises:
        SlugConflictError: if every candidate up to MAX_SLUG_SUFFIX is taken.
    """
    taken = set(taken)
    if base not in taken:
        return base
    for i in range(1, MAX_SLUG_SUFFIX + 1):
        candidate = f"{base}-{i}"
        if candidate not in taken:
            return candidate
    raise SlugConflictError(f"Too many entries share the slug {base!r}")


def is_valid_slug(slug: str) -> bool:
    return bool(_VALID_SLUG.match(slug))
