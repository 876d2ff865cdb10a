"""URL slug generation for communities and posts."""

import re

_DISALLOWED = re.compile(r"[^a-z0-9\-\s]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def slugify(value: str, max_length: int | None = None) -> str:
    """Lower-case ``value``, drop unsupported characters and hyphenate spaces."""
    slug = value.lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    if max_length is not None:
        slug = slug[:max_length]
    return slug


def is_valid_slug(slug: str) -> bool:
    return bool(SLUG_PATTERN.match(slug))
