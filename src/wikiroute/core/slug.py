"""Slug normalization.

Turns arbitrary text into a canonical URL path segment. The same function
is used for index keys and for route derivation, so a reference typed by an
author and the path a document is served from always agree.
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9\-_]")
_HYPHEN_RUN_RE = re.compile(r"--+")


def normalize(text: str) -> str:
    """Normalize text to a lowercase, hyphenated slug.

    Steps run in a fixed order: lowercase, whitespace runs to "-", drop
    anything outside [a-z0-9-_], collapse hyphen runs, trim hyphens.

    Args:
        text: Any string, including the empty string

    Returns:
        Normalized slug, possibly empty
    """
    slug = text.lower()
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def normalize_path(path: str) -> str:
    """Normalize each "/"-separated segment of a path independently.

    Segments that normalize to nothing are dropped.

    Args:
        path: Relative path such as "Notes/My Page"

    Returns:
        Normalized path such as "notes/my-page"
    """
    segments = (normalize(segment) for segment in path.split("/"))
    return "/".join(segment for segment in segments if segment)
