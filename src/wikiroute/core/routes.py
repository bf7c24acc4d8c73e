"""Route derivation from content paths.

Follows the file-based routing convention: `guides/setup.md` is served
at `/guides/setup/` and a directory's `index.md` is served at the
directory's own URL.
"""

from wikiroute.core.slug import normalize_path
from wikiroute.core.types import RouteURL

INDEX_NAME = "index"


def derive_url(relative_path: str) -> RouteURL:
    """Derive the site URL for a document.

    Args:
        relative_path: Path relative to the content root, without extension
                       (e.g., "guides/index", "guides/setup")

    Returns:
        RouteURL such as "/guides/" or "/guides/setup/"
    """
    if relative_path == INDEX_NAME:
        return RouteURL("/")

    suffix = f"/{INDEX_NAME}"
    if relative_path.endswith(suffix):
        relative_path = relative_path[: -len(suffix)]

    normalized = normalize_path(relative_path)
    if not normalized:
        return RouteURL("/")
    return RouteURL(f"/{normalized}/")


def is_index_path(relative_path: str) -> bool:
    """Check whether a document is the index of its directory."""
    return relative_path == INDEX_NAME or relative_path.endswith(f"/{INDEX_NAME}")
