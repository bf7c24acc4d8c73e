"""Pages API endpoint.

Renders a content document with its wiki-links resolved and returns JSON
with metadata, link diagnostics and HTML content.
"""

import logging
from hashlib import md5

from aiohttp import web

from wikiroute.app_keys import index_loader_key, resolve_options_key
from wikiroute.core.markdown import PageRenderer
from wikiroute.core.resolver import Broken
from wikiroute.errors import WikirouteError

logger = logging.getLogger(__name__)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages", get_page),
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    path = request.match_info.get("path", "")

    try:
        index = request.app[index_loader_key].load()
    except WikirouteError as e:
        return web.json_response({"error": str(e)}, status=500)

    entry = index.get_by_url(path)
    if entry is None:
        return web.json_response(
            {"error": "Page not found", "path": path},
            status=404,
        )

    renderer = PageRenderer(index, request.app[resolve_options_key])
    try:
        result = renderer.render(entry.document)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot render %s: %s", entry.document.source_path, e)
        return web.json_response(
            {"error": "Page not readable", "path": path},
            status=404,
        )

    for ref in result.broken:
        logger.debug("%s: unresolved wiki-link [[%s]]", entry.url, ref.raw_slug)

    etag = _compute_etag(result.html)
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    response_data = {
        "meta": {
            "title": result.title,
            "path": entry.url,
            "source_file": entry.document.relative_path,
            "draft": entry.draft,
        },
        "links": [
            {
                "slug": ref.raw_slug,
                "status": "broken" if isinstance(link, Broken) else "resolved",
            }
            for ref, link in result.links
        ],
        "content": result.html,
    }

    return web.json_response(
        response_data,
        headers={"ETag": etag, "Cache-Control": "no-cache"},
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars are enough to detect content changes
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
