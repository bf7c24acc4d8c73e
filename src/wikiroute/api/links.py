"""Links API endpoints.

Exposes the current link index and single-reference resolution.
"""

from aiohttp import web

from wikiroute.app_keys import index_loader_key, resolve_options_key
from wikiroute.core.nodes import to_node
from wikiroute.core.resolver import Broken, WikiLinkReference, resolve
from wikiroute.errors import WikirouteError


def create_links_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/links", get_links),
        web.get("/api/links/resolve", resolve_link),
    ]


async def get_links(request: web.Request) -> web.Response:
    try:
        index = request.app[index_loader_key].load()
    except WikirouteError as e:
        return web.json_response({"error": str(e)}, status=500)

    return web.json_response({"count": len(index), "links": index.to_dict()})


async def resolve_link(request: web.Request) -> web.Response:
    slug = request.query.get("slug")
    if not slug:
        return web.json_response({"error": "Missing slug parameter"}, status=400)

    try:
        index = request.app[index_loader_key].load()
    except WikirouteError as e:
        return web.json_response({"error": str(e)}, status=500)

    ref = WikiLinkReference(raw_slug=slug, alias=request.query.get("alias") or None)
    link = resolve(ref, index, request.app[resolve_options_key])
    status = "broken" if isinstance(link, Broken) else "resolved"
    return web.json_response({"status": status, "node": to_node(link).to_dict()})
