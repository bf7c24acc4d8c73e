"""Config API endpoint."""

from aiohttp import web

from wikiroute.app_keys import live_reload_enabled_key, resolve_options_key


def create_config_routes() -> list[web.RouteDef]:
    return [web.get("/api/config", get_config)]


async def get_config(request: web.Request) -> web.Response:
    options = request.app[resolve_options_key]
    return web.json_response(
        {
            "liveReloadEnabled": request.app[live_reload_enabled_key],
            "preview": options.preview,
            "unresolved": options.unresolved.value,
        }
    )
