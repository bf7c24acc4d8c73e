"""aiohttp preview server for Wikiroute.

Application factory and route registration for serving the link index and
rendered pages while authoring.
"""

from aiohttp import web

from wikiroute.api.config import create_config_routes
from wikiroute.api.links import create_links_routes
from wikiroute.api.pages import create_pages_routes
from wikiroute.app_keys import index_loader_key, live_reload_enabled_key, resolve_options_key
from wikiroute.config import Config
from wikiroute.core.index import LinkIndexLoader
from wikiroute.live import LiveReloadManager
from wikiroute.live.reload import create_live_reload_routes

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    loader = LinkIndexLoader(config.content.source_dir, config.links.conflict_policy)

    app[index_loader_key] = loader
    app[resolve_options_key] = config.links.resolve_options()
    app[live_reload_enabled_key] = config.live_reload.enabled

    app.router.add_routes(create_links_routes())
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_config_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(loader, watch_patterns=config.live_reload.watch_patterns)
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
