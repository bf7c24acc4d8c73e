"""Application keys for type-safe app configuration access."""

from aiohttp import web

from wikiroute.core.index import LinkIndexLoader
from wikiroute.core.resolver import ResolveOptions

index_loader_key = web.AppKey("index_loader", LinkIndexLoader)
resolve_options_key = web.AppKey("resolve_options", ResolveOptions)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
