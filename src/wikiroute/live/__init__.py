"""Live reload support for the preview server."""

from wikiroute.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
