"""WebSocket-based live reload for preview mode.

Monitors the content tree for changes, drops the link index so the next
request rebuilds it from scratch, and notifies connected clients via
WebSocket to trigger page reloads.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from wikiroute.core.index import LinkIndexLoader
from wikiroute.core.routes import derive_url

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload."""

    def __init__(
        self,
        loader: LinkIndexLoader,
        watch_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            loader: Index loader to invalidate on content changes
            watch_patterns: Glob patterns to watch (default: ["**/*.md"])
        """
        self._loader = loader
        # watchfiles reports absolute paths
        self._source_dir = loader.source_dir.resolve()
        self._watch_patterns = watch_patterns or ["**/*.md"]
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch for file changes, rebuild the index and broadcast reloads."""
        async for changes in awatch(self._source_dir):
            await self.handle_changes(changes)

    async def handle_changes(self, changes: set[tuple[Change, str]]) -> list[str]:
        """Process one batch of file changes.

        Any matching change, deletions included, invalidates the index since
        titles and paths of other documents' link targets may have moved.

        Args:
            changes: Batch as yielded by watchfiles

        Returns:
            Route URLs that were broadcast for reload
        """
        relevant = [
            (change_type, path)
            for change_type, path in ((c, Path(p).resolve()) for c, p in changes)
            if self._matches_patterns(path)
        ]
        if not relevant:
            return []

        self._loader.invalidate()
        logger.info("Content changed (%d files), link index will be rebuilt", len(relevant))

        urls: list[str] = []
        for change_type, path in sorted(relevant, key=lambda item: str(item[1])):
            if change_type == Change.deleted:
                continue
            url = self._to_url(path)
            urls.append(url)
            await self._broadcast_reload(url)
        return urls

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path matches any watch pattern."""
        try:
            relative = path.relative_to(self._source_dir)
        except ValueError:
            return False

        for pattern in self._watch_patterns:
            if relative.match(pattern):
                return True
            # "**/" also covers files directly under the root
            if pattern.startswith("**/") and relative.match(pattern[3:]):
                return True
        return False

    def _to_url(self, file_path: Path) -> str:
        """Convert a file system path to the route it is served at."""
        relative = file_path.relative_to(self._source_dir).with_suffix("")
        return derive_url(relative.as_posix())

    async def _broadcast_reload(self, path: str) -> None:
        """Broadcast reload event to all connected clients."""
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": path})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket."""
    return [web.get("/ws/live-reload", manager.handle_websocket)]
