"""Configuration management for Wikiroute.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from wikiroute.core.index import ConflictPolicy
from wikiroute.core.resolver import ResolveOptions, UnresolvedPolicy

CONFIG_FILENAME = "wikiroute.toml"


@dataclass
class ServerConfig:
    """Preview server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class ContentConfig:
    """Content tree configuration."""

    source_dir: Path = field(default_factory=lambda: Path("content"))


@dataclass
class LinksConfig:
    """Wiki-link resolution configuration."""

    conflict_policy: ConflictPolicy = ConflictPolicy.LAST_WINS
    unresolved: UnresolvedPolicy = UnresolvedPolicy.BROKEN
    preview: bool = False

    def resolve_options(self) -> ResolveOptions:
        """Build resolver options for this render context."""
        return ResolveOptions(
            preview=self.preview,
            unresolved=self.unresolved,
        )


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True
    watch_patterns: list[str] | None = None


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    content: ContentConfig
    links: LinksConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for wikiroute.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            links=LinksConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            links=cls._parse_links(data.get("links")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section."""
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(source_dir=config_dir / "content")

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        source_dir = data.get("source_dir", "content")
        if not isinstance(source_dir, str):
            raise ValueError("content.source_dir must be a string")

        return ContentConfig(source_dir=config_dir / source_dir)

    @classmethod
    def _parse_links(cls, data: object) -> LinksConfig:
        """Parse links configuration section."""
        if data is None:
            return LinksConfig()

        if not isinstance(data, dict):
            raise ValueError("links section must be a dictionary")

        conflict_policy = data.get("conflict_policy", ConflictPolicy.LAST_WINS.value)
        if not isinstance(conflict_policy, str):
            raise ValueError("links.conflict_policy must be a string")

        unresolved = data.get("unresolved", UnresolvedPolicy.BROKEN.value)
        if not isinstance(unresolved, str):
            raise ValueError("links.unresolved must be a string")

        preview = data.get("preview", False)
        if not isinstance(preview, bool):
            raise ValueError("links.preview must be a boolean")

        return LinksConfig(
            conflict_policy=ConflictPolicy.parse(conflict_policy),
            unresolved=UnresolvedPolicy.parse(unresolved),
            preview=preview,
        )

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        """Parse live_reload configuration section."""
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        watch_patterns_raw = data.get("watch_patterns")
        watch_patterns: list[str] | None = None
        if watch_patterns_raw is not None:
            if not isinstance(watch_patterns_raw, list):
                raise ValueError("live_reload.watch_patterns must be a list")
            watch_patterns = []
            for item in watch_patterns_raw:
                if not isinstance(item, str):
                    raise ValueError("live_reload.watch_patterns items must be strings")
                watch_patterns.append(item)

        return LiveReloadConfig(enabled=enabled, watch_patterns=watch_patterns)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        source_dir: Path | None = None,
        conflict_policy: ConflictPolicy | None = None,
        unresolved: UnresolvedPolicy | None = None,
        preview: bool | None = None,
        live_reload_enabled: bool | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if source_dir is not None:
            content = replace(self.content, source_dir=source_dir)

        links = self.links
        if conflict_policy is not None:
            links = replace(links, conflict_policy=conflict_policy)
        if unresolved is not None:
            links = replace(links, unresolved=unresolved)
        if preview is not None:
            links = replace(links, preview=preview)

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(
            self,
            server=server,
            content=content,
            links=links,
            live_reload=live_reload,
        )
