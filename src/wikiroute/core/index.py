"""Link index for wiki-link lookups.

Maps every lookup key a document can be referenced by (title, filename,
path, in raw and normalized forms) to the document's route. The index is
built once per build pass and is read-only afterwards; a content change
means building a new one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from wikiroute.core.routes import INDEX_NAME, derive_url, is_index_path
from wikiroute.core.scanner import ContentDocument, scan
from wikiroute.core.slug import normalize, normalize_path
from wikiroute.core.types import RouteURL
from wikiroute.errors import LinkConflictError

logger = logging.getLogger(__name__)


class ConflictPolicy(Enum):
    """What happens when two documents claim the same lookup key."""

    FIRST_WINS = "first-wins"
    LAST_WINS = "last-wins"
    REJECT = "reject-on-conflict"

    @classmethod
    def parse(cls, value: str) -> ConflictPolicy:
        """Parse a policy from its configuration name.

        Raises:
            ValueError: If the name is unknown
        """
        for policy in cls:
            if policy.value == value:
                return policy
        names = ", ".join(p.value for p in cls)
        raise ValueError(f"Unknown conflict policy {value!r} (expected one of: {names})")


@dataclass(frozen=True)
class IndexEntry:
    """Route of a document together with the document itself."""

    url: RouteURL
    document: ContentDocument

    @property
    def title(self) -> str | None:
        return self.document.title

    @property
    def draft(self) -> bool:
        return self.document.draft


class LinkIndex:
    """Immutable snapshot of lookup keys to document routes.

    Constructed once by LinkIndexBuilder and passed by reference into every
    resolver call. Nothing mutates it after construction.
    """

    __slots__ = ("_documents", "_entries", "_url_index")

    def __init__(
        self,
        entries: dict[str, IndexEntry],
        documents: list[ContentDocument],
    ) -> None:
        """Initialize index.

        Args:
            entries: Lookup key to entry, in registration order
            documents: Every indexed document, in scan order
        """
        self._entries: Mapping[str, IndexEntry] = MappingProxyType(dict(entries))
        self._documents = tuple(documents)
        self._url_index: dict[str, IndexEntry] = {}
        for entry in self._entries.values():
            self._url_index.setdefault(entry.url, entry)

    def lookup(self, key: str) -> IndexEntry | None:
        """Get the entry registered under a key, verbatim."""
        return self._entries.get(key)

    def url_for(self, key: str) -> RouteURL | None:
        """Get the route registered under a key, verbatim."""
        entry = self._entries.get(key)
        return entry.url if entry is not None else None

    def get_by_url(self, url: str) -> IndexEntry | None:
        """Get the entry for a route.

        Args:
            url: Route with or without leading/trailing slash (e.g., "guides/setup")

        Returns:
            IndexEntry if a document is served at that route, None otherwise
        """
        stripped = url.strip("/")
        normalized = f"/{stripped}/" if stripped else "/"
        return self._url_index.get(normalized)

    @property
    def documents(self) -> tuple[ContentDocument, ...]:
        """Indexed documents in scan order."""
        return self._documents

    def to_dict(self) -> dict[str, str]:
        """Convert to a key -> URL dictionary for JSON serialization."""
        return {key: entry.url for key, entry in self._entries.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class LinkIndexBuilder:
    """Builder for constructing LinkIndex instances.

    Keys are registered in two tiers: name keys (titles, filenames,
    directory names) for every document, then path keys for every
    document. A document's own path therefore always reaches it, whatever
    other documents are titled.
    """

    def __init__(self, policy: ConflictPolicy = ConflictPolicy.LAST_WINS) -> None:
        self._policy = policy
        self._documents: list[ContentDocument] = []

    @property
    def policy(self) -> ConflictPolicy:
        return self._policy

    def add(self, document: ContentDocument) -> LinkIndexBuilder:
        """Add a document to the index.

        Args:
            document: Scanned document, added in scan order

        Returns:
            The builder, for chaining
        """
        self._documents.append(document)
        return self

    def build(self) -> LinkIndex:
        """Build the LinkIndex instance.

        Raises:
            LinkConflictError: If the policy is REJECT and two documents
                               share a key
        """
        entries: dict[str, IndexEntry] = {}
        routed = [IndexEntry(url=derive_url(d.relative_path), document=d) for d in self._documents]
        self._warn_duplicate_routes(routed)

        for entry in routed:
            for key in _name_keys(entry.document):
                self._register(entries, key, entry)
        # Path keys displace name keys under every policy that tolerates conflicts
        name_held = set(entries)
        for entry in routed:
            for key in _path_keys(entry.document):
                self._register(entries, key, entry, yielding=name_held)

        logger.info(
            "Indexed %d documents under %d lookup keys", len(self._documents), len(entries)
        )
        return LinkIndex(entries, self._documents)

    def _register(
        self,
        entries: dict[str, IndexEntry],
        key: str,
        entry: IndexEntry,
        *,
        yielding: set[str] | None = None,
    ) -> None:
        if not key:
            return

        displaceable = yielding is not None and key in yielding
        if displaceable:
            yielding.discard(key)

        existing = entries.get(key)
        if existing is None or existing.document is entry.document:
            entries[key] = entry
            return

        if self._policy is ConflictPolicy.REJECT:
            raise LinkConflictError(
                key,
                existing.document.relative_path,
                entry.document.relative_path,
            )
        if self._policy is ConflictPolicy.FIRST_WINS and not displaceable:
            logger.debug(
                'Key "%s" kept for %s, ignored for %s',
                key,
                existing.document.relative_path,
                entry.document.relative_path,
            )
            return

        logger.debug(
            'Key "%s" moved from %s to %s',
            key,
            existing.document.relative_path,
            entry.document.relative_path,
        )
        # Re-insert so iteration order reflects the surviving registration
        del entries[key]
        entries[key] = entry

    @staticmethod
    def _warn_duplicate_routes(routed: list[IndexEntry]) -> None:
        seen: dict[str, str] = {}
        for entry in routed:
            previous = seen.setdefault(entry.url, entry.document.relative_path)
            if previous != entry.document.relative_path:
                logger.warning(
                    "%s and %s are both served at %s",
                    previous,
                    entry.document.relative_path,
                    entry.url,
                )


def build_index(
    root_dir: Path,
    policy: ConflictPolicy = ConflictPolicy.LAST_WINS,
) -> LinkIndex:
    """Scan a content root and build its link index.

    Args:
        root_dir: Content root directory
        policy: Key collision policy

    Returns:
        LinkIndex snapshot

    Raises:
        ScanError: If the content tree cannot be read
        LinkConflictError: If the policy is REJECT and two documents share a key
    """
    builder = LinkIndexBuilder(policy)
    for document in scan(root_dir):
        builder.add(document)
    return builder.build()


class LinkIndexLoader:
    """Lazily builds a LinkIndex and rebuilds it wholesale after invalidation."""

    def __init__(
        self,
        source_dir: Path,
        policy: ConflictPolicy = ConflictPolicy.LAST_WINS,
    ) -> None:
        self._source_dir = source_dir
        self._policy = policy
        self._index: LinkIndex | None = None

    @property
    def source_dir(self) -> Path:
        """Content root the index is built from."""
        return self._source_dir

    def load(self) -> LinkIndex:
        """Get the current index, building it if needed.

        Raises:
            ScanError: If the content tree cannot be read
            LinkConflictError: If the policy is REJECT and two documents share a key
        """
        if self._index is None:
            self._index = build_index(self._source_dir, self._policy)
        return self._index

    def invalidate(self) -> None:
        """Drop the current index so the next load() rebuilds from scratch."""
        self._index = None


def _name_keys(document: ContentDocument) -> list[str]:
    keys: list[str] = []
    title = document.title
    if title is not None:
        keys += [title, normalize(title)]

    segments = document.relative_path.split("/")
    filename = segments[-1]
    if filename != INDEX_NAME:
        keys += [filename, normalize(filename)]
    elif len(segments) > 1:
        # A directory's index is reachable by the directory's own name
        keys += [segments[-2], normalize(segments[-2])]
    return keys


def _path_keys(document: ContentDocument) -> list[str]:
    path = document.relative_path
    keys = [path, normalize(path), normalize_path(path)]
    if is_index_path(path) and path != INDEX_NAME:
        directory = path.rsplit("/", 1)[0]
        keys += [directory, normalize_path(directory)]
    return keys
