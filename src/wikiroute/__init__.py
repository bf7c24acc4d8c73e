"""Wikiroute - wiki-style cross-references resolved to site URLs."""

from wikiroute.core.index import ConflictPolicy, LinkIndex, build_index
from wikiroute.core.resolver import (
    Broken,
    Resolved,
    ResolveOptions,
    UnresolvedPolicy,
    WikiLinkReference,
    resolve,
)
from wikiroute.core.routes import derive_url
from wikiroute.core.scanner import ContentDocument, scan
from wikiroute.core.slug import normalize

__all__ = [
    "Broken",
    "ConflictPolicy",
    "ContentDocument",
    "LinkIndex",
    "ResolveOptions",
    "Resolved",
    "UnresolvedPolicy",
    "WikiLinkReference",
    "build_index",
    "derive_url",
    "normalize",
    "resolve",
    "scan",
]
