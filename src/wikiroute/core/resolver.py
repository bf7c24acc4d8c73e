"""Wiki-link resolution.

Turns one `[[slug#anchor|alias]]` reference into a Resolved or Broken
result by looking it up in a finished LinkIndex. Resolution is a pure
function of the reference, the index and the options; it never raises
for an unknown slug.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wikiroute.core.index import IndexEntry, LinkIndex
from wikiroute.core.slug import normalize, normalize_path


class UnresolvedPolicy(Enum):
    """How a slug with no index entry is rendered."""

    BROKEN = "broken"
    SYNTHESIZE = "synthesize"

    @classmethod
    def parse(cls, value: str) -> UnresolvedPolicy:
        """Parse a policy from its configuration name.

        Raises:
            ValueError: If the name is unknown
        """
        for policy in cls:
            if policy.value == value:
                return policy
        names = ", ".join(p.value for p in cls)
        raise ValueError(f"Unknown unresolved-link policy {value!r} (expected one of: {names})")


@dataclass(frozen=True)
class WikiLinkReference:
    """One wiki-link occurrence as written by the author."""

    raw_slug: str
    alias: str | None = None


@dataclass(frozen=True)
class ResolveOptions:
    """Render context for resolution."""

    preview: bool = False
    unresolved: UnresolvedPolicy = UnresolvedPolicy.BROKEN


@dataclass(frozen=True)
class Resolved:
    """Link to a known (or synthesized) route."""

    href: str
    display_text: str
    visually_marked: bool = False


@dataclass(frozen=True)
class Broken:
    """Link whose slug matched nothing in the index."""

    display_text: str
    reason_slug: str


ResolvedLink = Resolved | Broken


def resolve(
    ref: WikiLinkReference,
    index: LinkIndex,
    options: ResolveOptions | None = None,
) -> ResolvedLink:
    """Resolve a wiki-link reference against an index.

    Args:
        ref: Reference as parsed from markdown
        index: Finished link index
        options: Render context (defaults: not preview, broken on miss)

    Returns:
        Resolved with href and display text, or Broken carrying the raw slug
    """
    if options is None:
        options = ResolveOptions()

    base_slug, _, anchor = ref.raw_slug.partition("#")
    base_slug = base_slug.strip()
    anchor = anchor.strip()

    if not base_slug and anchor:
        return Resolved(
            href=f"#{anchor}",
            display_text=ref.alias or ref.raw_slug,
        )

    entry = lookup(base_slug, index)
    if entry is not None:
        return Resolved(
            href=_with_anchor(entry.url, anchor),
            display_text=ref.alias or entry.title or ref.raw_slug,
            visually_marked=entry.draft and not options.preview,
        )

    fallback = normalize(base_slug)
    if options.unresolved is UnresolvedPolicy.SYNTHESIZE and fallback:
        return Resolved(
            href=_with_anchor(f"/{fallback}/", anchor),
            display_text=ref.alias or ref.raw_slug,
        )

    return Broken(display_text=ref.alias or ref.raw_slug, reason_slug=ref.raw_slug)


def lookup(base_slug: str, index: LinkIndex) -> IndexEntry | None:
    """Find the index entry for a slug without its anchor.

    Tries the slug verbatim, then normalized as a whole, then normalized
    segment by segment.
    """
    if not base_slug:
        return None
    for key in (base_slug, normalize(base_slug), normalize_path(base_slug)):
        entry = index.lookup(key)
        if entry is not None:
            return entry
    return None


def _with_anchor(url: str, anchor: str) -> str:
    if not anchor:
        return url
    if url == "/":
        return f"/#{anchor}"
    return f"{url.rstrip('/')}#{anchor}"
