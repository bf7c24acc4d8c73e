"""Markdown rendering with wiki-link resolution.

Adds `[[target]]` and `[[target|alias]]` syntax to mistune. Each
occurrence is resolved against a LinkIndex and emitted through its
LinkNode descriptor. Code spans and fenced blocks are left alone since
mistune never runs inline rules inside them.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import mistune
from mistune.util import escape

from wikiroute.core.index import LinkIndex
from wikiroute.core.nodes import to_node
from wikiroute.core.resolver import (
    Broken,
    ResolvedLink,
    ResolveOptions,
    WikiLinkReference,
    resolve,
)
from wikiroute.core.scanner import ContentDocument, strip_frontmatter

logger = logging.getLogger(__name__)

WIKI_LINK_PATTERN = (
    r"\[\["
    r"(?P<wiki_link_target>[^\]|\n]+?)"
    r"(?:\|(?P<wiki_link_alias>[^\]\n]+?))?"
    r"\]\]"
)


def parse_wiki_link(inline: Any, m: Any, state: Any) -> int | None:
    target = m.group("wiki_link_target").strip()
    if not target:
        return None
    alias = m.group("wiki_link_alias")
    alias = alias.strip() if alias else None
    state.append_token(
        {"type": "wiki_link", "attrs": {"slug": target, "alias": alias or None}}
    )
    return m.end()


def wiki_links(md: mistune.Markdown) -> None:
    """Mistune plugin recognising wiki-link syntax.

    Without an index the links render as plain text; use create_renderer()
    to resolve them.
    """
    md.inline.register("wiki_link", WIKI_LINK_PATTERN, parse_wiki_link, before="link")
    if md.renderer and md.renderer.NAME == "html":
        md.renderer.register("wiki_link", _render_unresolved)


def _render_unresolved(renderer: Any, slug: str, alias: str | None = None) -> str:
    return escape(alias or slug)


def create_renderer(
    index: LinkIndex,
    options: ResolveOptions | None = None,
    record: list[tuple[WikiLinkReference, ResolvedLink]] | None = None,
) -> mistune.Markdown:
    """Create a markdown-to-HTML renderer that resolves wiki-links.

    Args:
        index: Finished link index
        options: Render context
        record: If given, every (reference, result) pair is appended to it

    Returns:
        Callable mistune Markdown instance
    """

    def render_wiki_link(renderer: Any, slug: str, alias: str | None = None) -> str:
        ref = WikiLinkReference(raw_slug=slug, alias=alias)
        link = resolve(ref, index, options)
        if record is not None:
            record.append((ref, link))
        return to_node(link).to_html()

    def plugin(md: mistune.Markdown) -> None:
        wiki_links(md)
        md.renderer.register("wiki_link", render_wiki_link)

    return mistune.create_markdown(plugins=["strikethrough", "table", plugin])


def find_references(markdown_text: str) -> list[WikiLinkReference]:
    """Extract every wiki-link reference from markdown text, in order."""
    md = mistune.create_markdown(renderer=None, plugins=[wiki_links])
    tokens = md(markdown_text)
    return [
        WikiLinkReference(raw_slug=token["attrs"]["slug"], alias=token["attrs"]["alias"])
        for token in _iter_tokens(tokens)
        if token["type"] == "wiki_link"
    ]


def _iter_tokens(tokens: Iterable[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    for token in tokens:
        yield token
        children = token.get("children")
        if children:
            yield from _iter_tokens(children)


@dataclass
class RenderResult:
    """Result of rendering a markdown document."""

    html: str
    title: str | None
    links: list[tuple[WikiLinkReference, ResolvedLink]] = field(default_factory=list)

    @property
    def broken(self) -> list[WikiLinkReference]:
        """References that did not resolve."""
        return [ref for ref, link in self.links if isinstance(link, Broken)]


class PageRenderer:
    """Renders content documents with wiki-links resolved.

    Holds on to one index snapshot; create a new renderer after the index
    is rebuilt.
    """

    def __init__(self, index: LinkIndex, options: ResolveOptions | None = None) -> None:
        self._index = index
        self._options = options or ResolveOptions()

    @property
    def index(self) -> LinkIndex:
        return self._index

    def render(self, document: ContentDocument) -> RenderResult:
        """Render a document body, front-matter excluded.

        Raises:
            OSError: If the source file can no longer be read
            UnicodeDecodeError: If the source file is no longer valid UTF-8
        """
        text = document.source_path.read_text(encoding="utf-8")
        return self.render_text(strip_frontmatter(text), title=document.title)

    def render_text(self, markdown_text: str, *, title: str | None = None) -> RenderResult:
        """Render markdown text."""
        links: list[tuple[WikiLinkReference, ResolvedLink]] = []
        md = create_renderer(self._index, self._options, links)
        html = md(markdown_text)
        logger.debug("Rendered %d characters with %d wiki-links", len(markdown_text), len(links))
        return RenderResult(html=html, title=title, links=links)


def check_links(
    index: LinkIndex,
    options: ResolveOptions | None = None,
) -> list[tuple[ContentDocument, WikiLinkReference]]:
    """Find wiki-links across all indexed documents that do not resolve.

    Raises:
        OSError: If a document can no longer be read
        UnicodeDecodeError: If a document is no longer valid UTF-8
    """
    broken: list[tuple[ContentDocument, WikiLinkReference]] = []
    for document in index.documents:
        text = strip_frontmatter(document.source_path.read_text(encoding="utf-8"))
        for ref in find_references(text):
            if isinstance(resolve(ref, index, options), Broken):
                broken.append((document, ref))
    logger.info("Checked %d documents, %d broken wiki-links", len(index.documents), len(broken))
    return broken
