"""Render descriptors for resolved wiki-links.

A LinkNode is what the rendering layer receives: an element tag, its
attributes and its text. Resolved links become anchors, broken links
become inline markers carrying the unresolved slug for diagnosis.
"""

from dataclasses import dataclass, field
from typing import TypedDict

from mistune.util import escape

from wikiroute.core.resolver import Broken, ResolvedLink

LINK_CLASS = "wikilink"
DRAFT_CLASS = "wikilink-draft"
BROKEN_CLASS = "wikilink-broken"


class LinkNodeDict(TypedDict):
    """Dictionary representation of a link node."""

    tag: str
    properties: dict[str, str]
    text: str


@dataclass(frozen=True)
class LinkNode:
    """Element descriptor for one rendered wiki-link."""

    tag: str
    text: str
    properties: dict[str, str] = field(default_factory=dict)

    def to_html(self) -> str:
        """Render as an HTML element with escaped attributes and text."""
        attrs = "".join(
            f' {name}="{escape(value)}"' for name, value in self.properties.items()
        )
        return f"<{self.tag}{attrs}>{escape(self.text)}</{self.tag}>"

    def to_dict(self) -> LinkNodeDict:
        """Convert to dictionary for JSON serialization."""
        return {"tag": self.tag, "properties": dict(self.properties), "text": self.text}


def to_node(link: ResolvedLink) -> LinkNode:
    """Build the render descriptor for a resolution result."""
    if isinstance(link, Broken):
        return LinkNode(
            tag="span",
            text=link.display_text,
            properties={
                "class": f"{LINK_CLASS} {BROKEN_CLASS}",
                "title": f"Unresolved wiki-link: {link.reason_slug}",
            },
        )

    css_class = f"{LINK_CLASS} {DRAFT_CLASS}" if link.visually_marked else LINK_CLASS
    return LinkNode(
        tag="a",
        text=link.display_text,
        properties={"href": link.href, "class": css_class},
    )
