"""Content tree scanning.

Walks a content root and produces one ContentDocument per markdown file,
with its front-matter parsed. Traversal is deterministic: entries of each
directory are visited in name order and subdirectories are descended at
their sorted position, so documents come out sorted by path segments.
This order decides which document wins a lookup-key collision.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import frontmatter
import yaml

from wikiroute.errors import ScanError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True)
class ContentDocument:
    """Scanned markdown document."""

    relative_path: str
    frontmatter: Mapping[str, Any]
    source_path: Path

    @property
    def title(self) -> str | None:
        """Title from front-matter, if it is a usable scalar."""
        value = self.frontmatter.get("title")
        if value is None or isinstance(value, (dict, list, bool)):
            return None
        title = str(value).strip()
        return title or None

    @property
    def draft(self) -> bool:
        """Whether front-matter flags the document as a draft."""
        return self.frontmatter.get("draft") is True


def scan(root_dir: Path) -> list[ContentDocument]:
    """Scan a content root for markdown documents.

    Args:
        root_dir: Content root directory

    Returns:
        Documents in traversal order

    Raises:
        ScanError: If the root, a directory or a file cannot be read
    """
    if not root_dir.is_dir():
        raise ScanError(root_dir, "content root is not a directory")

    logger.info("Scanning %s for markdown files", root_dir)
    documents = [load_document(root_dir, path) for path in _walk(root_dir)]
    logger.info("Found %d documents", len(documents))
    return documents


def load_document(root_dir: Path, path: Path) -> ContentDocument:
    """Read one markdown file into a ContentDocument.

    Args:
        root_dir: Content root the relative path is computed from
        path: Markdown file inside root_dir

    Returns:
        ContentDocument with parsed front-matter (empty if absent or malformed)

    Raises:
        ScanError: If the file cannot be read or decoded
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ScanError(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise ScanError(path, f"not valid UTF-8 ({e.reason})") from e

    relative_path = path.relative_to(root_dir).with_suffix("").as_posix()
    metadata = parse_frontmatter(text, path)
    logger.debug("Loaded %s (%d front-matter keys)", relative_path, len(metadata))

    return ContentDocument(
        relative_path=relative_path,
        frontmatter=MappingProxyType(metadata),
        source_path=path,
    )


def parse_frontmatter(text: str, path: Path | None = None) -> dict[str, Any]:
    """Parse leading front-matter from markdown text.

    Args:
        text: Full markdown source
        path: Source path, used only for log messages

    Returns:
        Front-matter fields, empty when the block is absent or malformed
    """
    try:
        metadata, _ = frontmatter.parse(text)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed front-matter in %s: %s", path or "<text>", e)
        return {}
    return dict(metadata)


def strip_frontmatter(text: str) -> str:
    """Return the markdown body without its front-matter block.

    A leading `---` block that is not a YAML mapping is a thematic break,
    not front-matter, and the text comes back unchanged.
    """
    try:
        metadata, content = frontmatter.parse(text)
    except yaml.YAMLError:
        return text
    if not metadata:
        return text
    return content


def _walk(directory: Path) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ScanError(directory, e.strerror or str(e)) from e

    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            yield from _walk(entry)
        elif entry.is_file() and entry.suffix == MARKDOWN_SUFFIX:
            yield entry
