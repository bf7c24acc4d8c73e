"""Shared test fixtures."""

from pathlib import Path

import pytest

from wikiroute.config import Config, ContentConfig, LinksConfig, LiveReloadConfig, ServerConfig


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create a content tree with titles, a directory index, a draft and a broken link.

    Scan order: guides/index, guides/setup, index, notes/draft-idea, notes/my-page.
    """
    content = tmp_path / "content"
    (content / "guides").mkdir(parents=True)
    (content / "notes").mkdir()

    (content / "index.md").write_text("---\ntitle: Home\n---\nWelcome. See [[My Page]].\n")
    (content / "guides" / "index.md").write_text("# Guides\n\nAll guides.\n")
    (content / "guides" / "setup.md").write_text(
        "---\ntitle: Setup Guide\n---\nRead [[guides#intro]] first.\n"
    )
    (content / "notes" / "my-page.md").write_text(
        "---\ntitle: My Page\n---\nBody with [[missing-page]] and [[Setup Guide|setup]].\n"
    )
    (content / "notes" / "draft-idea.md").write_text(
        "---\ntitle: Draft Idea\ndraft: true\n---\nWork in progress.\n"
    )
    return content


@pytest.fixture
def test_config(content_dir: Path) -> Config:
    """Create a test configuration pointing at the sample content tree."""
    return Config(
        server=ServerConfig(),
        content=ContentConfig(source_dir=content_dir),
        links=LinksConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
