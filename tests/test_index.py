"""Tests for the link index."""

from pathlib import Path

import pytest

from wikiroute.core.index import (
    ConflictPolicy,
    LinkIndex,
    LinkIndexBuilder,
    LinkIndexLoader,
    build_index,
)
from wikiroute.core.scanner import ContentDocument
from wikiroute.errors import LinkConflictError


def _doc(relative_path: str, **frontmatter: object) -> ContentDocument:
    return ContentDocument(
        relative_path=relative_path,
        frontmatter=frontmatter,
        source_path=Path(f"{relative_path}.md"),
    )


def _index(*documents: ContentDocument, policy: ConflictPolicy = ConflictPolicy.LAST_WINS) -> LinkIndex:
    builder = LinkIndexBuilder(policy)
    for document in documents:
        builder.add(document)
    return builder.build()


class TestLinkIndexBuilder:
    """Tests for LinkIndexBuilder.build()."""

    def test__titled_document__registers_all_keys(self) -> None:
        """Register raw and normalized title, filename and path."""
        index = _index(_doc("notes/my-page", title="My Page"))

        for key in ["My Page", "my-page", "notes/my-page", "notesmy-page"]:
            assert index.url_for(key) == "/notes/my-page/", key

    def test__untitled_document__registers_path_keys(self) -> None:
        """Documents without a title are still reachable by path."""
        index = _index(_doc("Guides/Getting Started"))

        assert index.url_for("Guides/Getting Started") == "/guides/getting-started/"
        assert index.url_for("guidesgetting-started") == "/guides/getting-started/"
        assert index.url_for("guides/getting-started") == "/guides/getting-started/"
        assert index.url_for("Getting Started") == "/guides/getting-started/"
        assert index.url_for("getting-started") == "/guides/getting-started/"

    def test__directory_index__registers_directory_name(self) -> None:
        """Directory index is reachable by its directory name, not by "index"."""
        index = _index(_doc("guides/index"), _doc("guides/setup"))

        assert index.url_for("guides") == "/guides/"
        assert index.url_for("guides/index") == "/guides/"
        assert index.url_for("index") is None

    def test__root_index__is_reachable_by_path(self) -> None:
        """The root index keeps its "index" path key."""
        index = _index(_doc("index", title="Home"))

        assert index.url_for("index") == "/"
        assert index.url_for("Home") == "/"
        assert index.url_for("home") == "/"

    def test__same_normalized_title__last_scanned_wins(self) -> None:
        """Under last-wins, the later document owns a shared key."""
        first = _doc("a/one", title="Shared Title")
        second = _doc("b/two", title="shared title!")

        index = _index(first, second)

        assert index.url_for("shared-title") == "/b/two/"
        assert index.url_for("Shared Title") == "/a/one/"

    def test__same_normalized_title__reversed_order__other_document_wins(self) -> None:
        """Scan order, not document identity, decides the survivor."""
        first = _doc("a/one", title="Shared Title")
        second = _doc("b/two", title="shared title!")

        index = _index(second, first)

        assert index.url_for("shared-title") == "/a/one/"

    def test__same_normalized_title__first_wins_policy__keeps_first(self) -> None:
        """Under first-wins, the earlier document keeps the key."""
        index = _index(
            _doc("a/one", title="Shared Title"),
            _doc("b/two", title="shared title!"),
            policy=ConflictPolicy.FIRST_WINS,
        )

        assert index.url_for("shared-title") == "/a/one/"

    def test__same_normalized_title__reject_policy__raises(self) -> None:
        """Under reject-on-conflict, a shared key aborts the build."""
        builder = LinkIndexBuilder(ConflictPolicy.REJECT)
        builder.add(_doc("a/one", title="Shared Title")).add(_doc("b/two", title="shared title!"))

        with pytest.raises(LinkConflictError) as exc_info:
            builder.build()

        assert exc_info.value.key == "shared-title"
        assert exc_info.value.existing == "a/one"
        assert exc_info.value.incoming == "b/two"

    def test__same_document_repeating_key__is_not_conflict(self) -> None:
        """A title equal to the filename is registered once without conflict."""
        index = _index(_doc("setup", title="setup"), policy=ConflictPolicy.REJECT)

        assert index.url_for("setup") == "/setup/"

    def test__title_matching_other_path__path_still_reaches_own_document(self) -> None:
        """Path keys are registered after name keys."""
        target = _doc("guides/setup")
        impostor = _doc("zzz/other", title="guides/setup")

        index = _index(target, impostor)

        assert index.url_for("guides/setup") == "/guides/setup/"

    def test__title_matching_other_path__first_wins_policy__path_still_reaches_own_document(
        self,
    ) -> None:
        """Under first-wins, a path key still displaces an earlier title key."""
        target = _doc("guides/setup")
        impostor = _doc("zzz/other", title="guides/setup")

        index = _index(target, impostor, policy=ConflictPolicy.FIRST_WINS)

        assert index.url_for("guides/setup") == "/guides/setup/"
        assert index.url_for("zzz/other") == "/zzz/other/"

    def test__lookup__returns_entry_with_document(self) -> None:
        """Entries expose the document's title and draft flag."""
        index = _index(_doc("notes/idea", title="Idea", draft=True))

        entry = index.lookup("Idea")

        assert entry is not None
        assert entry.url == "/notes/idea/"
        assert entry.title == "Idea"
        assert entry.draft is True

    def test__unknown_key__returns_none(self) -> None:
        """Missing keys return None."""
        index = _index(_doc("page"))

        assert index.lookup("nope") is None
        assert index.url_for("nope") is None
        assert "nope" not in index


class TestLinkIndex:
    """Tests for LinkIndex accessors."""

    def test__get_by_url__accepts_any_slashes(self) -> None:
        """Find entries by route with or without surrounding slashes."""
        index = _index(_doc("index", title="Home"), _doc("guides/setup"))

        assert index.get_by_url("guides/setup").url == "/guides/setup/"
        assert index.get_by_url("/guides/setup/").url == "/guides/setup/"
        assert index.get_by_url("").url == "/"
        assert index.get_by_url("missing") is None

    def test__documents__preserve_scan_order(self) -> None:
        """Documents are kept in the order they were added."""
        index = _index(_doc("b"), _doc("a"))

        assert [d.relative_path for d in index.documents] == ["b", "a"]

    def test__to_dict__maps_keys_to_urls(self) -> None:
        """Serialize the index as key -> URL."""
        index = _index(_doc("page", title="Page"))

        assert index.to_dict() == {
            "Page": "/page/",
            "page": "/page/",
        }
        assert len(index) == 2
        assert sorted(index) == ["Page", "page"]


class TestBuildIndex:
    """Tests for build_index()."""

    def test__content_tree__resolves_every_document(self, content_dir: Path) -> None:
        """Every scanned document is reachable by its path."""
        index = build_index(content_dir)

        assert index.url_for("index") == "/"
        assert index.url_for("guides") == "/guides/"
        assert index.url_for("guides/setup") == "/guides/setup/"
        assert index.url_for("Setup Guide") == "/guides/setup/"
        assert index.url_for("notes/my-page") == "/notes/my-page/"
        assert index.url_for("draft-idea") == "/notes/draft-idea/"
        assert len(index.documents) == 5

    def test__reject_policy__clean_tree__builds(self, content_dir: Path) -> None:
        """A tree without shared keys builds under reject-on-conflict."""
        index = build_index(content_dir, ConflictPolicy.REJECT)

        assert index.url_for("My Page") == "/notes/my-page/"


class TestLinkIndexLoader:
    """Tests for LinkIndexLoader."""

    def test__load__caches_index(self, content_dir: Path) -> None:
        """Repeated loads return the same snapshot."""
        loader = LinkIndexLoader(content_dir)

        assert loader.load() is loader.load()

    def test__invalidate__rebuilds_from_scratch(self, content_dir: Path) -> None:
        """After invalidation, new content is picked up."""
        loader = LinkIndexLoader(content_dir)
        before = loader.load()
        (content_dir / "new-page.md").write_text("---\ntitle: New Page\n---\n")

        loader.invalidate()
        after = loader.load()

        assert after is not before
        assert before.url_for("New Page") is None
        assert after.url_for("New Page") == "/new-page/"


class TestConflictPolicy:
    """Tests for ConflictPolicy.parse()."""

    def test__known_name__returns_policy(self) -> None:
        """Parse configuration names."""
        assert ConflictPolicy.parse("first-wins") is ConflictPolicy.FIRST_WINS
        assert ConflictPolicy.parse("reject-on-conflict") is ConflictPolicy.REJECT

    def test__unknown_name__raises(self) -> None:
        """Unknown names are a configuration error."""
        with pytest.raises(ValueError, match="Unknown conflict policy"):
            ConflictPolicy.parse("random")
