"""Tests for slug normalization."""

import pytest

from wikiroute.core.slug import normalize, normalize_path


class TestNormalize:
    """Tests for normalize()."""

    def test__punctuation__is_removed(self) -> None:
        """Drop characters outside the slug alphabet."""
        assert normalize("Some Page!!") == "some-page"

    def test__leading_and_trailing_hyphens__are_stripped(self) -> None:
        """Collapse hyphen runs and trim them at both ends."""
        assert normalize("--Lead--Trail--") == "lead-trail"

    def test__empty_string__returns_empty(self) -> None:
        """Empty input is valid and stays empty."""
        assert normalize("") == ""

    def test__whitespace_runs__become_single_hyphen(self) -> None:
        """Replace tabs, newlines and repeated spaces with one hyphen."""
        assert normalize("a \t\n b") == "a-b"

    def test__underscores_and_digits__are_kept(self) -> None:
        """Keep underscores and digits untouched."""
        assert normalize("Release_2 Notes") == "release_2-notes"

    def test__slashes__are_removed(self) -> None:
        """Path separators are not part of a single segment."""
        assert normalize("notes/My Page") == "notesmy-page"

    def test__non_ascii__is_dropped(self) -> None:
        """Non-ASCII letters are removed rather than transliterated."""
        assert normalize("Café Menu") == "caf-menu"

    def test__only_symbols__returns_empty(self) -> None:
        """Input without any slug characters yields an empty slug."""
        assert normalize("!!! ???") == ""

    @pytest.mark.parametrize(
        "text",
        ["Some Page!!", "--Lead--Trail--", "", "  spaced   out  ", "A - B", "x__y--z", "Ünïcödé  Tïtle"],
    )
    def test__normalized_value__is_idempotent(self, text: str) -> None:
        """Normalizing twice gives the same result as normalizing once."""
        once = normalize(text)

        assert normalize(once) == once


class TestNormalizePath:
    """Tests for normalize_path()."""

    def test__segments__are_normalized_independently(self) -> None:
        """Normalize each segment and keep the separators."""
        assert normalize_path("Notes/My Page") == "notes/my-page"

    def test__empty_segments__are_dropped(self) -> None:
        """Segments that normalize to nothing do not leave double slashes."""
        assert normalize_path("a/!!!/b") == "a/b"
