"""
test_md_utils.py
----------------
Unit tests for front matter utilities.

Target Coverage: 95%+
"""
import pytest

from oneiro.core.exceptions import FrontmatterError
from oneiro.utils.md import parse_frontmatter, split_frontmatter


class TestSplitFrontmatter:
    """Test split_frontmatter()."""

    def test_with_frontmatter(self):
        """Test YAML block and body are separated."""
        fm, body = split_frontmatter("---\ncreated: 20250615\n---\n\nBody\nMore")
        assert fm == "created: 20250615"
        assert body == ["Body", "More"]

    def test_without_frontmatter(self):
        """Test plain content."""
        fm, body = split_frontmatter("> [!journal-entry]\n> text")
        assert fm == ""
        assert body == ["> [!journal-entry]", "> text"]

    def test_unclosed(self):
        """Test unclosed block is not front matter."""
        fm, body = split_frontmatter("---\ncreated: 1\nbody")
        assert fm == ""
        assert len(body) == 3

    def test_empty(self):
        """Test empty content."""
        assert split_frontmatter("") == ("", [])


class TestParseFrontmatter:
    """Test parse_frontmatter()."""

    def test_flat_strings(self):
        """Test values become strings and keys lower-case."""
        data = parse_frontmatter("---\nCreated: 20250615\nmodified: '20250616'\n---\n")
        assert data == {"created": "20250615", "modified": "20250616"}

    def test_yaml_date(self):
        """Test YAML dates flatten to ISO strings."""
        assert parse_frontmatter("---\ncreated: 2025-06-15\n---\n") == {"created": "2025-06-15"}

    def test_lists_and_nulls(self):
        """Test lists join and nulls become empty strings."""
        data = parse_frontmatter("---\ntags: [dream, lucid]\nmood:\ndone: true\n---\n")
        assert data == {"tags": "dream, lucid", "mood": "", "done": "true"}

    def test_no_frontmatter(self):
        """Test notes without front matter."""
        assert parse_frontmatter("just text") == {}

    def test_invalid_yaml_raises(self):
        """Test malformed YAML raises FrontmatterError."""
        with pytest.raises(FrontmatterError):
            parse_frontmatter("---\ncreated: [oops\n---\n")

    def test_non_mapping_raises(self):
        """Test a YAML list raises FrontmatterError."""
        with pytest.raises(FrontmatterError):
            parse_frontmatter("---\n- a\n- b\n---\n")
