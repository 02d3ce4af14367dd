"""
Tests for RawCallout properties and tree navigation.
"""
from oneiro.dataclasses.raw_callout import RawCallout


def _tree():
    metrics = RawCallout(3, "dream-metrics", start_line=4, end_line=5)
    diary = RawCallout(2, "dream-diary", children=[metrics], start_line=2, end_line=5)
    journal = RawCallout(1, "journal-entry", children=[diary], start_line=0, end_line=5)
    return journal, diary, metrics


class TestBlockId:
    """Test block_id property."""

    def test_trailing_block_id(self):
        """Test trailing ^id is returned."""
        callout = RawCallout(1, "journal-entry", title_text="June 15 ^20250615")
        assert callout.block_id == "20250615"

    def test_block_id_only(self):
        """Test header that is only a block id."""
        assert RawCallout(1, "dream-diary", title_text="^dream-1").block_id == "dream-1"

    def test_no_block_id(self):
        """Test header without ^id."""
        assert RawCallout(1, "dream-diary", title_text="Flying").block_id is None

    def test_caret_inside_word_ignored(self):
        """Test x^2 is not a block id."""
        assert RawCallout(1, "dream-diary", title_text="x^2").block_id is None


class TestMetadata:
    """Test metadata property."""

    def test_key_values_and_flags(self):
        """Test key=value pairs and bare flags."""
        callout = RawCallout(1, "dream-diary", metadata_tag="mood=calm, Lucid")
        assert callout.metadata == {"mood": "calm", "lucid": True}

    def test_empty(self):
        """Test missing tag gives empty dict."""
        assert RawCallout(1, "dream-diary").metadata == {}


class TestNavigation:
    """Test walk() and find_first()."""

    def test_walk_depth_first(self):
        """Test walk yields self then descendants."""
        journal, diary, metrics = _tree()
        assert list(journal.walk()) == [journal, diary, metrics]

    def test_find_first_excludes_self(self):
        """Test find_first searches descendants only."""
        journal, diary, metrics = _tree()
        assert journal.find_first("dream-metrics") is metrics
        assert metrics.find_first("dream-metrics") is None

    def test_line_number_is_one_based(self):
        """Test line_number adds one."""
        _, diary, _ = _tree()
        assert diary.line_number == 3
