"""
test_scanner.py
---------------
Unit tests for the callout scanner.

Covers opener parsing, quote-marker counting with mixed whitespace,
nesting and closing rules, blank-line handling, and recovery from
malformed structure.

Target Coverage: 95%+
"""
import pytest

from oneiro.core.diagnostics import DiagnosticKind, DiagnosticSink
from oneiro.core.exceptions import CalloutScanError
from oneiro.parsers.scanner import (
    CalloutScanner,
    count_quote_markers,
    iter_callouts,
    parse_callout_opener,
    scan_callouts,
    strip_quote_markers,
)


class TestQuoteMarkers:
    """Test count_quote_markers() and strip_quote_markers()."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("> a", 1),
            (">> a", 2),
            ("> > a", 2),
            (">> > a", 3),
            (">>>a", 3),
            ("  >\t> a", 2),
            ("a > b", 0),
            ("", 0),
        ],
    )
    def test_count(self, line, expected):
        """Test marker counting ignores whitespace between markers."""
        assert count_quote_markers(line) == expected

    def test_strip(self):
        """Test the full marker run is stripped."""
        assert strip_quote_markers(">> > [!dream-metrics]") == "[!dream-metrics]"


class TestParseCalloutOpener:
    """Test parse_callout_opener()."""

    def test_full_opener(self):
        """Test type, metadata and title are captured."""
        opener = parse_callout_opener("> > [!Dream-Diary|lucid] Flying ^d1")
        assert opener.depth == 2
        assert opener.callout_type == "dream-diary"
        assert opener.metadata_tag == "lucid"
        assert opener.title_text == "Flying ^d1"

    def test_fold_marker(self):
        """Test Obsidian fold markers are accepted."""
        opener = parse_callout_opener("> [!journal-entry]- June")
        assert opener.callout_type == "journal-entry"
        assert opener.title_text == "June"

    def test_no_title(self):
        """Test opener without header text."""
        opener = parse_callout_opener(">>> [!dream-metrics]")
        assert opener.title_text == ""
        assert opener.metadata_tag is None

    @pytest.mark.parametrize("line", ["> plain quote", "[!note] not quoted", "> [!broken"])
    def test_not_opener_raises(self, line):
        """Test non-openers raise CalloutScanError."""
        with pytest.raises(CalloutScanError):
            parse_callout_opener(line)


class TestNesting:
    """Test tree construction."""

    def test_three_levels(self):
        """Test journal > diary > metrics nesting."""
        text = (
            "> [!journal-entry] June\n"
            ">> [!dream-diary] Flying\n"
            ">> text\n"
            ">>> [!dream-metrics]\n"
            ">>> Sensory Detail: 4\n"
        )
        roots = scan_callouts(text)
        assert len(roots) == 1
        journal = roots[0]
        diary = journal.children[0]
        metrics = diary.children[0]
        assert (journal.depth, diary.depth, metrics.depth) == (1, 2, 3)
        assert metrics.body_lines == [">>> Sensory Detail: 4"]
        assert diary.body_lines == [">> text", ">>> [!dream-metrics]", ">>> Sensory Detail: 4"]
        assert (diary.start_line, diary.end_line) == (1, 4)

    def test_mixed_marker_spacing(self):
        """Test '> > >' and '>>>' are the same depth."""
        text = "> [!journal-entry]\n> > [!dream-diary]\n>> > [!dream-metrics]\n> >> Words: 3\n"
        roots = scan_callouts(text)
        metrics = roots[0].children[0].children[0]
        assert metrics.depth == 3
        assert metrics.body_lines == ["> >> Words: 3"]

    def test_sibling_at_same_depth(self):
        """Test an opener at the same depth closes the previous sibling."""
        text = (
            "> [!journal-entry]\n"
            ">> [!dream-diary] One\n"
            ">> a\n"
            ">> [!dream-diary] Two\n"
            ">> b\n"
        )
        journal = scan_callouts(text)[0]
        assert [c.title_text for c in journal.children] == ["One", "Two"]
        assert journal.children[0].body_lines == [">> a"]

    def test_shallower_line_closes_deeper(self):
        """Test a depth-1 line closes the depth-2 callout."""
        text = "> [!journal-entry]\n>> [!dream-diary]\n>> a\n> back in journal\n"
        journal = scan_callouts(text)[0]
        diary = journal.children[0]
        assert diary.end_line == 2
        assert journal.end_line == 3
        assert journal.body_lines[-1] == "> back in journal"

    def test_non_quote_line_closes_all(self):
        """Test plain text ends every open callout."""
        text = "> [!journal-entry]\n>> [!dream-diary]\n>> a\nplain\n> [!journal-entry] Next\n"
        roots = scan_callouts(text)
        assert len(roots) == 2
        assert roots[0].end_line == 2

    def test_blank_lines_held_then_trimmed(self):
        """Test blank lines inside a callout are kept, trailing ones dropped."""
        text = "> [!journal-entry]\n> a\n\n> b\n\n\nplain\n"
        journal = scan_callouts(text)[0]
        assert journal.body_lines == ["> a", "", "> b"]
        assert journal.end_line == 3

    def test_empty_callout(self):
        """Test a callout with no body is valid."""
        roots = scan_callouts("> [!dream-metrics]\n")
        assert roots[0].body_lines == []
        assert roots[0].end_line == 0

    def test_type_lowercased(self):
        """Test callout types are lower-cased."""
        assert scan_callouts("> [!Journal-Entry]")[0].callout_type == "journal-entry"

    def test_header_kept(self):
        """Test header line and title are stored."""
        callout = scan_callouts("> [!journal-entry|x=1] Sunday ^20250615")[0]
        assert callout.header_line == "> [!journal-entry|x=1] Sunday ^20250615"
        assert callout.title_text == "Sunday ^20250615"
        assert callout.block_id == "20250615"

    def test_front_matter_ignored(self):
        """Test YAML front matter is not part of any callout."""
        text = "---\ncreated: 20250101\n---\n> [!journal-entry]\n> a\n"
        roots = scan_callouts(text)
        assert len(roots) == 1
        assert roots[0].start_line == 3


class TestRecovery:
    """Test malformed input handling."""

    def test_skipped_level_normalized(self):
        """Test a child skipping levels nests at parent depth + 1."""
        sink = DiagnosticSink()
        text = "> [!journal-entry]\n>>> [!dream-diary]\n>>> a\n"
        journal = scan_callouts(text, "a.md", sink)[0]
        assert journal.children[0].depth == 2
        assert sink.count(DiagnosticKind.STRUCTURAL_WARNING) == 1
        assert sink.diagnostics[0].line == 2

    def test_deep_top_level_normalized(self):
        """Test a parentless callout at depth 2 becomes top-level."""
        sink = DiagnosticSink()
        roots = scan_callouts(">> [!dream-diary] Orphan\n>> text\n", "a.md", sink)
        assert roots[0].depth == 1
        assert roots[0].body_lines == [">> text"]
        assert sink.count(DiagnosticKind.STRUCTURAL_WARNING) == 1

    def test_malformed_tag_is_text(self):
        """Test an unclosed tag is kept as body text with a warning."""
        sink = DiagnosticSink()
        text = "> [!journal-entry]\n> [!dream-diary Flying\n> text\n"
        roots = scan_callouts(text, "a.md", sink)
        assert len(roots) == 1
        assert roots[0].children == []
        assert "> [!dream-diary Flying" in roots[0].body_lines
        assert sink.count(DiagnosticKind.STRUCTURAL_WARNING) == 1

    def test_plain_quote_outside_callout(self):
        """Test ordinary quotes produce nothing."""
        assert scan_callouts("> just a quote\n>> nested quote\n") == []

    def test_scanner_reusable(self):
        """Test a scanner instance resets between scans."""
        scanner = CalloutScanner()
        scanner.scan("> [!a]\n> [!b]\n")
        assert len(scanner.scan("> [!c]\n")) == 1


class TestIterCallouts:
    """Test iter_callouts()."""

    def test_depth_first_with_ancestors(self):
        """Test walk order and ancestor chains."""
        text = "> [!a]\n>> [!b]\n>>> [!c]\n>> [!d]\n> [!e]\n"
        walked = [
            (node.callout_type, tuple(a.callout_type for a in ancestors))
            for node, ancestors in iter_callouts(scan_callouts(text))
        ]
        assert walked == [
            ("a", ()),
            ("b", ("a",)),
            ("c", ("a", "b")),
            ("d", ("a",)),
            ("e", ()),
        ]
