"""
test_assembler.py
-----------------
Unit tests for per-note extraction and the run context.

Target Coverage: 90%+
"""
import pytest
from datetime import date

from oneiro.core.diagnostics import DiagnosticKind
from oneiro.dataclasses.dream_entry import DateStrategy, DreamEntry, MetricValue, ResolvedDate
from oneiro.pipeline.assembler import (
    WORD_COUNT_METRIC,
    ExtractionOutcome,
    ExtractionRun,
    FileExtraction,
    MetricAggregate,
    extract_file,
    extract_text,
)
from oneiro.pipeline.configs.settings import EngineSettings, MetricDefinition


class TestExtractFile:
    """Test extract_file() on one note."""

    def test_entries_and_counts(self, journal_note, today):
        """Test two dreams from one journal entry."""
        extraction = extract_file("Journals/2025-06.md", journal_note, today=today)
        assert (extraction.journals_found, extraction.diaries_found, extraction.metrics_found) == (1, 2, 2)
        assert extraction.callouts_found == 5
        assert [e.title for e in extraction.entries] == ["Flying", "Lost keys"]
        assert extraction.diagnostics == []

    def test_entry_fields(self, journal_note, today):
        """Test date, content, anchor, metadata and metrics of an entry."""
        flying = extract_file("Journals/2025-06.md", journal_note, today=today).entries[0]
        assert flying.date.iso == "2025-06-15"
        assert flying.date.strategy is DateStrategy.BLOCK_REFERENCE
        assert flying.content == (
            "We were gliding above the harbour, see the old port. The water turned to glass."
        )
        assert flying.source_file == "Journals/2025-06.md"
        assert flying.source_anchor == "flying"
        assert dict(flying.callout_metadata) == {"mood": "calm"}
        assert flying.metrics["Sensory Detail"].numeric == 4
        assert flying.metrics["Emotional Recall"].numeric == 3
        assert flying.metrics["Words"].numeric == 343
        assert not flying.metrics["Lost Segments"].is_numeric
        assert flying.word_count == 15

    def test_anchor_falls_back_to_journal_block_id(self, journal_note, today):
        """Test a diary without ^id uses the journal's block id."""
        lost = extract_file("a.md", journal_note, today=today).entries[1]
        assert lost.source_anchor == "20250615"

    def test_anchor_falls_back_to_line(self, second_note, today):
        """Test line anchor when no block ids exist."""
        entry = extract_file("b.md", second_note, today=today).entries[0]
        assert entry.source_anchor == "line-6"
        assert entry.date.iso == "2025-06-10"
        assert entry.date.strategy is DateStrategy.FRONTMATTER_FIELD

    def test_orphan_diary(self, today):
        """Test a diary outside a journal entry is not extracted."""
        text = "> [!dream-diary] Loose\n> text\n>> [!dream-metrics]\n>> Sensory Detail: 2\n"
        extraction = extract_file("a.md", text, today=today)
        assert extraction.entries == []
        kinds = [d.kind for d in extraction.diagnostics]
        assert kinds.count(DiagnosticKind.ORPHAN_CALLOUT) == 2

    def test_missing_metrics_callout(self, today):
        """Test a diary without metrics keeps its whole body."""
        text = "> [!journal-entry] ^20250101\n>> [!dream-diary] Quiet\n>> Nothing measured.\n"
        extraction = extract_file("a.md", text, today=today)
        [entry] = extraction.entries
        assert entry.content == "Nothing measured."
        assert dict(entry.metrics) == {}
        assert extraction.metrics_found == 0
        assert [d.kind for d in extraction.diagnostics] == [DiagnosticKind.CONTENT_BOUNDARY_MISSING]

    def test_sibling_metrics_callout(self, today):
        """Test a metrics callout right after the diary is attached to it."""
        text = (
            "> [!journal-entry] ^20250101\n"
            ">> [!dream-diary] Flat\n"
            ">> Text.\n"
            ">> [!dream-metrics]\n"
            ">> Sensory Detail: 5\n"
        )
        [entry] = extract_file("a.md", text, today=today).entries
        assert entry.metrics["Sensory Detail"].numeric == 5
        assert entry.content == "Text."

    def test_invalid_frontmatter_recorded(self, today):
        """Test broken YAML is recorded and the note still extracts."""
        text = "---\ncreated: [oops\n---\n> [!journal-entry] ^20250101\n>> [!dream-diary] A\n>> b\n"
        extraction = extract_file("a.md", text, today=today)
        assert len(extraction.entries) == 1
        assert DiagnosticKind.FRONTMATTER_INVALID in [d.kind for d in extraction.diagnostics]

    def test_fallback_date_recorded_once_per_journal(self, today):
        """Test date resolution runs once per journal entry."""
        text = (
            "> [!journal-entry] Notes\n"
            ">> [!dream-diary] A\n>> a\n"
            ">> [!dream-diary] B\n>> b\n"
        )
        extraction = extract_file("notes.md", text, today=today)
        assert [e.date.iso for e in extraction.entries] == ["2030-01-01", "2030-01-01"]
        unresolved = [d for d in extraction.diagnostics if d.kind is DiagnosticKind.DATE_UNRESOLVED]
        assert len(unresolved) == 1

    def test_empty_diary_fails_entry(self, today):
        """Test a diary with no title and no content is an entry failure."""
        text = "> [!journal-entry] ^20250101\n>> [!dream-diary]\n> after\n"
        extraction = extract_file("a.md", text, today=today)
        assert extraction.entries == []
        [failed] = [d for d in extraction.diagnostics if d.kind is DiagnosticKind.ENTRY_FAILED]
        assert failed.source == "a.md#20250101"
        assert "EntryAssemblyError" in failed.message

    def test_custom_callout_names(self, today):
        """Test configured callout names drive recognition."""
        settings = EngineSettings(
            journal_callout="day", diary_callout="dream", metrics_callout="metrics"
        )
        text = "> [!day] ^20250101\n>> [!dream] A\n>> text\n>>> [!metrics]\n>>> Sensory Detail: 1\n"
        [entry] = extract_file("a.md", text, settings, today=today).entries
        assert entry.metrics["Sensory Detail"].numeric == 1


def _entry(iso_day, metrics=None, word_count=0, title="t"):
    return DreamEntry(
        date=ResolvedDate(2025, 6, iso_day, DateStrategy.BLOCK_REFERENCE),
        title=title,
        content="c",
        source_file="f.md",
        source_anchor="a",
        metrics=metrics or {},
        word_count=word_count,
    )


class TestMetricAggregate:
    """Test MetricAggregate."""

    def test_add_entry_filters(self):
        """Test only enabled configured numeric metrics plus word count."""
        entry = _entry(
            1,
            {
                "Sensory Detail": MetricValue("Sensory Detail", "4", 4, True),
                "Lost Segments": MetricValue("Lost Segments", "—", None, True),
                "Words": MetricValue("Words", "343", 343, False),
                "Lucidity": MetricValue("Lucidity", "2", 2, True),
            },
            word_count=12,
        )
        aggregate = MetricAggregate()
        aggregate.add_entry(entry, {"Sensory Detail", "Lost Segments"})
        assert aggregate.to_dict() == {"Sensory Detail": [4], WORD_COUNT_METRIC: [12]}

    def test_summary(self):
        """Test summary statistics."""
        aggregate = MetricAggregate()
        for value in (2, 4, 6):
            aggregate.add("Sensory Detail", value)
        summary = aggregate.summary()["Sensory Detail"]
        assert (summary.count, summary.total, summary.mean) == (3, 12, 4)
        assert (summary.minimum, summary.maximum) == (2, 6)

    def test_get_copies(self):
        """Test get() returns a copy and tolerates unknown names."""
        aggregate = MetricAggregate()
        aggregate.add("A", 1)
        aggregate.get("A").append(2)
        assert aggregate["A"] == [1]
        assert aggregate.get("missing") == []
        assert "A" in aggregate and aggregate.names == ["A"]


class TestExtractionRun:
    """Test ExtractionRun merging, progress and outcomes."""

    def test_sorted_stably_by_date(self):
        """Test entries sort by date, keeping input order on ties."""
        run = ExtractionRun()
        run.add_file(FileExtraction("b.md", entries=[_entry(20, title="late"), _entry(5, title="tie-1")]))
        run.add_file(FileExtraction("a.md", entries=[_entry(5, title="tie-2")]))
        titles = [e.title for e in run.finish().entries]
        assert titles == ["tie-1", "tie-2", "late"]

    def test_progress_events(self, journal_note, today):
        """Test one progress event per file with running totals."""
        events = []
        run = ExtractionRun(total_files=2, progress=events.append)
        run.add_file(extract_file("a.md", journal_note, today=today))
        run.record_read_failure("b.md", OSError("denied"))
        assert [(e.current_file, e.files_processed, e.total_files) for e in events] == [
            ("a.md", 1, 2),
            ("b.md", 2, 2),
        ]
        assert events[-1].entries_found == 2
        assert events[-1].callouts_found == 5

    def test_read_failure_recorded(self):
        """Test read failures become FILE_READ_FAILED diagnostics."""
        run = ExtractionRun()
        run.record_read_failure("b.md", OSError("denied"))
        result = run.finish()
        [diagnostic] = result.diagnostics_of(DiagnosticKind.FILE_READ_FAILED)
        assert diagnostic.source == "b.md"
        assert result.stats.errors == 1

    @pytest.mark.parametrize(
        "counts,outcome",
        [
            ((0, 0, 0), ExtractionOutcome.NO_JOURNAL_ENTRIES),
            ((1, 0, 0), ExtractionOutcome.NO_DREAM_DIARIES),
            ((1, 1, 0), ExtractionOutcome.NO_METRICS),
            ((1, 1, 1), ExtractionOutcome.OK),
        ],
    )
    def test_outcomes(self, counts, outcome):
        """Test the three no-data outcomes are distinct."""
        journals, diaries, metrics = counts
        run = ExtractionRun()
        run.add_file(
            FileExtraction("a.md", journals_found=journals, diaries_found=diaries, metrics_found=metrics)
        )
        assert run.finish().outcome is outcome

    def test_guidance_names_callouts(self):
        """Test guidance mentions the configured callout names."""
        settings = EngineSettings(diary_callout="dream")
        assert "[!dream]" in ExtractionOutcome.NO_DREAM_DIARIES.guidance(settings)
        assert ExtractionOutcome.NO_METRICS.guidance() != ExtractionOutcome.NO_JOURNAL_ENTRIES.guidance()

    def test_disabled_metric_not_aggregated(self, today):
        """Test disabled definitions stay out of the aggregate."""
        settings = EngineSettings(
            metrics=(MetricDefinition("Sensory Detail", 1, 5, enabled=False),)
        )
        text = "> [!journal-entry] ^20250101\n>> [!dream-diary] A\n>> a b\n>>> [!dream-metrics]\n>>> Sensory Detail: 3\n"
        result = extract_text(text, settings=settings, today=today)
        assert "Sensory Detail" not in result.aggregate
        assert result.aggregate[WORD_COUNT_METRIC] == [2]
        assert result.entries[0].metrics["Sensory Detail"].configured

    def test_declared_word_count_kept_apart(self, today):
        """Test a declared Word Count metric never enters the computed count."""
        text = "> [!journal-entry] ^20250101\n>> [!dream-diary] A\n>> a b\n>>> [!dream-metrics]\n>>> Word Count: 999\n"
        result = extract_text(text, today=today)
        assert result.aggregate[WORD_COUNT_METRIC] == [2]
        assert result.entries[0].metrics["Word Count"].raw == "999"
        assert not result.entries[0].metrics["Word Count"].configured
