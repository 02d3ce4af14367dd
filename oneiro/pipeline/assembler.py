#!/usr/bin/env python3
"""
assembler.py
-------------------
Dream entry assembly across journal notes.

For every dream-diary callout nested under a journal-entry callout, the
assembler combines the scanner, date resolver, content cleaner and metric
extractor into one DreamEntry, then folds the entry's numeric metrics into
the run's MetricAggregate.

Structure:
    extract_file: Pure per-note extraction (safe to fan out to workers)
    ExtractionRun: Per-run context owning the aggregate, diagnostics,
        statistics and progress callback
    run_extraction: Read and extract a batch of notes sequentially

Failure handling:
    - A note that cannot be read records FILE_READ_FAILED; the run goes on
    - A note whose extraction fails outside any entry records
      FILE_PARSE_FAILED; the run goes on
    - An entry that fails to assemble records ENTRY_FAILED; the note goes on
    - Zero journal entries, dream diaries or metrics callouts across the
      run are distinct ExtractionOutcome values, never exceptions

Usage:
    from oneiro.pipeline.assembler import run_extraction
    from oneiro.pipeline.configs.settings import EngineSettings

    result = run_extraction([Path("Journals")], EngineSettings())
    for entry in result.entries:
        print(entry.date.iso, entry.title, entry.metrics)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import statistics
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import (
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

# --- Local imports ---
from oneiro.core.cli import ScrapeStats
from oneiro.core.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink
from oneiro.core.exceptions import EntryAssemblyError, FrontmatterError
from oneiro.core.logging_manager import OneiroLogger, safe_logger
from oneiro.dataclasses.dream_entry import DreamEntry, MetricValue, ResolvedDate
from oneiro.dataclasses.raw_callout import RawCallout
from oneiro.parsers.cleaner import ContentCleaner, extract_title
from oneiro.parsers.dates import DateResolver
from oneiro.parsers.metrics import MetricExtractor, metrics_text_from_callout
from oneiro.parsers.scanner import CalloutScanner, iter_callouts
from oneiro.pipeline.configs.settings import WORD_COUNT_METRIC, EngineSettings
from oneiro.utils.fs import find_journal_files, read_note
from oneiro.utils.md import parse_frontmatter
from oneiro.utils.txt import word_count


PathLike = Union[str, Path]
NoteReader = Callable[[Path], str]


# ----- Outcomes -----
class ExtractionOutcome(str, Enum):
    """What a run found, checked from the outermost callout inward."""

    OK = "ok"
    NO_JOURNAL_ENTRIES = "no_journal_entries"
    NO_DREAM_DIARIES = "no_dream_diaries"
    NO_METRICS = "no_metrics"

    @property
    def has_data(self) -> bool:
        return self is ExtractionOutcome.OK

    def guidance(self, settings: Optional[EngineSettings] = None) -> str:
        """User-facing advice for this outcome."""
        settings = settings or EngineSettings()
        if self is ExtractionOutcome.NO_JOURNAL_ENTRIES:
            return (
                f"No [!{settings.journal_callout}] callouts were found. Check that the "
                f"selected notes contain journal entries and that the journal callout "
                f"name matches your notes."
            )
        if self is ExtractionOutcome.NO_DREAM_DIARIES:
            return (
                f"Journal entries were found, but none contain a nested "
                f"[!{settings.diary_callout}] callout. Check the dream diary callout "
                f"name and that diaries are nested one level inside journal entries."
            )
        if self is ExtractionOutcome.NO_METRICS:
            return (
                f"Dream diaries were found, but none contain a "
                f"[!{settings.metrics_callout}] callout. Add a metrics callout inside "
                f"each dream diary, or check the metrics callout name."
            )
        return "Dream entries extracted."


# ----- Aggregate -----
@dataclass(frozen=True)
class MetricSummary:
    """Summary statistics for one aggregated metric."""

    count: int
    total: float
    mean: float
    minimum: float
    maximum: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "total": self.total,
            "mean": self.mean,
            "minimum": self.minimum,
            "maximum": self.maximum,
        }


@dataclass
class MetricAggregate:
    """
    Numeric values per metric, in entry order, for one run.

    Attributes:
        values: Metric display name → numeric values
    """

    values: Dict[str, List[float]] = field(default_factory=dict)

    def add(self, name: str, value: float) -> None:
        self.values.setdefault(name, []).append(value)

    def add_entry(self, entry: DreamEntry, aggregated_names: Iterable[str]) -> None:
        """
        Fold an entry in: enabled configured metrics with numeric values,
        plus the computed word count.
        """
        names = set(aggregated_names)
        for name, metric in entry.metrics.items():
            if name in names and metric.configured and metric.is_numeric:
                self.add(name, metric.numeric)  # type: ignore[arg-type]
        self.add(WORD_COUNT_METRIC, entry.word_count)

    def __getitem__(self, name: str) -> List[float]:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def get(self, name: str) -> List[float]:
        return list(self.values.get(name, []))

    @property
    def names(self) -> List[str]:
        return list(self.values)

    def summary(self) -> Dict[str, MetricSummary]:
        """Per-metric count, total, mean, minimum and maximum."""
        summaries: Dict[str, MetricSummary] = {}
        for name, values in self.values.items():
            if not values:
                continue
            summaries[name] = MetricSummary(
                count=len(values),
                total=sum(values),
                mean=statistics.fmean(values),
                minimum=min(values),
                maximum=max(values),
            )
        return summaries

    def to_dict(self) -> Dict[str, List[float]]:
        return {name: list(values) for name, values in self.values.items()}


# ----- Per-file extraction -----
@dataclass
class FileExtraction:
    """
    Everything extracted from one note.

    Attributes:
        source: Note path
        entries: Dream entries in source order
        journals_found: Journal-entry callouts in the note
        diaries_found: Dream-diary callouts under a journal entry
        metrics_found: Metrics callouts attached to those diaries
        diagnostics: Problems recorded for this note
    """

    source: str
    entries: List[DreamEntry] = field(default_factory=list)
    journals_found: int = 0
    diaries_found: int = 0
    metrics_found: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def callouts_found(self) -> int:
        return self.journals_found + self.diaries_found + self.metrics_found


def _find_metrics_callout(
    diary: RawCallout, parent: Optional[RawCallout], metrics_type: str
) -> Optional[RawCallout]:
    """Metrics callout nested in the diary, else the diary's next sibling."""
    nested = diary.find_first(metrics_type)
    if nested is not None or parent is None:
        return nested

    siblings = parent.children
    position = next(i for i, child in enumerate(siblings) if child is diary)
    if position + 1 < len(siblings) and siblings[position + 1].callout_type == metrics_type:
        return siblings[position + 1]
    return None


def _source_anchor(diary: RawCallout, journal: RawCallout) -> str:
    return diary.block_id or journal.block_id or f"line-{diary.line_number}"


def _date_context(journal: RawCallout, lines: Sequence[str]) -> List[str]:
    """Journal header plus its next two lines, within the callout."""
    end = min(journal.start_line + 3, journal.end_line + 1)
    return [journal.header_line, *lines[journal.start_line + 1 : end]]


def extract_file(
    path: PathLike,
    text: str,
    settings: Optional[EngineSettings] = None,
    today: Optional[date] = None,
) -> FileExtraction:
    """
    Extract dream entries from one note's text.

    Pure: reads no files and touches no shared state.

    Args:
        path: Note path (used for path inference and diagnostics)
        text: Full note text
        settings: Engine settings (defaults when None)
        today: Date used when no other date strategy succeeds

    Returns:
        FileExtraction with entries, counts and diagnostics
    """
    settings = settings or EngineSettings()
    source = str(path)
    sink = DiagnosticSink()
    result = FileExtraction(source=source)

    try:
        frontmatter: Mapping[str, str] = parse_frontmatter(text)
    except FrontmatterError as e:
        sink.record(DiagnosticKind.FRONTMATTER_INVALID, source, str(e), line=1)
        frontmatter = {}

    lines = text.splitlines()
    roots = CalloutScanner(sink).scan(text, source)
    resolver = DateResolver(sink, source, today=today)
    cleaner = ContentCleaner(settings.metrics_callout, settings.paragraph_mode)
    extractor = MetricExtractor(settings.metrics)

    attached_metrics: List[RawCallout] = []
    journal_dates: Dict[int, ResolvedDate] = {}

    for callout, ancestors in iter_callouts(roots):
        kind = callout.callout_type

        if kind == settings.journal_callout:
            result.journals_found += 1
            continue

        if kind != settings.diary_callout:
            continue

        journal = next(
            (a for a in reversed(ancestors) if a.callout_type == settings.journal_callout),
            None,
        )
        if journal is None:
            sink.record(
                DiagnosticKind.ORPHAN_CALLOUT,
                source,
                f"[!{settings.diary_callout}] is not inside a [!{settings.journal_callout}] callout",
                line=callout.line_number,
            )
            continue

        result.diaries_found += 1
        parent = ancestors[-1] if ancestors else None
        metrics_callout = _find_metrics_callout(callout, parent, settings.metrics_callout)
        if metrics_callout is not None:
            result.metrics_found += 1
            attached_metrics.append(metrics_callout)

        reference = f"{source}#{_source_anchor(callout, journal)}"
        try:
            if journal.start_line not in journal_dates:
                journal_dates[journal.start_line] = resolver.resolve(
                    _date_context(journal, lines),
                    frontmatter,
                    source,
                    line=journal.line_number,
                )
            entry = assemble_entry(
                callout,
                journal,
                metrics_callout,
                journal_dates[journal.start_line],
                source,
                cleaner,
                extractor,
                sink,
            )
        except Exception as e:
            sink.record(
                DiagnosticKind.ENTRY_FAILED,
                reference,
                f"{type(e).__name__}: {e}",
                line=callout.line_number,
            )
            continue

        result.entries.append(entry)

    for callout, ancestors in iter_callouts(roots):
        if callout.callout_type != settings.metrics_callout:
            continue
        if not any(callout is attached for attached in attached_metrics):
            sink.record(
                DiagnosticKind.ORPHAN_CALLOUT,
                source,
                f"[!{settings.metrics_callout}] is not attached to a "
                f"[!{settings.diary_callout}] inside a journal entry",
                line=callout.line_number,
            )

    result.diagnostics = list(sink)
    return result


def assemble_entry(
    diary: RawCallout,
    journal: RawCallout,
    metrics_callout: Optional[RawCallout],
    resolved_date: ResolvedDate,
    source: str,
    cleaner: ContentCleaner,
    extractor: MetricExtractor,
    sink: DiagnosticSink,
) -> DreamEntry:
    """
    Build one DreamEntry from a diary callout and its context.

    Raises:
        EntryAssemblyError: If the diary has neither a title nor content
    """
    anchor = _source_anchor(diary, journal)
    reference = f"{source}#{anchor}"

    content = cleaner.clean("\n".join(diary.body_lines))
    if metrics_callout is None:
        sink.record(
            DiagnosticKind.CONTENT_BOUNDARY_MISSING,
            reference,
            f"No [!{cleaner.metrics_callout}] callout; whole body kept as content",
            line=diary.line_number,
        )
        metrics: Dict[str, MetricValue] = {}
    else:
        metrics = extractor.extract(
            metrics_text_from_callout(metrics_callout),
            sink,
            reference,
            line=metrics_callout.line_number,
        )

    title = extract_title(diary.title_text)
    if not content and not diary.title_text.strip():
        raise EntryAssemblyError(
            f"[!{diary.callout_type}] at line {diary.line_number} has no title and no content"
        )

    return DreamEntry(
        date=resolved_date,
        title=title,
        content=content,
        source_file=source,
        source_anchor=anchor,
        metrics=metrics,
        word_count=word_count(content),
        callout_metadata=diary.metadata,
    )


# ----- Run context -----
@dataclass(frozen=True)
class ProgressEvent:
    """Progress after one note, for UI or CLI feedback."""

    current_file: str
    files_processed: int
    total_files: int
    entries_found: int
    callouts_found: int


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class ExtractionResult:
    """
    Output of one run.

    Attributes:
        entries: Entries sorted by date (stable for equal dates)
        aggregate: Numeric metric values across entries
        diagnostics: Every recorded problem, in recording order
        outcome: Whether data was found, and if not, what was missing
        stats: Run counters and timing
        settings: Settings the run used
    """

    entries: List[DreamEntry]
    aggregate: MetricAggregate
    diagnostics: List[Diagnostic]
    outcome: ExtractionOutcome
    stats: ScrapeStats
    settings: EngineSettings

    @property
    def guidance(self) -> str:
        return self.outcome.guidance(self.settings)

    def diagnostics_of(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]


class ExtractionRun:
    """
    Per-run context: merges per-note results in submission order.

    Owns the MetricAggregate, the DiagnosticSink and the ScrapeStats for
    one run; nothing is shared between runs.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        total_files: int = 0,
        progress: Optional[ProgressCallback] = None,
        logger: Optional[OneiroLogger] = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.total_files = total_files
        self.progress = progress
        self.logger = logger
        self.sink = DiagnosticSink(logger=logger)
        self.aggregate = MetricAggregate()
        self.stats = ScrapeStats()
        self.entries: List[DreamEntry] = []
        self._aggregated_names = MetricExtractor(self.settings.metrics).aggregated_names

    def add_file(self, extraction: FileExtraction) -> None:
        """Merge one note's extraction and report progress."""
        self.sink.extend(extraction.diagnostics)
        self.entries.extend(extraction.entries)
        for entry in extraction.entries:
            self.aggregate.add_entry(entry, self._aggregated_names)

        self.stats.journals_found += extraction.journals_found
        self.stats.diaries_found += extraction.diaries_found
        self.stats.metrics_found += extraction.metrics_found
        self.stats.entries_found += len(extraction.entries)
        self.stats.errors += sum(
            1 for d in extraction.diagnostics if d.kind is DiagnosticKind.ENTRY_FAILED
        )

        safe_logger(self.logger).log_debug(
            "File extracted",
            {"file": extraction.source, "entries": len(extraction.entries)},
        )
        self._file_done(extraction.source)

    def record_read_failure(self, path: PathLike, error: Exception) -> None:
        """Record a note that could not be read and report progress."""
        self._record_file_failure(DiagnosticKind.FILE_READ_FAILED, path, error)

    def record_parse_failure(self, path: PathLike, error: Exception) -> None:
        """Record a note whose extraction raised and report progress."""
        self._record_file_failure(DiagnosticKind.FILE_PARSE_FAILED, path, error)

    def _record_file_failure(
        self, kind: DiagnosticKind, path: PathLike, error: Exception
    ) -> None:
        self.sink.record(
            kind,
            str(path),
            f"{type(error).__name__}: {error}",
        )
        self.stats.errors += 1
        safe_logger(self.logger).log_error(error, {"file": str(path)})
        self._file_done(str(path))

    def _file_done(self, source: str) -> None:
        self.stats.files_processed += 1
        if self.progress is not None:
            self.progress(
                ProgressEvent(
                    current_file=source,
                    files_processed=self.stats.files_processed,
                    total_files=self.total_files,
                    entries_found=self.stats.entries_found,
                    callouts_found=self.stats.callouts_found,
                )
            )

    def outcome(self) -> ExtractionOutcome:
        if self.stats.journals_found == 0:
            return ExtractionOutcome.NO_JOURNAL_ENTRIES
        if self.stats.diaries_found == 0:
            return ExtractionOutcome.NO_DREAM_DIARIES
        if self.stats.metrics_found == 0:
            return ExtractionOutcome.NO_METRICS
        return ExtractionOutcome.OK

    def finish(self) -> ExtractionResult:
        """Sort entries by date and freeze the run's result."""
        self.stats.finish()
        entries = sorted(self.entries, key=lambda entry: entry.date.sort_key)
        outcome = self.outcome()

        safe_logger(self.logger).log_operation(
            "extraction_complete",
            {**self.stats.to_dict(), "outcome": outcome.value, "diagnostics": len(self.sink)},
        )
        return ExtractionResult(
            entries=entries,
            aggregate=self.aggregate,
            diagnostics=list(self.sink),
            outcome=outcome,
            stats=self.stats,
            settings=self.settings,
        )


# ----- Batch -----
def collect_files(
    paths: Iterable[PathLike], settings: Optional[EngineSettings] = None
) -> List[Path]:
    """
    Expand inputs into note files: folders are searched recursively using
    the settings' exclusions and file cap; files are kept as given.
    """
    settings = settings or EngineSettings()
    files: List[Path] = []
    for item in paths:
        path = Path(item)
        if path.is_dir():
            files.extend(find_journal_files(path, settings.exclude, settings.max_files))
        else:
            files.append(path)
    return files


def run_extraction(
    paths: Iterable[PathLike],
    settings: Optional[EngineSettings] = None,
    reader: Optional[NoteReader] = None,
    progress: Optional[ProgressCallback] = None,
    logger: Optional[OneiroLogger] = None,
    today: Optional[date] = None,
) -> ExtractionResult:
    """
    Extract dream entries from notes and folders.

    Args:
        paths: Note files and/or folders
        settings: Engine settings (defaults when None)
        reader: Note reader, ``read_note`` by default
        progress: Called once per note with a ProgressEvent
        logger: Operational logger; diagnostics are mirrored into it
        today: Date used by the date fallback

    Returns:
        ExtractionResult, possibly empty; never raises for bad notes
    """
    settings = settings or EngineSettings()
    reader = reader or read_note
    files = collect_files(paths, settings)
    run = ExtractionRun(settings, total_files=len(files), progress=progress, logger=logger)

    safe_logger(logger).log_operation(
        "extraction_start", {"files": len(files), "settings": settings.to_dict()}
    )

    for path in files:
        # Any reader failure, including a caller-supplied reader's own
        # exceptions, only costs that note
        try:
            text = reader(path)
        except Exception as e:
            run.record_read_failure(path, e)
            continue

        try:
            extraction = extract_file(path, text, settings, today=today)
        except Exception as e:
            run.record_parse_failure(path, e)
            continue
        run.add_file(extraction)

    return run.finish()


def extract_text(
    text: str,
    source: str = "<text>",
    settings: Optional[EngineSettings] = None,
    today: Optional[date] = None,
) -> ExtractionResult:
    """Run a whole extraction over a single in-memory note."""
    run = ExtractionRun(settings, total_files=1)
    run.add_file(extract_file(source, text, run.settings, today=today))
    return run.finish()
