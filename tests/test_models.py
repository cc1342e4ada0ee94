from genome_grabber.models import (
    LEDGER_COLUMNS,
    AcquisitionAttempt,
    FetchResult,
    FetchStatus,
    LedgerEntry,
    Outcome,
    RunSummary,
)


def test_found_requires_bytes():
    assert FetchResult.found(b"PK\x03\x04").has_archive
    empty = FetchResult.found(b"")
    assert empty.status is FetchStatus.NOT_FOUND
    assert not empty.has_archive


def test_transient_has_no_archive():
    assert not FetchResult.transient("timeout").has_archive


def test_attempt_describe():
    assert AcquisitionAttempt("Alpha", "refseq", True).describe() == "refseq: archive received"
    assert AcquisitionAttempt("Alpha", "genbank", False).describe() == "genbank: no archive"


def test_ledger_entry_to_dict_has_report_columns():
    entry = LedgerEntry(organism="Alpha", outcome=Outcome.SKIPPED, run_id="r1")
    d = entry.to_dict()
    assert list(d.keys()) == LEDGER_COLUMNS
    assert d["outcome"] == "skipped-existing"
    assert d["reason"] == ""


def test_ledger_entry_event_round_trip():
    entry = LedgerEntry(
        organism="Beta", outcome=Outcome.FAILED, reason="EmptyArchive",
        timestamp="2026-10-19T08:00:00+00:00", run_id="r1", attempts=["refseq: archive received"],
    )
    assert LedgerEntry.from_event(entry.to_event()) == entry


def test_run_summary_invariant():
    summary = RunSummary()
    for outcome in (Outcome.SKIPPED, Outcome.DOWNLOADED, Outcome.FAILED, Outcome.FAILED):
        summary.add(outcome)
    assert (summary.total, summary.skipped, summary.downloaded, summary.failed) == (4, 1, 1, 2)
    assert summary.is_consistent()
