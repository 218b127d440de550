"""
Tests for the serialized scan scheduler.
"""

import pytest

from solid_lens.core.scheduler import ScanOutcome, ScanScheduler, SourceDocument
from solid_lens.core.semgrep_runner import ScanError


class RecordingScan:
    """Scan function that records calls and can submit more work mid-scan."""

    def __init__(self):
        self.calls = []
        self.during_first_scan = []
        self.fail_on = set()
        self.scheduler = None

    def __call__(self, document):
        self.calls.append((document.key, document.text))
        if len(self.calls) == 1:
            for doc, force in self.during_first_scan:
                assert self.scheduler.submit(doc, force=force) in (ScanOutcome.QUEUED, ScanOutcome.SKIPPED)
        if document.key in self.fail_on:
            raise ScanError("boom")


@pytest.fixture
def scan():
    return RecordingScan()


@pytest.fixture
def scheduler(scan):
    sched = ScanScheduler(scan)
    scan.scheduler = sched
    return sched


class TestScanScheduler:
    """Test cases for ScanScheduler."""

    def test_first_submit_runs(self, scheduler, scan):
        outcome = scheduler.submit(SourceDocument("a.py", "x = 1"))

        assert outcome == ScanOutcome.COMPLETED
        assert scan.calls == [("a.py", "x = 1")]
        assert not scheduler.in_flight

    def test_unchanged_text_is_skipped(self, scheduler, scan):
        """Test a repeat submission of identical text does not scan again."""
        scheduler.submit(SourceDocument("a.py", "x = 1"))

        assert scheduler.submit(SourceDocument("a.py", "x = 1")) == ScanOutcome.SKIPPED
        assert len(scan.calls) == 1

    def test_changed_text_scans_again(self, scheduler, scan):
        scheduler.submit(SourceDocument("a.py", "x = 1"))

        assert scheduler.submit(SourceDocument("a.py", "x = 2")) == ScanOutcome.COMPLETED
        assert len(scan.calls) == 2

    def test_force_bypasses_cache(self, scheduler, scan):
        scheduler.submit(SourceDocument("a.py", "x = 1"))

        assert scheduler.submit(SourceDocument("a.py", "x = 1"), force=True) == ScanOutcome.COMPLETED
        assert len(scan.calls) == 2

    def test_cache_disabled(self, scan):
        scheduler = ScanScheduler(scan, use_cache=False)
        scan.scheduler = scheduler

        scheduler.submit(SourceDocument("a.py", "x = 1"))
        scheduler.submit(SourceDocument("a.py", "x = 1"))

        assert len(scan.calls) == 2

    def test_queued_documents_drain_in_fifo_order(self, scheduler, scan):
        """Test requests made during a scan run afterwards in arrival order."""
        scan.during_first_scan = [
            (SourceDocument("b.py", "b"), False),
            (SourceDocument("c.py", "c"), False),
        ]

        scheduler.submit(SourceDocument("a.py", "a"))

        assert [key for key, _ in scan.calls] == ["a.py", "b.py", "c.py"]
        assert scheduler.pending == 0

    def test_queue_coalesces_per_document(self, scheduler, scan):
        """Test the latest text wins while the slot keeps its position."""
        scan.during_first_scan = [
            (SourceDocument("b.py", "b1"), False),
            (SourceDocument("c.py", "c"), False),
            (SourceDocument("b.py", "b2"), False),
        ]

        scheduler.submit(SourceDocument("a.py", "a"))

        assert scan.calls == [("a.py", "a"), ("b.py", "b2"), ("c.py", "c")]

    def test_unchanged_document_during_scan_is_skipped(self, scheduler, scan):
        """Test an unchanged document is skipped rather than queued while busy."""
        scheduler.submit(SourceDocument("b.py", "b"))
        scan.calls.clear()
        scan.during_first_scan = [(SourceDocument("b.py", "b"), False)]

        scheduler.submit(SourceDocument("a.py", "a"))

        assert [key for key, _ in scan.calls] == ["a.py"]

    def test_forced_queued_document_bypasses_cache(self, scheduler, scan):
        scheduler.submit(SourceDocument("b.py", "b"))
        scan.calls.clear()
        scan.during_first_scan = [(SourceDocument("b.py", "b"), True)]

        scheduler.submit(SourceDocument("a.py", "a"))

        assert [key for key, _ in scan.calls] == ["a.py", "b.py"]

    def test_failure_leaves_cache_untouched(self, scheduler, scan):
        """Test a failed scan is retried on the next identical submission."""
        scan.fail_on = {"a.py"}

        assert scheduler.submit(SourceDocument("a.py", "a")) == ScanOutcome.FAILED
        assert not scheduler.in_flight
        assert not scheduler.is_cached(SourceDocument("a.py", "a"))

        scan.fail_on = set()
        assert scheduler.submit(SourceDocument("a.py", "a")) == ScanOutcome.COMPLETED

    def test_failure_still_drains_queue(self, scheduler, scan):
        scan.fail_on = {"a.py"}
        scan.during_first_scan = [(SourceDocument("b.py", "b"), False)]

        assert scheduler.submit(SourceDocument("a.py", "a")) == ScanOutcome.FAILED
        assert [key for key, _ in scan.calls] == ["a.py", "b.py"]

    def test_unexpected_errors_propagate(self):
        def explode(document):
            raise RuntimeError("bug")

        scheduler = ScanScheduler(explode)

        with pytest.raises(RuntimeError):
            scheduler.submit(SourceDocument("a.py", "a"))
        assert not scheduler.in_flight

    def test_forget_and_clear(self, scheduler, scan):
        scheduler.submit(SourceDocument("a.py", "a"))
        scheduler.submit(SourceDocument("b.py", "b"))

        scheduler.forget("a.py")
        assert scheduler.submit(SourceDocument("a.py", "a")) == ScanOutcome.COMPLETED

        scheduler.clear()
        assert scheduler.submit(SourceDocument("b.py", "b")) == ScanOutcome.COMPLETED

    def test_on_idle_with_nothing_pending(self, scheduler):
        assert scheduler.on_idle() == 0


def test_document_fingerprint_tracks_text():
    assert SourceDocument("a.py", "x").fingerprint() == SourceDocument("b.py", "x").fingerprint()
    assert SourceDocument("a.py", "x").fingerprint() != SourceDocument("a.py", "y").fingerprint()
