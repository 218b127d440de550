"""
Serialized scan scheduling.

At most one external scan runs at a time. Requests arriving while a scan is
in flight wait in a FIFO with one slot per document; unchanged documents are
skipped using an md5 fingerprint of their text.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from .semgrep_runner import ScanError
from .utils import content_hash


class ScanOutcome(Enum):
    """What happened to a submitted document."""
    SKIPPED = "skipped"
    QUEUED = "queued"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SourceDocument:
    path: str
    text: str
    language_id: Optional[str] = None

    @property
    def key(self) -> str:
        return self.path

    def fingerprint(self) -> str:
        return content_hash(self.text)


class ScanScheduler:
    """
    Owns the fingerprint cache, the in-flight flag and the pending queue.

    `scan_fn` receives a SourceDocument and may raise ScanError; any other
    exception propagates to the submitter.
    """

    def __init__(self, scan_fn: Callable[[SourceDocument], None], use_cache: bool = True):
        self.scan_fn = scan_fn
        self.use_cache = use_cache
        self._lock = threading.Lock()
        self._fingerprints: Dict[str, str] = {}
        # key -> (document, force); OrderedDict keeps the first submission's position
        self._pending: "OrderedDict[str, tuple]" = OrderedDict()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def is_cached(self, document: SourceDocument) -> bool:
        with self._lock:
            return self._is_cached_locked(document)

    def _is_cached_locked(self, document: SourceDocument) -> bool:
        return self.use_cache and self._fingerprints.get(document.key) == document.fingerprint()

    def submit(self, document: SourceDocument, force: bool = False) -> ScanOutcome:
        with self._lock:
            if not force and self._is_cached_locked(document):
                logging.debug(f"Skipping unchanged document {document.key}")
                return ScanOutcome.SKIPPED
            if self._in_flight:
                if document.key in self._pending:
                    _, queued_force = self._pending[document.key]
                    self._pending[document.key] = (document, queued_force or force)
                else:
                    self._pending[document.key] = (document, force)
                logging.debug(f"Scan in progress, queued {document.key}")
                return ScanOutcome.QUEUED
            self._in_flight = True

        outcome = self._run(document)
        self.on_idle()
        return outcome

    def on_idle(self) -> int:
        """Drain queued documents one at a time in FIFO order; returns how many were scanned."""
        drained = 0
        while True:
            with self._lock:
                if self._in_flight or not self._pending:
                    return drained
                _, (document, force) = self._pending.popitem(last=False)
                if not force and self._is_cached_locked(document):
                    continue
                self._in_flight = True
            self._run(document)
            drained += 1

    def _run(self, document: SourceDocument) -> ScanOutcome:
        try:
            self.scan_fn(document)
        except ScanError as e:
            logging.error(f"Scan failed for {document.key}: {e}")
            return ScanOutcome.FAILED
        else:
            with self._lock:
                self._fingerprints[document.key] = document.fingerprint()
            return ScanOutcome.COMPLETED
        finally:
            with self._lock:
                self._in_flight = False

    def forget(self, key: str) -> None:
        with self._lock:
            self._fingerprints.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._fingerprints.clear()
            self._pending.clear()
