"""Background writer: persists freshly fetched batches off the request path."""

import logging
import queue
import threading
from dataclasses import asdict, dataclass

from jobsforce.jobs.models import CandidateJob

logger = logging.getLogger("jobsforce.storage.writer")

_STOP = object()


@dataclass
class WriterStats:
    submitted: int = 0
    dropped: int = 0
    processed: int = 0
    failed: int = 0
    added: int = 0
    updated: int = 0
    errors: int = 0


class BatchWriter:
    """Bounded queue of candidate batches drained by one daemon thread.

    ``submit`` never blocks: when the queue is full the batch is dropped and
    counted, and the next sync cycle picks the jobs up again.
    """

    def __init__(self, reconciler, queue_size: int = 32):
        self.reconciler = reconciler
        self.queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._stats = WriterStats()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="jobsforce-writer", daemon=True)
        self._thread.start()
        logger.info("Background writer started (queue size %d)", self.queue.maxsize)

    def stop(self, timeout: float = 5.0) -> None:
        """Finish queued batches, then stop the worker thread."""
        if not self.running:
            return
        try:
            self.queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("Writer queue still full after %.0fs; abandoning pending batches", timeout)
            return
        self._thread.join(timeout)
        self._thread = None
        logger.info("Background writer stopped")

    def submit(self, candidates: list[CandidateJob]) -> bool:
        """Queue a batch for persistence. Returns False if it was dropped."""
        if not candidates:
            return True
        try:
            self.queue.put_nowait(list(candidates))
        except queue.Full:
            with self._lock:
                self._stats.dropped += 1
            logger.warning("Writer queue full, dropping batch of %d candidates", len(candidates))
            return False
        with self._lock:
            self._stats.submitted += 1
        logger.debug("Queued batch of %d candidates for persistence", len(candidates))
        return True

    def drain(self) -> None:
        """Block until every queued batch has been handled."""
        self.queue.join()

    def stats(self) -> dict:
        with self._lock:
            data = asdict(self._stats)
        data["pending"] = self.queue.qsize()
        data["running"] = self.running
        return data

    def _run(self) -> None:
        while True:
            batch = self.queue.get()
            try:
                if batch is _STOP:
                    return
                self._write(batch)
            finally:
                self.queue.task_done()

    def _write(self, batch: list[CandidateJob]) -> None:
        try:
            result = self.reconciler.reconcile(batch)
        except Exception as e:
            with self._lock:
                self._stats.failed += 1
            logger.error("Background write of %d candidates failed: %s", len(batch), e, exc_info=True)
            return

        with self._lock:
            self._stats.processed += 1
            self._stats.added += result.added
            self._stats.updated += result.updated
            self._stats.errors += result.errors
        logger.info(
            "Background write complete: %d added, %d updated, %d errors",
            result.added, result.updated, result.errors,
        )
