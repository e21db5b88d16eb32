from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Dict, Optional

from .store import StatsStore

_SHUTDOWN = object()


class StatsWriter(threading.Thread):
    """Background writer so grading never waits on the disk.

    save() only enqueues a snapshot. The thread drains whatever has piled up
    and writes the newest snapshot; older ones are superseded because every
    snapshot is a full replacement of the record.
    """

    def __init__(self, store: StatsStore, poll_interval_s: float = 0.25):
        super().__init__(name="stats-writer", daemon=True)
        self.store = store
        self.in_queue: "queue.Queue[Any]" = queue.Queue()
        self.poll_interval_s = poll_interval_s
        self.stats = {"received": 0, "written": 0, "coalesced": 0, "failed": 0}

    def load(self) -> Optional[Dict[str, Any]]:
        return self.store.load()

    def save(self, record: Dict[str, Any]) -> None:
        self.stats["received"] += 1
        self.in_queue.put(record)

    def run(self) -> None:
        logger = logging.getLogger(__name__)
        logger.info("Stats writer started")
        alive = True
        while alive:
            try:
                msg = self.in_queue.get(timeout=self.poll_interval_s)
            except queue.Empty:
                continue
            latest = None
            while True:
                if msg is _SHUTDOWN:
                    alive = False
                elif latest is not None:
                    self.stats["coalesced"] += 1
                    latest = msg
                else:
                    latest = msg
                try:
                    msg = self.in_queue.get_nowait()
                except queue.Empty:
                    break
            if latest is not None:
                self._write(latest)
        logger.info("Stats writer stopped: %s", self.stats)

    def _write(self, record: Dict[str, Any]) -> None:
        t0 = time.perf_counter()
        try:
            self.store.save(record)
        except Exception:
            # Keep the writer alive; the next snapshot replaces this one anyway
            self.stats["failed"] += 1
            logging.getLogger(__name__).exception("Failed to persist stats")
            return
        self.stats["written"] += 1
        logging.getLogger(__name__).debug("Persisted stats in %.1f ms", (time.perf_counter() - t0) * 1000)

    def close(self, timeout: float = 5.0) -> None:
        """Flush pending snapshots and stop the thread"""
        if self.is_alive():
            self.in_queue.put(_SHUTDOWN)
            self.join(timeout=timeout)
